from .binary import (
    RuleRecord,
    itemset_dtype,
    rule_dtype,
    read_corpus,
    write_corpus,
    read_collection,
    write_collection,
    read_rules,
    write_rules
)
from .text import (
    format_itemset,
    parse_itemset,
    save_collection_text,
    load_collection_text,
    load_transactions_text
)

__all__ = [
    'RuleRecord', 'itemset_dtype', 'rule_dtype',
    'read_corpus', 'write_corpus',
    'read_collection', 'write_collection',
    'read_rules', 'write_rules',
    'format_itemset', 'parse_itemset',
    'save_collection_text', 'load_collection_text', 'load_transactions_text'
]
