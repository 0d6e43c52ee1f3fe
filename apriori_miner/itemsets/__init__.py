from .model import (
    Itemset,
    compare,
    match_count,
    is_subset,
    is_equal,
    merge,
    insert_sorted,
    DEFAULT_MAX_LENGTH,
    DEFAULT_COLLECTION_CAPACITY
)
from .collection import ItemsetCollection
from .pairs import iter_pairs, iter_pairs_from, iter_subset_pairs

__all__ = [
    'Itemset', 'ItemsetCollection',
    'compare', 'match_count', 'is_subset', 'is_equal', 'merge', 'insert_sorted',
    'iter_pairs', 'iter_pairs_from', 'iter_subset_pairs',
    'DEFAULT_MAX_LENGTH', 'DEFAULT_COLLECTION_CAPACITY'
]
