"""
Text dump of an itemset collection, one itemset per line::

    LEN 02 SUP 003 : a b
"""
import re
from pathlib import Path
from typing import Iterable, List, Union

from apriori_miner.errors import ParseError
from apriori_miner.itemsets import DEFAULT_COLLECTION_CAPACITY, DEFAULT_MAX_LENGTH, Itemset, ItemsetCollection

LINE_PATTERN = re.compile(r'^LEN\s+(\d+)\s+SUP\s+(\d+)\s*:(.*)$')


def format_itemset(itemset: Itemset) -> str:
    line = f"LEN {itemset.length:02d} SUP {itemset.support:03d} :"
    return line + ''.join(f" {item}" for item in itemset)


def parse_itemset(line: str, max_length: int = DEFAULT_MAX_LENGTH, source='<text>', lineno: int = 0) -> Itemset:
    match = LINE_PATTERN.match(line.strip())
    if match is None:
        raise ParseError(source, f"line {lineno}: expected 'LEN nn SUP nnn : items', got {line.strip()!r}")
    length, support = int(match.group(1)), int(match.group(2))
    items = match.group(3).split()
    if len(items) != length:
        raise ParseError(source, f"line {lineno}: LEN {length} but {len(items)} items")
    if length > max_length:
        raise ParseError(source, f"line {lineno}: LEN {length} exceeds {max_length}")
    try:
        return Itemset.from_sorted(items, support=support, max_length=max_length)
    except ValueError as e:
        raise ParseError(source, f"line {lineno}: {e}")


def save_collection_text(path: Union[str, Path], itemsets: Iterable[Itemset]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        for itemset in itemsets:
            f.write(format_itemset(itemset) + "\n")
    return path


def load_collection_text(
    path: Union[str, Path],
    max_length: int = DEFAULT_MAX_LENGTH,
    capacity: int = DEFAULT_COLLECTION_CAPACITY
) -> ItemsetCollection:
    collection = ItemsetCollection(capacity=capacity)
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            collection.add(parse_itemset(line, max_length, source=path, lineno=lineno))
    return collection


def load_transactions_text(path: Union[str, Path], max_length: int = DEFAULT_MAX_LENGTH) -> List[Itemset]:
    """Read a corpus dumped in the same line format; identical transactions are kept."""
    transactions = []
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            if line.strip():
                itemset = parse_itemset(line, max_length, source=path, lineno=lineno)
                itemset.support = 0
                transactions.append(itemset)
    return transactions
