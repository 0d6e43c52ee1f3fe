"""
Fixed-width binary records.

Layouts follow C struct alignment:

- itemset record: ``int32 length, int32 support, char value[max_length]``
- rule record: ``char left[max_length], char right[max_length], float32 support, float32 confidence``

A corpus file is a bare array of itemset records. A collection file and a rule
file are an ``int32`` count followed by ``capacity`` record slots, unused slots
zeroed. Items are single-byte symbols.
"""
import logging
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from apriori_miner.errors import CapacityExceeded, ParseError
from apriori_miner.itemsets import (
    DEFAULT_COLLECTION_CAPACITY,
    DEFAULT_MAX_LENGTH,
    Itemset,
    ItemsetCollection,
)
from apriori_miner.rule_mining.rules import DEFAULT_RULE_CAPACITY

logger = logging.getLogger(__name__)

COUNT_DTYPE = np.dtype('<i4')

PathLike = Union[str, Path]


class RuleRecord(NamedTuple):
    antecedent: Tuple[str, ...]
    consequent: Tuple[str, ...]
    support: float
    confidence: float


def itemset_dtype(max_length: int = DEFAULT_MAX_LENGTH) -> np.dtype:
    return np.dtype([
        ('length', '<i4'),
        ('support', '<i4'),
        ('value', f'S{max_length}')
    ], align=True)


def rule_dtype(max_length: int = DEFAULT_MAX_LENGTH) -> np.dtype:
    return np.dtype([
        ('left', f'S{max_length}'),
        ('right', f'S{max_length}'),
        ('support', '<f4'),
        ('confidence', '<f4')
    ], align=True)


def encode_items(items: Sequence[str]) -> bytes:
    try:
        encoded = ''.join(items).encode('latin-1')
    except UnicodeEncodeError:
        raise ValueError(f"items {list(items)} are not single-byte symbols")
    if len(encoded) != len(items):
        raise ValueError(f"items {list(items)} are not single-byte symbols")
    return encoded


def _decode_itemset(record, source, index: int, max_length: int, keep_support: bool,
                    min_length: int = 0) -> Itemset:
    length = int(record['length'])
    if not min_length <= length <= max_length:
        raise ParseError(source, f"record {index} has length {length} outside [{min_length}, {max_length}]")
    raw = bytes(record['value'])
    if len(raw) < length:
        raise ParseError(source, f"record {index} declares {length} items but holds {len(raw)}")
    support = int(record['support']) if keep_support else 0
    if support < 0:
        raise ParseError(source, f"record {index} has negative support {support}")
    items = [chr(b) for b in raw[:length]]
    try:
        return Itemset.from_sorted(items, support=support, max_length=max_length)
    except ValueError as e:
        raise ParseError(source, f"record {index}: {e}")


def _encode_itemsets(itemsets: Sequence[Itemset], slots: int, max_length: int) -> np.ndarray:
    records = np.zeros(slots, dtype=itemset_dtype(max_length))
    for index, itemset in enumerate(itemsets):
        if itemset.length > max_length:
            raise CapacityExceeded('itemset length', max_length, itemset=itemset)
        records['length'][index] = itemset.length
        records['support'][index] = itemset.support
        records['value'][index] = encode_items(itemset.items)
    return records


def _read_counted(path: PathLike, dtype: np.dtype, capacity: int) -> np.ndarray:
    data = Path(path).read_bytes()
    if len(data) < COUNT_DTYPE.itemsize:
        raise ParseError(path, "file too short for count field")
    count = int(np.frombuffer(data, dtype=COUNT_DTYPE, count=1)[0])
    if not 0 <= count <= capacity:
        raise ParseError(path, f"count {count} outside [0, {capacity}]")
    body = data[COUNT_DTYPE.itemsize:]
    if count == 0:
        return np.zeros(0, dtype=dtype)
    if len(body) < count * dtype.itemsize:
        raise ParseError(path, f"expected {count} records of {dtype.itemsize} bytes, got {len(body)} bytes")
    return np.frombuffer(body, dtype=dtype, count=count)


def _write_counted(path: PathLike, count: int, records: np.ndarray) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        f.write(np.array([count], dtype=COUNT_DTYPE).tobytes())
        f.write(records.tobytes())
    return path


def read_corpus(path: PathLike, max_length: int = DEFAULT_MAX_LENGTH, expected: Optional[int] = None) -> List[Itemset]:
    """
    Load a transaction corpus file.

    Raises:
        ParseError: on a truncated file, a size mismatch with ``expected``,
            or a malformed record
    """
    dtype = itemset_dtype(max_length)
    data = Path(path).read_bytes()
    if len(data) % dtype.itemsize:
        raise ParseError(path, f"size {len(data)} is not a multiple of the {dtype.itemsize}-byte record")
    n = len(data) // dtype.itemsize
    if expected is not None and n != expected:
        raise ParseError(path, f"expected {expected} transactions, found {n}")

    if n == 0:
        return []
    records = np.frombuffer(data, dtype=dtype)
    transactions = [_decode_itemset(record, path, i, max_length, keep_support=False) for i, record in enumerate(records)]
    logger.debug("Read %d transactions from %s", n, path)
    return transactions


def write_corpus(path: PathLike, transactions: Sequence[Itemset], max_length: int = DEFAULT_MAX_LENGTH) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _encode_itemsets(transactions, len(transactions), max_length).tofile(path)
    return path


def read_collection(
    path: PathLike,
    max_length: int = DEFAULT_MAX_LENGTH,
    capacity: int = DEFAULT_COLLECTION_CAPACITY
) -> ItemsetCollection:
    """Load a counted itemset collection file (e.g. the merged frequent set); empty records are rejected."""
    records = _read_counted(path, itemset_dtype(max_length), capacity)
    collection = ItemsetCollection(capacity=capacity)
    for i, record in enumerate(records):
        if not collection.add(_decode_itemset(record, path, i, max_length, keep_support=True, min_length=1)):
            logger.debug("Duplicate record %d in %s ignored", i, path)
    return collection


def write_collection(
    path: PathLike,
    collection: Sequence[Itemset],
    max_length: int = DEFAULT_MAX_LENGTH,
    capacity: int = DEFAULT_COLLECTION_CAPACITY
) -> Path:
    if len(collection) > capacity:
        raise CapacityExceeded('itemset collection', capacity)
    records = _encode_itemsets(list(collection), capacity, max_length)
    return _write_counted(path, len(collection), records)


def read_rules(
    path: PathLike,
    max_length: int = DEFAULT_MAX_LENGTH,
    capacity: int = DEFAULT_RULE_CAPACITY
) -> List[RuleRecord]:
    records = _read_counted(path, rule_dtype(max_length), capacity)
    return [
        RuleRecord(
            antecedent=tuple(chr(b) for b in bytes(record['left'])),
            consequent=tuple(chr(b) for b in bytes(record['right'])),
            support=float(record['support']),
            confidence=float(record['confidence'])
        )
        for record in records
    ]


def write_rules(
    path: PathLike,
    rules: Sequence,
    max_length: int = DEFAULT_MAX_LENGTH,
    capacity: int = DEFAULT_RULE_CAPACITY
) -> Path:
    """Write ``AssociationRule`` objects; support and confidence narrow to float32."""
    if len(rules) > capacity:
        raise CapacityExceeded('rule list', capacity)
    records = np.zeros(capacity, dtype=rule_dtype(max_length))
    for index, rule in enumerate(rules):
        records['left'][index] = encode_items(rule.antecedent.items)
        records['right'][index] = encode_items(rule.consequent.items)
        records['support'][index] = rule.support
        records['confidence'][index] = rule.confidence
    return _write_counted(path, len(rules), records)
