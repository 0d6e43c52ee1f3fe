"""
Canonical itemset representation.

An itemset is a strictly increasing, duplicate-free sequence of items held in a
buffer of fixed capacity, together with an occurrence count. All comparisons
are merge-walks over the sorted sequences.
"""
from functools import total_ordering
from typing import Iterable, Iterator, List, Optional, Tuple

from apriori_miner.errors import CapacityExceeded

DEFAULT_MAX_LENGTH = 10
DEFAULT_COLLECTION_CAPACITY = 10000

Item = str


@total_ordering
class Itemset:
    """
    Sorted, duplicate-free itemset with a support count.

    Equality and hashing look only at the items, never at ``support``. An
    itemset is hashed by value, so it must not be grown after it has been
    placed in a collection.
    """

    def __init__(self, items: Iterable[Item] = (), support: int = 0, max_length: int = DEFAULT_MAX_LENGTH):
        self.max_length = max_length
        self.support = support
        self._items: List[Item] = []
        for item in items:
            insert_sorted(self, item)

    @classmethod
    def from_sorted(cls, items: Iterable[Item], support: int = 0,
                    max_length: int = DEFAULT_MAX_LENGTH) -> 'Itemset':
        """Build from items already in canonical order, validating the order."""
        itemset = cls(max_length=max_length, support=support)
        items = list(items)
        if len(items) > max_length:
            raise CapacityExceeded('itemset length', max_length, itemset=items)
        for prev, cur in zip(items, items[1:]):
            if not prev < cur:
                raise ValueError(f"items not strictly increasing: {items}")
        itemset._items = items
        return itemset

    @property
    def items(self) -> Tuple[Item, ...]:
        return tuple(self._items)

    @property
    def length(self) -> int:
        return len(self._items)

    def add(self, item: Item) -> 'Itemset':
        insert_sorted(self, item)
        return self

    def without(self, position: int) -> 'Itemset':
        """Leave-one-out subset omitting the item at ``position``."""
        items = self._items[:position] + self._items[position + 1:]
        return Itemset.from_sorted(items, max_length=self.max_length)

    def difference(self, other: 'Itemset') -> 'Itemset':
        items = [item for item in self._items if item not in other]
        return Itemset.from_sorted(items, max_length=self.max_length)

    def copy(self) -> 'Itemset':
        return Itemset.from_sorted(self._items, support=self.support, max_length=self.max_length)

    def issubset(self, other: 'Itemset') -> bool:
        return is_subset(other, self)

    def issuperset(self, other: 'Itemset') -> bool:
        return is_subset(self, other)

    def __len__(self):
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __contains__(self, item):
        return item in self._items

    def __eq__(self, other):
        if not isinstance(other, Itemset):
            return NotImplemented
        return is_equal(self, other)

    def __lt__(self, other):
        if not isinstance(other, Itemset):
            return NotImplemented
        return compare(self, other) < 0

    def __hash__(self):
        return hash(tuple(self._items))

    def __repr__(self):
        return f"Itemset({self._items!r}, support={self.support})"

    def __str__(self):
        return '{' + ', '.join(str(item) for item in self._items) + '}'


def compare(a: Itemset, b: Itemset) -> int:
    """Shorter itemsets first, then lexicographic by sorted content."""
    if a.length != b.length:
        return -1 if a.length < b.length else 1
    ia, ib = a.items, b.items
    if ia == ib:
        return 0
    return -1 if ia < ib else 1


def match_count(a: Itemset, b: Itemset) -> int:
    """Number of items present in both ``a`` and ``b`` (single merge-walk)."""
    i = j = matched = 0
    while i < a.length and j < b.length:
        x, y = a[i], b[j]
        if x == y:
            matched += 1
            i += 1
            j += 1
        elif x > y:
            j += 1
        else:
            i += 1
    return matched


def is_subset(large: Itemset, small: Itemset) -> bool:
    """True if every item of ``small`` occurs in ``large``."""
    if small.length > large.length:
        return False
    i = j = 0
    while j < small.length:
        if i >= large.length:
            return False
        x, y = large[i], small[j]
        if x == y:
            i += 1
            j += 1
        elif x < y:
            i += 1
        else:
            return False
    return True


def is_equal(a: Itemset, b: Itemset) -> bool:
    return a.length == b.length and match_count(a, b) == a.length


def merge(a: Itemset, b: Itemset, max_length: Optional[int] = None) -> Itemset:
    """
    Join two equal-length itemsets that share all but one item.

    The result is ``a`` plus the single item of ``b`` that ``a`` lacks, in
    canonical order, with length ``a.length + 1``.

    Raises:
        ValueError: if the itemsets are not joinable
        CapacityExceeded: if the union does not fit the itemset buffer
    """
    if a.length != b.length or match_count(a, b) != a.length - 1:
        raise ValueError(f"itemsets {a} and {b} do not share all but one item")
    result = Itemset.from_sorted(a.items, max_length=max_length or a.max_length)
    extra = next(item for item in b if item not in a)
    insert_sorted(result, extra)
    return result


def insert_sorted(itemset: Itemset, item: Item) -> None:
    """
    Insert ``item`` into the sorted buffer, shifting larger items right.

    Raises:
        CapacityExceeded: if the buffer already holds ``max_length`` items
        ValueError: if the item is already present
    """
    buf = itemset._items
    if len(buf) >= itemset.max_length:
        raise CapacityExceeded('itemset length', itemset.max_length, itemset=itemset)
    position = len(buf)
    for index, existing in enumerate(buf):
        if existing == item:
            raise ValueError(f"item {item!r} already in {itemset}")
        if existing > item:
            position = index
            break
    buf.insert(position, item)
