"""Capacity-bounded, value-deduplicated collection of itemsets."""
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from apriori_miner.errors import CapacityExceeded
from apriori_miner.itemsets.model import DEFAULT_COLLECTION_CAPACITY, Itemset


class ItemsetCollection:
    """
    Ordered container of distinct itemsets.

    Inserting a value equal to an existing member is a no-op, even when the
    collection is full. Members keep insertion order; ``sorted()`` returns a
    canonically ordered copy.
    """

    def __init__(self, itemsets: Iterable[Itemset] = (), capacity: int = DEFAULT_COLLECTION_CAPACITY,
                 name: str = 'itemset collection'):
        self.capacity = capacity
        self.name = name
        self._members: List[Itemset] = []
        self._index: Dict[Tuple, Itemset] = {}
        for itemset in itemsets:
            self.add(itemset)

    def add(self, itemset: Itemset) -> bool:
        """
        Insert ``itemset`` unless an equal value is already present.

        Returns:
            True if the itemset was admitted, False if it was a duplicate

        Raises:
            CapacityExceeded: if a new value would exceed ``capacity``
        """
        key = itemset.items
        if key in self._index:
            return False
        if len(self._members) >= self.capacity:
            raise CapacityExceeded(self.name, self.capacity, itemset=itemset)
        self._members.append(itemset)
        self._index[key] = itemset
        return True

    def extend(self, itemsets: Iterable[Itemset]) -> int:
        """Insert each itemset in turn; returns how many were admitted."""
        return sum(1 for itemset in itemsets if self.add(itemset))

    def get(self, itemset: Itemset) -> Optional[Itemset]:
        """Stored member equal to ``itemset``, carrying its support."""
        return self._index.get(itemset.items)

    def sorted(self) -> 'ItemsetCollection':
        return ItemsetCollection(sorted(self._members), capacity=self.capacity, name=self.name)

    def of_length(self, length: int) -> List[Itemset]:
        return [itemset for itemset in self._members if itemset.length == length]

    def clear(self):
        self._members.clear()
        self._index.clear()

    def __contains__(self, itemset):
        return isinstance(itemset, Itemset) and itemset.items in self._index

    def __len__(self):
        return len(self._members)

    def __iter__(self) -> Iterator[Itemset]:
        return iter(self._members)

    def __getitem__(self, index):
        return self._members[index]

    def __bool__(self):
        return bool(self._members)

    def __repr__(self):
        return f"ItemsetCollection(size={len(self)}, capacity={self.capacity})"
