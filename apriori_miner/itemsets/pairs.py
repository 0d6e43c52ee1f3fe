"""
Lazy pair enumerations over itemset sequences.

These work on any iterable of itemsets, so the join and rule scans do not
depend on how a collection stores its members.
"""
from itertools import combinations, islice
from typing import Iterable, Iterator, Tuple

from apriori_miner.itemsets.model import Itemset, is_subset


def iter_pairs(itemsets: Iterable[Itemset]) -> Iterator[Tuple[Itemset, Itemset]]:
    """Each unordered pair once, as ``(s, t)`` with ``s`` preceding ``t``."""
    return combinations(itemsets, 2)


def iter_pairs_from(itemsets: Iterable[Itemset], index: int) -> Iterator[Tuple[Itemset, Itemset]]:
    """Pairs ``(s, t)`` where ``s`` is the member at ``index`` and ``t`` follows it."""
    it = iter(itemsets)
    s = next(islice(it, index, None), None)
    if s is None:
        return
    for t in it:
        yield s, t


def iter_subset_pairs(itemsets: Iterable[Itemset]) -> Iterator[Tuple[Itemset, Itemset]]:
    """
    Pairs ``(left, right)`` where ``right`` has at least two items, ``left`` is
    non-empty and strictly shorter and every item of ``left`` occurs in ``right``.

    Outer order follows ``right``, inner order follows ``left``.
    """
    members = list(itemsets)
    for right in members:
        if right.length < 2:
            continue
        for left in members:
            if 0 < left.length < right.length and is_subset(right, left):
                yield left, right
