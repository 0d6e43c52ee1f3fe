"""
Candidate generation: seed, join and prune.

``generate_candidates`` turns the frequent itemsets of level k into the
candidates of level k+1. Each worker owns one outer index of the level and
joins that member with every member after it, keeping its results in a
private, capacity-bounded buffer. The coordinator merges the buffers into the
shared candidate collection after each batch.
"""
import logging
from functools import partial
from typing import Iterable, List, Sequence

from apriori_miner.errors import CapacityExceeded
from apriori_miner.itemsets import (
    DEFAULT_COLLECTION_CAPACITY,
    DEFAULT_MAX_LENGTH,
    Itemset,
    ItemsetCollection,
    iter_pairs_from,
    match_count,
    merge,
)
from apriori_miner.rule_mining.scheduler import BatchScheduler

logger = logging.getLogger(__name__)


def seed_candidates(
    transactions: Iterable[Itemset],
    alphabet_size: int,
    capacity: int = DEFAULT_COLLECTION_CAPACITY,
    max_length: int = DEFAULT_MAX_LENGTH
) -> ItemsetCollection:
    """
    Build C1: one single-item candidate per distinct item in the corpus.

    Raises:
        CapacityExceeded: if the corpus uses more than ``alphabet_size`` items
    """
    alphabet = set()
    for transaction in transactions:
        alphabet.update(transaction)
        if len(alphabet) > alphabet_size:
            raise CapacityExceeded('item alphabet', alphabet_size, itemset=transaction)

    return ItemsetCollection(
        (Itemset([item], max_length=max_length) for item in sorted(alphabet)),
        capacity=capacity,
        name='candidate collection'
    )


def is_proper(candidate: Itemset, level: ItemsetCollection) -> bool:
    """
    Anti-monotonicity check: every leave-one-out subset of ``candidate`` must be
    a member of ``level``. Omission positions are tried from last to first.
    """
    for position in reversed(range(candidate.length)):
        if candidate.without(position) not in level:
            return False
    return True


def join_and_prune(
    index: int,
    members: Sequence[Itemset],
    level: ItemsetCollection,
    buffer_capacity: int,
    max_length: int
) -> List[Itemset]:
    """
    Worker body for one outer index of the join.

    Joins ``members[index]`` with every later member sharing all but one item,
    drops duplicates within the private buffer and returns the candidates that
    pass the prune step, in the order they were produced.
    """
    buffer = ItemsetCollection(capacity=buffer_capacity, name='worker candidate buffer')
    proper = []
    for s, t in iter_pairs_from(members, index):
        if match_count(t, s) != s.length - 1:
            continue
        candidate = merge(t, s, max_length=max_length)
        if not buffer.add(candidate):
            continue
        if is_proper(candidate, level):
            proper.append(candidate)
    return proper


def generate_candidates(
    level: ItemsetCollection,
    scheduler: BatchScheduler,
    capacity: int = DEFAULT_COLLECTION_CAPACITY,
    buffer_capacity: int = 20,
    max_length: int = DEFAULT_MAX_LENGTH
) -> ItemsetCollection:
    """
    Produce C(k+1) from the frequent itemsets L(k).

    Args:
        level: Frequent itemsets, all of the same length k
        scheduler: Batch scheduler running the per-index workers
        capacity: Capacity of the returned candidate collection
        buffer_capacity: Capacity of each worker's private buffer
        max_length: Itemset buffer length for the new candidates

    Returns:
        Deduplicated candidates of length k+1 that are join- and prune-valid

    Raises:
        CapacityExceeded: if a worker buffer or the candidate collection overflows
        ValueError: if the level mixes itemset lengths
    """
    candidates = ItemsetCollection(capacity=capacity, name='candidate collection')
    if not level:
        return candidates

    members = list(level)
    k = members[0].length
    if any(itemset.length != k for itemset in members):
        raise ValueError(f"level mixes itemset lengths; expected all of length {k}")

    worker = partial(
        join_and_prune,
        members=members,
        level=level,
        buffer_capacity=buffer_capacity,
        max_length=max_length
    )
    for _, results in scheduler.map_batches(worker, range(len(members))):
        for proper in results:
            candidates.extend(proper)

    logger.debug("Joined %d itemsets of length %d into %d candidates", len(members), k, len(candidates))
    return candidates
