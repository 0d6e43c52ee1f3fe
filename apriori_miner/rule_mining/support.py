"""Parallel support counting and minimum-support filtering."""
import logging
from functools import partial
from typing import Sequence

from apriori_miner.itemsets import DEFAULT_COLLECTION_CAPACITY, Itemset, ItemsetCollection, is_subset
from apriori_miner.rule_mining.scheduler import BatchScheduler

logger = logging.getLogger(__name__)


def count_support(candidate: Itemset, transactions: Sequence[Itemset]) -> int:
    """Number of transactions containing every item of ``candidate``."""
    return sum(1 for transaction in transactions if is_subset(transaction, candidate))


def count_level(
    candidates: ItemsetCollection,
    transactions: Sequence[Itemset],
    min_support: int,
    scheduler: BatchScheduler,
    capacity: int = DEFAULT_COLLECTION_CAPACITY
) -> ItemsetCollection:
    """
    Count every candidate and keep those with ``support >= min_support``.

    Each worker scans the whole corpus for a single candidate and returns the
    count; the coordinator records it on the candidate and applies the
    threshold after each batch join.

    Returns:
        The frequent itemsets of this level, in candidate order
    """
    frequent = ItemsetCollection(capacity=capacity, name='frequent itemset collection')
    worker = partial(count_support, transactions=transactions)

    discarded = 0
    for batch, counts in scheduler.map_batches(worker, candidates):
        for candidate, count in zip(batch, counts):
            candidate.support = count
            if count >= min_support:
                frequent.add(candidate)
            else:
                discarded += 1

    logger.debug("Counted %d candidates: %d frequent, %d discarded", len(candidates), len(frequent), discarded)
    return frequent
