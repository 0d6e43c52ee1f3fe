import random

import pytest

from apriori_miner.itemsets import Itemset, ItemsetCollection
from apriori_miner.rule_mining.scheduler import BatchScheduler


@pytest.fixture
def scenario_corpus():
    """Four transactions over a, b, c."""
    return [
        Itemset(['a', 'b']),
        Itemset(['a', 'b', 'c']),
        Itemset(['a']),
        Itemset(['b', 'c']),
    ]


@pytest.fixture
def scheduler():
    return BatchScheduler(num_procs=3, name='test')


@pytest.fixture
def serial_scheduler():
    return BatchScheduler(num_procs=1, name='serial')


@pytest.fixture
def level_one():
    return ItemsetCollection([
        Itemset(['a'], support=3),
        Itemset(['b'], support=3),
        Itemset(['c'], support=2),
    ])


@pytest.fixture
def random_corpus():
    """Reproducible corpus of 200 transactions over eight items."""
    rng = random.Random(7)
    alphabet = 'abcdefgh'
    weights = [0.6, 0.5, 0.45, 0.4, 0.3, 0.25, 0.2, 0.1]
    transactions = []
    for _ in range(200):
        items = [item for item, w in zip(alphabet, weights) if rng.random() < w]
        if not items:
            items = [rng.choice(alphabet)]
        transactions.append(items)
    return transactions
