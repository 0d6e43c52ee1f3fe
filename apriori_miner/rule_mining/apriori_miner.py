"""
Level-wise Apriori miner.

Seeds single-item candidates from the corpus, then alternates support counting
and candidate generation up to a fixed level cap. The frequent itemsets of all
levels are merged into one cumulative collection from which association rules
are derived.
"""
import logging
import math
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from apriori_miner.errors import AprioriError
from apriori_miner.itemsets import (
    DEFAULT_COLLECTION_CAPACITY,
    DEFAULT_MAX_LENGTH,
    Itemset,
    ItemsetCollection,
)
from apriori_miner.postprocessing.rule import rank_rules
from apriori_miner.rule_mining.base import HybridMiner
from apriori_miner.rule_mining.candidates import generate_candidates, seed_candidates
from apriori_miner.rule_mining.rules import (
    DEFAULT_RULE_CAPACITY,
    UNDEFINED_CONFIDENCE_POLICIES,
    AssociationRule,
    extract_rules,
)
from apriori_miner.rule_mining.scheduler import BatchScheduler
from apriori_miner.rule_mining.support import count_level

logger = logging.getLogger(__name__)

# the item symbols must stay below this bound
MAX_ALPHABET_SIZE = 32


@dataclass
class MiningResult:
    n_transactions: int
    levels: List[ItemsetCollection] = field(default_factory=list)
    candidate_counts: List[int] = field(default_factory=list)
    frequent: ItemsetCollection = None
    rules: List[AssociationRule] = field(default_factory=list)
    stage_times: Dict[str, float] = field(default_factory=dict)

    def level(self, k: int) -> ItemsetCollection:
        """Frequent itemsets of length ``k`` (1-based)."""
        return self.levels[k - 1]

    def rule_rows(self, min_confidence: float = 0.0) -> List[Dict[str, Any]]:
        """
        Rules as dicts with lift added, dropping those below ``min_confidence``.

        Rules with a non-finite confidence are always kept; their lift is None.
        """
        rows = []
        for rule in self.rules:
            if rule.confidence_defined and rule.confidence < min_confidence:
                continue
            row = rule.to_dict()
            consequent = self.frequent.get(rule.consequent) if self.frequent is not None else None
            if consequent is not None and consequent.support > 0 and rule.confidence_defined:
                row['lift'] = rule.confidence / (consequent.support / self.n_transactions)
            else:
                row['lift'] = None
            rows.append(row)
        return rows


def as_transactions(raw: Iterable[Union[Itemset, Iterable[str]]], max_length: int = DEFAULT_MAX_LENGTH) -> List[Itemset]:
    """Coerce plain item iterables into itemsets; repeated items within a transaction collapse."""
    transactions = []
    for entry in raw:
        if isinstance(entry, Itemset):
            transactions.append(entry)
        else:
            transactions.append(Itemset(sorted(set(entry)), max_length=max_length))
    return transactions


class AprioriMiner(HybridMiner):
    """
    Apriori frequent itemset and association rule miner.

    All buffer sizes of the mining run are explicit parameters, validated on
    construction; exceeding any of them aborts the run with ``CapacityExceeded``.
    """

    def __init__(
        self,
        min_support: int = 300,
        min_confidence: float = 0.0,
        max_level: int = 4,
        alphabet_size: int = 20,
        max_length: int = DEFAULT_MAX_LENGTH,
        collection_capacity: int = DEFAULT_COLLECTION_CAPACITY,
        rule_capacity: int = DEFAULT_RULE_CAPACITY,
        worker_buffer_capacity: int = None,
        num_procs: int = 4,
        on_undefined_confidence: str = 'propagate',
        **kwargs
    ):
        """
        Initialize Apriori miner.

        Args:
            min_support: Minimum occurrence count for an itemset to be frequent
            min_confidence: Minimum confidence for rules returned by mine_rules
            max_level: Highest itemset length searched
            alphabet_size: Maximum number of distinct items in the corpus
            max_length: Itemset buffer length
            collection_capacity: Capacity of candidate and frequent collections
            rule_capacity: Maximum number of rules
            worker_buffer_capacity: Private join buffer per worker (default: alphabet_size)
            num_procs: Processor count; batches hold num_procs - 1 workers
            on_undefined_confidence: 'propagate' (non-finite float) or 'raise'
        """
        self.check_parameters(
            min_support=min_support,
            min_confidence=min_confidence,
            max_level=max_level,
            alphabet_size=alphabet_size,
            max_length=max_length,
            collection_capacity=collection_capacity,
            rule_capacity=rule_capacity,
            worker_buffer_capacity=worker_buffer_capacity,
            num_procs=num_procs,
            on_undefined_confidence=on_undefined_confidence
        )
        super().__init__(min_support, min_confidence, max_level, **kwargs)
        self.alphabet_size = alphabet_size
        self.max_length = max_length
        self.collection_capacity = collection_capacity
        self.rule_capacity = rule_capacity
        self.worker_buffer_capacity = worker_buffer_capacity or alphabet_size
        self.num_procs = num_procs
        self.on_undefined_confidence = on_undefined_confidence

    @staticmethod
    def check_parameters(
        min_support: int,
        min_confidence: float,
        max_level: int,
        alphabet_size: int,
        max_length: int,
        collection_capacity: int,
        rule_capacity: int,
        worker_buffer_capacity: int,
        num_procs: int,
        on_undefined_confidence: str
    ):
        """Raise ``ValueError`` naming the first invalid parameter."""
        if min_support < 1:
            raise ValueError(f"min_support must be >= 1, got {min_support}")
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be in [0, 1], got {min_confidence}")
        if not 0 < alphabet_size < MAX_ALPHABET_SIZE:
            raise ValueError(f"alphabet_size must be in [1, {MAX_ALPHABET_SIZE - 1}], got {alphabet_size}")
        if max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        if not 1 <= max_level <= max_length:
            raise ValueError(f"max_level must be in [1, max_length={max_length}], got {max_level}")
        if collection_capacity < 1:
            raise ValueError(f"collection_capacity must be >= 1, got {collection_capacity}")
        if rule_capacity < 1:
            raise ValueError(f"rule_capacity must be >= 1, got {rule_capacity}")
        if worker_buffer_capacity is not None and worker_buffer_capacity < 1:
            raise ValueError(f"worker_buffer_capacity must be >= 1, got {worker_buffer_capacity}")
        if num_procs < 1:
            raise ValueError(f"num_procs must be >= 1, got {num_procs}")
        if on_undefined_confidence not in UNDEFINED_CONFIDENCE_POLICIES:
            raise ValueError(
                f"on_undefined_confidence must be one of {UNDEFINED_CONFIDENCE_POLICIES}, "
                f"got '{on_undefined_confidence}'"
            )

    @contextmanager
    def _stage(self, name: str, stage_times: Dict[str, float]):
        start_time = time.time()
        try:
            yield
        except AprioriError as e:
            if e.stage is None:
                e.stage = name
            logger.error("Stage %s failed: %s", name, e)
            raise
        finally:
            stage_times[name] = time.time() - start_time

    def _scheduler(self, name: str) -> BatchScheduler:
        return BatchScheduler(self.num_procs, name=name)

    def run(self, transactions: Iterable, rules: bool = True) -> MiningResult:
        """
        Execute the full level-wise pipeline.

        Args:
            transactions: Corpus as itemsets or plain item iterables
            rules: Whether to run rule extraction after merging the levels

        Returns:
            MiningResult with per-level frequent collections, the cumulative
            collection, rules (if requested) and per-stage wall times
        """
        times: Dict[str, float] = {}
        with self._stage('read', times):
            transactions = as_transactions(transactions, self.max_length)
        if not transactions:
            raise ValueError("Transaction corpus is empty")

        result = MiningResult(n_transactions=len(transactions), stage_times=times)

        with self._stage('makec1', times):
            candidates = seed_candidates(
                transactions,
                self.alphabet_size,
                capacity=self.collection_capacity,
                max_length=self.max_length
            )

        for k in range(1, self.max_level + 1):
            result.candidate_counts.append(len(candidates))
            with self._stage(f'makel{k}', times):
                frequent = count_level(
                    candidates,
                    transactions,
                    self.min_support,
                    self._scheduler(f'makel{k}'),
                    capacity=self.collection_capacity
                )
            logger.info("Level %d: %d candidates, %d frequent", k, len(candidates), len(frequent))
            if not frequent:
                break
            result.levels.append(frequent)
            if k == self.max_level:
                break

            with self._stage(f'makec{k + 1}', times):
                candidates = generate_candidates(
                    frequent,
                    self._scheduler(f'makec{k + 1}'),
                    capacity=self.collection_capacity,
                    buffer_capacity=self.worker_buffer_capacity,
                    max_length=self.max_length
                )
            if not candidates:
                logger.info("No candidates of length %d; stopping", k + 1)
                break

        with self._stage('merge', times):
            result.frequent = ItemsetCollection(capacity=self.collection_capacity, name='merged collection')
            for level in result.levels:
                result.frequent.extend(level)
        logger.info("Merged %d levels into %d frequent itemsets", len(result.levels), len(result.frequent))

        if rules:
            with self._stage('genass', times):
                result.rules = extract_rules(
                    result.frequent,
                    result.n_transactions,
                    self._scheduler('genass'),
                    capacity=self.rule_capacity,
                    on_undefined_confidence=self.on_undefined_confidence
                )
            logger.info("Extracted %d rules", len(result.rules))

        return result

    def mine_itemsets(self, transactions: Sequence) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine frequent itemsets.

        Args:
            transactions: Corpus as itemsets or plain item iterables

        Returns:
            Tuple of (itemsets, stats)
        """
        start_time = time.time()
        result = self.run(transactions, rules=False)

        n = result.n_transactions
        itemsets = [
            {
                'items': list(itemset.items),
                'count': itemset.support,
                'support': itemset.support / n
            }
            for itemset in result.frequent
        ]

        stats = {
            'num_itemsets': len(itemsets),
            'num_levels': len(result.levels),
            'execution_time': time.time() - start_time,
            'average_support': sum(i['support'] for i in itemsets) / len(itemsets) if itemsets else 0.0,
            'stage_times': dict(result.stage_times),
            'algorithm': 'Apriori',
            'mode': 'itemsets'
        }
        return itemsets, stats

    def mine_rules(self, transactions: Sequence) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine association rules, ranked by confidence then support.

        Rules with a non-finite confidence are kept; NaN confidences rank last.

        Args:
            transactions: Corpus as itemsets or plain item iterables

        Returns:
            Tuple of (rules, stats)
        """
        start_time = time.time()
        result = self.run(transactions, rules=True)

        rules = rank_rules(result.rule_rows(self.min_confidence))

        defined = [r for r in rules if math.isfinite(r['confidence'])]
        stats = {
            'num_rules': len(rules),
            'num_itemsets': len(result.frequent),
            'execution_time': time.time() - start_time,
            'average_support': sum(r['support'] for r in rules) / len(rules) if rules else 0.0,
            'average_confidence': sum(r['confidence'] for r in defined) / len(defined) if defined else 0.0,
            'stage_times': dict(result.stage_times),
            'algorithm': 'Apriori',
            'mode': 'rules'
        }
        return rules, stats

    def __repr__(self):
        return (f"AprioriMiner(min_support={self.min_support}, min_confidence={self.min_confidence}, "
                f"max_level={self.max_level}, num_procs={self.num_procs})")
