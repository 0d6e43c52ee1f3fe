"""
Association rule extraction.

Every (left, right) pair from the cumulative frequent collection where ``left``
is a strictly shorter subset of ``right`` yields one rule. Slots in the output
list are reserved by the coordinator in enumeration order before dispatch, and
each worker writes only its own slot.
"""
import logging
import math
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apriori_miner.errors import CapacityExceeded, UndefinedConfidence
from apriori_miner.itemsets import Itemset, iter_subset_pairs
from apriori_miner.rule_mining.scheduler import BatchScheduler

logger = logging.getLogger(__name__)

DEFAULT_RULE_CAPACITY = 10000

UNDEFINED_CONFIDENCE_POLICIES = ['propagate', 'raise']


@dataclass
class AssociationRule:
    antecedent: Itemset
    consequent: Itemset
    full: Itemset
    support: float
    confidence: float

    @property
    def confidence_defined(self) -> bool:
        return math.isfinite(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'antecedent': list(self.antecedent.items),
            'consequent': list(self.consequent.items),
            'support': self.support,
            'confidence': self.confidence,
            'count': self.full.support,
            'antecedent_count': self.antecedent.support
        }

    def __str__(self):
        return f"{self.antecedent} -> {self.consequent} (support={self.support:.4f}, confidence={self.confidence:.4f})"


def rule_confidence(left: Itemset, right: Itemset, policy: str = 'propagate') -> float:
    """
    ``count(right) / count(left)``.

    A zero antecedent count gives ``inf`` (or ``nan`` when the full itemset is
    also zero) under the ``'propagate'`` policy and raises
    ``UndefinedConfidence`` under ``'raise'``.
    """
    if left.support != 0:
        return right.support / left.support
    if policy == 'raise':
        raise UndefinedConfidence(left, right)
    logger.warning("Antecedent %s has zero count; confidence of rule over %s is not finite", left, right)
    return math.inf if right.support > 0 else math.nan


def derive_rule(
    unit: Tuple[int, Itemset, Itemset],
    rules: List[Optional[AssociationRule]],
    n_transactions: int,
    policy: str
) -> None:
    """Worker body: compute the rule for one pair and store it in its reserved slot."""
    slot, left, right = unit
    rules[slot] = AssociationRule(
        antecedent=left,
        consequent=right.difference(left),
        full=right,
        support=right.support / n_transactions,
        confidence=rule_confidence(left, right, policy)
    )


def _reserve_slots(
    pairs: Iterable[Tuple[Itemset, Itemset]],
    rules: List[Optional[AssociationRule]],
    capacity: int
):
    for left, right in pairs:
        if len(rules) >= capacity:
            raise CapacityExceeded('rule list', capacity, itemset=right)
        rules.append(None)
        yield len(rules) - 1, left, right


def extract_rules(
    frequent: Iterable[Itemset],
    n_transactions: int,
    scheduler: BatchScheduler,
    capacity: int = DEFAULT_RULE_CAPACITY,
    on_undefined_confidence: str = 'propagate'
) -> List[AssociationRule]:
    """
    Derive all rules from the cumulative frequent-itemset collection.

    Args:
        frequent: Every frequent itemset from every level, supports populated
        n_transactions: Corpus size, the denominator of rule support
        scheduler: Batch scheduler running one worker per pair
        capacity: Maximum number of rules
        on_undefined_confidence: 'propagate' or 'raise' for zero-count antecedents

    Returns:
        Rules in pair-enumeration order (outer: full itemset, inner: antecedent)

    Raises:
        CapacityExceeded: if more than ``capacity`` rules would be produced
        UndefinedConfidence: under the 'raise' policy
    """
    if n_transactions <= 0:
        raise ValueError(f"n_transactions must be positive, got {n_transactions}")
    if on_undefined_confidence not in UNDEFINED_CONFIDENCE_POLICIES:
        raise ValueError(
            f"on_undefined_confidence must be one of {UNDEFINED_CONFIDENCE_POLICIES}, "
            f"got '{on_undefined_confidence}'"
        )

    rules: List[Optional[AssociationRule]] = []
    worker = partial(derive_rule, rules=rules, n_transactions=n_transactions, policy=on_undefined_confidence)
    units = _reserve_slots(iter_subset_pairs(frequent), rules, capacity)
    for _ in scheduler.map_batches(worker, units):
        pass

    logger.debug("Extracted %d rules", len(rules))
    return rules
