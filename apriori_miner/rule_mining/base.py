"""
Base interfaces for itemset and rule miners.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from apriori_miner.itemsets import Itemset


class FrequentItemsetMiner(ABC):
    """
    Base class for frequent itemset mining.

    Discovers itemsets whose occurrence count in the corpus meets the minimum
    support, without forming rules.
    """

    def __init__(self, min_support: int = 1, **kwargs):
        self.min_support = min_support
        self.config = kwargs

    @abstractmethod
    def mine_itemsets(self, transactions: Sequence[Itemset]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine frequent itemsets from a transaction corpus.

        Args:
            transactions: Corpus of transactions

        Returns:
            Tuple of (itemsets, stats) where:
                itemsets: List of dicts with keys 'items', 'count' and 'support' (fraction)
                stats: Dict with mining statistics (execution_time, num_itemsets, etc.)
        """
        pass


class AssociationRuleMiner(ABC):
    """
    Base class for association rule mining.

    Rules take the form antecedent -> consequent with support and confidence.
    """

    def __init__(self, min_support: int = 1, min_confidence: float = 0.0, **kwargs):
        self.min_support = min_support
        self.min_confidence = min_confidence
        self.config = kwargs

    @abstractmethod
    def mine_rules(self, transactions: Sequence[Itemset]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine association rules from a transaction corpus.

        Args:
            transactions: Corpus of transactions

        Returns:
            Tuple of (rules, stats) where:
                rules: List of dicts with keys:
                    - 'antecedent': list of items (left-hand side)
                    - 'consequent': list of items (right-hand side)
                    - 'support': float
                    - 'confidence': float
                    - 'lift' (optional): float
                stats: Dict with mining statistics
        """
        pass


class HybridMiner(FrequentItemsetMiner, AssociationRuleMiner):
    """
    Base class for miners producing both frequent itemsets and rules.

    ``max_level`` bounds the length of the itemsets searched, and so also the
    size of the rules derived from them.
    """

    def __init__(
        self,
        min_support: int = 1,
        min_confidence: float = 0.0,
        max_level: int = None,
        **kwargs
    ):
        AssociationRuleMiner.__init__(self, min_support, min_confidence, **kwargs)
        self.max_level = max_level

    @abstractmethod
    def mine_itemsets(self, transactions: Sequence[Itemset]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Mine frequent itemsets."""
        pass

    @abstractmethod
    def mine_rules(self, transactions: Sequence[Itemset]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Mine association rules."""
        pass
