"""
Level-wise Apriori frequent itemset and association rule mining.
"""
from .errors import AprioriError, CapacityExceeded, ParseError, UndefinedConfidence
from .itemsets import Itemset, ItemsetCollection
from .rule_mining.apriori_miner import AprioriMiner, MiningResult
from .rule_mining.rules import AssociationRule

__version__ = '0.1.0'

__all__ = [
    'AprioriMiner',
    'MiningResult',
    'AssociationRule',
    'Itemset',
    'ItemsetCollection',
    'AprioriError',
    'CapacityExceeded',
    'ParseError',
    'UndefinedConfidence'
]
