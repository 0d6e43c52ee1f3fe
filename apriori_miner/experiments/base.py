import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from apriori_miner.errors import CapacityExceeded, ParseError
from apriori_miner.itemsets import Itemset
from apriori_miner.postprocessing.rule import filter_itemsets, filter_rules
from apriori_miner.records import load_transactions_text, read_corpus
from apriori_miner.rule_mining.apriori_miner import AprioriMiner

from .config import DataConfig, ExperimentConfig, FilterConfig, MiningConfig

logger = logging.getLogger(__name__)


def _to_transaction(items, source, row, max_length: int) -> Itemset:
    try:
        return Itemset(sorted(set(items)), max_length=max_length)
    except (ValueError, CapacityExceeded) as e:
        raise ParseError(source, f"row {row}: {e}")


def load_basket_csv(path, max_length: int = 10) -> List[Itemset]:
    """
    One transaction per row. Items are either spread over columns or given as
    a single quoted comma-separated cell; empty cells are skipped. A row with
    more than ``max_length`` columns is rejected.
    """
    try:
        # one spare column catches rows that are too wide
        df = pd.read_csv(path, header=None, names=list(range(max_length + 1)), index_col=False, dtype=str,
                         skipinitialspace=True, skip_blank_lines=True)
    except pd.errors.ParserError as e:
        raise ParseError(path, str(e))
    overflow = df[max_length].notna()
    if overflow.any():
        raise ParseError(path, f"row {int(overflow.idxmax())} has more than {max_length} columns")
    df = df.drop(columns=[max_length])

    transactions = []
    for row, values in enumerate(df.itertuples(index=False)):
        items = []
        for cell in values:
            if pd.isna(cell):
                continue
            for token in str(cell).split(','):
                token = token.strip()
                if token:
                    items.append(token)
        transactions.append(_to_transaction(items, path, row, max_length))
    return transactions


def load_long_csv(path, tid_col: str = 'tid', item_col: str = 'item', max_length: int = 10) -> List[Itemset]:
    """(tid, item) rows grouped into one transaction per tid, in first-seen tid order."""
    df = pd.read_csv(path, dtype=str)
    missing = [c for c in (tid_col, item_col) if c not in df.columns]
    if missing:
        raise ParseError(path, f"missing columns {missing}")

    df = df.dropna(subset=[item_col]).copy()
    df[item_col] = df[item_col].str.strip()
    df = df[df[item_col] != '']
    transactions = []
    for tid, group in df.groupby(tid_col, sort=False):
        transactions.append(_to_transaction(group[item_col].tolist(), path, tid, max_length))
    return transactions


def load_data(config: DataConfig, mining: MiningConfig = None) -> List[Itemset]:
    mining = mining or MiningConfig()
    path = Path(config.path)
    if config.format == 'binary':
        transactions = read_corpus(path, max_length=mining.max_length, expected=mining.corpus_size)
    elif config.format == 'text':
        transactions = load_transactions_text(path, max_length=mining.max_length)
    elif config.format == 'basket':
        transactions = load_basket_csv(path, max_length=mining.max_length)
    elif config.format == 'long':
        transactions = load_long_csv(path, config.tid_col, config.item_col, max_length=mining.max_length)
    else:
        raise ValueError(f"Unsupported data format: {config.format}")

    if config.format != 'binary' and mining.corpus_size is not None and len(transactions) != mining.corpus_size:
        raise ParseError(path, f"expected {mining.corpus_size} transactions, found {len(transactions)}")
    logger.info("Loaded %d transactions from %s", len(transactions), path)
    return transactions


def create_miner(config: MiningConfig) -> AprioriMiner:
    return AprioriMiner(**config.miner_kwargs())


def apply_filters(
    data: List[Dict],
    filters: List[FilterConfig],
    mode: str = 'rules'
) -> List[Dict]:
    if not filters:
        return data

    result = data
    for f in filters:
        if mode == 'rules':
            result = filter_rules(result, criterion=f.metric, threshold=f.threshold)
        else:
            result, _ = filter_itemsets(result, criterion=f.metric, threshold=f.threshold)

    return result


def run_rule_mining(
    transactions: List[Itemset],
    config: ExperimentConfig
) -> Tuple[Dict[str, List[Dict]], Dict[str, Any]]:
    miner = create_miner(config.mining)
    mode = config.mode
    if mode not in ['rules', 'itemsets', 'both']:
        raise ValueError(f"Unknown mode: {mode}")

    results = {}
    stats = {}

    if mode in ['itemsets', 'both']:
        itemsets, itemset_stats = miner.mine_itemsets(transactions)
        itemsets = apply_filters(itemsets, config.filters, mode='itemsets')
        results['itemsets'] = itemsets
        stats['itemsets'] = itemset_stats
        stats['itemsets']['count'] = len(itemsets)

    if mode in ['rules', 'both']:
        rules, rule_stats = miner.mine_rules(transactions)
        rules = apply_filters(rules, config.filters, mode='rules')
        results['rules'] = rules
        stats['rules'] = rule_stats
        stats['rules']['count'] = len(rules)

    return results, stats


def generate_output_filename(
    experiment_name: str,
    mode: str,
    dataset_name: str
) -> str:
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{timestamp}_{experiment_name}_apriori_{mode}_{dataset_name}"
