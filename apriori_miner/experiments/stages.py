"""
Staged execution.

Each stage of the mining loop can run on its own, reading its inputs from and
writing its outputs to binary files in a working directory:

    read     corpus (any format)      -> transactions
    makec1   transactions             -> c1
    makelK   transactions, cK         -> lK
    makecK   l(K-1)                   -> cK
    merge    l1 .. lN                 -> merged
    genass   transactions, merged     -> ass
    write    merged, ass              -> merged.txt, ass.txt

Running every stage in order gives the same frequent itemsets and rules as an
in-process ``AprioriMiner.run``.
"""
import logging
import re
import time
from pathlib import Path
from typing import Dict, List, Union

from apriori_miner.errors import AprioriError
from apriori_miner.itemsets import ItemsetCollection
from apriori_miner.records import (
    read_collection,
    read_corpus,
    read_rules,
    save_collection_text,
    write_collection,
    write_corpus,
    write_rules,
)
from apriori_miner.rule_mining.candidates import generate_candidates, seed_candidates
from apriori_miner.rule_mining.rules import extract_rules
from apriori_miner.rule_mining.scheduler import BatchScheduler
from apriori_miner.rule_mining.support import count_level

from .base import load_data
from .config import DataConfig, MiningConfig

logger = logging.getLogger(__name__)

TRANSACTIONS_FILE = 'transactions'
MERGED_FILE = 'merged'
RULES_FILE = 'ass'

LEVEL_STAGE = re.compile(r'^make([cl])(\d+)$')


def stage_names(max_level: int) -> List[str]:
    names = ['read', 'makec1']
    for k in range(1, max_level + 1):
        names.append(f'makel{k}')
        if k < max_level:
            names.append(f'makec{k + 1}')
    return names + ['merge', 'genass', 'write']


def _read_level(path: Path, config: MiningConfig) -> ItemsetCollection:
    if not path.exists():
        return ItemsetCollection(capacity=config.collection_capacity)
    return read_collection(path, config.max_length, config.collection_capacity)


def _write_level(path: Path, collection: ItemsetCollection, config: MiningConfig):
    write_collection(path, collection, config.max_length, config.collection_capacity)


def _transactions(workdir: Path, config: MiningConfig):
    return read_corpus(workdir / TRANSACTIONS_FILE, config.max_length, expected=config.corpus_size)


def _format_rule_line(rule) -> str:
    return (f"{' '.join(rule.antecedent)} -> {' '.join(rule.consequent)} : "
            f"support {rule.support:.4f} confidence {rule.confidence:.4f}")


def run_stage(
    name: str,
    workdir: Union[str, Path],
    config: MiningConfig,
    data: DataConfig = None
) -> float:
    """
    Run a single named stage against ``workdir``.

    Args:
        name: Stage name (see ``stage_names``)
        workdir: Directory holding the stage files
        config: Mining configuration
        data: Corpus source, required by the 'read' stage

    Returns:
        Wall time of the stage in seconds

    Raises:
        AprioriError: tagged with the stage name
        ValueError: for an unknown stage or a level above ``max_level``
    """
    workdir = Path(workdir)
    workdir.mkdir(parents=True, exist_ok=True)
    scheduler = BatchScheduler(config.num_procs, name=name)
    start_time = time.time()

    try:
        match = LEVEL_STAGE.match(name)
        if name == 'read':
            if data is None:
                raise ValueError("Stage 'read' needs a data config")
            write_corpus(workdir / TRANSACTIONS_FILE, load_data(data, config), config.max_length)

        elif name == 'makec1':
            candidates = seed_candidates(
                _transactions(workdir, config),
                config.alphabet_size,
                capacity=config.collection_capacity,
                max_length=config.max_length
            )
            _write_level(workdir / 'c1', candidates, config)

        elif match:
            kind, k = match.group(1), int(match.group(2))
            if not 1 <= k <= config.max_level:
                raise ValueError(f"Level {k} outside [1, {config.max_level}]")
            if kind == 'l':
                frequent = count_level(
                    _read_level(workdir / f'c{k}', config),
                    _transactions(workdir, config),
                    config.min_support,
                    scheduler,
                    capacity=config.collection_capacity
                )
                _write_level(workdir / f'l{k}', frequent, config)
                logger.info("Level %d: %d frequent", k, len(frequent))
            else:
                if k < 2:
                    raise ValueError("Use stage 'makec1' to seed the first level")
                candidates = generate_candidates(
                    _read_level(workdir / f'l{k - 1}', config),
                    scheduler,
                    capacity=config.collection_capacity,
                    buffer_capacity=config.worker_buffer_capacity or config.alphabet_size,
                    max_length=config.max_length
                )
                _write_level(workdir / f'c{k}', candidates, config)

        elif name == 'merge':
            merged = ItemsetCollection(capacity=config.collection_capacity, name='merged collection')
            for k in range(1, config.max_level + 1):
                merged.extend(_read_level(workdir / f'l{k}', config))
            _write_level(workdir / MERGED_FILE, merged, config)
            logger.info("Merged %d frequent itemsets", len(merged))

        elif name == 'genass':
            n_transactions = len(_transactions(workdir, config))
            rules = extract_rules(
                read_collection(workdir / MERGED_FILE, config.max_length, config.collection_capacity),
                n_transactions,
                scheduler,
                capacity=config.rule_capacity,
                on_undefined_confidence=config.on_undefined_confidence
            )
            write_rules(workdir / RULES_FILE, rules, config.max_length, config.rule_capacity)
            logger.info("Extracted %d rules", len(rules))

        elif name == 'write':
            merged = read_collection(workdir / MERGED_FILE, config.max_length, config.collection_capacity)
            save_collection_text(workdir / f'{MERGED_FILE}.txt', merged)
            rules = read_rules(workdir / RULES_FILE, config.max_length, config.rule_capacity)
            with open(workdir / f'{RULES_FILE}.txt', 'w') as f:
                for rule in rules:
                    f.write(_format_rule_line(rule) + "\n")

        else:
            raise ValueError(f"Unknown stage: {name}")

    except AprioriError as e:
        if e.stage is None:
            e.stage = name
        logger.error("Stage %s failed: %s", name, e)
        raise

    elapsed = time.time() - start_time
    logger.info("Stage %s finished in %.3fs", name, elapsed)
    return elapsed


def run_stages(
    workdir: Union[str, Path],
    config: MiningConfig,
    data: DataConfig
) -> Dict[str, float]:
    """Run every stage in order; returns the wall time of each."""
    return {name: run_stage(name, workdir, config, data) for name in stage_names(config.max_level)}
