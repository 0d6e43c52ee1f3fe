"""
Apriori Mining Experiment

Loads a transaction corpus, mines frequent itemsets level by level, derives
association rules and saves them as binary records plus readable reports.

    python -m apriori_miner.experiments.run_apriori mine corpus.csv --min-support 2
    python -m apriori_miner.experiments.run_apriori stage makel2 --workdir work
"""
import argparse
import logging
import sys
from pathlib import Path

from apriori_miner.errors import AprioriError
from apriori_miner.experiments.base import apply_filters, create_miner, generate_output_filename, load_data
from apriori_miner.experiments.config import DATA_FORMATS, DataConfig, FilterConfig, MiningConfig
from apriori_miner.experiments.stages import MERGED_FILE, RULES_FILE, run_stage, stage_names
from apriori_miner.postprocessing.rule import filter_rules_by_pattern, rank_rules
from apriori_miner.records import save_collection_text, write_collection, write_rules
from apriori_miner.utils.excel_io import save_rule_mining_results, save_rules_text
from apriori_miner.utils.log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Level-wise Apriori itemset and rule mining")
    parser.add_argument('--verbose', '-v', action='store_true', help="Log per-batch detail")

    mining = argparse.ArgumentParser(add_help=False)
    mining.add_argument('--min-support', type=int, default=300, help="Minimum occurrence count")
    mining.add_argument('--min-confidence', type=float, default=0.0)
    mining.add_argument('--alphabet-size', type=int, default=20)
    mining.add_argument('--max-length', type=int, default=10)
    mining.add_argument('--max-level', type=int, default=4)
    mining.add_argument('--collection-capacity', type=int, default=10000)
    mining.add_argument('--rule-capacity', type=int, default=10000)
    mining.add_argument('--num-procs', type=int, default=4)
    mining.add_argument('--corpus-size', type=int, default=None)
    mining.add_argument('--on-undefined-confidence', choices=['propagate', 'raise'], default='propagate')

    sub = parser.add_subparsers(dest='command', required=True)

    mine = sub.add_parser('mine', parents=[mining], help="Run the whole pipeline in-process")
    mine.add_argument('data', help="Corpus file")
    mine.add_argument('--format', choices=DATA_FORMATS, default=None, help="Default: inferred from suffix")
    mine.add_argument('--output-dir', default='./out')
    mine.add_argument('--excel', action='store_true', help="Also write an Excel report")
    mine.add_argument('--min-lift', type=float, default=None)
    mine.add_argument('--consequent', nargs='+', default=None, help="Keep rules whose consequent holds all these items")

    stage = sub.add_parser('stage', parents=[mining], help="Run one stage against a working directory")
    stage.add_argument('name', help="Stage name, e.g. read, makec1, makel1, makec2, merge, genass, write, all")
    stage.add_argument('--workdir', default='./work')
    stage.add_argument('--data', default=None, help="Corpus file for the 'read' stage")
    stage.add_argument('--format', choices=DATA_FORMATS, default=None)

    return parser


def mining_config(args) -> MiningConfig:
    return MiningConfig(
        min_support=args.min_support,
        min_confidence=args.min_confidence,
        alphabet_size=args.alphabet_size,
        max_length=args.max_length,
        max_level=args.max_level,
        collection_capacity=args.collection_capacity,
        rule_capacity=args.rule_capacity,
        num_procs=args.num_procs,
        on_undefined_confidence=args.on_undefined_confidence,
        corpus_size=args.corpus_size
    )


def data_config(path: str, fmt: str = None) -> DataConfig:
    config = DataConfig.infer(path)
    if fmt:
        config = DataConfig(path=path, name=config.name, format=fmt)
    return config


def run_mine(args) -> int:
    config = mining_config(args)
    data = data_config(args.data, args.format)

    print("=" * 70)
    print("APRIORI MINING EXPERIMENT")
    print("=" * 70)
    print(f"Dataset: {data.path} ({data.format})")
    print(f"Min support: {config.min_support}, max level: {config.max_level}, procs: {config.num_procs}")

    print("\n[1] Loading data...")
    transactions = load_data(data, config)
    print(f"  Transactions: {len(transactions)}")

    print("\n[2] Mining...")
    miner = create_miner(config)
    result = miner.run(transactions)
    for k, level in enumerate(result.levels, 1):
        print(f"  Level {k}: {result.candidate_counts[k - 1]} candidates, {len(level)} frequent")
    print(f"  Frequent itemsets: {len(result.frequent)}")
    print(f"  Rules: {len(result.rules)}")

    print("\n[3] Saving results...")
    output_dir = Path(args.output_dir)
    if all(len(item) == 1 and ord(item) < 256 for itemset in result.frequent for item in itemset):
        write_collection(output_dir / MERGED_FILE, result.frequent, config.max_length, config.collection_capacity)
        write_rules(output_dir / RULES_FILE, result.rules, config.max_length, config.rule_capacity)
    else:
        print("  Items are not single-byte symbols; binary records skipped")
    save_collection_text(output_dir / f'{MERGED_FILE}.txt', result.frequent)

    n = result.n_transactions
    rules = result.rule_rows(config.min_confidence)
    if args.min_lift is not None:
        rules = apply_filters(rules, [FilterConfig('lift', args.min_lift)])
    if args.consequent:
        rules = filter_rules_by_pattern(rules, consequent_contains=args.consequent)
    rules = rank_rules(rules)

    filename = generate_output_filename('run', 'rules', data.name)
    save_rules_text(rules, output_dir / filename, metadata={'dataset': data.path, **config.to_dict()})
    if args.excel:
        itemsets = [
            {'items': list(i.items), 'count': i.support, 'support': i.support / n}
            for i in result.frequent
        ]
        stats = {
            'num_transactions': n,
            'num_itemsets': len(result.frequent),
            'num_rules': len(rules),
            'stage_times': result.stage_times
        }
        save_rule_mining_results(rules, stats, output_dir / filename, itemsets=itemsets, parameters=config.to_dict())

    print("\n" + "=" * 70)
    print("EXPERIMENT COMPLETE")
    print("=" * 70)
    for stage, seconds in result.stage_times.items():
        print(f"  {stage:8s} {seconds:.3f}s")
    print(f"Output: {output_dir}")
    return 0


def run_stage_command(args) -> int:
    config = mining_config(args)
    data = data_config(args.data, args.format) if args.data else None
    names = stage_names(config.max_level) if args.name == 'all' else [args.name]
    for name in names:
        elapsed = run_stage(name, args.workdir, config, data)
        print(f"  {name:8s} {elapsed:.3f}s")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        if args.command == 'mine':
            return run_mine(args)
        return run_stage_command(args)
    except AprioriError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
