from .config import (
    DataConfig,
    MiningConfig,
    FilterConfig,
    ExperimentConfig
)
from .base import (
    load_data,
    load_basket_csv,
    load_long_csv,
    run_rule_mining,
    create_miner,
    apply_filters
)
from .stages import run_stage, run_stages, stage_names

__all__ = [
    'DataConfig',
    'MiningConfig',
    'FilterConfig',
    'ExperimentConfig',
    'load_data',
    'load_basket_csv',
    'load_long_csv',
    'run_rule_mining',
    'create_miner',
    'apply_filters',
    'run_stage',
    'run_stages',
    'stage_names'
]
