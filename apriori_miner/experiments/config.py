from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from apriori_miner.rule_mining.apriori_miner import AprioriMiner

DATA_FORMATS = ['binary', 'text', 'basket', 'long']


@dataclass
class DataConfig:
    path: str
    name: str = 'transactions'
    format: str = 'binary'
    # long format column names
    tid_col: str = 'tid'
    item_col: str = 'item'

    def __post_init__(self):
        if self.format not in DATA_FORMATS:
            raise ValueError(f"Data format must be one of {DATA_FORMATS}, got '{self.format}'")

    @classmethod
    def infer(cls, path: str, name: str = None) -> 'DataConfig':
        """Pick the format from the file suffix: .csv is basket, .txt is text, anything else binary."""
        suffix = Path(path).suffix.lower()
        fmt = {'.csv': 'basket', '.txt': 'text'}.get(suffix, 'binary')
        return cls(path=path, name=name or Path(path).stem, format=fmt)


@dataclass
class MiningConfig:
    min_support: int = 300
    min_confidence: float = 0.0
    alphabet_size: int = 20
    max_length: int = 10
    max_level: int = 4
    collection_capacity: int = 10000
    rule_capacity: int = 10000
    worker_buffer_capacity: Optional[int] = None
    num_procs: int = 4
    on_undefined_confidence: str = 'propagate'
    # expected transaction count, checked when the corpus is loaded
    corpus_size: Optional[int] = None

    def __post_init__(self):
        AprioriMiner.check_parameters(**self.miner_kwargs())
        if self.corpus_size is not None and self.corpus_size < 1:
            raise ValueError(f"corpus_size must be >= 1, got {self.corpus_size}")

    @classmethod
    def reference(cls) -> 'MiningConfig':
        return cls(
            min_support=300,
            alphabet_size=20,
            max_length=10,
            max_level=4,
            collection_capacity=10000,
            rule_capacity=10000,
            num_procs=4,
            corpus_size=10000
        )

    @classmethod
    def small(cls, min_support: int = 2) -> 'MiningConfig':
        return cls(
            min_support=min_support,
            alphabet_size=26,
            max_length=10,
            max_level=4,
            collection_capacity=1000,
            rule_capacity=1000,
            num_procs=2
        )

    def miner_kwargs(self) -> Dict[str, Any]:
        kwargs = self.to_dict()
        kwargs.pop('corpus_size')
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FilterConfig:
    metric: str
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return {'metric': self.metric, 'threshold': self.threshold}


@dataclass
class ExperimentConfig:
    name: str
    data: DataConfig
    mining: MiningConfig = field(default_factory=MiningConfig)
    mode: str = 'rules'  # 'rules', 'itemsets', 'both'
    filters: List[FilterConfig] = field(default_factory=list)
    output_dir: str = "./out"

    def get_output_path(self, suffix: str = "") -> Path:
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path / suffix if suffix else path

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'data_path': self.data.path,
            'data_format': self.data.format,
            'mode': self.mode,
            'filters': [f.to_dict() for f in self.filters],
            'output_dir': self.output_dir,
            **self.mining.to_dict()
        }
