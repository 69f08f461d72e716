"""
Genetic algorithm configuration.

Parameters are loaded from a YAML mapping so runs stay reproducible and
configurable without touching code.
"""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional, Any

import yaml


@dataclass
class GAConfig:
    # Genetic algorithm
    population_size: int = 100
    generations: int = 300
    mutation_rate: float = 0.15
    crossover_rate: float = 0.85
    elite_size: int = 8
    tournament_size: int = 5
    max_stagnation: int = 20
    seed: Optional[int] = None
    time_limit_sec: Optional[float] = None

    # Fitness weights
    conflict_weight: int = 500
    day_bonus: int = 15
    spread_bonus: int = 5
    classroom_bonus: int = 20
    classroom_diversity: int = 3

    # Diagnostics
    log_every: int = 50

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GAConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: str = "config.yaml") -> GAConfig:
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return GAConfig.from_dict(data)
