import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml

from errors.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "application.yml"


@dataclass(frozen=True)
class EngineConfig:
    workers: int = 0
    timeout: Optional[float] = None
    seed: int = 42
    privacy_schema: Optional[str] = None
    quantile_bin_factor: int = 100
    quantile_slack: int = 10

    def __post_init__(self) -> None:
        if self.workers < 0:
            raise InvalidArgumentError(f"workers must be >= 0, got {self.workers}")
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidArgumentError(f"timeout must be positive, got {self.timeout}")
        if self.quantile_bin_factor <= 0 or self.quantile_slack <= 0:
            raise InvalidArgumentError("quantile_bin_factor and quantile_slack must be positive")

    @property
    def pool_size(self) -> int:
        return self.workers if self.workers > 0 else (os.cpu_count() or 4)

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH) -> "EngineConfig":
        if not os.path.exists(path):
            logger.info(f"config file {path} not found, using defaults")
            return cls()
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
        return cls.from_dict(config.get('engine') or {})

    @classmethod
    def from_dict(cls, values: dict) -> "EngineConfig":
        known = {field.name for field in fields(cls)}
        if unknown := set(values.keys()) - known:
            raise InvalidArgumentError(f"Unknown engine config keys: {sorted(unknown)}")
        return cls(**values)
