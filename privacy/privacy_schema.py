import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import yaml

from errors.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrivacyMetadata:
    epsilon: float
    granularity: float
    global_min: float
    global_max: float

    def __post_init__(self) -> None:
        if not self.epsilon > 0:
            raise InvalidArgumentError(f"epsilon must be positive, got {self.epsilon}")
        if not self.granularity > 0:
            raise InvalidArgumentError(f"granularity must be positive, got {self.granularity}")
        if not (math.isfinite(self.global_min) and math.isfinite(self.global_max)) \
                or self.global_min >= self.global_max:
            raise InvalidArgumentError(f"Invalid global range [{self.global_min}, {self.global_max}]")


class PrivacySchema:
    def __init__(self, metadata: Mapping[str, PrivacyMetadata]) -> None:
        self._metadata = MappingProxyType(dict(metadata))

    def get(self, column: str) -> PrivacyMetadata:
        if (md := self._metadata.get(column)) is None:
            raise InvalidArgumentError(f"No privacy metadata for column '{column}'")
        return md

    def columns(self) -> list[str]:
        return list(self._metadata.keys())

    def __contains__(self, column: str) -> bool:
        return column in self._metadata

    @classmethod
    def from_dict(cls, values: dict) -> "PrivacySchema":
        columns = values.get('columns')
        if not isinstance(columns, dict):
            raise InvalidArgumentError("Privacy schema needs a 'columns' mapping")
        metadata = {}
        for name, md in columns.items():
            try:
                metadata[name] = PrivacyMetadata(
                    epsilon=float(md['epsilon']),
                    granularity=float(md['granularity']),
                    global_min=float(md['global_min']),
                    global_max=float(md['global_max']),
                )
            except (KeyError, TypeError) as e:
                raise InvalidArgumentError(f"Malformed privacy metadata for column '{name}': {e!r}") from e
        return cls(metadata)

    @classmethod
    def load(cls, path: str) -> "PrivacySchema":
        with open(path, 'r') as f:
            schema = cls.from_dict(yaml.safe_load(f) or {})
        logger.info(f"loaded privacy schema for columns {schema.columns()} from {path}")
        return schema
