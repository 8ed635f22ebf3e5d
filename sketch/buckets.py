import math
from bisect import bisect_right
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from errors.errors import InvalidArgumentError
from table.content_kind import ContentsKind


class Quantization(Enum):
    NUMERIC = "numeric"
    STRING = "string"


class HistogramBuckets:
    quantization: Quantization

    @property
    def bucket_count(self) -> int:
        raise NotImplementedError

    def indexes(self, values: np.ndarray) -> np.ndarray:
        """Bucket index of each value, -1 when out of range."""
        raise NotImplementedError

    def index_of(self, value) -> int:
        return int(self.indexes(np.array([value], dtype=object if self.quantization == Quantization.STRING else np.float64))[0])

    def accepts(self, kind: ContentsKind, converter: Optional[object] = None) -> bool:
        if self.quantization == Quantization.STRING:
            return kind.is_string()
        return kind.is_numeric() or (kind.is_string() and converter is not None)


class DoubleHistogramBuckets(HistogramBuckets):
    quantization = Quantization.NUMERIC

    def __init__(self, min_value: float, max_value: float, bucket_count: int) -> None:
        if bucket_count <= 0:
            raise InvalidArgumentError(f"bucket_count must be positive, got {bucket_count}")
        if not (math.isfinite(min_value) and math.isfinite(max_value)) or max_value < min_value:
            raise InvalidArgumentError(f"Invalid bucket range [{min_value}, {max_value}]")
        self.min = float(min_value)
        self.max = float(max_value)
        self._bucket_count = 1 if self.min == self.max else bucket_count
        self.range = self.max - self.min

    @property
    def bucket_count(self) -> int:
        return self._bucket_count

    def indexes(self, values: np.ndarray) -> np.ndarray:
        values = np.asarray(values, dtype=np.float64)
        result = np.full(len(values), -1, dtype=np.int64)
        inside = (values >= self.min) & (values <= self.max)
        if self.range == 0:
            result[inside] = 0
            return result
        index = np.floor((values[inside] - self.min) * self._bucket_count / self.range).astype(np.int64)
        # max belongs to the last bucket
        result[inside] = np.minimum(index, self._bucket_count - 1)
        return result

    def __eq__(self, other: object) -> bool:
        return (type(other) is type(self)
                and (self.min, self.max, self.bucket_count) == (other.min, other.max, other.bucket_count))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}([{self.min}, {self.max}], {self.bucket_count})"


class StringHistogramBuckets(HistogramBuckets):
    # left boundaries; the last bucket runs to max_value, or is unbounded
    quantization = Quantization.STRING

    def __init__(self, boundaries: Sequence[str], max_value: Optional[str] = None) -> None:
        if not boundaries:
            raise InvalidArgumentError("String buckets need at least one boundary")
        boundaries = list(boundaries)
        if boundaries != sorted(set(boundaries)):
            raise InvalidArgumentError("String bucket boundaries must be sorted and distinct")
        if max_value is not None and max_value < boundaries[-1]:
            raise InvalidArgumentError(f"max_value {max_value!r} below the last boundary")
        self.boundaries = boundaries
        self.max = max_value

    @property
    def bucket_count(self) -> int:
        return len(self.boundaries)

    def indexes(self, values: np.ndarray) -> np.ndarray:
        result = np.full(len(values), -1, dtype=np.int64)
        for k, value in enumerate(values):
            if value is None or (self.max is not None and value > self.max):
                continue
            result[k] = bisect_right(self.boundaries, value) - 1
        return result

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, StringHistogramBuckets)
                and (self.boundaries, self.max) == (other.boundaries, other.max))

    def __repr__(self) -> str:
        return f"StringHistogramBuckets({self.boundaries})"
