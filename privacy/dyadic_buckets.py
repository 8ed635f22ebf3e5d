import numpy as np

from errors.errors import InvalidArgumentError
from sketch.buckets import DoubleHistogramBuckets

TOLERANCE = 1e-9


def _is_integral(x: float) -> bool:
    return abs(x - round(x)) <= TOLERANCE * max(1.0, abs(x))


def dyadic_decomposition(start: int, end: int) -> list[tuple[int, int]]:
    """
    Split the leaf interval [start, end) into maximal dyadic intervals,
    returned as (level, index): the interval [index * 2^level, (index + 1) * 2^level).
    """
    intervals = []
    while start < end:
        level = 0
        while start % (1 << (level + 1)) == 0 and start + (1 << (level + 1)) <= end:
            level += 1
        intervals.append((level, start >> level))
        start += 1 << level
    return intervals


class DyadicHistogramBuckets(DoubleHistogramBuckets):
    def __init__(self, min_value: float, max_value: float, bucket_count: int, granularity: float,
                 origin: float = 0.0) -> None:
        if not granularity > 0:
            raise InvalidArgumentError(f"granularity must be positive, got {granularity}")
        super().__init__(min_value, max_value, bucket_count)
        if max_value <= min_value:
            raise InvalidArgumentError(f"Dyadic buckets need min < max, got [{min_value}, {max_value}]")
        self.granularity = float(granularity)
        self.origin = float(origin)
        if not _is_integral((self.min - self.origin) / self.granularity):
            raise InvalidArgumentError(f"min {self.min} is not on the grid of granularity {granularity}")
        leaves = (self.max - self.min) / self.granularity
        if not _is_integral(leaves):
            raise InvalidArgumentError(f"Range [{self.min}, {self.max}] is not a whole number of leaves")
        self.leaves = int(round(leaves))
        if self.leaves % bucket_count != 0:
            raise InvalidArgumentError(
                f"{bucket_count} buckets do not fall on leaf boundaries of {self.leaves} leaves")
        self.leaves_per_bucket = self.leaves // bucket_count
        self.first_leaf = int(round((self.min - self.origin) / self.granularity))

    def leaf_range(self, bucket: int) -> tuple[int, int]:
        start = self.first_leaf + bucket * self.leaves_per_bucket
        return start, start + self.leaves_per_bucket

    def decompose(self, bucket: int) -> list[tuple[int, int]]:
        return dyadic_decomposition(*self.leaf_range(bucket))

    def indexes(self, values: np.ndarray) -> np.ndarray:
        values = np.asarray(values, dtype=np.float64)
        result = np.full(len(values), -1, dtype=np.int64)
        inside = (values >= self.min) & (values <= self.max)
        leaf = np.floor((values[inside] - self.min) / self.granularity + TOLERANCE).astype(np.int64)
        result[inside] = np.minimum(leaf // self.leaves_per_bucket, self.bucket_count - 1)
        return result

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, DyadicHistogramBuckets) and super().__eq__(other)
                and (self.granularity, self.origin) == (other.granularity, other.origin))

    def __repr__(self) -> str:
        return (f"DyadicHistogramBuckets([{self.min}, {self.max}], {self.bucket_count}, "
                f"granularity={self.granularity})")
