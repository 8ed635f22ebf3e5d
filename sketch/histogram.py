from typing import Optional

import numpy as np

from errors.errors import SchemaMismatchError
from sketch.buckets import HistogramBuckets


class Histogram:
    def __init__(self, counts: np.ndarray, missing_count: int = 0, out_of_range: int = 0,
                 buckets: Optional[HistogramBuckets] = None) -> None:
        self.counts = np.asarray(counts, dtype=np.int64)
        self.counts.flags.writeable = False
        self.missing_count = int(missing_count)
        self.out_of_range = int(out_of_range)
        self.buckets = buckets

    @classmethod
    def zero(cls, bucket_count: int, buckets: Optional[HistogramBuckets] = None) -> "Histogram":
        return cls(np.zeros(bucket_count, dtype=np.int64), buckets=buckets)

    @property
    def bucket_count(self) -> int:
        return len(self.counts)

    def get_count(self, bucket: int) -> int:
        return int(self.counts[bucket])

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def union(self, other: "Histogram") -> "Histogram":
        if self.bucket_count != other.bucket_count:
            raise SchemaMismatchError(f"Histograms with {self.bucket_count} and {other.bucket_count} buckets")
        if self.buckets is not None and other.buckets is not None and self.buckets != other.buckets:
            raise SchemaMismatchError(f"Histograms over {self.buckets!r} and {other.buckets!r}")
        return Histogram(self.counts + other.counts,
                         self.missing_count + other.missing_count,
                         self.out_of_range + other.out_of_range,
                         self.buckets if self.buckets is not None else other.buckets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return (np.array_equal(self.counts, other.counts)
                and self.missing_count == other.missing_count
                and self.out_of_range == other.out_of_range
                and self.buckets == other.buckets)

    def __repr__(self) -> str:
        return f"Histogram({self.counts.tolist()}, missing={self.missing_count}, out_of_range={self.out_of_range})"
