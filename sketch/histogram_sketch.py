import logging
from typing import Optional

import numpy as np

from errors.errors import SchemaMismatchError
from sketch.buckets import HistogramBuckets, Quantization
from sketch.histogram import Histogram
from sketch.sketch import Sketch
from table.converter import StringConverter
from table.table import Table

logger = logging.getLogger(__name__)


class HistogramSketch(Sketch[Table, Histogram]):
    def __init__(self, buckets: HistogramBuckets, column: str, rate: float = 1.0, seed: int = 0,
                 converter: Optional[StringConverter] = None) -> None:
        self.buckets = buckets
        self.column = column
        self.rate = rate
        self.seed = seed
        self.converter = converter

    def zero(self) -> Histogram:
        return Histogram.zero(self.buckets.bucket_count, self.buckets)

    def create(self, data: Table) -> Histogram:
        column = data.get_column(self.column)
        if not self.buckets.accepts(column.kind, self.converter):
            raise SchemaMismatchError(
                f"{self.buckets.quantization.value} buckets cannot index column {column.description}")
        # sampled counts are not rescaled
        members = data.members.sample_rate(self.rate, self.seed) if self.rate < 1 else data.members
        rows = members.to_array()
        missing = column.missing_at(rows)
        if self.buckets.quantization == Quantization.STRING:
            values = column.values_at(rows)[~missing]
        else:
            values = column.to_doubles(rows, self.converter)[~missing]
        indexes = self.buckets.indexes(values)
        inside = indexes >= 0
        counts = np.bincount(indexes[inside], minlength=self.buckets.bucket_count)
        return Histogram(counts, int(missing.sum()), int((~inside).sum()), self.buckets)

    def add(self, left: Histogram, right: Histogram) -> Histogram:
        return left.union(right)

    def __repr__(self) -> str:
        return f"HistogramSketch({self.column}, {self.buckets!r})"
