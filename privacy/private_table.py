import logging
from dataclasses import dataclass
from typing import Optional

from container.container import container
from dataset.dataset import DataSet
from errors.errors import InvalidArgumentError
from privacy.dyadic_buckets import DyadicHistogramBuckets
from privacy.private_histogram import PrivateHistogram, noise_scale
from privacy.privacy_schema import PrivacySchema
from sketch.data_range_sketch import DataRange
from sketch.histogram import Histogram
from sketch.histogram_sketch import HistogramSketch
from sketch.summary_sketch import SummarySketch, TableSummary
from table.column_description import ColumnDescription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrivacySummary:
    summary: TableSummary
    metadata: PrivacySchema


class PrivateTable:
    def __init__(self, dataset: DataSet, metadata: Optional[PrivacySchema] = None, **sketch_args) -> None:
        self.dataset = dataset
        self.metadata = metadata if metadata is not None else container.require("PrivacySchema")
        self.sketch_args = sketch_args

    def schema_summary(self) -> PrivacySummary:
        return self.dataset.run_complete_sketch(
            SummarySketch(), lambda summary: PrivacySummary(summary, self.metadata), **self.sketch_args)

    def get_buckets(self, column: ColumnDescription, min_value: Optional[float], max_value: Optional[float],
                    bucket_count: int) -> DyadicHistogramBuckets:
        if not column.kind.is_numeric():
            raise InvalidArgumentError(f"Attempted to instantiate private buckets with non-numeric column {column}")
        md = self.metadata.get(column.name)
        min_value = md.global_min if min_value is None else min_value
        max_value = md.global_max if max_value is None else max_value
        if min_value < md.global_min or max_value > md.global_max:
            raise InvalidArgumentError(
                f"Range [{min_value}, {max_value}] outside [{md.global_min}, {md.global_max}] for {column.name}")
        # computed buckets fall on leaf boundaries of the curator's grid
        return DyadicHistogramBuckets(min_value, max_value, bucket_count, md.granularity, origin=md.global_min)

    def histogram(self, column: ColumnDescription, bucket_count: int, min_value: Optional[float] = None,
                  max_value: Optional[float] = None, seed: Optional[int] = None) -> PrivateHistogram:
        buckets = self.get_buckets(column, min_value, max_value, bucket_count)
        md = self.metadata.get(column.name)
        scale = noise_scale(md.epsilon, buckets.leaves)
        if seed is not None and seed < 0:
            raise InvalidArgumentError(f"seed must be >= 0, got {seed}")
        logger.info(f"private histogram of {column.name}: {buckets!r}, scale {scale}")
        sketch = HistogramSketch(buckets, column.name)

        def add_laplace_noise(histogram: Histogram) -> PrivateHistogram:
            return PrivateHistogram(histogram, buckets).add_dyadic_laplace_noise(scale, seed)

        return self.dataset.run_complete_sketch(sketch, add_laplace_noise, **self.sketch_args)

    def data_range(self, column: str, min_value: Optional[float] = None,
                   max_value: Optional[float] = None) -> DataRange:
        md = self.metadata.get(column)
        return DataRange(md.global_min if min_value is None else min_value,
                         md.global_max if max_value is None else max_value, -1, -1)

    def filter_range(self, column: str, min_value: float, max_value: float) -> "PrivateTable":
        # range filters are applied by the histogram request itself
        self.metadata.get(column)
        return self
