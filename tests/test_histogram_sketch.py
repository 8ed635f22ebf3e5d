"""Tests for histograms and bucket descriptors."""

import numpy as np
import pytest

from dataset.loader import Loader
from errors.errors import InvalidArgumentError, SchemaMismatchError
from membership.membership_set import SparseMembership
from sketch.buckets import DoubleHistogramBuckets, StringHistogramBuckets
from sketch.histogram import Histogram
from sketch.histogram_sketch import HistogramSketch
from table.converter import SortedStringConverter
from table.table import Table
from conftest import int_table


class TestBuckets:
    def test_double_bucket_index(self):
        """Values map to floor((v - min) / width); max joins the last bucket."""
        buckets = DoubleHistogramBuckets(0, 10, 5)
        assert buckets.indexes(np.array([0, 1.9, 2, 9.99, 10, -1, 11])).tolist() == [0, 0, 1, 4, 4, -1, -1]

    def test_single_value_range(self):
        """A degenerate range has one bucket."""
        buckets = DoubleHistogramBuckets(3, 3, 10)
        assert buckets.bucket_count == 1
        assert buckets.index_of(3) == 0

    def test_rejects_bad_range(self):
        """max below min is invalid."""
        with pytest.raises(InvalidArgumentError):
            DoubleHistogramBuckets(5, 1, 3)

    def test_string_buckets(self):
        """Strings fall in the bucket of the largest boundary below them."""
        buckets = StringHistogramBuckets(["b", "m", "t"], max_value="x")
        assert buckets.indexes(np.array(["a", "b", "n", "t", "z"], dtype=object)).tolist() == [-1, 0, 1, 2, -1]


class TestHistogramSketch:
    def test_counts_missing_and_out_of_range(self, flights):
        """Missing and out-of-range rows are tallied apart from buckets."""
        table = Table.from_dataframe(flights)
        histogram = HistogramSketch(DoubleHistogramBuckets(-20, 40, 6), "depdelay").create(table)
        values = flights["depdelay"]
        assert histogram.missing_count == int(values.isna().sum())
        inside = values[(values >= -20) & (values <= 40)]
        assert histogram.total == len(inside)
        assert histogram.out_of_range == len(values) - histogram.missing_count - len(inside)

    def test_additivity(self):
        """Histogram(A u B) == add(Histogram(A), Histogram(B)) exactly."""
        table = int_table(np.random.default_rng(2).integers(0, 100, 500))
        a = table.with_members(SparseMembership.from_range(0, 200, 500))
        b = table.with_members(SparseMembership.from_range(200, 500, 500))
        sketch = HistogramSketch(DoubleHistogramBuckets(0, 99, 10), "x")
        assert sketch.add(sketch.create(a), sketch.create(b)) == sketch.create(table)

    def test_zero_is_identity(self):
        """Adding zero leaves a histogram unchanged."""
        sketch = HistogramSketch(DoubleHistogramBuckets(0, 10, 5), "x")
        histogram = sketch.create(int_table([1, 2, 3, 11]))
        assert sketch.add(sketch.zero(), histogram) == histogram
        assert sketch.add(histogram, sketch.zero()) == histogram

    def test_tree_matches_single_partition(self, flights, flights_dataset):
        """Any partitioning gives the same histogram as one table."""
        sketch = HistogramSketch(DoubleHistogramBuckets(0, 999, 20), "distance")
        expected = sketch.create(Table.from_dataframe(flights))
        assert flights_dataset.sketch(sketch) == expected
        deeper = Loader().from_dataframe(flights, parts=7, fanout=3)
        assert deeper.sketch(sketch) == expected

    def test_rejects_mismatched_lengths(self):
        """Histograms over different bucket counts cannot be added."""
        with pytest.raises(SchemaMismatchError):
            Histogram.zero(3).union(Histogram.zero(4))

    def test_rejects_different_descriptors(self):
        """Equal-length histograms over different buckets cannot be added."""
        table = int_table([1, 5, 9])
        narrow = HistogramSketch(DoubleHistogramBuckets(0, 10, 4), "x").create(table)
        wide = HistogramSketch(DoubleHistogramBuckets(0, 100, 4), "x").create(table)
        with pytest.raises(SchemaMismatchError):
            narrow.union(wide)
        strings = Histogram.zero(4, StringHistogramBuckets(["a", "b", "c", "d"]))
        with pytest.raises(SchemaMismatchError):
            narrow.union(strings)

    def test_string_buckets_on_numeric_column(self):
        """A string descriptor is refused for a numeric column."""
        sketch = HistogramSketch(StringHistogramBuckets(["a"]), "x")
        with pytest.raises(SchemaMismatchError):
            sketch.create(int_table([1]))

    def test_numeric_buckets_on_strings_need_converter(self, flights):
        """Strings go through a converter onto numeric buckets."""
        table = Table.from_dataframe(flights)
        with pytest.raises(SchemaMismatchError):
            HistogramSketch(DoubleHistogramBuckets(0, 4, 5), "origin").create(table)
        converter = SortedStringConverter(["ATL", "JFK", "LAX", "ORD", "SFO"])
        histogram = HistogramSketch(DoubleHistogramBuckets(0, 4, 5), "origin", converter=converter).create(table)
        assert histogram.total == 1000
        assert histogram.get_count(0) == int((flights["origin"] == "ATL").sum())

    def test_string_histogram(self, flights):
        """String buckets count by boundary."""
        table = Table.from_dataframe(flights)
        histogram = HistogramSketch(StringHistogramBuckets(["A", "L"]), "origin").create(table)
        assert histogram.get_count(0) == int(flights["origin"].isin(["ATL", "JFK"]).sum())
        assert histogram.total == 1000

    def test_sampling_rate(self):
        """With a rate, only a sample of the rows is counted."""
        table = int_table(np.arange(1000))
        histogram = HistogramSketch(DoubleHistogramBuckets(0, 999, 4), "x", rate=0.1, seed=3).create(table)
        assert histogram.total == 100
