"""Tests for the per-partition maps."""

import pytest

from errors.errors import InvalidArgumentError
from maps.filter_map import RangeFilter, RowFilter
from maps.sample_map import ProjectMap, SampleMap
from sketch.summary_sketch import SummarySketch
from table.table import Table


class TestRowFilter:
    def test_from_sql(self):
        """Conjunctions become a list of predicates."""
        row_filter = RowFilter.from_sql("distance >= 100 AND (origin = 'SFO' AND depdelay < -5)")
        assert row_filter.predicates == [("distance", "GTE", "100"), ("origin", "EQ", "SFO"),
                                         ("depdelay", "LT", "-5")]

    def test_filters_rows(self, flights):
        """Only matching rows remain; missing values never match."""
        table = Table.from_dataframe(flights)
        result = RowFilter.from_sql("depdelay > 10 AND origin <> 'ATL'").apply(table)
        expected = flights[(flights["depdelay"] > 10) & (flights["origin"] != "ATL")]
        assert result.num_rows == len(expected)
        assert result.to_dataframe()["depdelay"].tolist() == pytest.approx(expected["depdelay"].tolist())

    def test_over_dataset(self, flights, flights_dataset):
        """Filtering partitions equals filtering the whole table."""
        filtered = flights_dataset.map(RowFilter.from_sql("distance < 250"))
        assert filtered.sketch(SummarySketch()).row_count == int((flights["distance"] < 250).sum())

    @pytest.mark.parametrize("condition", ["distance > 1 OR origin = 'SFO'", "distance >", "f(distance) = 1"])
    def test_rejects_unsupported(self, condition):
        with pytest.raises(InvalidArgumentError):
            RowFilter.from_sql(condition)

    def test_rejects_unknown_operator(self):
        with pytest.raises(InvalidArgumentError):
            RowFilter([("x", "LIKE", "a")])


class TestRangeFilter:
    def test_inclusive_bounds(self, flights):
        """Both ends of the range are kept; missing rows are dropped."""
        table = Table.from_dataframe(flights)
        result = RangeFilter("depdelay", 0, 20).apply(table)
        values = flights["depdelay"]
        assert result.num_rows == int(((values >= 0) & (values <= 20)).sum())

    def test_empty_range(self):
        with pytest.raises(InvalidArgumentError):
            RangeFilter("x", 2, 1)


class TestSampleMap:
    def test_rate(self, flights):
        """The sample keeps rate * rows members."""
        table = Table.from_dataframe(flights)
        assert SampleMap(0.25, seed=1).apply(table).num_rows == 250
        assert SampleMap(1.0).apply(table).num_rows == 1000

    def test_seeded_sample_repeats(self, flights):
        table = Table.from_dataframe(flights)
        first = SampleMap(0.1, seed=9).apply(table).members.to_array()
        second = SampleMap(0.1, seed=9).apply(table).members.to_array()
        assert first.tolist() == second.tolist()

    def test_rejects_bad_rate(self):
        with pytest.raises(InvalidArgumentError):
            SampleMap(0)


class TestProjectMap:
    def test_projects_columns(self, flights):
        table = ProjectMap(["origin"]).apply(Table.from_dataframe(flights))
        assert table.schema.column_names == ["origin"]
        assert table.num_rows == 1000
