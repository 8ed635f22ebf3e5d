"""Tests for schemas, columns and tables."""

import numpy as np
import pandas as pd
import pytest

from errors.errors import InvalidArgumentError
from membership.membership_set import SparseMembership
from table.column import ArrayColumn
from table.column_description import ColumnDescription
from table.content_kind import ContentsKind
from table.converter import SortedStringConverter
from table.list_column import StringListColumn
from table.schema import Schema
from table.table import Table
from conftest import int_table


class TestSchema:
    def test_rejects_duplicate_names(self):
        """Column names are unique within a schema."""
        desc = ColumnDescription("a", ContentsKind.Integer)
        with pytest.raises(InvalidArgumentError, match="Duplicate"):
            Schema([desc, desc])

    def test_project_keeps_requested_order(self):
        """Projection follows the requested column order."""
        schema = Schema([ColumnDescription("a", ContentsKind.Integer), ColumnDescription("b", ContentsKind.String)])
        assert schema.project(["b", "a"]).column_names == ["b", "a"]

    def test_unknown_column(self):
        """Asking for a missing column is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            Schema().get_description("nope")

    def test_kind_partition(self):
        """Kinds split into numeric-like and string-like."""
        assert ContentsKind.Date.is_numeric()
        assert ContentsKind.Json.is_string()
        assert not ContentsKind.String.is_numeric()


class TestColumns:
    def test_missing_requires_allow_missing(self):
        """A column that does not allow missing values rejects them."""
        desc = ColumnDescription("d", ContentsKind.Double)
        with pytest.raises(InvalidArgumentError, match="missing"):
            ArrayColumn(desc, [1.0, np.nan])

    def test_date_projects_to_milliseconds(self):
        """Dates map to milliseconds since the epoch."""
        desc = ColumnDescription("t", ContentsKind.Date)
        column = ArrayColumn(desc, np.array(["1970-01-01T00:00:01"], dtype="datetime64[ms]"))
        assert column.as_double(0) == 1000.0

    def test_string_needs_converter(self):
        """Strings have no numeric projection without a converter."""
        desc = ColumnDescription("s", ContentsKind.String)
        column = ArrayColumn(desc, np.array(["b", "d"], dtype=object))
        with pytest.raises(InvalidArgumentError, match="converter"):
            column.to_doubles(np.arange(2))
        converter = SortedStringConverter(["a", "c"])
        assert column.to_doubles(np.arange(2), converter).tolist() == [0.0, 1.0]

    def test_merge_interleaves(self):
        """Merging follows the merge order and keeps each side's order."""
        desc = ColumnDescription("x", ContentsKind.Integer)
        left = ArrayColumn(desc, [1, 4])
        right = ArrayColumn(desc, [2, 3])
        merged = ArrayColumn.merge(left, right, np.array([True, False, False, True]))
        assert merged.values.tolist() == [1, 2, 3, 4]


class TestStringListColumn:
    def test_appends_across_segments(self):
        """Values spill into new segments and stay addressable."""
        column = StringListColumn(ColumnDescription("s", ContentsKind.String, True), segment_bits=2)
        for i in range(10):
            column.append(str(i))
        column.append_missing()
        assert column.size_in_rows() == 11
        assert len(column.segments) == 3
        assert column.get_value_at(9) == "9"
        assert column.is_missing(10)

    def test_rejects_numeric_kind(self):
        """Only string-like kinds can be stored."""
        with pytest.raises(InvalidArgumentError):
            StringListColumn(ColumnDescription("x", ContentsKind.Integer))


class TestTable:
    def test_from_dataframe_infers_kinds(self, flights):
        """Kinds and missing flags come from the frame dtypes."""
        table = Table.from_dataframe(flights)
        assert table.schema.get_description("distance").kind == ContentsKind.Integer
        depdelay = table.schema.get_description("depdelay")
        assert depdelay.kind == ContentsKind.Double and depdelay.allow_missing
        assert table.schema.get_description("origin").kind == ContentsKind.String
        assert table.num_rows == 1000

    def test_compress_readdresses_rows(self):
        """Compressing copies member rows into a dense table."""
        table = int_table([10, 20, 30, 40])
        subset = table.with_members(SparseMembership.from_range(1, 3, 4))
        compressed = subset.compress()
        assert compressed.num_rows == 2
        assert [compressed.get_row(i) for i in range(2)] == [(20,), (30,)]

    def test_derived_tables_share_columns(self):
        """A filtered view shares the column storage of its source."""
        table = int_table([1, 2, 3])
        view = table.with_members(SparseMembership.from_range(0, 1, 3))
        assert view.get_column("x") is table.get_column("x")

    def test_membership_must_match_columns(self):
        """The membership set ranges over the column rows."""
        table = int_table([1, 2, 3])
        with pytest.raises(InvalidArgumentError):
            table.with_members(SparseMembership.from_range(0, 1, 10))

    def test_round_trip_to_dataframe(self):
        """Only member rows are exported."""
        df = pd.DataFrame({"a": [1, 2, 3], "b": ["x", None, "z"]})
        table = Table.from_dataframe(df)
        view = table.with_members(SparseMembership.from_range(1, 3, 3))
        out = view.to_dataframe()
        assert out["a"].tolist() == [2, 3]
        assert out["b"].isna().tolist() == [True, False]
        assert out["b"].iloc[1] == "z"
