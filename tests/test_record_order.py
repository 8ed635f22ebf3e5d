"""Tests for record orders."""

import numpy as np
import pytest

from table.column import ArrayColumn
from table.column_description import ColumnDescription
from table.content_kind import ContentsKind
from table.record_order import ColumnSortOrientation, RecordOrder
from table.schema import Schema
from table.table import Table


@pytest.fixture
def people() -> Table:
    name = ColumnDescription("name", ContentsKind.String, True)
    age = ColumnDescription("age", ContentsKind.Integer)
    return Table(Schema([name, age]), [
        ArrayColumn(name, np.array(["bob", "amy", None, "amy"], dtype=object)),
        ArrayColumn(age, [30, 40, 20, 25]),
    ])


class TestRecordOrder:
    def test_sorts_by_columns_in_order(self, people):
        """Ties on the first column are broken by the second; missing sorts first."""
        order = RecordOrder.ascending(people.schema.get_description("name"), people.schema.get_description("age"))
        assert order.sorted_row_order(people).tolist() == [2, 3, 1, 0]

    def test_descending(self, people):
        """A descending column reverses the comparison."""
        order = RecordOrder([ColumnSortOrientation(people.schema.get_description("age"), False)])
        assert order.sorted_row_order(people).tolist() == [1, 0, 3, 2]

    def test_compare_agrees_with_sort(self, people):
        """Row comparison and the vectorized sort agree."""
        order = RecordOrder.ascending(people.schema.get_description("name"), people.schema.get_description("age"))
        sorted_rows = order.sorted_row_order(people)
        for a, b in zip(sorted_rows, sorted_rows[1:]):
            assert order.compare_rows(people, a, people, b) <= 0

    def test_merge_order_is_stable(self):
        """Equal rows are taken from the left side first."""
        desc = ColumnDescription("x", ContentsKind.Integer)
        left = Table(Schema([desc]), [ArrayColumn(desc, [1, 3, 3])])
        right = Table(Schema([desc]), [ArrayColumn(desc, [2, 3])])
        order = RecordOrder.ascending(desc)
        assert order.merge_order(left, right).tolist() == [True, False, True, True, False]

    def test_is_sorted(self):
        """is_sorted detects an out-of-order row."""
        desc = ColumnDescription("x", ContentsKind.Integer)
        order = RecordOrder.ascending(desc)
        assert order.is_sorted(Table(Schema([desc]), [ArrayColumn(desc, [1, 2, 2])]))
        assert not order.is_sorted(Table(Schema([desc]), [ArrayColumn(desc, [2, 1])]))
