from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from table.column_description import ColumnDescription
from table.schema import Schema
from table.table import Table


@dataclass(frozen=True)
class ColumnSortOrientation:
    column: ColumnDescription
    ascending: bool = True


def _compare_values(left: Any, right: Any) -> int:
    # missing values sort before everything else
    if left is None or right is None:
        return (left is not None) - (right is not None)
    if left < right:
        return -1
    if right < left:
        return 1
    return 0


class RecordOrder:
    def __init__(self, orientations: Iterable[ColumnSortOrientation]) -> None:
        self.orientations = list(orientations)

    @classmethod
    def ascending(cls, *columns: ColumnDescription) -> "RecordOrder":
        return cls(ColumnSortOrientation(column, True) for column in columns)

    @property
    def column_names(self) -> list[str]:
        return [o.column.name for o in self.orientations]

    def to_schema(self) -> Schema:
        return Schema(o.column for o in self.orientations)

    def sorted_row_order(self, table: Table) -> np.ndarray:
        rows = table.members.to_array()
        if not self.orientations or len(rows) == 0:
            return rows
        keys = []
        for orientation in self.orientations:
            column = table.get_column(orientation.column.name)
            missing = column.missing_at(rows)
            if column.kind.is_numeric():
                key = column.to_doubles(rows)
                key[missing] = -np.inf
            else:
                values = column.values_at(rows)
                key = np.full(len(rows), -1.0)
                if (~missing).any():
                    _, ranks = np.unique(values[~missing].astype(str), return_inverse=True)
                    key[~missing] = ranks
            keys.append(key if orientation.ascending else -key)
        # lexsort sorts by its last key first
        return rows[np.lexsort(keys[::-1])]

    def compare_rows(self, left: Table, i: int, right: Table, j: int) -> int:
        for orientation in self.orientations:
            name = orientation.column.name
            result = _compare_values(left.get_column(name).get_value_at(i), right.get_column(name).get_value_at(j))
            if result != 0:
                return result if orientation.ascending else -result
        return 0

    def merge_order(self, left: Table, right: Table) -> np.ndarray:
        left_rows = left.members.to_array()
        right_rows = right.members.to_array()
        merge_left = np.zeros(len(left_rows) + len(right_rows), dtype=bool)
        i = j = 0
        for k in range(len(merge_left)):
            if j >= len(right_rows) or (
                    i < len(left_rows) and self.compare_rows(left, left_rows[i], right, right_rows[j]) <= 0):
                merge_left[k] = True
                i += 1
            else:
                j += 1
        return merge_left

    def is_sorted(self, table: Table) -> bool:
        rows = table.members.to_array()
        return all(self.compare_rows(table, rows[k], table, rows[k + 1]) <= 0 for k in range(len(rows) - 1))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordOrder):
            return NotImplemented
        return self.orientations == other.orientations

    def __repr__(self) -> str:
        return "RecordOrder(" + ", ".join(
            f"{o.column.name} {'asc' if o.ascending else 'desc'}" for o in self.orientations) + ")"
