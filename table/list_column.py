from typing import Optional

import numpy as np

from errors.errors import InvalidArgumentError
from table.column import Column
from table.column_description import ColumnDescription

LOG_SEGMENT_SIZE = 20


class StringListColumn(Column):
    def __init__(self, description: ColumnDescription, segment_bits: int = LOG_SEGMENT_SIZE) -> None:
        super().__init__(description)
        if not description.kind.is_string():
            raise InvalidArgumentError(f"Unexpected column kind {description.kind}")
        self._log_segment_size = segment_bits
        self._segment_size = 1 << segment_bits
        self._segment_mask = self._segment_size - 1
        self.segments: list[np.ndarray] = []
        self.size = 0

    def append(self, value: Optional[str]) -> None:
        if value is None and not self.description.allow_missing:
            raise InvalidArgumentError(f"Column {self.description} does not allow missing values")
        segment_id = self.size >> self._log_segment_size
        local_index = self.size & self._segment_mask
        if len(self.segments) <= segment_id:
            self.segments.append(np.empty(self._segment_size, dtype=object))
        self.segments[segment_id][local_index] = value
        self.size += 1

    def append_missing(self) -> None:
        self.append(None)

    def size_in_rows(self) -> int:
        return self.size

    def get_value_at(self, row: int) -> Optional[str]:
        if not 0 <= row < self.size:
            raise IndexError(f"Row {row} out of range for column of {self.size} rows")
        return self.segments[row >> self._log_segment_size][row & self._segment_mask]

    def is_missing(self, row: int) -> bool:
        return self.get_value_at(row) is None

    def values_at(self, rows: np.ndarray) -> np.ndarray:
        return np.array([self.get_value_at(int(row)) for row in rows], dtype=object)

    def missing_at(self, rows: np.ndarray) -> np.ndarray:
        return np.array([self.get_value_at(int(row)) is None for row in rows], dtype=bool)
