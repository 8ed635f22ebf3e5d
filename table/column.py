import logging
from typing import Any, Optional

import numpy as np

from errors.errors import InvalidArgumentError
from table.column_description import ColumnDescription
from table.content_kind import ContentsKind
from table.converter import StringConverter

logger = logging.getLogger(__name__)

DTYPES = {
    ContentsKind.Integer: np.int64,
    ContentsKind.Double: np.float64,
    ContentsKind.Date: "datetime64[ms]",
    ContentsKind.Duration: "timedelta64[ms]",
    ContentsKind.String: object,
    ContentsKind.Json: object,
}


class Column:
    def __init__(self, description: ColumnDescription) -> None:
        self.description = description

    @property
    def name(self) -> str:
        return self.description.name

    @property
    def kind(self) -> ContentsKind:
        return self.description.kind

    def size_in_rows(self) -> int:
        raise NotImplementedError

    def get_value_at(self, row: int) -> Any:
        raise NotImplementedError

    def is_missing(self, row: int) -> bool:
        raise NotImplementedError

    def values_at(self, rows: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def missing_at(self, rows: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def as_double(self, row: int, converter: Optional[StringConverter] = None) -> float:
        return float(self.to_doubles(np.array([row], dtype=np.int64), converter)[0])

    def to_doubles(self, rows: np.ndarray, converter: Optional[StringConverter] = None) -> np.ndarray:
        values = self.values_at(rows)
        missing = self.missing_at(rows)
        match self.kind:
            case ContentsKind.Integer | ContentsKind.Double:
                result = values.astype(np.float64)
            case ContentsKind.Date | ContentsKind.Duration:
                result = values.astype(np.int64).astype(np.float64)
            case _:
                if converter is None:
                    raise InvalidArgumentError(f"Column {self.description} needs a converter to be used as numeric")
                result = np.array(
                    [np.nan if m else converter.as_double(v) for v, m in zip(values, missing)],
                    dtype=np.float64,
                )
        result[missing] = np.nan
        return result


class ArrayColumn(Column):
    def __init__(self, description: ColumnDescription, values, missing: Optional[np.ndarray] = None) -> None:
        super().__init__(description)
        values = np.asarray(values, dtype=DTYPES[description.kind])
        if missing is None:
            if description.kind.is_string():
                missing = np.array([v is None for v in values], dtype=bool)
            elif description.kind == ContentsKind.Double:
                missing = np.isnan(values)
            elif description.kind in (ContentsKind.Date, ContentsKind.Duration):
                missing = np.isnat(values)
            else:
                missing = np.zeros(len(values), dtype=bool)
        missing = np.asarray(missing, dtype=bool)
        if missing.shape != values.shape:
            raise InvalidArgumentError(f"Missing mask of {description} has the wrong length")
        if missing.any() and not description.allow_missing:
            raise InvalidArgumentError(f"Column {description} does not allow missing values")
        values.flags.writeable = False
        missing.flags.writeable = False
        self.values = values
        self.missing = missing

    def size_in_rows(self) -> int:
        return len(self.values)

    def get_value_at(self, row: int) -> Any:
        if self.missing[row]:
            return None
        value = self.values[row]
        return value.item() if self.kind in (ContentsKind.Integer, ContentsKind.Double) else value

    def is_missing(self, row: int) -> bool:
        return bool(self.missing[row])

    def values_at(self, rows: np.ndarray) -> np.ndarray:
        return self.values[rows]

    def missing_at(self, rows: np.ndarray) -> np.ndarray:
        return self.missing[rows]

    @classmethod
    def merge(cls, left: Column, right: Column, merge_left: np.ndarray) -> "ArrayColumn":
        merge_left = np.asarray(merge_left, dtype=bool)
        if len(merge_left) != left.size_in_rows() + right.size_in_rows():
            raise InvalidArgumentError("Length of merge order must equal sum of lengths of the columns")
        left_rows = np.arange(left.size_in_rows())
        right_rows = np.arange(right.size_in_rows())
        values = np.empty(len(merge_left), dtype=DTYPES[left.kind])
        missing = np.empty(len(merge_left), dtype=bool)
        values[merge_left] = left.values_at(left_rows)
        values[~merge_left] = right.values_at(right_rows)
        missing[merge_left] = left.missing_at(left_rows)
        missing[~merge_left] = right.missing_at(right_rows)
        return cls(left.description, values, missing)
