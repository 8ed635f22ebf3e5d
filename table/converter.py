from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence

from errors.errors import InvalidArgumentError


class StringConverter:
    def as_double(self, value: str) -> float:
        raise NotImplementedError


class SortedStringConverter(StringConverter):
    def __init__(self, boundaries: Sequence[str]) -> None:
        if list(boundaries) != sorted(boundaries):
            raise InvalidArgumentError("String boundaries must be sorted")
        self.boundaries = list(boundaries)

    def as_double(self, value: str) -> float:
        # -1 below the first boundary
        return float(bisect_right(self.boundaries, value) - 1)


@dataclass(frozen=True)
class ColumnNameAndConverter:
    column_name: str
    converter: Optional[StringConverter] = None
