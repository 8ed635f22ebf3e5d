import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from sketch.sketch import Sketch
from table.converter import StringConverter
from table.table import Table


@dataclass(frozen=True)
class DataRange:
    min: float = math.inf
    max: float = -math.inf
    present_count: int = 0
    missing_count: int = 0

    def union(self, other: "DataRange") -> "DataRange":
        return DataRange(min(self.min, other.min), max(self.max, other.max),
                         self.present_count + other.present_count,
                         self.missing_count + other.missing_count)


class DataRangeSketch(Sketch[Table, DataRange]):
    def __init__(self, column: str, converter: Optional[StringConverter] = None) -> None:
        self.column = column
        self.converter = converter

    def zero(self) -> DataRange:
        return DataRange()

    def create(self, data: Table) -> DataRange:
        column = data.get_column(self.column)
        rows = data.members.to_array()
        missing = column.missing_at(rows)
        values = column.to_doubles(rows, self.converter)[~missing]
        if len(values) == 0:
            return DataRange(missing_count=int(missing.sum()))
        return DataRange(float(np.min(values)), float(np.max(values)), len(values), int(missing.sum()))

    def add(self, left: DataRange, right: DataRange) -> DataRange:
        return left.union(right)
