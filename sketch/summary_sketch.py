from dataclasses import dataclass
from typing import Optional

from errors.errors import SchemaMismatchError
from sketch.sketch import Sketch
from table.schema import Schema
from table.table import Table


@dataclass(frozen=True)
class TableSummary:
    schema: Optional[Schema] = None
    row_count: int = 0


class SummarySketch(Sketch[Table, TableSummary]):
    def zero(self) -> TableSummary:
        return TableSummary()

    def create(self, data: Table) -> TableSummary:
        return TableSummary(data.schema, data.num_rows)

    def add(self, left: TableSummary, right: TableSummary) -> TableSummary:
        if left.schema is not None and right.schema is not None and left.schema != right.schema:
            raise SchemaMismatchError(f"Partitions with schemas {left.schema} and {right.schema}")
        schema = left.schema if left.schema is not None else right.schema
        return TableSummary(schema, left.row_count + right.row_count)
