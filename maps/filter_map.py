import logging
from typing import Any, Optional

import numpy as np
import sqlglot
import sqlglot.expressions as exp
from sqlglot.errors import ParseError

from errors.errors import InvalidArgumentError
from maps.map import Map
from table.column import Column
from table.content_kind import ContentsKind
from table.converter import StringConverter
from table.table import Table

logger = logging.getLogger(__name__)

OPERATORS = ("EQ", "NEQ", "GT", "GTE", "LT", "LTE")


def _coerce(column: Column, value: Any) -> Any:
    match column.kind:
        case ContentsKind.Integer:
            return int(value)
        case ContentsKind.Double:
            return float(value)
        case ContentsKind.Date:
            return np.datetime64(value, 'ms')
        case ContentsKind.Duration:
            return np.timedelta64(int(value), 'ms')
        case _:
            return str(value)


class RowFilter(Map[Table, Table]):
    def __init__(self, predicates: list[tuple[str, str, Any]]) -> None:
        for _, op, _ in predicates:
            if op not in OPERATORS:
                raise InvalidArgumentError(f"Unsupported operator '{op}'")
        self.predicates = [(col, op, val) for col, op, val in predicates]

    @classmethod
    def from_sql(cls, condition: str) -> "RowFilter":
        """Predicates of a conjunctive SQL condition, e.g. "delay > 10 AND origin = 'SFO'"."""
        try:
            parsed = sqlglot.condition(condition)
        except ParseError as e:
            raise InvalidArgumentError(f"Cannot parse filter '{condition}': {e}") from e
        predicates = []

        def add_predicate(predicate: exp.Expression) -> None:
            op = predicate.__class__.__name__.upper()
            if op not in OPERATORS or not isinstance(predicate.this, exp.Column):
                raise InvalidArgumentError(f"Unsupported predicate '{predicate.sql()}'")
            value = predicate.expression
            if isinstance(value, exp.Neg):
                literal = "-" + value.this.name
            elif isinstance(value, exp.Literal):
                literal = value.name
            else:
                raise InvalidArgumentError(f"Unsupported value '{value.sql()}'")
            predicates.append((predicate.this.name, op, literal))

        def process(node: exp.Expression) -> None:
            if isinstance(node, exp.Paren):
                process(node.this)
            elif isinstance(node, exp.And):
                process(node.this)
                process(node.expression)
            else:
                add_predicate(node)

        process(parsed)
        return cls(predicates)

    def apply(self, data: Table) -> Table:
        rows = data.members.to_array()
        keep = np.ones(len(rows), dtype=bool)
        for col, op, val in self.predicates:
            column = data.get_column(col)
            # missing values never match
            present = ~column.missing_at(rows)
            values = column.values_at(rows)[present]
            val = _coerce(column, val)
            match op:
                case 'EQ':
                    mask = values == val
                case 'NEQ':
                    mask = values != val
                case 'GT':
                    mask = values > val
                case 'GTE':
                    mask = values >= val
                case 'LT':
                    mask = values < val
                case _:
                    mask = values <= val
            matched = np.zeros(len(rows), dtype=bool)
            matched[present] = np.asarray(mask, dtype=bool)
            keep &= matched
        return data.with_members(data.members.filter_mask(keep))

    def __repr__(self) -> str:
        return f"RowFilter({self.predicates})"


class RangeFilter(Map[Table, Table]):
    def __init__(self, column: str, min_value: float, max_value: float,
                 converter: Optional[StringConverter] = None) -> None:
        if max_value < min_value:
            raise InvalidArgumentError(f"Empty range [{min_value}, {max_value}]")
        self.column = column
        self.min = min_value
        self.max = max_value
        self.converter = converter

    def apply(self, data: Table) -> Table:
        rows = data.members.to_array()
        values = data.get_column(self.column).to_doubles(rows, self.converter)
        with np.errstate(invalid='ignore'):
            keep = (values >= self.min) & (values <= self.max)
        return data.with_members(data.members.filter_mask(keep))

    def __repr__(self) -> str:
        return f"RangeFilter({self.column}, [{self.min}, {self.max}])"
