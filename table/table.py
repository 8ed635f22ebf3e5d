import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from errors.errors import InvalidArgumentError
from membership.membership_set import FullMembership, MembershipSet
from table.column import DTYPES, ArrayColumn, Column
from table.column_description import ColumnDescription
from table.content_kind import ContentsKind
from table.schema import Schema

logger = logging.getLogger(__name__)


class Table:
    def __init__(self, schema: Schema, columns: Iterable[Column], members: Optional[MembershipSet] = None) -> None:
        self.schema = schema
        self.columns: dict[str, Column] = {column.name: column for column in columns}
        if self.schema.column_names != list(self.columns.keys()):
            raise InvalidArgumentError(f"Columns {list(self.columns.keys())} do not match schema {schema}")
        sizes = {column.size_in_rows() for column in self.columns.values()}
        if len(sizes) > 1:
            raise InvalidArgumentError(f"Columns of different sizes {sorted(sizes)}")
        rows = sizes.pop() if sizes else (members.max_size if members is not None else 0)
        if members is None:
            members = FullMembership(rows)
        elif members.max_size != rows:
            raise InvalidArgumentError(f"Membership set over {members.max_size} rows for columns of {rows} rows")
        self.members = members

    @property
    def num_rows(self) -> int:
        return self.members.size

    def get_column(self, name: str) -> Column:
        if (column := self.columns.get(name)) is None:
            raise InvalidArgumentError(f"Column '{name}' not in table {self.schema}")
        return column

    def with_members(self, members: MembershipSet) -> "Table":
        return Table(self.schema, self.columns.values(), members)

    def project(self, names: Iterable[str]) -> "Table":
        names = list(names)
        return Table(self.schema.project(names), [self.get_column(name) for name in names], self.members)

    def compress(self, members: Optional[MembershipSet] = None) -> "Table":
        members = self.members if members is None else members
        return self.compress_rows(members.to_array())

    def compress_rows(self, rows: np.ndarray, names: Optional[Iterable[str]] = None) -> "Table":
        schema = self.schema if names is None else self.schema.project(names)
        rows = np.asarray(rows, dtype=np.int64)
        columns = [
            ArrayColumn(desc, self.columns[desc.name].values_at(rows), self.columns[desc.name].missing_at(rows))
            for desc in schema
        ]
        return Table(schema, columns, FullMembership(len(rows)))

    def get_row(self, row: int) -> tuple:
        return tuple(self.columns[name].get_value_at(row) for name in self.schema.column_names)

    def to_dataframe(self) -> pd.DataFrame:
        rows = self.members.to_array()
        data = {}
        for name, column in self.columns.items():
            values = pd.Series(column.values_at(rows))
            data[name] = values.mask(column.missing_at(rows)) if column.kind.is_numeric() else values
        return pd.DataFrame(data, columns=self.schema.column_names)

    @classmethod
    def empty(cls, schema: Schema) -> "Table":
        return cls(schema, [ArrayColumn(desc, np.empty(0, dtype=DTYPES[desc.kind])) for desc in schema])

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, schema: Optional[Schema] = None) -> "Table":
        if schema is None:
            schema = Schema(infer_description(name, df[name]) for name in df.columns)
        columns = []
        for desc in schema:
            series = df[desc.name]
            missing = series.isna().to_numpy()
            match desc.kind:
                case ContentsKind.Integer:
                    values = series.fillna(0).astype(np.int64).to_numpy()
                case ContentsKind.Double:
                    values = series.astype(np.float64).to_numpy()
                case ContentsKind.Date:
                    values = pd.to_datetime(series).to_numpy().astype("datetime64[ms]")
                case ContentsKind.Duration:
                    values = pd.to_timedelta(series).to_numpy().astype("timedelta64[ms]")
                case _:
                    values = series.astype(object).where(~missing, None).to_numpy()
            columns.append(ArrayColumn(desc, values, missing))
        logger.debug(f"loaded table {schema} with {len(df)} rows")
        return cls(schema, columns)

    def __repr__(self) -> str:
        return f"Table({self.schema}, {self.num_rows} rows)"


def infer_description(name: str, series: pd.Series) -> ColumnDescription:
    allow_missing = bool(series.isna().any())
    if pd.api.types.is_bool_dtype(series) or pd.api.types.is_integer_dtype(series):
        kind = ContentsKind.Integer
    elif pd.api.types.is_float_dtype(series):
        kind = ContentsKind.Double
    elif pd.api.types.is_datetime64_any_dtype(series):
        kind = ContentsKind.Date
    elif pd.api.types.is_timedelta64_dtype(series):
        kind = ContentsKind.Duration
    else:
        kind = ContentsKind.String
    return ColumnDescription(name, kind, allow_missing)
