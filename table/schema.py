from typing import Iterable, Iterator

from errors.errors import InvalidArgumentError
from table.column_description import ColumnDescription


class Schema:
    def __init__(self, columns: Iterable[ColumnDescription] = ()) -> None:
        self._columns: dict[str, ColumnDescription] = {}
        for desc in columns:
            if desc.name in self._columns:
                raise InvalidArgumentError(f"Duplicate column name '{desc.name}'")
            self._columns[desc.name] = desc

    @property
    def column_names(self) -> list[str]:
        return list(self._columns.keys())

    def get_description(self, name: str) -> ColumnDescription:
        if (desc := self._columns.get(name)) is None:
            raise InvalidArgumentError(f"Column '{name}' not in schema {self}")
        return desc

    def contains(self, name: str) -> bool:
        return name in self._columns

    def project(self, names: Iterable[str]) -> "Schema":
        return Schema(self.get_description(name) for name in names)

    def append(self, desc: ColumnDescription) -> "Schema":
        return Schema([*self._columns.values(), desc])

    def __iter__(self) -> Iterator[ColumnDescription]:
        return iter(self._columns.values())

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return list(self._columns.values()) == list(other._columns.values())

    def __hash__(self) -> int:
        return hash(tuple(self._columns.values()))

    def __str__(self) -> str:
        return "[" + ", ".join(str(desc) for desc in self) + "]"

    __repr__ = __str__
