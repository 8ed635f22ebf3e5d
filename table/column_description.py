from dataclasses import dataclass

from table.content_kind import ContentsKind


@dataclass(frozen=True)
class ColumnDescription:
    name: str
    kind: ContentsKind
    allow_missing: bool = False

    def __str__(self) -> str:
        return f"{self.name}({self.kind.name})"
