from enum import Enum

from errors.errors import InvalidArgumentError


class ContentsKind(Enum):
    Integer = "int"
    Double = "num"
    Date = "date"
    Duration = "duration"
    String = "str"
    Json = "json"

    def is_numeric(self) -> bool:
        return self in (ContentsKind.Integer, ContentsKind.Double, ContentsKind.Date, ContentsKind.Duration)

    def is_string(self) -> bool:
        return self in (ContentsKind.String, ContentsKind.Json)

    @classmethod
    def parse(cls, value: str) -> "ContentsKind":
        for kind in cls:
            if value in (kind.value, kind.name, kind.name.lower()):
                return kind
        raise InvalidArgumentError(f"Unknown column kind '{value}'")
