from typing import Optional

from errors.errors import InvalidArgumentError
from maps.map import Map
from table.table import Table


class SampleMap(Map[Table, Table]):
    def __init__(self, rate: float, seed: Optional[int] = None) -> None:
        if not 0 < rate <= 1:
            raise InvalidArgumentError(f"Sampling rate must be in (0, 1], got {rate}")
        self.rate = rate
        self.seed = seed

    def apply(self, data: Table) -> Table:
        return data.with_members(data.members.sample_rate(self.rate, self.seed))

    def __repr__(self) -> str:
        return f"SampleMap({self.rate})"


class ProjectMap(Map[Table, Table]):
    def __init__(self, columns: list[str]) -> None:
        self.columns = list(columns)

    def apply(self, data: Table) -> Table:
        return data.project(self.columns)

    def __repr__(self) -> str:
        return f"ProjectMap({self.columns})"
