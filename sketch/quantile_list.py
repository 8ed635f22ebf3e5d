from dataclasses import dataclass

import numpy as np

from errors.errors import InvalidArgumentError
from table.record_order import RecordOrder
from table.schema import Schema
from table.table import Table


@dataclass(frozen=True)
class WinsAndLosses:
    wins: int
    losses: int


class QuantileList:
    """
    Landmark rows in sorted order, each with bounds on its rank in the
    summarized data: at least wins rows sort at or before it, at least
    losses rows sort after it (so data_size - losses bounds its rank
    from above).
    """
    def __init__(self, quantile: Table, wins: np.ndarray, losses: np.ndarray, data_size: int) -> None:
        wins = np.asarray(wins, dtype=np.int64)
        losses = np.asarray(losses, dtype=np.int64)
        if not len(wins) == len(losses) == quantile.num_rows:
            raise InvalidArgumentError("Wins and losses must have one entry per landmark")
        self.quantile = quantile
        self.wins = wins
        self.losses = losses
        self.data_size = data_size

    @classmethod
    def empty(cls, schema: Schema) -> "QuantileList":
        return cls(Table.empty(schema), np.empty(0), np.empty(0), 0)

    @property
    def schema(self) -> Schema:
        return self.quantile.schema

    @property
    def quantile_size(self) -> int:
        return self.quantile.num_rows

    def is_empty(self) -> bool:
        return self.quantile_size == 0 and self.data_size == 0

    def get_wins(self, index: int) -> int:
        return int(self.wins[index])

    def get_losses(self, index: int) -> int:
        return int(self.losses[index])

    def get_wins_and_losses(self, index: int) -> WinsAndLosses:
        return WinsAndLosses(self.get_wins(index), self.get_losses(index))

    def get_row(self, index: int) -> tuple:
        return self.quantile.get_row(index)

    def rank_bounds(self, index: int) -> tuple[int, int]:
        return self.get_wins(index), self.data_size - self.get_losses(index)

    def check_sorted(self, order: RecordOrder) -> bool:
        return order.is_sorted(self.quantile)

    def compress_exact(self, size: int) -> "QuantileList":
        if self.quantile_size <= size:
            return self
        if size <= 0:
            raise InvalidArgumentError(f"Cannot compress a quantile list to {size} entries")
        rows = np.unique(np.round(np.linspace(0, self.quantile_size - 1, size)).astype(np.int64))
        return QuantileList(self.quantile.compress_rows(rows), self.wins[rows], self.losses[rows], self.data_size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantileList):
            return NotImplemented
        return (self.data_size == other.data_size
                and self.schema == other.schema
                and np.array_equal(self.wins, other.wins)
                and np.array_equal(self.losses, other.losses)
                and [self.get_row(i) for i in range(self.quantile_size)]
                == [other.get_row(i) for i in range(other.quantile_size)])

    def __repr__(self) -> str:
        return f"QuantileList({self.quantile_size} landmarks over {self.data_size} rows)"
