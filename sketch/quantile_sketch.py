import logging
from typing import Optional

import numpy as np

from container.container import container
from errors.errors import InvalidArgumentError, SchemaMismatchError, UnorderedMergeError
from sketch.quantile_list import QuantileList
from sketch.sketch import Sketch
from table.column import ArrayColumn
from table.record_order import RecordOrder
from table.table import Table

logger = logging.getLogger(__name__)

PER_BIN = 100
SLACK = 10


class QuantileSketch(Sketch[Table, QuantileList]):
    def __init__(self, order: RecordOrder, resolution: int, seed: Optional[int] = None,
                 per_bin: Optional[int] = None, slack: Optional[int] = None) -> None:
        if resolution <= 0:
            raise InvalidArgumentError(f"resolution must be positive, got {resolution}")
        if not order.orientations:
            raise InvalidArgumentError("Quantiles need at least one sort column")
        config = container.get("config")
        self.order = order
        self.resolution = resolution
        self.seed = seed if seed is not None else getattr(config, "seed", None)
        self.per_bin = per_bin or getattr(config, "quantile_bin_factor", PER_BIN)
        self.slack = slack or getattr(config, "quantile_slack", SLACK)

    def get_quantile(self, data: Table) -> QuantileList:
        data_size = data.num_rows
        # at least one row per landmark gap, so a short sample is the whole partition
        sample_size = max(self.resolution * self.per_bin, self.resolution + 1)
        sample_set = data.members.sample(sample_size, self.seed)
        sample_table = data.compress_rows(sample_set.to_array(), self.order.column_names)
        order = self.order.sorted_row_order(sample_table)
        # number of samples might be less than resolution * per_bin
        sample_step = sample_table.num_rows // (self.resolution + 1)
        data_step = data_size // (self.resolution + 1)
        if sample_step == 0:
            # fewer rows than landmarks: the sample is the whole partition, ranks are exact
            wins = np.arange(1, data_size + 1)
            return QuantileList(sample_table.compress_rows(order), wins, data_size - wins, data_size)
        steps = np.arange(1, self.resolution + 1)
        quantile = order[steps * sample_step - 1]
        wins = steps * data_step
        losses = (self.resolution + 1 - steps) * data_step
        return QuantileList(sample_table.compress_rows(quantile), wins, losses, data_size)

    def merge_ranks(self, left: QuantileList, right: QuantileList, merge_left: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Wins and losses of the merged landmarks. A landmark from one side
        adds the wins of the largest landmark of the other side merged
        before it, and the losses of the smallest one merged after it.
        """
        length = left.quantile_size + right.quantile_size
        wins = np.empty(length, dtype=np.int64)
        losses = np.empty(length, dtype=np.int64)
        i = j = 0
        for k in range(length):
            if merge_left[k]:
                wins[k] = left.get_wins(i) + (right.get_wins(j - 1) if j > 0 else 0)
                losses[k] = left.get_losses(i) + (right.get_losses(j) if j < right.quantile_size else 0)
                i += 1
            else:
                wins[k] = right.get_wins(j) + (left.get_wins(i - 1) if i > 0 else 0)
                losses[k] = right.get_losses(j) + (left.get_losses(i) if i < left.quantile_size else 0)
                j += 1
        return wins, losses

    def zero(self) -> QuantileList:
        return QuantileList.empty(self.order.to_schema())

    def create(self, data: Table) -> QuantileList:
        if data.num_rows == 0:
            return self.zero()
        return self.get_quantile(data)

    def add(self, left: QuantileList, right: QuantileList) -> QuantileList:
        if left.is_empty():
            return right
        if right.is_empty():
            return left
        if left.schema != right.schema:
            raise SchemaMismatchError(f"The schemas do not match: {left.schema} vs {right.schema}")
        for side, ql in (("left", left), ("right", right)):
            if not ql.check_sorted(self.order):
                raise UnorderedMergeError(f"The {side} quantile list is not sorted by {self.order}")
        merge_left = self.order.merge_order(left.quantile, right.quantile)
        columns = [
            ArrayColumn.merge(left.quantile.get_column(name), right.quantile.get_column(name), merge_left)
            for name in left.schema.column_names
        ]
        merged = Table(left.schema, columns)
        wins, losses = self.merge_ranks(left, right, merge_left)
        result = QuantileList(merged, wins, losses, left.data_size + right.data_size)
        # the returned list can hold up to slack * resolution landmarks
        return result.compress_exact(self.slack * self.resolution)
