import logging
from typing import Optional

import numpy as np
import pandas as pd

from dataset.dataset import DataSet, LocalDataSet, ParallelDataSet
from errors.errors import InvalidArgumentError
from membership.membership_set import SparseMembership
from table.schema import Schema
from table.table import Table, infer_description

logger = logging.getLogger(__name__)


class Loader:
    def partition(self, table: Table, parts: int, fanout: Optional[int] = None) -> DataSet[Table]:
        if parts <= 0:
            raise InvalidArgumentError(f"parts must be positive, got {parts}")
        rows = table.members.to_array()
        leaves = []
        for chunk in np.array_split(rows, parts):
            members = table.members.select(chunk)
            leaves.append(LocalDataSet(table.with_members(members)))
        logger.info(f"partitioned {table} into {parts} partitions")
        return self.group(leaves, fanout)

    def group(self, leaves: list[DataSet], fanout: Optional[int] = None) -> DataSet:
        if fanout is not None and fanout < 2:
            raise InvalidArgumentError(f"fanout must be >= 2, got {fanout}")
        nodes: list[DataSet] = list(leaves)
        if fanout is None:
            return ParallelDataSet(nodes)
        while len(nodes) > fanout:
            nodes = [ParallelDataSet(nodes[k:k + fanout]) if len(nodes[k:k + fanout]) > 1 else nodes[k]
                     for k in range(0, len(nodes), fanout)]
        return ParallelDataSet(nodes)

    def from_dataframe(self, df: pd.DataFrame, parts: int = 1, fanout: Optional[int] = None,
                       schema: Optional[Schema] = None) -> DataSet[Table]:
        return self.partition(Table.from_dataframe(df, schema), parts, fanout)

    def from_dataframes(self, dfs: list[pd.DataFrame], fanout: Optional[int] = None,
                        schema: Optional[Schema] = None) -> DataSet[Table]:
        if schema is None:
            schema = Schema(infer_description(name, pd.concat([df[name] for df in dfs], ignore_index=True))
                            for name in dfs[0].columns)
        leaves = [LocalDataSet(Table.from_dataframe(df, schema)) for df in dfs]
        return self.group(leaves, fanout)

    def from_csv(self, paths: list[str], parts: int = 1, fanout: Optional[int] = None) -> DataSet[Table]:
        if len(paths) == 1:
            return self.from_dataframe(pd.read_csv(paths[0]), parts, fanout)
        return self.from_dataframes([pd.read_csv(path) for path in paths], fanout)
