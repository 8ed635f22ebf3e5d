"""
Shared pytest fixtures for the sketch engine tests.
"""

import numpy as np
import pandas as pd
import pytest

from config.config import EngineConfig
from container.container import container
from dataset.loader import Loader
from engine.engine import Engine
from table.column import ArrayColumn
from table.column_description import ColumnDescription
from table.content_kind import ContentsKind
from table.schema import Schema
from table.table import Table


@pytest.fixture(autouse=True)
def clean_container():
    """Every test starts and ends with an empty registry."""
    container.clear()
    yield
    container.clear()


@pytest.fixture
def engine():
    """A started engine with a small worker pool."""
    engine = Engine(EngineConfig(workers=4, timeout=30))
    engine.start()
    yield engine
    engine.stop()


def int_table(values, name: str = "x") -> Table:
    desc = ColumnDescription(name, ContentsKind.Integer)
    return Table(Schema([desc]), [ArrayColumn(desc, np.asarray(values, dtype=np.int64))])


@pytest.fixture
def twelve_rows() -> Table:
    """Integers 1..12 in scrambled order."""
    return int_table([7, 3, 12, 1, 9, 5, 11, 2, 8, 6, 10, 4])


@pytest.fixture
def flights() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    n = 1000
    return pd.DataFrame({
        "distance": rng.integers(0, 1000, n),
        "depdelay": np.where(rng.random(n) < 0.05, np.nan, rng.normal(10, 30, n)),
        "origin": rng.choice(["ATL", "JFK", "LAX", "ORD", "SFO"], n),
    })


@pytest.fixture
def flights_dataset(flights):
    return Loader().from_dataframe(flights, parts=5)
