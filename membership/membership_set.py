import logging
from typing import Callable, Iterator, Optional

import numpy as np
from pyroaring import BitMap

from errors.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class MembershipSet:
    def __init__(self, max_size: int) -> None:
        if max_size < 0:
            raise InvalidArgumentError(f"max_size must be >= 0, got {max_size}")
        self.max_size = max_size

    @property
    def size(self) -> int:
        raise NotImplementedError

    def is_member(self, row: int) -> bool:
        raise NotImplementedError

    def to_array(self) -> np.ndarray:
        raise NotImplementedError

    def __iter__(self) -> Iterator[int]:
        return (int(row) for row in self.to_array())

    def __len__(self) -> int:
        return self.size

    def sample(self, k: int, seed: Optional[int] = None) -> "MembershipSet":
        if k < 0:
            raise InvalidArgumentError(f"Sample size must be >= 0, got {k}")
        if k >= self.size:
            return self
        rng = np.random.default_rng(seed)
        chosen = rng.choice(self.to_array(), size=k, replace=False)
        return SparseMembership(BitMap(chosen.tolist()), self.max_size)

    def sample_rate(self, rate: float, seed: Optional[int] = None) -> "MembershipSet":
        if not 0 < rate <= 1:
            raise InvalidArgumentError(f"Sampling rate must be in (0, 1], got {rate}")
        if rate == 1:
            return self
        return self.sample(int(round(self.size * rate)), seed)

    def filter(self, predicate: Callable[[int], bool]) -> "MembershipSet":
        return SparseMembership(BitMap(row for row in self if predicate(row)), self.max_size)

    def filter_mask(self, mask: np.ndarray) -> "MembershipSet":
        rows = self.to_array()
        if len(mask) != len(rows):
            raise InvalidArgumentError(f"Mask of {len(mask)} entries for {len(rows)} members")
        return SparseMembership(BitMap(rows[np.asarray(mask, dtype=bool)].tolist()), self.max_size)

    def select(self, rows: np.ndarray) -> "MembershipSet":
        return SparseMembership(BitMap(np.asarray(rows, dtype=np.int64).tolist()), self.max_size)

    def intersection(self, other: "MembershipSet") -> "MembershipSet":
        self._check_compatible(other)
        return SparseMembership(self.to_bitmap() & other.to_bitmap(), self.max_size)

    def union(self, other: "MembershipSet") -> "MembershipSet":
        self._check_compatible(other)
        return SparseMembership(self.to_bitmap() | other.to_bitmap(), self.max_size)

    def to_bitmap(self) -> BitMap:
        return BitMap(self.to_array().tolist())

    def _check_compatible(self, other: "MembershipSet") -> None:
        if self.max_size != other.max_size:
            raise InvalidArgumentError(f"Membership sets over {self.max_size} and {other.max_size} rows")


class FullMembership(MembershipSet):
    def __init__(self, max_size: int) -> None:
        super().__init__(max_size)

    @property
    def size(self) -> int:
        return self.max_size

    def is_member(self, row: int) -> bool:
        return 0 <= row < self.max_size

    def to_array(self) -> np.ndarray:
        return np.arange(self.max_size, dtype=np.int64)

    def to_bitmap(self) -> BitMap:
        return BitMap(range(self.max_size))

    def __repr__(self) -> str:
        return f"FullMembership({self.max_size})"


class SparseMembership(MembershipSet):
    def __init__(self, bitmap: BitMap, max_size: int) -> None:
        super().__init__(max_size)
        if bitmap and bitmap.max() >= max_size:
            raise InvalidArgumentError(f"Row {bitmap.max()} out of range [0, {max_size})")
        self.bitmap = BitMap(bitmap)

    @classmethod
    def from_range(cls, start: int, end: int, max_size: int) -> "SparseMembership":
        return cls(BitMap(range(start, end)), max_size)

    @property
    def size(self) -> int:
        return len(self.bitmap)

    def is_member(self, row: int) -> bool:
        return row in self.bitmap

    def to_array(self) -> np.ndarray:
        return np.fromiter(self.bitmap, dtype=np.int64, count=len(self.bitmap))

    def to_bitmap(self) -> BitMap:
        return BitMap(self.bitmap)

    def __repr__(self) -> str:
        return f"SparseMembership({self.size}/{self.max_size})"
