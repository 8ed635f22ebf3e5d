from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class Sketch(Generic[T, R]):
    """
    An associative aggregate over a dataset tree.

    zero() is the identity of add; create(data) summarizes one partition;
    add(left, right) summarizes the union of two disjoint row sets and
    always returns a new result instead of mutating its inputs.
    """
    def zero(self) -> R:
        raise NotImplementedError

    def create(self, data: T) -> R:
        raise NotImplementedError

    def add(self, left: R, right: R) -> R:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.__class__.__name__
