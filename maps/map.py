from typing import Generic, TypeVar

T = TypeVar("T")
S = TypeVar("S")


class Map(Generic[T, S]):
    def apply(self, data: T) -> S:
        raise NotImplementedError

    def __call__(self, data: T) -> S:
        return self.apply(data)

    def __repr__(self) -> str:
        return self.__class__.__name__
