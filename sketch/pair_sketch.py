from typing import Any

from sketch.sketch import Sketch


class ConcurrentSketch(Sketch):
    def __init__(self, first: Sketch, second: Sketch) -> None:
        self.first = first
        self.second = second

    def zero(self) -> tuple:
        return self.first.zero(), self.second.zero()

    def create(self, data: Any) -> tuple:
        return self.first.create(data), self.second.create(data)

    def add(self, left: tuple, right: tuple) -> tuple:
        return self.first.add(left[0], right[0]), self.second.add(left[1], right[1])


class ZipSketch(ConcurrentSketch):
    def create(self, data: tuple) -> tuple:
        left, right = data
        return self.first.create(left), self.second.create(right)
