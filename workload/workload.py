from typing import Iterator

import yaml

from errors.errors import InvalidArgumentError
from request.sketch_request import SketchRequest


class Workload:
    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path

    def __iter__(self) -> Iterator[SketchRequest]:
        with open(self.path, encoding="utf-8") as f:
            requests = yaml.safe_load(f) or []
        if not isinstance(requests, list):
            raise InvalidArgumentError(f"Workload {self.path} must be a list of requests")
        for args in requests:
            yield SketchRequest.from_dict(args)
