from typing import Optional


class SketchError(Exception):
    pass


class SchemaMismatchError(SketchError):
    pass


class InvalidArgumentError(SketchError, ValueError):
    pass


class PartitionFailureError(SketchError):
    def __init__(self, partition: str, cause: Optional[BaseException] = None) -> None:
        self.partition = partition
        self.cause = cause
        super().__init__(f"Partition {partition} failed: {cause!r}")
        self.__cause__ = cause


class SketchCancelledError(SketchError):
    pass


class SketchTimeoutError(SketchError, TimeoutError):
    pass


class UnknownHandleError(SketchError, KeyError):
    def __init__(self, handle: str) -> None:
        self.handle = handle
        super().__init__(f"Unknown dataset handle '{handle}'")

    def __str__(self) -> str:
        return self.args[0]


class UnorderedMergeError(SketchError):
    pass
