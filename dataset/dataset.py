import logging
import time
from concurrent.futures import FIRST_EXCEPTION, Executor, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, Optional, Sequence, TypeVar

from container.container import container
from dataset.cancellation import CancellationToken
from dataset.reduction import TreeReduction
from errors.errors import (
    InvalidArgumentError,
    PartitionFailureError,
    SketchError,
    SketchTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def executor_scope(executor: Optional[Executor] = None, size: int = 1) -> Iterator[Executor]:
    if executor is None:
        executor = container.get("Executor")
    if executor is not None:
        yield executor
        return
    pool = ThreadPoolExecutor(max_workers=max(size, 1))
    try:
        yield pool
    except BaseException:
        # leaves still running after a timeout or cancellation finish in the background
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown(wait=True)


def _apply(transform: Any, data: Any, path: str) -> Any:
    try:
        if hasattr(transform, "apply"):
            return transform.apply(data)
        return transform(data)
    except SketchError:
        raise
    except Exception as e:
        logger.error(f"Partition {path} failed in map: {e!r}")
        raise PartitionFailureError(path, e) from e


class DataSet(Generic[T]):
    def is_leaf(self) -> bool:
        raise NotImplementedError

    def paths(self, prefix: str = "") -> Iterator[tuple[str, "LocalDataSet"]]:
        raise NotImplementedError

    def flatten(self) -> list["LocalDataSet"]:
        """Leaves in left-to-right order."""
        return [leaf for _, leaf in self.paths()]

    def leaves(self) -> list["LocalDataSet"]:
        return self.flatten()

    def _rebuild(self, values: Iterator[Any]) -> "DataSet":
        raise NotImplementedError

    def map(self, transform: Any, executor: Optional[Executor] = None,
            timeout: Optional[float] = None) -> "DataSet":
        leaves = list(self.paths())
        start = time.perf_counter()
        with executor_scope(executor, len(leaves)) as pool:
            futures = [pool.submit(_apply, transform, leaf.data, path) for path, leaf in leaves]
            done, not_done = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)
            for future in not_done:
                future.cancel()
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()
            if not_done:
                raise SketchTimeoutError(f"map did not finish within {timeout}s")
        results = [future.result() for future in futures]
        logger.debug(f"map {transform!r} over {len(leaves)} partitions elapse {time.perf_counter() - start}s")
        return self._rebuild(iter(results))

    def sketch(self, sketch, cancel: Optional[CancellationToken] = None, timeout: Optional[float] = None,
               executor: Optional[Executor] = None):
        start = time.perf_counter()
        with executor_scope(executor, len(self.leaves())) as pool:
            reduction = TreeReduction(sketch, pool, cancel)
            future = reduction.start(self)
            try:
                result = future.result(timeout=timeout)
            except SketchError:
                raise
            except FutureTimeoutError:
                logger.warning(f"sketch {sketch.__class__.__name__} timed out after {timeout}s")
                reduction.fail(SketchTimeoutError(f"sketch did not finish within {timeout}s"))
                raise SketchTimeoutError(f"sketch did not finish within {timeout}s") from None
        logger.debug(f"sketch {sketch.__class__.__name__} elapse {time.perf_counter() - start}s")
        return result

    def run_complete_sketch(self, sketch, postprocess: Callable[[Any], Any], **kwargs):
        """Run a sketch, then post-process the complete result once."""
        return postprocess(self.sketch(sketch, **kwargs))

    def zip(self, other: "DataSet") -> "DataSet":
        raise NotImplementedError


class LocalDataSet(DataSet[T]):
    def __init__(self, data: T) -> None:
        self.data = data

    def is_leaf(self) -> bool:
        return True

    def paths(self, prefix: str = "") -> Iterator[tuple[str, "LocalDataSet"]]:
        yield prefix or "0", self

    def _rebuild(self, values: Iterator[Any]) -> "LocalDataSet":
        return LocalDataSet(next(values))

    def zip(self, other: DataSet) -> "LocalDataSet":
        if not isinstance(other, LocalDataSet):
            raise InvalidArgumentError("Cannot zip datasets of different shapes")
        return LocalDataSet((self.data, other.data))

    def __repr__(self) -> str:
        return f"LocalDataSet({self.data!r})"


class ParallelDataSet(DataSet[T]):
    def __init__(self, children: Sequence[DataSet[T]]) -> None:
        self.children = list(children)

    def is_leaf(self) -> bool:
        return False

    def paths(self, prefix: str = "") -> Iterator[tuple[str, LocalDataSet]]:
        for index, child in enumerate(self.children):
            yield from child.paths(f"{prefix}/{index}" if prefix else str(index))

    def _rebuild(self, values: Iterator[Any]) -> "ParallelDataSet":
        return ParallelDataSet([child._rebuild(values) for child in self.children])

    def zip(self, other: DataSet) -> "ParallelDataSet":
        if not isinstance(other, ParallelDataSet) or len(other.children) != len(self.children):
            raise InvalidArgumentError("Cannot zip datasets of different shapes")
        return ParallelDataSet([mine.zip(theirs) for mine, theirs in zip(self.children, other.children)])

    def __repr__(self) -> str:
        return f"ParallelDataSet({len(self.children)} children, {len(self.leaves())} partitions)"
