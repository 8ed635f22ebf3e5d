import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Callable, Optional

from dataset.cancellation import CancellationToken
from errors.errors import PartitionFailureError, SketchCancelledError, SketchError

logger = logging.getLogger(__name__)


class TreeReduction:
    def __init__(self, sketch, executor: Executor, token: Optional[CancellationToken] = None) -> None:
        self.sketch = sketch
        self.executor = executor
        self.token = token if token is not None else CancellationToken()
        self.root: Future = Future()
        self._lock = threading.Lock()
        self._spawned: list[Future] = []
        self._stopped = False

    def start(self, node) -> Future:
        self.token.on_cancel(self._cancelled)
        result = self._schedule(node, "")
        if result is not None:
            result.add_done_callback(self._finish)
        return self.root

    def _cancelled(self) -> None:
        logger.warning(f"sketch {self.sketch.__class__.__name__} cancelled")
        self.fail(SketchCancelledError("sketch cancelled"))

    def fail(self, error: BaseException) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            pending, self._spawned = self._spawned, []
            if not self.root.done():
                self.root.set_exception(error)
        for future in pending:
            future.cancel()

    def _schedule(self, node, path: str) -> Optional[Future]:
        if node.is_leaf():
            return self._submit(self._create, node, path or "0")
        children = []
        for index, child in enumerate(node.children):
            future = self._schedule(child, f"{path}/{index}" if path else str(index))
            if future is None:
                return None
            children.append(future)
        if not children:
            future = Future()
            future.set_result(self.sketch.zero())
            return future
        while len(children) > 1:
            paired = [self._combine(children[k], children[k + 1], path) for k in range(0, len(children) - 1, 2)]
            if len(children) % 2:
                paired.append(children[-1])
            children = paired
        return children[0]

    def _combine(self, left: Future, right: Future, path: str) -> Future:
        out: Future = Future()
        remaining = [2]
        lock = threading.Lock()

        def forward(inner: Future) -> None:
            if not inner.cancelled() and inner.exception() is None:
                out.set_result(inner.result())

        def done(_: Future) -> None:
            with lock:
                remaining[0] -= 1
                if remaining[0]:
                    return
            # failures were already reported through fail()
            if any(f.cancelled() or f.exception() is not None for f in (left, right)):
                return
            inner = self._submit(self._add, left.result(), right.result(), path)
            if inner is not None:
                inner.add_done_callback(forward)

        left.add_done_callback(done)
        right.add_done_callback(done)
        return out

    def _submit(self, fn: Callable, *args: Any) -> Optional[Future]:
        with self._lock:
            if self._stopped or self.token.cancelled:
                return None
            try:
                future = self.executor.submit(fn, *args)
            except RuntimeError as e:
                error = e
            else:
                self._spawned.append(future)
                return future
        self.fail(SketchCancelledError(f"worker pool unavailable: {error}"))
        return None

    def _create(self, node, path: str):
        self.token.check()
        try:
            return self.sketch.create(node.data)
        except SketchError as e:
            logger.error(f"Partition {path} rejected sketch {self.sketch.__class__.__name__}: {e}")
            self.fail(e)
            raise
        except Exception as e:
            logger.error(f"Partition {path} failed: {e!r}")
            error = PartitionFailureError(path, e)
            self.fail(error)
            raise error from e

    def _add(self, left, right, path: str):
        self.token.check()
        try:
            return self.sketch.add(left, right)
        except Exception as e:
            logger.error(f"Combining results under '{path or '/'}' failed: {e!r}")
            self.fail(e)
            raise

    def _finish(self, future: Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        with self._lock:
            if self.root.done():
                return
            self._stopped = True
            self._spawned = []
            self.root.set_result(future.result())
