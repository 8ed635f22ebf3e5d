import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from config.config import EngineConfig
from container.container import container
from container.initialize_level import get_initialize_level, initialize_level
from dataset.cancellation import CancellationToken
from dataset.dataset import DataSet
from errors.errors import InvalidArgumentError, UnknownHandleError
from privacy.private_table import PrivateTable
from privacy.privacy_schema import PrivacySchema
from request.sketch_request import SketchRequest
from sketch.sketch import Sketch
from sketch.summary_sketch import SummarySketch, TableSummary
from table.schema import Schema
from table.table import Table

logger = logging.getLogger(__name__)


@initialize_level(2)
class Engine:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config
        self.executor: Optional[ThreadPoolExecutor] = None
        self._datasets: dict[str, DataSet] = {}
        self._lock = threading.Lock()

    def start(self) -> None:
        if self.config is None:
            self.config = container.get("config") or EngineConfig()
        container.register_or_update("config", self.config)
        container.register_or_update("Engine", self)
        self._initialize_components()

    def stop(self) -> None:
        self._finalize_components()

    def __enter__(self) -> "Engine":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def initialize(self) -> None:
        workers = self.config.pool_size
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sketch")
        container.register_or_update("Executor", self.executor)
        if self.config.privacy_schema and not container.exist("PrivacySchema"):
            container.register("PrivacySchema", PrivacySchema.load(self.config.privacy_schema))
        logger.info(f"Engine initialized with {workers} workers")

    def finalize(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=True, cancel_futures=True)
            self.executor = None
        container.try_remove("Executor")
        with self._lock:
            self._datasets.clear()
        logger.info("Engine stopped")

    def _initialize_components(self) -> None:
        items = sorted(container.items(), key=lambda item: get_initialize_level(item[1]))
        for name, obj in items:
            if hasattr(obj, "initialize"):
                logger.debug(f"Initializing [{get_initialize_level(obj)}]: {name}")
                obj.initialize()

    def _finalize_components(self) -> None:
        items = sorted(container.items(), key=lambda item: get_initialize_level(item[1]), reverse=True)
        for name, obj in items:
            if hasattr(obj, "finalize"):
                logger.debug(f"Finalizing: {name}")
                obj.finalize()

    def load(self, dataset: DataSet) -> str:
        handle = uuid.uuid4().hex
        with self._lock:
            self._datasets[handle] = dataset
        logger.info(f"published {dataset!r} as {handle}")
        return handle

    def get(self, handle: str) -> DataSet:
        with self._lock:
            if (dataset := self._datasets.get(handle)) is None:
                raise UnknownHandleError(handle)
            return dataset

    def release(self, handle: str) -> None:
        with self._lock:
            if self._datasets.pop(handle, None) is None:
                raise UnknownHandleError(handle)

    def map(self, handle: str, transform: Any) -> str:
        logger.info(f"map {transform!r} over {handle}")
        return self.load(self.get(handle).map(transform, self.executor, self.config.timeout))

    def zip(self, handle: str, other: str) -> str:
        logger.info(f"zip {handle} with {other}")
        return self.load(self.get(handle).zip(self.get(other)))

    def sketch(self, handle: str, sketch: Sketch, cancel: Optional[CancellationToken] = None) -> Any:
        logger.info(f"sketch {sketch!r} over {handle}")
        return self.get(handle).sketch(sketch, cancel=cancel, timeout=self.config.timeout, executor=self.executor)

    def schema(self, handle: str) -> TableSummary:
        return self.sketch(handle, SummarySketch())

    def private(self, handle: str, metadata: Optional[PrivacySchema] = None) -> PrivateTable:
        return PrivateTable(self.get(handle), metadata, timeout=self.config.timeout, executor=self.executor)

    def _leaf_schema(self, handle: str) -> Schema:
        # partitions share one schema
        if not (leaves := self.get(handle).flatten()):
            raise InvalidArgumentError(f"Dataset {handle} has no partitions")
        if not isinstance(table := leaves[0].data, Table):
            raise InvalidArgumentError(f"Dataset {handle} does not hold tables")
        return table.schema

    def run(self, handle: str, request: SketchRequest, cancel: Optional[CancellationToken] = None) -> Any:
        start = time.perf_counter()
        schema = self._leaf_schema(handle)
        if request.is_private:
            result = self.private(handle).histogram(**request.private_args(schema))
        else:
            result = self.sketch(handle, request.build(schema), cancel)
        logger.debug(f"request {request.name} elapse {time.perf_counter() - start}s")
        return result
