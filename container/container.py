import logging
import threading
from typing import ItemsView, Any

from errors.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class Container:
    def __init__(self) -> None:
        self._objs: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, name: str, default: Any = None) -> Any:
        with self._lock:
            return self._objs.get(name, default)

    def require(self, name: str) -> Any:
        with self._lock:
            if name not in self._objs:
                raise InvalidArgumentError(f"'{name}' is not registered")
            return self._objs[name]

    def register(self, name: str, obj: Any) -> bool:
        return self._safe_set(name, obj, allow_override=False)

    def update(self, name: str, obj: Any) -> bool:
        return self._safe_set(name, obj, allow_override=True, must_exist=True)

    def register_or_update(self, name: str, obj: Any) -> None:
        with self._lock:
            self._objs[name] = obj

    def remove(self, name: str) -> bool:
        with self._lock:
            if name in self._objs:
                del self._objs[name]
                return True
        self._log_error(name, "remove", "not found")
        return False

    def try_remove(self, name: str) -> None:
        with self._lock:
            self._objs.pop(name, None)

    def exist(self, name: str) -> bool:
        with self._lock:
            return name in self._objs

    def items(self) -> ItemsView[str, Any]:
        with self._lock:
            return dict(self._objs).items()

    def clear(self) -> None:
        with self._lock:
            self._objs.clear()

    def _safe_set(
            self, name: str, obj: Any, *, allow_override: bool = False, must_exist: bool = False
    ) -> bool:
        with self._lock:
            exists = name in self._objs
            if must_exist and not exists:
                self._log_error(name, "update", "not found")
                return False
            if not allow_override and exists:
                self._log_error(name, "register", "already exists")
                return False
            self._objs[name] = obj
            return True

    def _log_error(self, name: str, action: str, reason: str) -> None:
        logger.error(f"Failed to {action} '{name}': {reason}")


container = Container()
