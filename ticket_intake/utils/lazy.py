from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyResource(Generic[T]):
    """Thread-safe once-only initializer for process-scoped handles.

    The factory runs at most once per instance, even under concurrent
    first use. A factory that raises leaves the resource empty, so the
    next caller tries again instead of caching the failure.
    """

    def __init__(self, factory: Callable[[], T], *, name: str = "resource") -> None:
        self._factory = factory
        self._name = name
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._ready = False

    @property
    def initialized(self) -> bool:
        return self._ready

    def get(self) -> T:
        if self._ready:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._ready:
                logger.info("Initialising %s", self._name)
                self._value = self._factory()
                self._ready = True
        return self._value  # type: ignore[return-value]
