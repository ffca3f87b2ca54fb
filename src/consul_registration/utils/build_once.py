from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

__all__ = ["BuildOnce"]


class BuildOnce(Generic[T]):
    """Holds a value that is built at most once and never replaced.

    A build that raises leaves the holder empty so the next caller retries.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None
        self._built = False

    @property
    def built(self) -> bool:
        return self._built

    def peek(self) -> T | None:
        return self._value

    def get(self, factory: Callable[[], T]) -> T:
        if self._built:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._built:
                self._value = factory()
                self._built = True
        return self._value  # type: ignore[return-value]
