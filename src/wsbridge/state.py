from __future__ import annotations

import copy
import threading
from typing import Callable, Generic, TypeVar


__all__ = ["Guarded"]


T = TypeVar("T")
R = TypeVar("R")


class Guarded(Generic[T]):
    """
    Thread-safe container for a value.

    Reads return a snapshot. Updates run a function against an exclusive copy
    of the value and store the copy back when the function returns::

        counter = Guarded(Counter())
        counter.mutate(lambda c: c.increment())

    The lock is reentrant. When ``fn`` calls :meth:`mutate` on the same
    container, the nested call operates on the same working copy, so updates
    made by the nested call aren't lost when the outer call completes.

    Functions passed to :meth:`mutate` must not block or perform I/O.

    """

    def __init__(self, value: T) -> None:
        self._lock = threading.RLock()
        self._value = value
        # Working copy of the value while a mutation is in progress.
        self._working: T | None = None
        self._mutating = False

    @property
    def value(self) -> T:
        """Snapshot of the value."""
        with self._lock:
            if self._mutating:
                return copy.copy(self._working)  # type: ignore[return-value]
            return copy.copy(self._value)

    def set(self, value: T) -> None:
        """Replace the value."""
        with self._lock:
            if self._mutating:
                self._working = value
            else:
                self._value = value

    def mutate(self, fn: Callable[[T], R]) -> R:
        """
        Run ``fn`` with exclusive access to the value and return its result.

        If ``fn`` raises an exception, the exception propagates and the value
        isn't updated.

        """
        with self._lock:
            if self._mutating:
                return fn(self._working)  # type: ignore[arg-type]
            self._working = copy.copy(self._value)
            self._mutating = True
            try:
                result = fn(self._working)
                self._value = self._working
            finally:
                self._working = None
                self._mutating = False
            return result
