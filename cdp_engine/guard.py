"""Non-reentrant critical section shared by every mutating engine call."""
from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from .errors import ReentrantCall

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class NonReentrant:
    """Call-scoped lock; a nested acquisition is rejected outright."""

    def __init__(self) -> None:
        self._holder: str | None = None

    @property
    def locked(self) -> bool:
        return self._holder is not None

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        if self._holder is not None:
            logger.warning(
                "Rejected reentrant %s while %s is running", operation, self._holder
            )
            raise ReentrantCall(operation)
        self._holder = operation
        try:
            yield
        finally:
            self._holder = None


def non_reentrant(method: F) -> F:
    """Run ``method`` while holding ``self._guard``."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._guard.hold(method.__name__):
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
