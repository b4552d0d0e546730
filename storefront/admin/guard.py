# storefront/admin/guard.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator, Set


class ConfirmationRequired(Exception):
    """A destructive command was issued without the user's confirmation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MutationInProgress(Exception):
    """Another mutation of the same entity has not finished yet."""

    def __init__(self, key: Hashable):
        self.key = key
        super().__init__(f"A change to '{key}' is already in progress")


class InFlightGuard:
    """Set of entity keys currently being mutated, shared by one session's commands."""

    def __init__(self) -> None:
        self._keys: Set[Hashable] = set()
        self._lock = threading.Lock()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._keys

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._lock:
            if key in self._keys:
                raise MutationInProgress(key)
            self._keys.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._keys.discard(key)
