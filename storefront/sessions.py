# storefront/sessions.py
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Tuple
from uuid import uuid4

from .admin.guard import InFlightGuard
from .admin.order_review import OrderReviewViewModel
from .admin.product_admin import ProductCatalogViewModel
from .notify import Notifier

SESSION_TTL_SECONDS = 60 * 60 * 8
MAX_SESSIONS = 512


@dataclass
class AdminSession:
    """One browser's view-model state; nothing here is shared across sessions."""

    session_id: str
    orders: OrderReviewViewModel
    products: ProductCatalogViewModel
    notifier: Notifier
    guard: InFlightGuard = field(default_factory=InFlightGuard)


SessionFactory = Callable[[str], AdminSession]


class SessionRegistry:
    """
    Sessions idle for longer than ``ttl`` seconds are dropped, matching the
    cookie lifetime. When more than ``max_sessions`` are live the least
    recently used one goes first.
    """

    def __init__(
        self,
        factory: SessionFactory,
        ttl: float = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self.ttl = ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, Tuple[AdminSession, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        # oldest first, so stop at the first one still fresh
        while self._sessions:
            sid, (_, seen) = next(iter(self._sessions.items()))
            if now - seen < self.ttl and len(self._sessions) < self.max_sessions:
                break
            del self._sessions[sid]

    def get_or_create(self, session_id: str | None) -> AdminSession:
        with self._lock:
            now = self._clock()
            hit = self._sessions.pop(session_id, None) if session_id else None
            if hit is not None and now - hit[1] < self.ttl:
                session = hit[0]
            else:
                session = None

            self._evict(now)
            if session is None:
                session = self._factory(session_id or uuid4().hex)
            self._sessions[session.session_id] = (session, now)
            return session

    def __len__(self) -> int:
        return len(self._sessions)
