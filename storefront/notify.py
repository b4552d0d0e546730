# storefront/notify.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = DEFAULT
    duration_ms: int = 3000

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Notifier:
    """Collects toasts for the next response; every toast is logged too."""

    def __init__(self) -> None:
        self._pending: List[Toast] = []

    def notify(self, title: str, description: str = "", duration_ms: int = 3000) -> Toast:
        return self._push(Toast(title, description, DEFAULT, duration_ms))

    def error(self, title: str, description: str = "", duration_ms: int = 5000) -> Toast:
        return self._push(Toast(title, description, DESTRUCTIVE, duration_ms))

    def _push(self, toast: Toast) -> Toast:
        level = logging.WARNING if toast.variant == DESTRUCTIVE else logging.INFO
        logger.log(level, "%s: %s", toast.title, toast.description)
        self._pending.append(toast)
        return toast

    @property
    def pending(self) -> List[Toast]:
        return list(self._pending)

    def drain(self) -> List[Toast]:
        out, self._pending = self._pending, []
        return out
