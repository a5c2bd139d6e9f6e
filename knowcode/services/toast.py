"""Short-lived notifications shown on admin pages."""
from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import Callable, Literal

from knowcode.config import TOAST_SECONDS

ToastKind = Literal["success", "error"]


@dataclass
class Toast:
    id: int
    message: str
    kind: ToastKind
    created_at: float

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "message": self.message, "type": self.kind}


class ToastCenter:
    """Toasts dismiss themselves ``ttl`` seconds after being raised."""

    def __init__(
        self,
        ttl: float = TOAST_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._ids = itertools.count(1)
        self._toasts: list[Toast] = []

    def success(self, message: str) -> Toast:
        return self._push(message, "success")

    def error(self, message: str) -> Toast:
        return self._push(message, "error")

    def _push(self, message: str, kind: ToastKind) -> Toast:
        toast = Toast(next(self._ids), message, kind, self._clock())
        self._toasts.append(toast)
        return toast

    def active(self) -> list[Toast]:
        now = self._clock()
        self._toasts = [t for t in self._toasts if now - t.created_at < self.ttl]
        return list(self._toasts)

    def dismiss(self, toast_id: int) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def clear(self) -> None:
        self._toasts.clear()
