"""Optimistic updates: change local state first, undo it if the call fails."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OptimisticCommand(Generic[T]):
    """``apply`` runs before ``call``; ``revert`` must undo exactly ``apply``.

    Any exception from ``call`` reverts and propagates.
    """

    name: str
    apply: Callable[[], None]
    call: Callable[[], T]
    revert: Callable[[], None]

    def run(self) -> T:
        self.apply()
        try:
            return self.call()
        except Exception as exc:
            log.warning("Rolling back %s: %s", self.name, getattr(exc, "message", exc))
            self.revert()
            raise
