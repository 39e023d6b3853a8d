"""Cooperative cancellation for engine runs."""

from __future__ import annotations

import threading


class CancellationToken:
    """Poll-only cancellation flag.

    Any thread may call ``cancel``; the engine only reads ``is_cancelled``
    between steps and never waits on the token.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
