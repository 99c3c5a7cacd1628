"""Shipped implementations of the navigation race ports."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from .interfaces import TimerHandlePort


class AsyncioRaceScheduler:
    """Schedule race timers with `loop.call_later` on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def scheduler_call_later(self, delay_seconds: float, callback: Callable[[], object]) -> TimerHandlePort:
        """Schedule one callback after a delay.

        Args:
            delay_seconds: Delay in seconds.
            callback: Zero-argument callback.

        Returns:
            TimerHandlePort: `asyncio.TimerHandle` for the callback.

        Raises:
            RuntimeError: Raised when no loop was given and none is running.
        """

        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)


class RecordingNavigator:
    """Navigator that records assigned URIs instead of changing a real location."""

    def __init__(self) -> None:
        self.assigned_uris: list[str] = []

    def navigator_assign(self, uri: str) -> None:
        self.assigned_uris.append(uri)

    @property
    def current_uri(self) -> str | None:
        return self.assigned_uris[-1] if self.assigned_uris else None


class ManualVisibilitySource:
    """Visibility source driven explicitly, e.g. by a client bridge or tests."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[bool], object]] = []
        self.hidden = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def visibility_subscribe(self, callback: Callable[[bool], object]) -> Callable[[], None]:
        """Subscribe to visibility changes.

        Args:
            callback: Receives True when the page became hidden.

        Returns:
            Callable[[], None]: Idempotent unsubscribe function.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def visibility_emit(self, hidden: bool) -> None:
        """Record a visibility change and notify current subscribers.

        Args:
            hidden: True when the page became hidden.

        Returns:
            None: Notifies as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self.hidden = hidden
        for callback in list(self._subscribers):
            callback(hidden)
