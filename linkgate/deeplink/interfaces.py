"""Typed ports the navigation race runs against."""

from collections.abc import Callable
from typing import Protocol


class TimerHandlePort(Protocol):
    """Handle for one scheduled callback."""

    def cancel(self) -> None:
        """Cancel the callback; cancelling a fired or cancelled timer is a no-op.

        Returns:
            None: Cancels as side effect.

        Raises:
            RuntimeError: Raised when the scheduler cannot cancel.
        """


class RaceSchedulerPort(Protocol):
    """Port for scheduling the race timer on the cooperative event loop."""

    def scheduler_call_later(self, delay_seconds: float, callback: Callable[[], object]) -> TimerHandlePort:
        """Schedule one callback after a delay.

        Args:
            delay_seconds: Delay in seconds.
            callback: Zero-argument callback.

        Returns:
            TimerHandlePort: Cancellable handle.

        Raises:
            RuntimeError: Raised when no event loop is available.
        """


class NavigatorPort(Protocol):
    """Port for changing the active location of the browsing context."""

    def navigator_assign(self, uri: str) -> None:
        """Navigate the browsing context to a URI.

        Args:
            uri: Target URI.

        Returns:
            None: Navigates as side effect.

        Raises:
            RuntimeError: Raised when navigation cannot be issued.
        """


class VisibilityPort(Protocol):
    """Port for observing page visibility changes."""

    def visibility_subscribe(self, callback: Callable[[bool], object]) -> Callable[[], None]:
        """Subscribe to visibility changes.

        Args:
            callback: Receives True when the page became hidden, False when visible.

        Returns:
            Callable[[], None]: Unsubscribe function; calling it twice is a no-op.

        Raises:
            RuntimeError: Raised when observation is unavailable.
        """
