"""Cancellation of long-running operations on user interrupt."""

import signal
import threading
from collections.abc import Generator
from contextlib import contextmanager

from errors import OperationCancelled
from logging_config import get_logger

logger = get_logger(__name__)


class CancellationToken:
    """Flag shared between the main flow and the SIGINT handler."""

    def __init__(self):
        self._event = threading.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()
            logger.debug(f"Cancellation requested: {reason}")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout; return True if cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled(self.reason or "cancelled")


@contextmanager
def cancellable_context(signals: tuple[int, ...] = (signal.SIGINT,)) -> Generator[CancellationToken, None, None]:
    """Yield a token that is cancelled when one of signals arrives.

    The previous handlers are restored when the block exits, however it exits.
    Signal handlers can only be installed from the main thread; elsewhere the
    token is still usable but only cancels when told to.
    """
    token = CancellationToken()

    def on_signal(signum, frame):
        token.cancel(f"received {signal.Signals(signum).name}")

    previous = {}
    if threading.current_thread() is threading.main_thread():
        for signum in signals:
            previous[signum] = signal.signal(signum, on_signal)
    else:
        logger.debug("Not on the main thread, signal-driven cancellation disabled")

    try:
        yield token
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
        # Release: anything still holding the token sees it as finished.
        token.cancel("released")
