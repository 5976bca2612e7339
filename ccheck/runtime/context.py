"""
Cancellation context for ccheck runs.

A CheckContext is handed to ConfChecker.run(). The dispatcher calls
raise_if_cancelled() immediately before every policy evaluation, so a
cancel() from another thread stops the run at the next query.
"""

import threading
import time
from typing import Optional

from ccheck.core.exceptions import CheckCancelled


class CheckContext:
    """Caller-owned cancellation signal, optionally with a deadline."""

    def __init__(self, deadline: Optional[float] = None):
        self._event = threading.Event()
        self._reason: Optional[str] = None
        self.deadline = deadline

    @classmethod
    def background(cls) -> "CheckContext":
        """A context that is never cancelled unless cancel() is called."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CheckContext":
        """A context that cancels itself once `seconds` have elapsed."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "run cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CheckCancelled(self._reason or "run cancelled")

    def __repr__(self) -> str:
        return f"CheckContext(cancelled={self.cancelled!r})"
