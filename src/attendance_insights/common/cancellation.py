from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from ..core.exceptions import Cancelled


@dataclass
class CancellationToken:
    """Caller-owned abort signal for long loops.

    Trips when ``cancel()`` is called or when the monotonic ``deadline`` passes.
    Safe to share between worker threads.
    """

    deadline: Optional[float] = None
    _event: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + float(seconds))

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise Cancelled("Operation cancelled by caller")
