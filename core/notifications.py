# core/notifications.py
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

INFO = "info"
SUCCESS = "success"
ERROR = "error"
LOADING = "loading"


@dataclass
class Notification:
    key: str
    message: str
    level: str = INFO
    duration: Optional[float] = 3.0
    created_at: float = field(default_factory=time.time)


class Subscription:
    """Handle returned by every subscribe-style call; dispose() detaches once."""

    def __init__(self, detach: Callable[[], None]):
        self._detach = detach
        self._lock = threading.Lock()
        self.active = True

    def dispose(self):
        with self._lock:
            if not self.active:
                return
            self.active = False
        self._detach()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.dispose()
        return False


class Notifier:
    """
    Transient user notifications keyed by a stable identifier.

    Notifying again with a key that is still showing replaces the earlier
    notification instead of stacking a second one.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._active: Dict[str, Notification] = {}
        self._sinks: List[Callable[[Notification], None]] = []

    def attach(self, sink: Callable[[Notification], None]) -> Subscription:
        with self._lock:
            self._sinks.append(sink)

        def detach():
            with self._lock:
                if sink in self._sinks:
                    self._sinks.remove(sink)

        return Subscription(detach)

    def notify(self, key: str, message: str, level: str = INFO, duration: Optional[float] = 3.0) -> Notification:
        note = Notification(key=key, message=message, level=level, duration=duration, created_at=self._clock())
        with self._lock:
            self._active[key] = note
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink(note)
            except Exception:
                logger.exception("Notification sink failed for %s", key)
        return note

    def info(self, key, message, duration=3.0):
        return self.notify(key, message, INFO, duration)

    def success(self, key, message, duration=2.0):
        return self.notify(key, message, SUCCESS, duration)

    def error(self, key, message, duration=3.0):
        return self.notify(key, message, ERROR, duration)

    def loading(self, key, message):
        return self.notify(key, message, LOADING, None)

    def dismiss(self, key: str):
        with self._lock:
            self._active.pop(key, None)

    def active(self) -> List[Notification]:
        """Notifications still on screen; expired ones are dropped."""
        now = self._clock()
        with self._lock:
            for key, note in list(self._active.items()):
                if note.duration is not None and now - note.created_at >= note.duration:
                    del self._active[key]
            return list(self._active.values())
