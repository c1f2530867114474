"""Session identifiers for command invocations."""

import threading


class SessionCounter:
    """Thread-safe, strictly increasing invocation counter.

    Identifiers are unique for the lifetime of the counter; nothing is
    persisted across process restarts.
    """

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """Issue the next session identifier."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def current(self) -> int:
        """The most recently issued identifier (the start value if none)."""
        with self._lock:
            return self._value
