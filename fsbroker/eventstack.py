"""A thread-safe LIFO stack of pending filesystem events."""

from __future__ import annotations

import threading

from .events import FSEvent


class EventStack:
    """Collects events between processing ticks; popped newest first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stack: list[FSEvent] = []

    def push(self, event: FSEvent) -> None:
        with self._lock:
            self._stack.append(event)

    def pop(self) -> FSEvent | None:
        """Remove and return the newest event, or None when empty."""
        with self._lock:
            return self._stack.pop() if self._stack else None

    def list(self) -> list[FSEvent]:
        """Return a copy of the events, oldest first."""
        with self._lock:
            return self._stack.copy()

    def by_signature(self) -> dict[str, FSEvent]:
        """Return the events keyed by signature; later events win."""
        with self._lock:
            return {event.signature(): event for event in self._stack}

    def delete(self, event: FSEvent) -> bool:
        """Remove this exact event object; return whether it was present."""
        with self._lock:
            for index, candidate in enumerate(self._stack):
                if candidate is event:
                    del self._stack[index]
                    return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._stack.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._stack)