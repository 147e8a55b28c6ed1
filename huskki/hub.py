"""A fan-out hub that pushes sensor events to any number of subscribers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

Event = dict[str, Any]


class Subscription:
    """One subscriber's bounded queue of events, fed by an :class:`EventHub`."""

    def __init__(self, hub: EventHub, ident: int, capacity: int) -> None:
        self.id = ident
        self._hub = hub
        self._capacity = capacity
        self._items: deque[Event] = deque()
        self._cond = threading.Condition()
        self.closed = False

    def _offer(self, event: Event) -> None:
        with self._cond:
            if not self.closed and len(self._items) < self._capacity:
                self._items.append(event)
                self._cond.notify()

    def _close(self) -> None:
        with self._cond:
            self.closed = True
            self._cond.notify_all()

    def get(self, timeout: float | None = None) -> Event | None:
        """Return the next event, or None once cancelled and drained.

        Raises TimeoutError if nothing arrives within ``timeout`` seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._items or self.closed, timeout):
                raise TimeoutError("no event received in time")
            return self._items.popleft() if self._items else None

    def cancel(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        self._hub._unsubscribe(self.id)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *args: object) -> None:
        self.cancel()


class EventHub:
    """Broadcasts events to subscribers and remembers the latest value of each key."""

    def __init__(self, capacity: int = 16) -> None:
        self._lock = threading.Lock()
        self._subs: dict[int, Subscription] = {}
        self._next = 0
        self._last: Event = {}
        self._capacity = capacity

    @property
    def last(self) -> Event:
        """A copy of the merged state of every event broadcast so far."""
        with self._lock:
            return dict(self._last)

    def subscribe(self) -> Subscription:
        """Register a new subscriber, primed with the latest known state."""
        with self._lock:
            sub = Subscription(self, self._next, self._capacity)
            self._next += 1
            if self._last:
                sub._offer(dict(self._last))
            self._subs[sub.id] = sub
            return sub

    def broadcast(self, signal: Event) -> None:
        """Send a copy of ``signal`` to every subscriber whose queue has room."""
        with self._lock:
            self._last.update(signal)
            for sub in self._subs.values():
                sub._offer(dict(signal))

    def _unsubscribe(self, ident: int) -> None:
        with self._lock:
            sub = self._subs.pop(ident, None)
        if sub is not None:
            sub._close()