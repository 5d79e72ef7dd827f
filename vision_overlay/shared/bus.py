from __future__ import annotations

import threading
from collections import defaultdict
from typing import Callable, DefaultDict, Generic, Hashable, TypeVar

Event = TypeVar("Event")
Subscriber = Callable[[Event], None]


class EventBus(Generic[Event]):
    """Thread-safe publish/subscribe bus keyed by topic.

    Listeners run synchronously on the publishing thread, in subscription
    order. ``subscribe`` returns a callable that removes the listener again.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Hashable, list[Subscriber]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(self, topic: Hashable, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers[topic].append(callback)
        return lambda: self.unsubscribe(topic, callback)

    def unsubscribe(self, topic: Hashable, callback: Subscriber) -> None:
        with self._lock:
            listeners = self._subscribers.get(topic)
            if not listeners or callback not in listeners:
                return
            listeners.remove(callback)
            if not listeners:
                del self._subscribers[topic]

    def has_subscribers(self, topic: Hashable) -> bool:
        with self._lock:
            return bool(self._subscribers.get(topic))

    def publish(self, topic: Hashable, event: Event) -> int:
        """Deliver ``event`` to the listeners of ``topic`` and return how many ran."""

        with self._lock:
            listeners = tuple(self._subscribers.get(topic, ()))
        for listener in listeners:
            listener(event)
        return len(listeners)
