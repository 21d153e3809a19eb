# rotamax/events.py
"""Push-style subscriptions over the stores.

A subscriber registers handlers for one ``(user_id, topic)`` pair and gets a
full snapshot right away and again after every committed write. Snapshots
come from loaders registered per topic, so every delivery reflects what is
actually stored. Unsubscribing is done through the callable returned by
``subscribe``.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from rotamax.errors import ReadFailed, TrackerError
from rotamax.logging_utils import get_logger

LOGGER = get_logger(__name__)

SnapshotHandler = Callable[[Any], None]
ErrorHandler = Callable[[TrackerError], None]
Loader = Callable[[str], Any]


@dataclass(frozen=True)
class Subscription:
    sub_id: int
    user_id: str
    topic: str
    on_snapshot: SnapshotHandler
    on_error: Optional[ErrorHandler] = None


class SnapshotHub:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._loaders: Dict[str, Loader] = {}
        self._subs: Dict[Tuple[str, str], Dict[int, Subscription]] = {}
        self._ids = itertools.count(1)

    def register_loader(self, topic: str, loader: Loader) -> None:
        with self._lock:
            self._loaders[topic] = loader

    def subscribe(
        self,
        user_id: str,
        topic: str,
        on_snapshot: SnapshotHandler,
        on_error: Optional[ErrorHandler] = None,
    ) -> Callable[[], None]:
        if topic not in self._loaders:
            raise KeyError(f"No loader registered for topic {topic!r}")
        sub = Subscription(next(self._ids), user_id, topic, on_snapshot, on_error)
        with self._lock:
            self._subs.setdefault((user_id, topic), {})[sub.sub_id] = sub
        LOGGER.debug("Subscription %s opened on %s for %s", sub.sub_id, topic, user_id)
        self._deliver(user_id, topic, [sub])

        def unsubscribe() -> None:
            with self._lock:
                bucket = self._subs.get((user_id, topic))
                if bucket is not None:
                    bucket.pop(sub.sub_id, None)
                    if not bucket:
                        del self._subs[(user_id, topic)]
            LOGGER.debug("Subscription %s closed", sub.sub_id)

        return unsubscribe

    def subscriber_count(self, user_id: str, topic: str) -> int:
        with self._lock:
            return len(self._subs.get((user_id, topic), {}))

    def notify(self, user_id: str, topic: str) -> None:
        """Reload the topic snapshot and push it to every subscriber."""
        with self._lock:
            subs = list(self._subs.get((user_id, topic), {}).values())
        if subs:
            self._deliver(user_id, topic, subs)

    def _deliver(self, user_id: str, topic: str, subs) -> None:
        try:
            snapshot = self._loaders[topic](user_id)
        except TrackerError as exc:
            error = exc
        except Exception as exc:  # loader bug or driver error not mapped by the store
            LOGGER.exception("Loading %s snapshot for %s failed", topic, user_id)
            error = ReadFailed()
            error.__cause__ = exc
        else:
            for sub in subs:
                self._call(sub, sub.on_snapshot, snapshot)
            return

        for sub in subs:
            if sub.on_error is not None:
                self._call(sub, sub.on_error, error)
            else:
                LOGGER.warning("Unhandled %s on %s subscription: %s", type(error).__name__, topic, error.message)

    @staticmethod
    def _call(sub: Subscription, handler: Callable, payload: Any) -> None:
        # one faulty subscriber must not starve the others
        try:
            handler(payload)
        except Exception:
            LOGGER.exception("Subscriber %s on %s raised", sub.sub_id, sub.topic)
