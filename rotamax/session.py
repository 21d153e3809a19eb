# rotamax/session.py
"""Per-client coordinator owning the live tracker state.

``TrackerSession`` holds the signed-in user, the latest settings and log
snapshots, the derived report and the last user-facing error. It listens to
the hub and rebuilds the report whenever the logs or the daily goal change.
"""

from __future__ import annotations

import threading
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from rotamax import crud, schemas
from rotamax.errors import TrackerError
from rotamax.events import SnapshotHub
from rotamax.logging_utils import get_logger
from rotamax.reports import build_report

LOGGER = get_logger(__name__)


class SessionState(str, Enum):
    AUTHENTICATING = "authenticating"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class TrackerSession:
    def __init__(
        self,
        hub: Optional[SnapshotHub] = None,
        today: Callable[[], date] = date.today,
        on_change: Optional[Callable[["TrackerSession"], None]] = None,
    ) -> None:
        self.hub = hub or crud.hub
        self.today = today
        self.on_change = on_change
        self.state = SessionState.AUTHENTICATING
        self.user_id: Optional[str] = None
        self.settings = schemas.UserSettings()
        self.logs: List[schemas.DailyLog] = []
        self.report = build_report([], 0.0, today())
        self.error: Optional[str] = None
        self._seen = set()
        self._unsubscribers: List[Callable[[], None]] = []
        self._lock = threading.RLock()

    def attach(self, user_id: str) -> None:
        """Start listening for ``user_id``; snapshots arrive synchronously first."""
        self.detach()
        with self._lock:
            self.user_id = user_id
            self.state = SessionState.LOADING
            self.error = None
            self._seen = set()
        self._unsubscribers = [
            self.hub.subscribe(user_id, crud.SETTINGS, self._on_settings, self._on_error),
            self.hub.subscribe(user_id, crud.LOGS, self._on_logs, self._on_error),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def fail_authentication(self, error: TrackerError) -> None:
        with self._lock:
            self.state = SessionState.ERROR
            self.error = error.message
        self._changed()

    def _on_settings(self, snapshot: schemas.UserSettings) -> None:
        with self._lock:
            goal_changed = snapshot.daily_goal != self.settings.daily_goal
            self.settings = snapshot
            self._mark_seen(crud.SETTINGS)
            if goal_changed:
                self._recompute()
        self._changed()

    def _on_logs(self, snapshot: List[schemas.DailyLog]) -> None:
        with self._lock:
            self.logs = list(snapshot)
            self._mark_seen(crud.LOGS)
            self._recompute()
        self._changed()

    def _on_error(self, error: TrackerError) -> None:
        # prior snapshots stay as they were
        with self._lock:
            self.error = error.message
        LOGGER.warning("Subscription error for %s: %s", self.user_id, error.message)
        self._changed()

    def _mark_seen(self, topic: str) -> None:
        self._seen.add(topic)
        if self.state is SessionState.LOADING and self._seen >= {crud.SETTINGS, crud.LOGS}:
            self.state = SessionState.READY

    def _recompute(self) -> None:
        self.report = build_report(self.logs, self.settings.daily_goal, self.today())

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "state": self.state.value,
                "user_id": self.user_id,
                "error": self.error,
                "settings": self.settings.model_dump(mode="json"),
                "logs": [log.model_dump(mode="json") for log in self.logs],
                "report": self.report.model_dump(mode="json"),
            }
