"""
Alert state machine for unacknowledged orders.

    silent --(unacknowledged order present)--> alarming   (cue plays at once)
    alarming --(none left)--> silent

While alarming, ``tick`` replays the cue every ``interval_seconds``. Times are
monotonic seconds supplied by the caller.
"""

from enum import Enum
from typing import Callable

from shared.config.logging import kitchen_display_logger as logger

DEFAULT_ALARM_INTERVAL = 2.2


class AlertState(str, Enum):
    SILENT = "silent"
    ALARMING = "alarming"


class AlertStateMachine:
    def __init__(self, cue: Callable[[], None], interval_seconds: float = DEFAULT_ALARM_INTERVAL):
        self._cue = cue
        self._interval = interval_seconds
        self._state = AlertState.SILENT
        self._last_played: float | None = None

    @property
    def state(self) -> AlertState:
        return self._state

    @property
    def is_alarming(self) -> bool:
        return self._state is AlertState.ALARMING

    def evaluate(self, has_unacknowledged: bool, now: float) -> AlertState:
        """Move between states from the current reconciled view."""
        if has_unacknowledged and self._state is AlertState.SILENT:
            self._state = AlertState.ALARMING
            logger.info("New order alert started")
            self._play(now)
        elif not has_unacknowledged and self._state is AlertState.ALARMING:
            self._state = AlertState.SILENT
            self._last_played = None
            logger.info("New order alert silenced")
        return self._state

    def tick(self, now: float) -> bool:
        """Replay the cue if alarming and the interval has elapsed. Returns True if played."""
        if self._state is not AlertState.ALARMING:
            return False
        if self._last_played is not None and now - self._last_played < self._interval:
            return False
        self._play(now)
        return True

    def _play(self, now: float) -> None:
        self._last_played = now
        try:
            self._cue()
        except Exception as e:
            logger.warning("Alert cue failed", error=str(e))
