"""
Acknowledged order store.

A JSON file mapping order id to the time the operator acknowledged it, so a
restarted dashboard does not re-alarm for orders already accepted. Entries
older than the retention window are evicted whenever the file is loaded or
saved.
"""

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from shared.config.logging import kitchen_display_logger as logger
from shared.utils.eta import ensure_aware

DEFAULT_RETENTION = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AckStore:
    """
    Durable set of acknowledged order ids with time-based eviction.

    Pass ``path=None`` for an in-memory store.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._path = Path(path).expanduser() if path is not None else None
        self._retention = retention
        self._clock = clock
        self._entries: dict[int, datetime] = {}
        self.load()

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def path(self) -> Path | None:
        return self._path

    def is_acknowledged(self, order_id: int) -> bool:
        return order_id in self._entries

    def acknowledge(self, order_id: int) -> None:
        """Record the acknowledgment and persist it immediately."""
        self._entries[order_id] = self._clock()
        self.save()

    def load(self) -> None:
        self._entries = {}
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            for key, value in raw.items():
                self._entries[int(key)] = ensure_aware(datetime.fromisoformat(value))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable acknowledgment store", path=str(self._path), error=str(e))
            self._entries = {}
            return
        if self.prune():
            self.save()

    def prune(self) -> int:
        """Drop entries past the retention window. Returns how many were removed."""
        cutoff = self._clock() - self._retention
        expired = [order_id for order_id, at in self._entries.items() if at < cutoff]
        for order_id in expired:
            del self._entries[order_id]
        if expired:
            logger.debug("Evicted expired acknowledgments", count=len(expired))
        return len(expired)

    def save(self) -> None:
        self.prune()
        if self._path is None:
            return
        data = {str(order_id): at.isoformat() for order_id, at in self._entries.items()}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.error("Failed to persist acknowledgments", path=str(self._path), error=str(e))
