"""
Schedule Snapshot Store

Keeps one ScheduleSnapshot per ISO date plus the active working copy for
the current date. Stored snapshots and the working copy never share
objects; `save` writes a deep copy back under the current date key.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from showtime.app.schemas.schedules import ScheduleSnapshot

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 14


class SnapshotStore:

    def __init__(
        self,
        snapshots: Optional[Dict[str, ScheduleSnapshot]] = None,
        current_date: Optional[date] = None,
        retention: int = DEFAULT_RETENTION,
    ):
        self.snapshots: Dict[str, ScheduleSnapshot] = dict(snapshots or {})
        self.current_date: date = current_date or date.today()
        self.retention = max(retention, DEFAULT_RETENTION)
        self._listeners: List[Callable[[date], None]] = []
        self.active: ScheduleSnapshot = self.get_or_create(self.current_date).model_copy(deep=True)

    # =========================================================================
    # Access
    # =========================================================================

    def get_or_create(self, day: date) -> ScheduleSnapshot:
        """Stored snapshot for `day`, creating an empty one on first access."""
        key = day.isoformat()
        if key not in self.snapshots:
            self.snapshots[key] = ScheduleSnapshot()
        return self.snapshots[key]

    def list_dates(self) -> List[str]:
        return sorted(self.snapshots.keys())

    def on_date_changed(self, listener: Callable[[date], None]):
        self._listeners.append(listener)

    # =========================================================================
    # Operations
    # =========================================================================

    def save(self):
        """Write the working copy under the current date, then apply retention."""
        self.snapshots[self.current_date.isoformat()] = self.active.model_copy(deep=True)
        self._prune()

    def switch_to(self, day: date):
        """Persist the active snapshot, then load `day` into the working set."""
        if day == self.current_date:
            return
        self.save()
        self.current_date = day
        self.active = self.get_or_create(day).model_copy(deep=True)
        logger.info("Switched schedule date to %s", day.isoformat())
        for listener in self._listeners:
            listener(day)

    def copy(self, from_day: Optional[date], to_days: Iterable[date]) -> List[date]:
        """
        Clone the schedule of `from_day` onto every date in `to_days`.

        Manual-show and override instants are shifted by the day offset so
        their time of day is kept on the target operating day. The copied
        undo history is always empty. Returns the dates actually written.
        """
        from_day = from_day or self.current_date
        self.save()
        source = self.get_or_create(from_day)

        written = []
        for target in to_days:
            if target == from_day:
                continue
            self.snapshots[target.isoformat()] = self._rebased(source, target - from_day)
            written.append(target)
            if target == self.current_date:
                self.active = self.snapshots[target.isoformat()].model_copy(deep=True)

        if written:
            logger.info(
                "Copied schedule %s to %s",
                from_day.isoformat(), ", ".join(d.isoformat() for d in written),
            )
        self._prune()
        return written

    def clear(self, day: date):
        """Reset one date to an empty snapshot."""
        self.snapshots[day.isoformat()] = ScheduleSnapshot()
        if day == self.current_date:
            self.active = ScheduleSnapshot()

    def clear_all(self):
        self.snapshots = {}
        self.active = ScheduleSnapshot()

    def migrate_legacy(self, legacy: Optional[ScheduleSnapshot]) -> bool:
        """Adopt a pre-multi-date schedule as the current date's when it has none."""
        if legacy is None or legacy.is_blank():
            return False
        if not self.get_or_create(self.current_date).is_blank():
            return False
        migrated = legacy.model_copy(deep=True)
        self.snapshots[self.current_date.isoformat()] = migrated
        self.active = migrated.model_copy(deep=True)
        logger.info("Migrated legacy schedule into %s", self.current_date.isoformat())
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _rebased(self, source: ScheduleSnapshot, offset: timedelta) -> ScheduleSnapshot:
        manual_shows = [
            ms.model_copy(update={"start": ms.start + offset, "end": ms.end + offset})
            for ms in source.manual_shows
        ]
        overrides = {
            show_id: ov.patch(start=ov.start + offset) if ov.start is not None else ov
            for show_id, ov in source.overrides.items()
        }
        return ScheduleSnapshot(
            rows=[row.model_copy() for row in source.rows],
            manual_shows=manual_shows,
            overrides=overrides,
            hidden=set(source.hidden),
            undo_stack=[],
        )

    def _prune(self):
        """Drop the oldest dates beyond the retention limit, never the active one."""
        excess = len(self.snapshots) - self.retention
        if excess <= 0:
            return
        current = self.current_date.isoformat()
        others = [key for key in sorted(self.snapshots.keys()) if key != current]
        for key in others[:excess]:
            del self.snapshots[key]
            logger.debug("Pruned schedule for %s", key)
