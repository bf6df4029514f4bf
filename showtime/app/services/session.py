"""
Schedule Session

Explicit context object holding the catalog, the per-date snapshots (with
the active working snapshot) and the operating window. Every engine call
goes through a session; nothing reads ambient global state.

A session is single-writer: callers that share one store across requests
must serialize access themselves.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel, ValidationError

from showtime.app.core.config import Settings, settings as default_settings
from showtime.app.schemas.audit import AuditReport, OrderLine
from showtime.app.schemas.catalog import Auditorium, Booking, Film, Row
from showtime.app.schemas.schedules import (
    Issue, OperatingWindow, ScheduleSnapshot, Show, StaticRow, UndoEntry,
)
from showtime.app.services import timeutil
from showtime.app.services.audit import AuditService
from showtime.app.services.catalog import Catalog
from showtime.app.services.downtime import DowntimeAnalyzer
from showtime.app.services.editor import ScheduleEditor
from showtime.app.services.generator import CycleGenerator
from showtime.app.services.resolver import ShowResolver
from showtime.app.services.snapshots import SnapshotStore
from showtime.app.services.state_store import StateStore
from showtime.app.services.undo import UndoEngine

logger = logging.getLogger(__name__)

# Persisted state keys
KEY_AUDITORIUMS = "auditoriums"
KEY_FILMS = "films"
KEY_BOOKINGS = "bookings"
KEY_SCHEDULES = "schedulesByDate"
KEY_CURRENT_DATE = "currentDate"
KEY_WINDOW = "operatingWindow"
KEY_LEGACY_SCHEDULE = "schedule"

ROW_FIELDS = ("audId", "filmId", "primeHM")


class ScheduleSession:

    def __init__(
        self,
        store: StateStore,
        catalog: Catalog,
        snapshots: SnapshotStore,
        window: OperatingWindow,
    ):
        self.store = store
        self.catalog = catalog
        self.snapshots = snapshots
        self.window = window
        self.snapshots.on_date_changed(self._on_date_changed)

    @classmethod
    def open(cls, store: StateStore, settings: Settings = None, today: date = None) -> "ScheduleSession":
        """Load persisted state, seeding the default catalog where a key is missing."""
        settings = settings or default_settings
        seeded = False

        auditoriums = cls._load_list(store, KEY_AUDITORIUMS, Auditorium)
        films = cls._load_list(store, KEY_FILMS, Film)
        bookings = cls._load_list(store, KEY_BOOKINGS, Booking)
        defaults = Catalog.with_defaults()
        if auditoriums is None:
            auditoriums, seeded = defaults.auditoriums, True
        if films is None:
            films, seeded = defaults.films, True
        if bookings is None:
            bookings, seeded = defaults.bookings, True
        catalog = Catalog(auditoriums=auditoriums, films=films, bookings=bookings)

        snapshots = {}
        for key, raw in (store.load(KEY_SCHEDULES) or {}).items():
            try:
                snapshots[key] = ScheduleSnapshot.model_validate(raw)
            except ValidationError as e:
                logger.warning("Dropping unreadable schedule for %s: %s", key, e)

        current = timeutil.parse_iso_date(store.load(KEY_CURRENT_DATE)) or today or date.today()

        window = OperatingWindow(first_hm=settings.FIRST_SHOW_HM, last_hm=settings.LAST_SHOW_HM)
        raw_window = store.load(KEY_WINDOW)
        if raw_window:
            try:
                window = OperatingWindow.model_validate(raw_window)
            except ValidationError as e:
                logger.warning("Ignoring unreadable operating window: %s", e)

        session = cls(
            store=store,
            catalog=catalog,
            snapshots=SnapshotStore(snapshots, current, settings.SCHEDULE_RETENTION_DAYS),
            window=window,
        )

        raw_legacy = store.load(KEY_LEGACY_SCHEDULE)
        if raw_legacy:
            try:
                seeded = session.snapshots.migrate_legacy(ScheduleSnapshot.model_validate(raw_legacy)) or seeded
            except ValidationError as e:
                logger.warning("Ignoring unreadable legacy schedule: %s", e)

        session.ensure_prime_rows(persist=False)
        if seeded:
            session.save()
        return session

    # =========================================================================
    # Engine wiring
    # =========================================================================

    @property
    def current_date(self) -> date:
        return self.snapshots.current_date

    @property
    def snapshot(self) -> ScheduleSnapshot:
        return self.snapshots.active

    def editor(self) -> ScheduleEditor:
        generator = CycleGenerator(self.catalog, self.window, self.current_date)
        resolver = ShowResolver(self.catalog, generator)
        return ScheduleEditor(self.snapshot, self.catalog, resolver, self.current_date)

    def save(self) -> bool:
        """Store the working snapshot and write every state key."""
        self.snapshots.save()
        results = [
            self.store.save(KEY_AUDITORIUMS, [a.model_dump(mode="json") for a in self.catalog.auditoriums]),
            self.store.save(KEY_FILMS, [f.model_dump(mode="json", exclude={"cycle_minutes"}) for f in self.catalog.films]),
            self.store.save(KEY_BOOKINGS, [b.model_dump(mode="json") for b in self.catalog.bookings]),
            self.store.save(KEY_SCHEDULES, {
                key: snap.model_dump(mode="json") for key, snap in self.snapshots.snapshots.items()
            }),
            self.store.save(KEY_CURRENT_DATE, self.current_date.isoformat()),
            self.store.save(KEY_WINDOW, self.window.model_dump(mode="json")),
        ]
        return all(results)

    # =========================================================================
    # Shows
    # =========================================================================

    def resolve(self) -> List[Show]:
        return self.editor().shows()

    def set_start(self, show_id: str, hm: str) -> Optional[Show]:
        return self._mutate(lambda e: e.set_start(show_id, hm))

    def set_auditorium(self, show_id: str, aud_id: Optional[int]) -> Optional[Show]:
        return self._mutate(lambda e: e.set_auditorium(show_id, aud_id))

    def set_film(self, show_id: str, film_id: Optional[str]) -> Optional[Show]:
        return self._mutate(lambda e: e.set_film(show_id, film_id))

    def add_manual_show(self, row_id: str, hm: str) -> Optional[Show]:
        return self._mutate(lambda e: e.add_manual_show(row_id, hm))

    def undo(self) -> Optional[UndoEntry]:
        entry = UndoEngine(self.editor()).undo()
        if entry is not None:
            self.save()
        return entry

    def options_for(self, show_id: str) -> List[str]:
        """Start-time choices around a show, clipped to the operating window."""
        show = self.editor().find(show_id)
        if show is None:
            return []
        bounds = timeutil.window_bounds(self.window.first_hm, self.window.last_hm, self.current_date)
        if bounds is None:
            return []
        return timeutil.options_around(show.start, *bounds)

    def set_operating_window(self, first_hm: str, last_hm: str) -> bool:
        first, last = timeutil.parse_hm(first_hm), timeutil.parse_hm(last_hm)
        if first is None or last is None:
            return False
        self.window = OperatingWindow(first_hm=first.strftime("%H:%M"), last_hm=last.strftime("%H:%M"))
        self.save()
        return True

    # =========================================================================
    # Dates
    # =========================================================================

    def list_dates(self) -> List[str]:
        return self.snapshots.list_dates()

    def switch_to(self, day: date):
        self.snapshots.switch_to(day)
        self.save()

    def copy(self, from_day: Optional[date], to_days: Iterable[date]) -> List[date]:
        written = self.snapshots.copy(from_day, to_days)
        self.save()
        return written

    def clear(self, day: date):
        self.snapshots.clear(day)
        if day == self.current_date:
            self.ensure_prime_rows(persist=False)
        self.save()

    def clear_all(self):
        self.snapshots.clear_all()
        self.ensure_prime_rows(persist=False)
        self.save()

    # =========================================================================
    # Reports
    # =========================================================================

    def analyze(self) -> List[Issue]:
        window_start = timeutil.instant_from_hm(self.window.first_hm, self.current_date)
        if window_start is None:
            return []
        return DowntimeAnalyzer(self.current_date).analyze(self.resolve(), window_start)

    def audit(self) -> AuditReport:
        return AuditService(self.catalog, self.current_date).report(self.resolve())

    def start_time_order(self) -> List[OrderLine]:
        return AuditService(self.catalog, self.current_date).start_time_order(self.resolve())

    # =========================================================================
    # Rows
    # =========================================================================

    def ensure_prime_rows(self, persist: bool = True):
        """
        Mirror the bookings as prime rows on the active snapshot.

        Only bookings whose film exists and has a title get a row. Existing
        rows keep their auditorium and prime time; extra rows are untouched.
        """
        existing = {r.booking_id: r for r in self.snapshot.rows if not r.is_extra}
        prime_rows = []
        for booking in self.catalog.bookings:
            film = self.catalog.film_by_id(booking.film_id)
            if not film or not film.title:
                continue
            current = existing.get(booking.id)
            prime_rows.append(Row(
                row_id=current.row_id if current else f"PRB-{booking.id}",
                booking_id=booking.id,
                slot=booking.slot,
                film_id=booking.film_id,
                aud_id=current.aud_id if current else None,
                prime_hm=current.prime_hm if current else "",
            ))
        extra_rows = [r for r in self.snapshot.rows if r.is_extra]
        self.snapshot.rows = prime_rows + extra_rows
        if persist:
            self.save()

    def add_extra_row(self) -> Row:
        row = Row(row_id=f"EX-{uuid.uuid4().hex[:12]}", slot=str(len(self.snapshot.rows) + 1))
        self.snapshot.rows.append(row)
        self.save()
        return row

    def set_row_field(self, row_id: str, field: str, value: Any) -> Optional[Row]:
        """
        Update one field of a row (audId, filmId or primeHM).

        Auditorium and film changes carry over to the row's manual shows.
        A prime row's film follows its booking and cannot be set here.
        """
        idx = next((i for i, r in enumerate(self.snapshot.rows) if r.row_id == row_id), None)
        if idx is None or field not in ROW_FIELDS:
            return None
        row = self.snapshot.rows[idx]
        editor = self.editor()
        manual_ids = [
            ms.id for ms in self.snapshot.manual_shows
            if isinstance(ms.row_ref, StaticRow) and ms.row_ref.row_id == row_id
        ]

        if field == "audId":
            try:
                aud_id = int(value) if value not in (None, "") else None
            except (TypeError, ValueError):
                return None
            if aud_id is not None and self.catalog.auditorium_by_id(aud_id) is None:
                return None
            row = row.model_copy(update={"aud_id": aud_id})
            for show_id in manual_ids:
                editor.move_manual(editor.manual_index(show_id), aud_id)

        elif field == "filmId":
            if not row.is_extra:
                return None
            film = self.catalog.film_by_id(value) if value else None
            if value and film is None:
                return None
            row = row.model_copy(update={"film_id": film.id if film else None})
            for show_id in manual_ids:
                editor.retarget_manual_film(editor.manual_index(show_id), film)

        else:
            hm = ""
            if value:
                t = timeutil.parse_hm(str(value))
                if t is None:
                    return None
                hm = t.strftime("%H:%M")
            row = row.model_copy(update={"prime_hm": hm})

        self.snapshot.rows[idx] = row
        self.save()
        return row

    def clear_all_times(self):
        """Blank every prime time and drop the active date's edits and history."""
        snap = self.snapshot
        snap.rows = [r.model_copy(update={"prime_hm": ""}) for r in snap.rows]
        snap.overrides = {}
        snap.manual_shows = []
        snap.hidden = set()
        snap.undo_stack = []
        self.save()

    # =========================================================================
    # Catalog
    # =========================================================================

    def add_auditorium(self, **fields) -> Auditorium:
        aud = self.catalog.add_auditorium(**fields)
        self.save()
        return aud

    def update_auditorium(self, aud_id: int, changes: Dict) -> Optional[Auditorium]:
        aud = self.catalog.update_auditorium(aud_id, changes)
        if aud is not None:
            self.save()
        return aud

    def delete_auditorium(self, aud_id: int) -> Optional[Auditorium]:
        """Remove an auditorium and unassign it from rows and overrides on every date."""
        aud = self.catalog.remove_auditorium(aud_id)
        if aud is None:
            return None
        for snap in self._all_snapshots():
            snap.rows = [r.model_copy(update={"aud_id": None}) if r.aud_id == aud_id else r for r in snap.rows]
            for show_id, ov in list(snap.overrides.items()):
                if ov.aud_id != aud_id:
                    continue
                updated = ov.patch(aud_id=None)
                if updated.is_empty():
                    del snap.overrides[show_id]
                else:
                    snap.overrides[show_id] = updated
        logger.info("Deleted auditorium %s", aud_id)
        self.save()
        return aud

    def add_film(self, title: str, **fields) -> Film:
        film = self.catalog.add_film(title, **fields)
        self.save()
        return film

    def update_film(self, film_id: str, changes: Dict) -> Optional[Film]:
        film = self.catalog.update_film(film_id, changes)
        if film is not None:
            self.ensure_prime_rows()
        return film

    def delete_film(self, film_id: str) -> Optional[Film]:
        film = self.catalog.remove_film(film_id)
        if film is not None:
            self.ensure_prime_rows()
        return film

    def add_booking(self, **fields) -> Booking:
        booking = self.catalog.add_booking(**fields)
        self.ensure_prime_rows()
        return booking

    def update_booking(self, booking_id: str, changes: Dict) -> Optional[Booking]:
        booking = self.catalog.update_booking(booking_id, changes)
        if booking is not None:
            self.ensure_prime_rows()
        return booking

    def delete_booking(self, booking_id: str) -> Optional[Booking]:
        """
        Remove a booking with its prime rows on every date, together with
        their manual shows and overrides. The film goes too when nothing
        else uses it.
        """
        booking = self.catalog.remove_booking(booking_id)
        if booking is None:
            return None

        for snap in self._all_snapshots():
            row_ids = set(r.row_id for r in snap.rows if r.booking_id == booking_id)
            if not row_ids:
                continue
            removed = set(ms.id for ms in snap.manual_shows if ms.row_ref.key in row_ids)
            snap.rows = [r for r in snap.rows if r.row_id not in row_ids]
            snap.manual_shows = [ms for ms in snap.manual_shows if ms.id not in removed]
            snap.overrides = {
                show_id: ov for show_id, ov in snap.overrides.items()
                if show_id.split(":")[0] not in row_ids and show_id not in removed
            }
            snap.hidden = set(
                h for h in snap.hidden if h.split(":")[0] not in row_ids and h not in removed
            )

        if booking.film_id and not self._film_in_use(booking.film_id):
            self.catalog.remove_film(booking.film_id)
            logger.info("Removed film %s with its last booking", booking.film_id)

        logger.info("Deleted booking %s", booking_id)
        self.save()
        return booking

    def clear_bookings_and_times(self):
        """Drop every booking and every date's schedule; auditoriums and films stay."""
        self.catalog.bookings = []
        self.snapshots.clear_all()
        self.save()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _mutate(self, action):
        undo_depth = len(self.snapshot.undo_stack)
        show = action(self.editor())
        if len(self.snapshot.undo_stack) != undo_depth:
            self.save()
        return show

    def _all_snapshots(self) -> List[ScheduleSnapshot]:
        return [self.snapshot] + list(self.snapshots.snapshots.values())

    def _film_in_use(self, film_id: str) -> bool:
        if any(b.film_id == film_id for b in self.catalog.bookings):
            return True
        for snap in self._all_snapshots():
            if any(r.is_extra and r.film_id == film_id for r in snap.rows):
                return True
            if any(ms.film_id == film_id for ms in snap.manual_shows):
                return True
        return False

    def _on_date_changed(self, day: date):
        self.ensure_prime_rows(persist=False)

    @staticmethod
    def _load_list(store: StateStore, key: str, model: Type[BaseModel]) -> Optional[List[Any]]:
        raw = store.load(key)
        if raw is None:
            return None
        items = []
        for item in raw:
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping unreadable %s entry: %s", key, e)
        return items
