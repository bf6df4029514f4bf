"""
Override & Manual Layer: mutations

Every entry point records exactly one undo entry when it changes something
and is a silent no-op otherwise (unknown show, malformed time, value equal
to the current one). The UI is responsible for only offering valid actions.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from showtime.app.schemas.catalog import Film
from showtime.app.schemas.schedules import (
    EditEntry, EditFilmEntry, HideEntry, ManualInsertEntry, MoveAuditoriumEntry,
    Override, ScheduleSnapshot, Show, ShowSource, StaticRow,
)
from showtime.app.services import timeutil
from showtime.app.services.catalog import Catalog
from showtime.app.services.resolver import ShowResolver

logger = logging.getLogger(__name__)


class ScheduleEditor:
    """
    Mutates one date's schedule snapshot.

    Generated shows are adjusted through overrides; manual shows are edited
    in place when their auditorium or film changes. Each public method
    returns the new effective Show, or None when nothing changed (or the
    show was hidden).
    """

    def __init__(self, snapshot: ScheduleSnapshot, catalog: Catalog, resolver: ShowResolver, day: date):
        self.snapshot = snapshot
        self.catalog = catalog
        self.resolver = resolver
        self.day = day

    def shows(self) -> List[Show]:
        s = self.snapshot
        return self.resolver.resolve(s.rows, s.manual_shows, s.overrides, s.hidden)

    def find(self, show_id: str) -> Optional[Show]:
        return next((s for s in self.shows() if s.id == show_id), None)

    def base_show(self, show_id: str) -> Optional[Show]:
        return self.resolver.base_show(show_id, self.snapshot.rows, self.snapshot.manual_shows)

    # =========================================================================
    # Entry points
    # =========================================================================

    def set_start(self, show_id: str, hm: str) -> Optional[Show]:
        """Move a show to `hm`; an empty string hides it instead."""
        rec = self.find(show_id)
        if rec is None:
            return None

        if hm == "":
            self._push(HideEntry(show_id=show_id, previous_hidden=show_id in self.snapshot.hidden))
            self.snapshot.hidden.add(show_id)
            return None

        new_start = timeutil.instant_from_hm(hm, self.day)
        if new_start is None or new_start == rec.start:
            return None

        current = self.snapshot.overrides.get(show_id)
        previous = current.start if current and current.start else rec.start
        self._push(EditEntry(show_id=show_id, previous_start=previous))
        self.write_override(show_id, start=new_start)
        return self.find(show_id)

    def set_auditorium(self, show_id: str, aud_id: Optional[int]) -> Optional[Show]:
        """Reassign a show's auditorium; None clears an auditorium override."""
        rec = self.find(show_id)
        if rec is None:
            return None
        if aud_id is not None and self.catalog.auditorium_by_id(aud_id) is None:
            return None

        current = self.snapshot.overrides.get(show_id)
        previous = current.aud_id if current and current.aud_id is not None else rec.aud_id

        idx = self.manual_index(show_id)
        if idx is not None:
            target = previous if aud_id is None else aud_id
            if target == previous:
                return None
            self._push(MoveAuditoriumEntry(show_id=show_id, previous_aud_id=previous))
            self.move_manual(idx, target)
            return self.find(show_id)

        if aud_id is None:
            if current is None or current.aud_id is None:
                return None
            self._push(MoveAuditoriumEntry(show_id=show_id, previous_aud_id=previous))
            self.clear_override_field(show_id, "aud_id")
            return self.find(show_id)

        if aud_id == previous:
            return None
        self._push(MoveAuditoriumEntry(show_id=show_id, previous_aud_id=previous))
        self.write_override(show_id, aud_id=aud_id)
        return self.find(show_id)

    def set_film(self, show_id: str, film_id: Optional[str]) -> Optional[Show]:
        """Reassign a show's film; None clears a film override."""
        rec = self.find(show_id)
        if rec is None:
            return None

        current = self.snapshot.overrides.get(show_id)
        previous = current.film_id if current and current.film_id else rec.film_id
        if film_id == previous:
            return None

        film = self.catalog.film_by_id(film_id)
        if film_id is not None and film is None:
            return None

        idx = self.manual_index(show_id)
        if idx is not None:
            # A manual record has no base film to fall back to
            if film is None:
                return None
            self._push(EditFilmEntry(show_id=show_id, previous_film_id=previous))
            self.retarget_manual_film(idx, film)
            return self.find(show_id)

        if film_id is None:
            if current is None or current.film_id is None:
                return None
            self._push(EditFilmEntry(show_id=show_id, previous_film_id=previous))
            self.clear_override_field(show_id, "film_id")
            return self.find(show_id)

        self._push(EditFilmEntry(show_id=show_id, previous_film_id=previous))
        self.write_override(show_id, film_id=film_id)
        return self.find(show_id)

    def add_manual_show(self, row_id: str, hm: str) -> Optional[Show]:
        """Insert a single show at `hm` using the row's film and auditorium."""
        row = next((r for r in self.snapshot.rows if r.row_id == row_id), None)
        if row is None:
            return None
        film = self.catalog.film_by_id(row.film_id)
        aud = self.catalog.auditorium_by_id(row.aud_id)
        start = timeutil.instant_from_hm(hm, self.day)
        if not film or not aud or start is None:
            return None

        show = Show(
            id=f"M-{uuid.uuid4().hex[:12]}",
            row_ref=StaticRow(row_id=row_id),
            aud_id=aud.id,
            aud_name=aud.name,
            film_id=film.id,
            film_title=film.display_title,
            start=start,
            end=timeutil.add_minutes(start, film.show_length_min),
            runtime_min=film.runtime_min,
            trailer_min=film.trailer_min,
            clean_min=film.clean_min,
            cycle_minutes=film.cycle_minutes,
            source=ShowSource.MANUAL,
        )
        self.snapshot.manual_shows.append(show)
        self._push(ManualInsertEntry(show=show))
        logger.debug("Manual show %s added to row %s at %s", show.id, row_id, hm)
        return show

    # =========================================================================
    # Shared helpers (also used by undo and row propagation)
    # =========================================================================

    def write_override(self, show_id: str, **changes):
        current = self.snapshot.overrides.get(show_id)
        if current is None:
            current = Override()
        self.snapshot.overrides[show_id] = current.patch(**changes)

    def clear_override_field(self, show_id: str, field: str):
        current = self.snapshot.overrides.get(show_id)
        if current is None:
            return
        updated = current.patch(**{field: None})
        if updated.is_empty():
            del self.snapshot.overrides[show_id]
        else:
            self.snapshot.overrides[show_id] = updated

    def manual_index(self, show_id: str) -> Optional[int]:
        for idx, ms in enumerate(self.snapshot.manual_shows):
            if ms.id == show_id:
                return idx
        return None

    def move_manual(self, idx: int, aud_id: Optional[int]):
        aud = self.catalog.auditorium_by_id(aud_id)
        ms = self.snapshot.manual_shows[idx]
        self.snapshot.manual_shows[idx] = ms.model_copy(update={
            "aud_id": aud_id,
            "aud_name": aud.name if aud else "",
        })

    def retarget_manual_film(self, idx: int, film: Optional[Film]):
        ms = self.snapshot.manual_shows[idx]
        if film is None:
            self.snapshot.manual_shows[idx] = ms.model_copy(update={
                "film_id": None,
                "film_title": "",
                "runtime_min": 0,
                "trailer_min": 0,
                "clean_min": 0,
                "cycle_minutes": 0,
                "end": ms.start,
            })
            return
        self.snapshot.manual_shows[idx] = ms.model_copy(update={
            "film_id": film.id,
            "film_title": film.display_title,
            "runtime_min": film.runtime_min,
            "trailer_min": film.trailer_min,
            "clean_min": film.clean_min,
            "cycle_minutes": film.cycle_minutes,
            "end": timeutil.add_minutes(ms.start, film.show_length_min),
        })

    def _push(self, entry):
        self.snapshot.undo_stack.append(entry)
