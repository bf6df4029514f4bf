"""
Cycle Generator

Expands a Row (auditorium + film + prime time) into the shows that fit
inside the operating window.
"""

from datetime import date, datetime
from typing import List

from showtime.app.schemas.catalog import Auditorium, Film, Row
from showtime.app.schemas.schedules import OperatingWindow, Show, ShowSource, StaticRow
from showtime.app.services import timeutil
from showtime.app.services.catalog import Catalog

# Hard ceiling on steps in either direction from the prime show
MAX_STEPS = 50


class CycleGenerator:
    """
    Steps from a row's prime time backward and forward by the film's cycle
    length, clipped to the operating window.

    Show ids are `rowId:offset`, so they stay stable across regenerations as
    long as the row and the window are unchanged.
    """

    def __init__(self, catalog: Catalog, window: OperatingWindow, day: date):
        self.catalog = catalog
        self.window = window
        self.day = day

    def generate(self, row: Row) -> List[Show]:
        """
        Generate the shows for one row.

        Returns an empty list when the row lacks a film, auditorium or prime
        time, when the film's cycle is not positive, or when the window is
        malformed or inverted.
        """
        film = self.catalog.film_by_id(row.film_id)
        aud = self.catalog.auditorium_by_id(row.aud_id)
        if not film or not aud or not row.prime_hm:
            return []

        cycle = film.cycle_minutes
        if not cycle or cycle <= 0:
            return []

        bounds = timeutil.window_bounds(self.window.first_hm, self.window.last_hm, self.day)
        if bounds is None:
            return []
        first, last = bounds
        if last < first:
            return []

        prime = timeutil.instant_from_hm(row.prime_hm, self.day)
        if prime is None:
            return []

        pre_count = min(timeutil.minutes_between(prime, first) // cycle, MAX_STEPS)
        post_count = min(timeutil.minutes_between(last, prime) // cycle, MAX_STEPS)

        shows = []
        for i in range(pre_count, 0, -1):
            start = timeutil.add_minutes(prime, -i * cycle)
            if start < first:
                continue
            shows.append(self._make_show(row, -i, start, film, aud))

        # The prime show is always kept, even outside the window
        shows.append(self._make_show(row, 0, prime, film, aud))

        for i in range(1, post_count + 1):
            start = timeutil.add_minutes(prime, i * cycle)
            if start > last:
                continue
            shows.append(self._make_show(row, i, start, film, aud))

        return shows

    def generate_all(self, rows: List[Row]) -> List[Show]:
        shows = []
        for row in rows:
            shows.extend(self.generate(row))
        return shows

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _make_show(self, row: Row, offset: int, start: datetime, film: Film, aud: Auditorium) -> Show:
        return Show(
            id=f"{row.row_id}:{offset}",
            row_ref=StaticRow(row_id=row.row_id),
            offset=offset,
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
            source=ShowSource.PRIME,
        )
