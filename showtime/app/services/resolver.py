"""
Override & Manual Layer: resolution

Turns generated shows, manual shows, per-show overrides and hidden markers
into the flat list of visible shows. This is the single source of truth
for "what shows exist today"; renderers must re-fetch it after every
mutation.
"""

from typing import Dict, Iterable, List, Optional, Set

from showtime.app.schemas.catalog import Row
from showtime.app.schemas.schedules import DynamicRow, Override, Show, ShowSource
from showtime.app.services import timeutil
from showtime.app.services.catalog import Catalog
from showtime.app.services.generator import CycleGenerator


class ShowResolver:

    def __init__(self, catalog: Catalog, generator: CycleGenerator):
        self.catalog = catalog
        self.generator = generator

    def raw_shows(self, rows: List[Row], manual_shows: List[Show]) -> List[Show]:
        """Generated shows for every row followed by all manual shows."""
        shows = self.generator.generate_all(rows)
        for ms in manual_shows:
            shows.append(ms.model_copy(update={"source": ShowSource.MANUAL}))
        return shows

    def base_show(self, show_id: str, rows: List[Row], manual_shows: List[Show]) -> Optional[Show]:
        """The show as produced by its generator (or manual record), before overrides."""
        return next((s for s in self.raw_shows(rows, manual_shows) if s.id == show_id), None)

    def resolve(
        self,
        rows: List[Row],
        manual_shows: List[Show],
        overrides: Dict[str, Override],
        hidden: Set[str],
    ) -> List[Show]:
        # 1. Raw set minus hidden shows
        visible = [s for s in self.raw_shows(rows, manual_shows) if s.id not in hidden]

        # 2. Apply overrides
        effective = []
        for show in visible:
            ov = overrides.get(show.id)
            effective.append(self.apply_override(show, ov) if ov else show)

        # 3. Order by start and drop duplicates
        return self._dedupe(sorted(effective, key=lambda s: s.start))

    def apply_override(self, base: Show, ov: Override) -> Show:
        """
        Apply a sparse override to a base show.

        Order matters: start first (end recomputed from the effective film),
        then auditorium, then film. When the auditorium or film differs from
        the base, the show moves to a dynamic row keyed by its destination.
        """
        changes = {}
        start = base.start
        end = base.end

        if ov.start is not None:
            start = ov.start
            film = self.catalog.film_by_id(ov.film_id or base.film_id)
            length = film.show_length_min if film else base.runtime_min + base.trailer_min
            end = timeutil.add_minutes(start, length)
            changes["start"] = start
            changes["end"] = end

        if ov.aud_id is not None:
            aud = self.catalog.auditorium_by_id(ov.aud_id)
            changes["aud_id"] = ov.aud_id
            changes["aud_name"] = aud.name if aud else base.aud_name

        if ov.film_id is not None and ov.film_id != base.film_id:
            film = self.catalog.film_by_id(ov.film_id)
            if film:
                changes.update(
                    film_id=film.id,
                    film_title=film.display_title,
                    runtime_min=film.runtime_min,
                    trailer_min=film.trailer_min,
                    clean_min=film.clean_min,
                    cycle_minutes=film.cycle_minutes,
                    end=timeutil.add_minutes(start, film.show_length_min),
                )

        aud_moved = ov.aud_id is not None and ov.aud_id != base.aud_id
        film_moved = ov.film_id is not None and ov.film_id != base.film_id
        if aud_moved or film_moved:
            changes["row_ref"] = DynamicRow(
                aud_id=changes.get("aud_id", base.aud_id),
                film_id=changes.get("film_id", base.film_id),
            )
            changes["source"] = ShowSource.OVERRIDE

        return base.model_copy(update=changes)

    def _dedupe(self, shows: Iterable[Show]) -> List[Show]:
        """Keep the first show for each (start, auditorium, film)."""
        seen = set()
        unique = []
        for show in shows:
            key = (show.start, show.aud_id, show.film_id)
            if key in seen:
                continue
            seen.add(key)
            unique.append(show)
        return unique
