"""
Audit summaries

Read-only reports over the resolved shows of one date: the schedule by
film, house placement, shows per auditorium and per feature, and the
start-time order used by the floor staff.
"""

from datetime import date
from typing import Dict, List, Optional

from showtime.app.schemas.audit import (
    AuditoriumSummary, AuditReport, FeatureSummary, FilmShowLine, HousePlacement, OrderLine,
)
from showtime.app.schemas.schedules import Show
from showtime.app.services import timeutil
from showtime.app.services.catalog import Catalog

# Starts of the same film closer than this are highlighted
SHORT_GAP_MIN = 30
# Clean gaps below this are highlighted in the start-time order
TIGHT_CLEAN_MIN = 20


class AuditService:

    def __init__(self, catalog: Catalog, day: date):
        self.catalog = catalog
        self.day = day

    def report(self, shows: List[Show]) -> AuditReport:
        groups = self._group_by_title(shows)
        return AuditReport(
            by_film=self._by_film(groups),
            house_placement=self._house_placement(groups),
            per_auditorium=self._per_auditorium(shows),
            per_feature=self._per_feature(groups),
        )

    def start_time_order(self, shows: List[Show]) -> List[OrderLine]:
        ordered = sorted(shows, key=lambda s: self._normalize(s))
        lines = []
        for show in ordered:
            gap = self._clean_gap(show, ordered)
            lines.append(OrderLine(
                show_id=show.id,
                start=timeutil.to12(show.start),
                clean_gap=timeutil.format_clean_gap(gap) if gap is not None else "",
                tight=gap is not None and gap < TIGHT_CLEAN_MIN,
                aud_name=show.aud_name,
                film_title=show.film_title,
            ))
        return lines

    # =========================================================================
    # Sections
    # =========================================================================

    def _group_by_title(self, shows: List[Show]) -> Dict[str, List[Show]]:
        groups: Dict[str, List[Show]] = {}
        for show in shows:
            groups.setdefault(self._base_title(show), []).append(show)
        for title in groups:
            groups[title].sort(key=lambda s: s.start)
        return dict(sorted(groups.items(), key=lambda kv: kv[0].lower()))

    def _by_film(self, groups: Dict[str, List[Show]]) -> List[FilmShowLine]:
        lines = []
        for title, film_shows in groups.items():
            for show, following in zip(film_shows, film_shows[1:] + [None]):
                gap, short = "", False
                if following is not None:
                    minutes = timeutil.minutes_between(following.start, show.start)
                    gap = timeutil.fmt_dur(minutes)
                    short = minutes < SHORT_GAP_MIN
                lines.append(FilmShowLine(
                    film_title=title,
                    start=timeutil.to12(show.start),
                    aud_name=show.aud_name,
                    gap=gap,
                    short_gap=short,
                ))
        return lines

    def _house_placement(self, groups: Dict[str, List[Show]]) -> List[HousePlacement]:
        placements = []
        for title, film_shows in groups.items():
            houses: Dict[str, Optional[int]] = {}
            for show in film_shows:
                aud = self.catalog.auditorium_by_id(show.aud_id)
                name = aud.name if aud and aud.name else show.aud_name
                if name not in houses:
                    houses[name] = aud.seats if aud else None
            placements.append(HousePlacement(
                film_title=title,
                houses=[f"{name} ({seats})" if seats else name for name, seats in houses.items()],
            ))
        return placements

    def _per_auditorium(self, shows: List[Show]) -> List[AuditoriumSummary]:
        by_aud: Dict[Optional[int], List[Show]] = {}
        for show in shows:
            by_aud.setdefault(show.aud_id, []).append(show)

        summaries = []
        for aud_id, aud_shows in by_aud.items():
            aud_shows.sort(key=lambda s: s.start)
            aud = self.catalog.auditorium_by_id(aud_id)
            summaries.append(AuditoriumSummary(
                aud_id=aud_id,
                aud_name=aud.name if aud else "",
                seats=aud.seats if aud else None,
                shows=len(aud_shows),
                first_show=timeutil.to12(aud_shows[0].start),
                last_show=timeutil.to12(aud_shows[-1].start),
            ))
        summaries.sort(key=lambda s: (s.aud_id is None, s.aud_id or 0))
        return summaries

    def _per_feature(self, groups: Dict[str, List[Show]]) -> List[FeatureSummary]:
        return [
            FeatureSummary(
                film_title=title,
                prints=len(set(s.aud_id for s in film_shows)),
                shows=len(film_shows),
                first_show=timeutil.to12(film_shows[0].start),
                last_show=timeutil.to12(film_shows[-1].start),
            )
            for title, film_shows in groups.items()
        ]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _base_title(self, show: Show) -> str:
        # Group formats of the same film together
        film = self.catalog.film_by_id(show.film_id)
        if film and film.title:
            return film.title
        return show.film_title

    def _normalize(self, show: Show):
        return timeutil.normalize_instant(show.start, self.day)

    def _clean_gap(self, show: Show, ordered: List[Show]) -> Optional[int]:
        """Minutes from this show's end to the next start in the same auditorium."""
        start = self._normalize(show)
        following = next(
            (s for s in ordered if s.aud_id == show.aud_id and self._normalize(s) > start),
            None,
        )
        if following is None:
            return None
        end = timeutil.normalize_instant(show.end, self.day)
        return timeutil.minutes_between(self._normalize(following), end)
