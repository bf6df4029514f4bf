"""
Downtime Analyzer

Flags auditoriums that open late and idle gaps between consecutive shows.
"""

from datetime import date, datetime
from typing import Dict, List

from showtime.app.schemas.schedules import Issue, IssueKind, Show
from showtime.app.services import timeutil

GAP_THRESHOLD_MIN = 45
GAP_HUGE_MIN = 90
LATE_OPENING_MIN = 105


class DowntimeAnalyzer:

    def __init__(self, day: date):
        self.day = day

    def analyze(self, shows: List[Show], window_start: datetime) -> List[Issue]:
        """
        Issues for every auditorium, longest first.

        Shows without an auditorium are ignored. Instants are projected onto
        the operating day so a 01:00 show sorts after a 23:00 one.
        """
        by_aud: Dict[int, List[Show]] = {}
        for show in shows:
            if not show.aud_id:
                continue
            by_aud.setdefault(show.aud_id, []).append(show)

        opening = self._normalize(window_start)
        issues = []
        for aud_id, aud_shows in by_aud.items():
            aud_shows.sort(key=lambda s: self._normalize(s.start))
            aud_name = aud_shows[0].aud_name or f"Aud {aud_id}"

            # Late first show
            first = aud_shows[0]
            late = timeutil.minutes_between(self._normalize(first.start), opening)
            if late >= LATE_OPENING_MIN:
                issues.append(self._issue(
                    aud_name, IssueKind.LATE, late,
                    f"slot before first show from {timeutil.to12(window_start)} to {timeutil.to12(first.start)}",
                ))

            # Idle gaps between consecutive shows
            for current, following in zip(aud_shows, aud_shows[1:]):
                gap = timeutil.minutes_between(self._normalize(following.start), self._normalize(current.end))
                if gap < GAP_THRESHOLD_MIN:
                    continue
                kind = IssueKind.HUGE_GAP if gap >= GAP_HUGE_MIN else IssueKind.GAP
                issues.append(self._issue(
                    aud_name, kind, gap,
                    f"gap from {timeutil.to12(current.end)} to {timeutil.to12(following.start)}",
                ))

        issues.sort(key=lambda i: i.minutes, reverse=True)
        return issues

    def _normalize(self, dt: datetime) -> datetime:
        return timeutil.normalize_instant(dt, self.day)

    def _issue(self, aud_name: str, kind: IssueKind, minutes: int, span: str) -> Issue:
        duration = timeutil.format_duration(minutes)
        return Issue(
            auditorium_name=aud_name,
            kind=kind,
            message=f"{aud_name}: {span} ({duration})",
            minutes=minutes,
            duration=duration,
        )
