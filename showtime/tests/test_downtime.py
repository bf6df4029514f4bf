import pytest
from datetime import date, datetime, timedelta
from showtime.app.schemas.schedules import IssueKind, Show, StaticRow
from showtime.app.services.downtime import DowntimeAnalyzer

DAY = date(2025, 8, 19)
WINDOW_START = datetime(2025, 8, 19, 7, 0)


def make_show(show_id, start, minutes, aud_id=1, aud_name="Aud 1"):
    return Show(
        id=show_id,
        row_ref=StaticRow(row_id="R1"),
        aud_id=aud_id,
        aud_name=aud_name,
        film_id="F1",
        start=start,
        end=start + timedelta(minutes=minutes),
    )


@pytest.fixture
def analyzer():
    return DowntimeAnalyzer(DAY)


class TestDowntimeAnalyzer:

    def test_late_opening(self, analyzer):
        shows = [make_show("A", datetime(2025, 8, 19, 9, 0), 100)]
        issues = analyzer.analyze(shows, WINDOW_START)

        assert len(issues) == 1
        assert issues[0].kind == IssueKind.LATE
        assert issues[0].minutes == 120
        assert issues[0].duration == "2h00m"
        assert issues[0].message == "Aud 1: slot before first show from 7:00am to 9:00am (2h00m)"

    def test_opening_within_threshold(self, analyzer):
        shows = [make_show("A", datetime(2025, 8, 19, 8, 40), 100)]
        assert analyzer.analyze(shows, WINDOW_START) == []

    def test_gap(self, analyzer):
        shows = [
            make_show("A", datetime(2025, 8, 19, 18, 0), 120),  # ends 20:00
            make_show("B", datetime(2025, 8, 19, 21, 0), 100),
        ]
        issues = [i for i in analyzer.analyze(shows, datetime(2025, 8, 19, 17, 0)) if i.kind != IssueKind.LATE]

        assert len(issues) == 1
        assert issues[0].kind == IssueKind.GAP
        assert issues[0].minutes == 60
        assert issues[0].message == "Aud 1: gap from 8:00pm to 9:00pm (1h00m)"

    def test_huge_gap(self, analyzer):
        shows = [
            make_show("A", datetime(2025, 8, 19, 7, 0), 120),  # ends 09:00
            make_show("B", datetime(2025, 8, 19, 10, 30), 100),
        ]
        issues = analyzer.analyze(shows, WINDOW_START)
        assert [i.kind for i in issues] == [IssueKind.HUGE_GAP]
        assert issues[0].duration == "1h30m"

    def test_short_gap_ignored(self, analyzer):
        shows = [
            make_show("A", datetime(2025, 8, 19, 7, 0), 120),
            make_show("B", datetime(2025, 8, 19, 9, 40), 100),
        ]
        assert analyzer.analyze(shows, WINDOW_START) == []

    def test_after_midnight_show_sorts_last(self, analyzer):
        shows = [
            make_show("late", datetime(2025, 8, 19, 0, 30), 100),
            make_show("first", datetime(2025, 8, 19, 7, 0), 120),
            make_show("evening", datetime(2025, 8, 19, 22, 0), 120),  # ends 00:00
        ]
        issues = analyzer.analyze(shows, WINDOW_START)
        # 09:00 -> 22:00 is the only large gap; 00:00 -> 00:30 is too short
        assert len(issues) == 1
        assert issues[0].minutes == 13 * 60

    def test_shows_without_auditorium_ignored(self, analyzer):
        shows = [make_show("A", datetime(2025, 8, 19, 12, 0), 100, aud_id=None, aud_name="")]
        assert analyzer.analyze(shows, WINDOW_START) == []

    def test_issues_sorted_longest_first(self, analyzer):
        shows = [
            make_show("A1", datetime(2025, 8, 19, 7, 0), 120),
            make_show("A2", datetime(2025, 8, 19, 10, 0), 100),  # 60 min gap
            make_show("B1", datetime(2025, 8, 19, 11, 0), 100, aud_id=2, aud_name="Aud 2"),  # 240 min late
        ]
        issues = analyzer.analyze(shows, WINDOW_START)
        assert [i.minutes for i in issues] == [240, 60]
        assert issues[0].auditorium_name == "Aud 2"
