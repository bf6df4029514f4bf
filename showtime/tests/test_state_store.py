import pytest
from datetime import date, datetime, timedelta
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from showtime.app.services.session import ScheduleSession
from showtime.app.services.state_store import MemoryStateStore, SqlStateStore

OPERATING_DAY = date(2025, 8, 19)


class TestSqlStateStore:

    def test_round_trip(self, session: Session):
        store = SqlStateStore(session)
        assert store.load("films") is None
        assert store.save("films", [{"id": "F1"}]) is True
        assert store.load("films") == [{"id": "F1"}]

    def test_overwrite(self, session: Session):
        store = SqlStateStore(session)
        store.save("currentDate", "2025-08-19")
        store.save("currentDate", "2025-08-20")
        assert store.load("currentDate") == "2025-08-20"

    def test_unencodable_value_is_not_saved(self, session: Session):
        store = SqlStateStore(session)
        assert store.save("bad", {"when": datetime(2025, 8, 19)}) is False
        assert store.load("bad") is None

    def test_storage_failure_is_swallowed(self, session: Session, monkeypatch):
        store = SqlStateStore(session)

        def fail():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "commit", fail)
        assert store.save("films", []) is False


class TestSessionPersistence:

    def test_defaults_seeded_into_empty_store(self, settings):
        store = MemoryStateStore()
        schedule = ScheduleSession.open(store, settings=settings, today=OPERATING_DAY)
        assert len(schedule.catalog.auditoriums) == 6
        assert len(store.load("films")) == 3
        assert [r.row_id for r in schedule.snapshot.rows] == ["PRB-B1", "PRB-B2", "PRB-B3"]

    def test_state_survives_reopen(self, schedule_session, store, settings):
        moved = schedule_session.set_start("PRB-B1:0", "19:20")
        manual = schedule_session.add_manual_show("PRB-B2", "23:00")

        reopened = ScheduleSession.open(store, settings=settings)
        assert reopened.current_date == OPERATING_DAY
        shows = {s.id: s for s in reopened.resolve()}
        assert shows["PRB-B1:0"] == moved
        assert shows[manual.id].end == manual.end
        assert len(reopened.snapshot.undo_stack) == 2

        reopened.undo()
        assert manual.id not in [s.id for s in reopened.resolve()]

    def test_instants_stored_as_iso_strings(self, schedule_session, store):
        schedule_session.set_start("PRB-B1:0", "19:20")
        stored = store.load("schedulesByDate")["2025-08-19"]
        assert stored["overrides"]["PRB-B1:0"]["start"] == "2025-08-19T19:20:00"

    def test_switch_date_persists_current_date(self, schedule_session, store, settings):
        schedule_session.switch_to(date(2025, 8, 20))
        assert store.load("currentDate") == "2025-08-20"
        reopened = ScheduleSession.open(store, settings=settings)
        assert reopened.current_date == date(2025, 8, 20)
        assert "2025-08-19" in reopened.list_dates()

    def test_active_date_kept_when_retention_prunes(self, schedule_session, store, settings):
        schedule_session.copy(None, [OPERATING_DAY + timedelta(days=i) for i in range(1, 15)])
        moved = schedule_session.set_start("PRB-B1:0", "19:20")
        shows = schedule_session.resolve()

        reopened = ScheduleSession.open(store, settings=settings)
        assert reopened.current_date == OPERATING_DAY
        assert reopened.resolve() == shows
        assert {s.id: s for s in reopened.resolve()}["PRB-B1:0"] == moved

        dates = reopened.list_dates()
        assert len(dates) == 14
        assert "2025-08-19" in dates
        assert "2025-08-20" not in dates

    def test_legacy_schedule_migrated(self, settings):
        store = MemoryStateStore({
            "schedule": {"rows": [{"row_id": "EX-1", "film_id": "F1", "aud_id": 1, "prime_hm": "12:00"}]},
        })
        schedule = ScheduleSession.open(store, settings=settings, today=OPERATING_DAY)
        assert "EX-1" in [r.row_id for r in schedule.snapshot.rows]
        assert any(s.row_id == "EX-1" for s in schedule.resolve())
        assert "2025-08-19" in store.load("schedulesByDate")

    def test_unreadable_schedule_dropped(self, settings):
        store = MemoryStateStore({"schedulesByDate": {"2025-08-18": {"rows": "nope"}}})
        schedule = ScheduleSession.open(store, settings=settings, today=OPERATING_DAY)
        assert "2025-08-18" not in schedule.list_dates()

    @pytest.mark.parametrize("first, last, ok", [
        ("08:00", "01:00", True),
        ("8am", "23:00", False),
    ])
    def test_operating_window(self, schedule_session, store, first, last, ok):
        assert schedule_session.set_operating_window(first, last) is ok
        if ok:
            assert store.load("operatingWindow") == {"first_hm": "08:00", "last_hm": "01:00"}
            assert schedule_session.resolve()[-1].start == datetime(2025, 8, 20, 0, 25)
