import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from showtime.app.main import app
from showtime.app.core.config import Settings
from showtime.app.db.session import get_session
from showtime.app.services.session import ScheduleSession
from showtime.app.services.state_store import MemoryStateStore

OPERATING_DAY = date(2025, 8, 19)

@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session

@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(FIRST_SHOW_HM="07:00", LAST_SHOW_HM="23:00", SCHEDULE_RETENTION_DAYS=14)

@pytest.fixture(name="store")
def store_fixture():
    # Small catalog: F1 cycles every 150 minutes, F2 every 125
    return MemoryStateStore({
        "auditoriums": [
            {"id": 1, "name": "Aud 1", "seats": 200},
            {"id": 2, "name": "Aud 2", "seats": 150},
            {"id": 3, "name": "Aud 3", "seats": 120},
        ],
        "films": [
            {"id": "F1", "title": "Thunder Road", "runtime_min": 120, "trailer_min": 15, "clean_min": 15},
            {"id": "F2", "title": "Moon Harbor", "runtime_min": 100, "trailer_min": 10, "clean_min": 15},
        ],
        "bookings": [
            {"id": "B1", "slot": "1", "film_id": "F1"},
            {"id": "B2", "slot": "2", "film_id": "F2"},
        ],
    })

@pytest.fixture(name="schedule_session")
def schedule_session_fixture(store: MemoryStateStore, settings: Settings):
    """
    Session on 2025-08-19 with two prime rows:
    PRB-B1 (Aud 1, Thunder Road, 19:00) and PRB-B2 (Aud 2, Moon Harbor, 14:00).
    """
    schedule = ScheduleSession.open(store, settings=settings, today=OPERATING_DAY)
    schedule.set_row_field("PRB-B1", "audId", 1)
    schedule.set_row_field("PRB-B1", "primeHM", "19:00")
    schedule.set_row_field("PRB-B2", "audId", 2)
    schedule.set_row_field("PRB-B2", "primeHM", "14:00")
    return schedule
