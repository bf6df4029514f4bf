from functools import lru_cache
from fastapi import Depends
from sqlmodel import Session

from .config import Settings
from showtime.app.db.session import get_session
from showtime.app.services.session import ScheduleSession
from showtime.app.services.state_store import SqlStateStore

@lru_cache()
def get_settings():
    return Settings()

def get_schedule_session(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> ScheduleSession:
    return ScheduleSession.open(SqlStateStore(session), settings=settings)
