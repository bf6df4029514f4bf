from sqlmodel import SQLModel, create_engine, Session
from typing import Generator

from showtime.app.core.config import settings

sqlite_url = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if sqlite_url.startswith("sqlite") else {}
engine = create_engine(sqlite_url, connect_args=connect_args)

def create_db_and_tables():
    # Import models so they register with SQLModel.metadata
    from showtime.app.db import models  # noqa: F401
    SQLModel.metadata.create_all(engine)

def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
