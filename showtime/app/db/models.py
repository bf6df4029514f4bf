from datetime import datetime
from sqlmodel import Field, SQLModel

# --- Persisted State ---

class StateEntry(SQLModel, table=True):
    """
    One top-level key of the persisted application state.

    Values are JSON documents (auditoriums, films, bookings, schedulesByDate,
    currentDate, operatingWindow). Instants inside them are ISO-8601 strings.
    """
    key: str = Field(primary_key=True)
    value: str  # JSON text
    updated_at: datetime = Field(default_factory=datetime.now)
