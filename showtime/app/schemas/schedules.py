from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Set, Union
from datetime import date, datetime, timedelta
from pydantic import BaseModel, ConfigDict, Field, computed_field

from showtime.app.schemas.catalog import Row

# --- Row References ---

class StaticRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["static"] = "static"
    row_id: str

    @property
    def key(self) -> str:
        return self.row_id

class DynamicRow(BaseModel):
    """Virtual row grouping every show redirected to the same auditorium/film."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["dynamic"] = "dynamic"
    aud_id: Optional[int] = None
    film_id: Optional[str] = None

    @property
    def key(self) -> str:
        return f"OV-{self.aud_id}-{self.film_id}"

RowRef = Annotated[Union[StaticRow, DynamicRow], Field(discriminator="kind")]

# --- Shows ---

class ShowSource(str, Enum):
    PRIME = "Prime"
    MANUAL = "Manual"
    OVERRIDE = "Override"

class Show(BaseModel):
    """
    A resolved, displayable show.

    `end` is start + runtime + trailer. The next available slot in the
    auditorium is start + cycle_minutes (clean time is part of the cycle).
    """
    model_config = ConfigDict(frozen=True)

    id: str
    row_ref: RowRef
    offset: Optional[int] = None
    aud_id: Optional[int] = None
    aud_name: str = ""
    film_id: Optional[str] = None
    film_title: str = ""
    start: datetime
    end: datetime
    runtime_min: int = 0
    trailer_min: int = 0
    clean_min: int = 0
    cycle_minutes: int = 0
    source: ShowSource = ShowSource.PRIME

    @computed_field
    @property
    def row_id(self) -> str:
        return self.row_ref.key

    @property
    def next_slot(self) -> datetime:
        return self.start + timedelta(minutes=self.cycle_minutes)

class Override(BaseModel):
    """Sparse, immutable patch applied to a show by id."""
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    aud_id: Optional[int] = None
    film_id: Optional[str] = None

    def is_empty(self) -> bool:
        return self.start is None and self.aud_id is None and self.film_id is None

    def patch(self, **changes) -> "Override":
        return self.model_copy(update=changes)

# --- Undo Entries ---

class EditEntry(BaseModel):
    kind: Literal["edit"] = "edit"
    show_id: str
    previous_start: datetime

class HideEntry(BaseModel):
    kind: Literal["hide"] = "hide"
    show_id: str
    previous_hidden: bool = False

class ManualInsertEntry(BaseModel):
    kind: Literal["manual"] = "manual"
    show: Show

class MoveAuditoriumEntry(BaseModel):
    kind: Literal["moveAud"] = "moveAud"
    show_id: str
    previous_aud_id: Optional[int] = None

class EditFilmEntry(BaseModel):
    kind: Literal["editFilm"] = "editFilm"
    show_id: str
    previous_film_id: Optional[str] = None

UndoEntry = Annotated[
    Union[EditEntry, HideEntry, ManualInsertEntry, MoveAuditoriumEntry, EditFilmEntry],
    Field(discriminator="kind"),
]

# --- Per-date Schedule ---

class ScheduleSnapshot(BaseModel):
    rows: List[Row] = []
    manual_shows: List[Show] = []
    overrides: Dict[str, Override] = {}
    hidden: Set[str] = set()
    undo_stack: List[UndoEntry] = []

    def is_blank(self) -> bool:
        return not (self.rows or self.manual_shows)

class OperatingWindow(BaseModel):
    first_hm: str = "07:00"
    last_hm: str = "23:00"

# --- Downtime Issues ---

class IssueKind(str, Enum):
    LATE = "Late"
    GAP = "Gap"
    HUGE_GAP = "HugeGap"

class Issue(BaseModel):
    auditorium_name: str
    kind: IssueKind
    message: str
    minutes: int
    duration: str  # HhMMm

# --- Request Bodies ---

class StartInput(BaseModel):
    hm: str = ""  # empty string hides the show

class AuditoriumAssignInput(BaseModel):
    aud_id: Optional[int] = None

class FilmAssignInput(BaseModel):
    film_id: Optional[str] = None

class ManualShowInput(BaseModel):
    hm: str

class DateInput(BaseModel):
    day: str  # ISO date

class WindowInput(BaseModel):
    first_hm: str
    last_hm: str

class CopyScheduleRequest(BaseModel):
    from_date: Optional[str] = None  # defaults to the current date
    to_dates: List[str]

class RowFieldInput(BaseModel):
    field: Literal["audId", "filmId", "primeHM"]
    value: Optional[Union[int, str]] = None

# --- Responses ---

class ScheduleView(BaseModel):
    current_date: date
    shows: List[Show]
    undo_depth: int = 0
    undone: Optional[str] = None  # kind of the entry just undone
