import math
from typing import Optional
from pydantic import BaseModel, computed_field

# --- Catalog Entities ---

class Auditorium(BaseModel):
    id: int
    name: str
    format: str = "Standard"
    seats: int = 0

class Film(BaseModel):
    id: str
    title: str
    rating: str = ""
    runtime_min: int = 0
    trailer_min: int = 0
    clean_min: int = 0
    priority: Optional[float] = None
    format: str = ""

    @computed_field
    @property
    def cycle_minutes(self) -> int:
        """Runtime + trailer + clean, rounded up to a multiple of 5."""
        total = (self.runtime_min or 0) + (self.trailer_min or 0) + (self.clean_min or 0)
        return int(math.ceil(total / 5) * 5)

    @property
    def display_title(self) -> str:
        # Format suffix, e.g. "Galaxy Kids 3D"
        return self.title + (" " + self.format if self.format else "")

    @property
    def show_length_min(self) -> int:
        return (self.runtime_min or 0) + (self.trailer_min or 0)

class Booking(BaseModel):
    id: str
    week: Optional[int] = None
    slot: str = ""
    film_id: Optional[str] = None
    notes: str = ""
    weeks_out: Optional[int] = None

# --- Schedule Rows ---

class Row(BaseModel):
    """
    A Prime row (backed by a booking) or an Extra row (bookingId is None).

    A row generates shows only when film, auditorium and prime time are all set.
    """
    row_id: str
    booking_id: Optional[str] = None
    slot: str = ""
    film_id: Optional[str] = None
    aud_id: Optional[int] = None
    prime_hm: str = ""

    @property
    def is_extra(self) -> bool:
        return self.booking_id is None

# --- Request Bodies ---

class AuditoriumInput(BaseModel):
    name: Optional[str] = None
    format: Optional[str] = None
    seats: Optional[int] = None

class FilmInput(BaseModel):
    title: Optional[str] = None
    rating: Optional[str] = None
    runtime_min: Optional[int] = None
    trailer_min: Optional[int] = None
    clean_min: Optional[int] = None
    priority: Optional[float] = None
    format: Optional[str] = None

class BookingInput(BaseModel):
    film_id: Optional[str] = None
    slot: Optional[str] = None
    week: Optional[int] = None
    notes: Optional[str] = None
    weeks_out: Optional[int] = None
