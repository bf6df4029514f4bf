from typing import List, Optional
from pydantic import BaseModel

# --- Audit Report ---

class FilmShowLine(BaseModel):
    film_title: str
    start: str  # 12-hour clock
    aud_name: str
    gap: str = ""  # H:MM to the next start of the same film
    short_gap: bool = False

class HousePlacement(BaseModel):
    film_title: str
    houses: List[str]  # "Aud 1 (200)"

class AuditoriumSummary(BaseModel):
    aud_id: Optional[int] = None
    aud_name: str
    seats: Optional[int] = None
    shows: int
    first_show: str
    last_show: str

class FeatureSummary(BaseModel):
    film_title: str
    prints: int  # distinct auditoriums
    shows: int
    first_show: str
    last_show: str

class AuditReport(BaseModel):
    by_film: List[FilmShowLine] = []
    house_placement: List[HousePlacement] = []
    per_auditorium: List[AuditoriumSummary] = []
    per_feature: List[FeatureSummary] = []

# --- Start-time Order ---

class OrderLine(BaseModel):
    show_id: str
    start: str  # 12-hour clock
    clean_gap: str = ""  # to the next show in the same auditorium
    tight: bool = False
    aud_name: str
    film_title: str
