"""
Catalog Store

Holds auditoriums, films and bookings. Lookups tolerate missing ids and
return None ("nothing assigned") instead of raising.
"""

from typing import Dict, List, Optional

from showtime.app.schemas.catalog import Auditorium, Booking, Film


DEFAULT_AUDITORIUMS = [
    {"id": 1, "name": "Aud 1", "format": "Standard", "seats": 200},
    {"id": 2, "name": "Aud 2", "format": "Standard", "seats": 190},
    {"id": 3, "name": "Aud 3", "format": "3D", "seats": 150},
    {"id": 4, "name": "Aud 4", "format": "Laser", "seats": 210},
    {"id": 5, "name": "Aud 5", "format": "Standard", "seats": 140},
    {"id": 6, "name": "Aud 6", "format": "Standard", "seats": 140},
]

DEFAULT_FILMS = [
    {"id": "F1", "title": "Thunder Road", "rating": "PG-13", "runtime_min": 124, "trailer_min": 18, "clean_min": 20, "priority": 1},
    {"id": "F2", "title": "Moon Harbor", "rating": "R", "runtime_min": 108, "trailer_min": 16, "clean_min": 20, "priority": 2},
    {"id": "F3", "title": "Galaxy Kids 3D", "rating": "PG", "runtime_min": 97, "trailer_min": 15, "clean_min": 15, "priority": 3},
]

DEFAULT_BOOKINGS = [
    {"id": "B1", "week": 34, "slot": "1", "film_id": "F1", "weeks_out": 1},
    {"id": "B2", "week": 34, "slot": "2", "film_id": "F2", "weeks_out": 1},
    {"id": "B3", "week": 34, "slot": "3", "film_id": "F3", "weeks_out": 1},
]


class Catalog:
    """In-memory catalog with id lookups and list maintenance."""

    def __init__(
        self,
        auditoriums: List[Auditorium] = None,
        films: List[Film] = None,
        bookings: List[Booking] = None,
    ):
        self.auditoriums: List[Auditorium] = list(auditoriums or [])
        self.films: List[Film] = list(films or [])
        self.bookings: List[Booking] = list(bookings or [])

    @classmethod
    def with_defaults(cls) -> "Catalog":
        return cls(
            auditoriums=[Auditorium(**a) for a in DEFAULT_AUDITORIUMS],
            films=[Film(**f) for f in DEFAULT_FILMS],
            bookings=[Booking(**b) for b in DEFAULT_BOOKINGS],
        )

    # =========================================================================
    # Lookups
    # =========================================================================

    def film_by_id(self, film_id: Optional[str]) -> Optional[Film]:
        if film_id is None:
            return None
        return next((f for f in self.films if f.id == film_id), None)

    def auditorium_by_id(self, aud_id: Optional[int]) -> Optional[Auditorium]:
        if aud_id is None:
            return None
        return next((a for a in self.auditoriums if a.id == aud_id), None)

    def booking_by_id(self, booking_id: Optional[str]) -> Optional[Booking]:
        if booking_id is None:
            return None
        return next((b for b in self.bookings if b.id == booking_id), None)

    # =========================================================================
    # Auditoriums
    # =========================================================================

    def add_auditorium(self, name: str = None, format: str = "Standard", seats: int = 100) -> Auditorium:
        next_id = max((a.id for a in self.auditoriums), default=0) + 1
        aud = Auditorium(id=next_id, name=name or f"Aud {next_id}", format=format, seats=seats)
        self.auditoriums.append(aud)
        return aud

    def update_auditorium(self, aud_id: int, changes: Dict) -> Optional[Auditorium]:
        return self._replace(self.auditoriums, aud_id, changes)

    def remove_auditorium(self, aud_id: int) -> Optional[Auditorium]:
        return self._remove(self.auditoriums, aud_id)

    # =========================================================================
    # Films
    # =========================================================================

    def add_film(self, title: str, **fields) -> Film:
        film_id = fields.pop("id", None) or self._next_id("F", self.films)
        film = Film(id=film_id, title=title, **fields)
        self.films.append(film)
        return film

    def update_film(self, film_id: str, changes: Dict) -> Optional[Film]:
        return self._replace(self.films, film_id, changes)

    def remove_film(self, film_id: str) -> Optional[Film]:
        return self._remove(self.films, film_id)

    # =========================================================================
    # Bookings
    # =========================================================================

    def add_booking(self, film_id: str = None, slot: str = None, **fields) -> Booking:
        booking_id = self._next_id("B", self.bookings)
        next_slot = slot or str(len(self.bookings) + 1)
        booking = Booking(id=booking_id, film_id=film_id, slot=next_slot, **fields)
        self.bookings.append(booking)
        return booking

    def update_booking(self, booking_id: str, changes: Dict) -> Optional[Booking]:
        return self._replace(self.bookings, booking_id, changes)

    def remove_booking(self, booking_id: str) -> Optional[Booking]:
        return self._remove(self.bookings, booking_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _replace(self, items: List, item_id, changes: Dict):
        for idx, item in enumerate(items):
            if item.id == item_id:
                updated = item.model_validate({**item.model_dump(), **changes, "id": item_id})
                items[idx] = updated
                return updated
        return None

    def _remove(self, items: List, item_id):
        for idx, item in enumerate(items):
            if item.id == item_id:
                return items.pop(idx)
        return None

    def _next_id(self, prefix: str, items: List) -> str:
        used = set(i.id for i in items)
        n = len(items) + 1
        while f"{prefix}{n}" in used:
            n += 1
        return f"{prefix}{n}"
