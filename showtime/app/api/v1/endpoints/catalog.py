from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from showtime.app.core.dependencies import get_schedule_session
from showtime.app.schemas.catalog import (
    Auditorium, AuditoriumInput, Booking, BookingInput, Film, FilmInput,
)
from showtime.app.services.session import ScheduleSession

router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
    responses={404: {"description": "Not found"}},
)

# --- Auditoriums ---

@router.get("/auditoriums", response_model=List[Auditorium])
def list_auditoriums(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.catalog.auditoriums

@router.post("/auditoriums", response_model=Auditorium, status_code=status.HTTP_201_CREATED)
def create_auditorium(body: AuditoriumInput, schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.add_auditorium(**body.model_dump(exclude_none=True))

@router.patch("/auditoriums/{aud_id}", response_model=Auditorium)
def update_auditorium(
    aud_id: int,
    body: AuditoriumInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    aud = schedule.update_auditorium(aud_id, body.model_dump(exclude_none=True))
    if not aud:
        raise HTTPException(status_code=404, detail="Auditorium not found")
    return aud

@router.delete("/auditoriums/{aud_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_auditorium(aud_id: int, schedule: ScheduleSession = Depends(get_schedule_session)):
    if not schedule.delete_auditorium(aud_id):
        raise HTTPException(status_code=404, detail="Auditorium not found")

# --- Films ---

@router.get("/films", response_model=List[Film])
def list_films(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.catalog.films

@router.post("/films", response_model=Film, status_code=status.HTTP_201_CREATED)
def create_film(body: FilmInput, schedule: ScheduleSession = Depends(get_schedule_session)):
    fields = body.model_dump(exclude_none=True)
    title = fields.pop("title", None)
    if not title:
        raise HTTPException(status_code=400, detail="Film title is required.")
    return schedule.add_film(title, **fields)

@router.patch("/films/{film_id}", response_model=Film)
def update_film(
    film_id: str,
    body: FilmInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    film = schedule.update_film(film_id, body.model_dump(exclude_none=True))
    if not film:
        raise HTTPException(status_code=404, detail="Film not found")
    return film

@router.delete("/films/{film_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_film(film_id: str, schedule: ScheduleSession = Depends(get_schedule_session)):
    if not schedule.delete_film(film_id):
        raise HTTPException(status_code=404, detail="Film not found")

# --- Bookings ---

@router.get("/bookings", response_model=List[Booking])
def list_bookings(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.catalog.bookings

@router.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(body: BookingInput, schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.add_booking(**body.model_dump(exclude_none=True))

@router.patch("/bookings/{booking_id}", response_model=Booking)
def update_booking(
    booking_id: str,
    body: BookingInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    booking = schedule.update_booking(booking_id, body.model_dump(exclude_none=True))
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking

@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: str, schedule: ScheduleSession = Depends(get_schedule_session)):
    if not schedule.delete_booking(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")

@router.post("/bookings/clear", status_code=status.HTTP_204_NO_CONTENT)
def clear_bookings_and_times(schedule: ScheduleSession = Depends(get_schedule_session)):
    schedule.clear_bookings_and_times()
