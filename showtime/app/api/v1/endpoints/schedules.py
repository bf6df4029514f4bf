from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from datetime import date

from showtime.app.core.dependencies import get_schedule_session
from showtime.app.schemas.audit import AuditReport, OrderLine
from showtime.app.schemas.catalog import Row
from showtime.app.schemas.schedules import (
    AuditoriumAssignInput, CopyScheduleRequest, DateInput, FilmAssignInput, Issue,
    ManualShowInput, OperatingWindow, RowFieldInput, ScheduleView, StartInput, WindowInput,
)
from showtime.app.services import timeutil
from showtime.app.services.session import ScheduleSession

router = APIRouter(
    prefix="/schedules",
    tags=["schedules"],
    responses={404: {"description": "Not found"}},
)

# --- Helpers ---

def parse_day(value: str) -> date:
    day = timeutil.parse_iso_date(value)
    if day is None:
        raise HTTPException(status_code=400, detail=f"Invalid date '{value}', expected YYYY-MM-DD.")
    return day

def view(schedule: ScheduleSession, undone: str = None) -> ScheduleView:
    return ScheduleView(
        current_date=schedule.current_date,
        shows=schedule.resolve(),
        undo_depth=len(schedule.snapshot.undo_stack),
        undone=undone,
    )

# --- Shows ---

@router.get("/shows", response_model=ScheduleView)
def get_shows(schedule: ScheduleSession = Depends(get_schedule_session)):
    return view(schedule)

@router.patch("/shows/{show_id}/start", response_model=ScheduleView)
def set_show_start(
    show_id: str,
    body: StartInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    # Unknown shows and malformed times leave the schedule unchanged
    schedule.set_start(show_id, body.hm)
    return view(schedule)

@router.patch("/shows/{show_id}/auditorium", response_model=ScheduleView)
def set_show_auditorium(
    show_id: str,
    body: AuditoriumAssignInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    schedule.set_auditorium(show_id, body.aud_id)
    return view(schedule)

@router.patch("/shows/{show_id}/film", response_model=ScheduleView)
def set_show_film(
    show_id: str,
    body: FilmAssignInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    schedule.set_film(show_id, body.film_id)
    return view(schedule)

@router.get("/shows/{show_id}/options", response_model=List[str])
def get_start_options(show_id: str, schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.options_for(show_id)

@router.post("/undo", response_model=ScheduleView)
def undo_last(schedule: ScheduleSession = Depends(get_schedule_session)):
    entry = schedule.undo()
    return view(schedule, undone=entry.kind if entry else None)

# --- Rows ---

@router.get("/rows", response_model=List[Row])
def get_rows(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.snapshot.rows

@router.post("/rows", response_model=Row, status_code=status.HTTP_201_CREATED)
def add_extra_row(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.add_extra_row()

@router.patch("/rows/{row_id}", response_model=Row)
def update_row(
    row_id: str,
    body: RowFieldInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    row = schedule.set_row_field(row_id, body.field, body.value)
    if row is None:
        raise HTTPException(status_code=400, detail=f"Cannot set {body.field} on row '{row_id}'.")
    return row

@router.post("/rows/{row_id}/manual", response_model=ScheduleView, status_code=status.HTTP_201_CREATED)
def add_manual_show(
    row_id: str,
    body: ManualShowInput,
    schedule: ScheduleSession = Depends(get_schedule_session),
):
    schedule.add_manual_show(row_id, body.hm)
    return view(schedule)

@router.post("/times/clear", response_model=ScheduleView)
def clear_all_times(schedule: ScheduleSession = Depends(get_schedule_session)):
    schedule.clear_all_times()
    return view(schedule)

# --- Operating Window ---

@router.get("/window", response_model=OperatingWindow)
def get_window(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.window

@router.put("/window", response_model=OperatingWindow)
def set_window(body: WindowInput, schedule: ScheduleSession = Depends(get_schedule_session)):
    if not schedule.set_operating_window(body.first_hm, body.last_hm):
        raise HTTPException(status_code=400, detail="Operating window times must be H:MM.")
    return schedule.window

# --- Dates ---

@router.get("/dates", response_model=List[str])
def list_dates(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.list_dates()

@router.put("/date", response_model=ScheduleView)
def switch_date(body: DateInput, schedule: ScheduleSession = Depends(get_schedule_session)):
    schedule.switch_to(parse_day(body.day))
    return view(schedule)

@router.post("/copy", response_model=List[str])
def copy_schedule(body: CopyScheduleRequest, schedule: ScheduleSession = Depends(get_schedule_session)):
    from_day = parse_day(body.from_date) if body.from_date else None
    to_days = [parse_day(d) for d in body.to_dates]
    return [d.isoformat() for d in schedule.copy(from_day, to_days)]

@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_schedules(schedule: ScheduleSession = Depends(get_schedule_session)):
    schedule.clear_all()

@router.delete("/{day}", status_code=status.HTTP_204_NO_CONTENT)
def clear_schedule(day: str, schedule: ScheduleSession = Depends(get_schedule_session)):
    schedule.clear(parse_day(day))

# --- Reports ---

@router.get("/issues", response_model=List[Issue])
def get_issues(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.analyze()

@router.get("/audit", response_model=AuditReport)
def get_audit(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.audit()

@router.get("/order", response_model=List[OrderLine])
def get_start_time_order(schedule: ScheduleSession = Depends(get_schedule_session)):
    return schedule.start_time_order()
