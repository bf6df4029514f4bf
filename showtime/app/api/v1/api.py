from fastapi import APIRouter
from showtime.app.api.v1.endpoints import catalog, schedules

api_router = APIRouter()
api_router.include_router(schedules.router, tags=["schedules"])
api_router.include_router(catalog.router, tags=["catalog"])
