from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List
import logging
import os

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///showtime.db"
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    FIRST_SHOW_HM: str = "07:00"
    LAST_SHOW_HM: str = "23:00"  # values before 05:00 belong to the next day
    SCHEDULE_RETENTION_DAYS: int = Field(default=14, ge=14)
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))), ".env")

settings = Settings()

def configure_logging(level: str = None):
    """Configure root logging once for the application process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
