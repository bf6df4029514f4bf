"""
Time Utilities

Pure helpers for wall-clock strings, instants and the operating day.

An operating day runs from 05:00 to 04:59 the following morning, so a
01:00 show belongs to the same show-day as a 23:00 show. Every instant the
engine builds from an HM string goes through `instant_from_hm`, and every
comparison that crosses midnight goes through `normalize_instant`.
"""

import math
import re
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

# Hours before this belong to the previous show-day
ROLLOVER_HOUR = 5

_HM_RE = re.compile(r"^(\d{1,2}):(\d{1,2})$")


def parse_hm(hm: Optional[str]) -> Optional[time]:
    """
    Parse a wall-clock string.

    Accepts "H:MM" / "HH:MM" (24-hour) and 12-hour forms such as
    "7:00 pm" or "7:00pm". Returns None when the string is malformed.
    """
    if not hm or not isinstance(hm, str):
        return None

    t_str = hm.strip().lower().replace("midnight", "12:00 am")
    m = _HM_RE.match(t_str)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
        if hours > 23 or minutes > 59:
            return None
        return time(hours, minutes)

    for fmt in ("%I:%M %p", "%I:%M%p"):
        try:
            return datetime.strptime(t_str, fmt).time()
        except ValueError:
            continue
    return None


def instant_from_hm(hm: Optional[str], day: date) -> Optional[datetime]:
    """Instant for `hm` on operating day `day` (times before 05:00 roll to day + 1)."""
    t = parse_hm(hm)
    if t is None:
        return None
    if t.hour < ROLLOVER_HOUR:
        return datetime.combine(day + timedelta(days=1), t)
    return datetime.combine(day, t)


def normalize_instant(dt: datetime, day: date) -> datetime:
    """Project an instant onto operating day `day` by its time of day."""
    if dt.hour < ROLLOVER_HOUR:
        return datetime.combine(day + timedelta(days=1), dt.time())
    return datetime.combine(day, dt.time())


def hm_from_instant(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def add_minutes(dt: datetime, minutes: int) -> datetime:
    return dt + timedelta(minutes=minutes)


def minutes_between(a: datetime, b: datetime) -> int:
    """Whole minutes from b to a (a - b)."""
    return int(round((a - b).total_seconds() / 60))


def ceil_to_5(minutes: float) -> int:
    return int(math.ceil(minutes / 5) * 5)


def window_bounds(first_hm: str, last_hm: str, day: date) -> Optional[Tuple[datetime, datetime]]:
    """
    Resolve an operating window to instants on `day`.

    A last show before 05:00 denotes the next morning. Returns None when
    either bound is malformed.
    """
    first = instant_from_hm(first_hm, day)
    last = instant_from_hm(last_hm, day)
    if first is None or last is None:
        return None
    return first, last

# =========================================================================
# Display formatting
# =========================================================================

def to12(dt: datetime) -> str:
    """12-hour clock with am/pm suffix, e.g. 12:05am, 7:30pm."""
    suffix = "pm" if dt.hour >= 12 else "am"
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d}{suffix}"


def fmt_hm(hm: str) -> str:
    t = parse_hm(hm)
    if t is None:
        return ""
    return to12(datetime.combine(date.today(), t))


def fmt_dur(minutes: int) -> str:
    """H:MM, e.g. 2:10"""
    return f"{minutes // 60}:{minutes % 60:02d}"


def format_duration(minutes: float) -> str:
    """HhMMm, e.g. 1h30m"""
    hours = int(minutes // 60)
    mins = int(round(minutes % 60))
    return f"{hours}h{mins:02d}m"


def format_clean_gap(minutes: int) -> str:
    if minutes >= 60:
        return format_duration(minutes)
    return f"{minutes}m"

# =========================================================================
# Calendar dates
# =========================================================================

def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def iso_to_mmdd(iso: str) -> str:
    """2025-08-19 -> 08/19/2025; anything else is returned unchanged."""
    if not iso or not isinstance(iso, str):
        return iso
    parts = iso.split("-")
    if len(parts) != 3:
        return iso
    y, m, d = parts
    return f"{m}/{d}/{y}"


def mmdd_to_iso(mmdd: str) -> Optional[str]:
    """08/19/2025 (or 8-19-2025) -> 2025-08-19; None when invalid."""
    if not mmdd or not isinstance(mmdd, str):
        return None
    parts = re.split(r"[/-]", mmdd.strip())
    if len(parts) != 3:
        return None
    m, d, y = parts
    if len(y) != 4:
        return None
    try:
        mm, dd, yyyy = int(m), int(d), int(y)
    except ValueError:
        return None
    if not (1 <= mm <= 12 and 1 <= dd <= 31 and 1000 <= yyyy <= 9999):
        return None
    return f"{y}-{m.zfill(2)}-{d.zfill(2)}"


def shift_date(iso: str, days: int) -> Optional[str]:
    day = parse_iso_date(iso)
    if day is None:
        return None
    return (day + timedelta(days=days)).isoformat()


def nearby_dates(iso: str) -> List[str]:
    """Copy targets: the three previous and ten following days, excluding `iso`."""
    day = parse_iso_date(iso)
    if day is None:
        return []
    return [(day + timedelta(days=i)).isoformat() for i in range(-3, 11) if i != 0]

# =========================================================================
# Pickers
# =========================================================================

def window_choices() -> Tuple[List[str], List[str]]:
    """First-show options 05:00..19:00 and last-show options 20:00..02:00, every 30 minutes."""
    first = [f"{m // 60:02d}:{m % 60:02d}" for m in range(5 * 60, 19 * 60 + 1, 30)]
    last = [f"{(m // 60) % 24:02d}:{m % 60:02d}" for m in range(20 * 60, 26 * 60 + 1, 30)]
    return first, last


def options_around(start: datetime, first: datetime, last: datetime) -> List[str]:
    """5-minute start options within +/-90 minutes of `start`, clipped to the window."""
    seen = set()
    options = []
    for offset in range(-90, 95, 5):
        t = add_minutes(start, offset)
        if t < first or t > last:
            continue
        hm = hm_from_instant(t)
        if hm not in seen:
            seen.add(hm)
            options.append(hm)
    return options
