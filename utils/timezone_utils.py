# utils/timezone_utils.py
from datetime import datetime, date, timedelta, timezone
from typing import Optional
from fastapi import Header

# Real-world UTC offsets run from UTC-12:00 to UTC+14:00
MIN_OFFSET_MINUTES = -12 * 60
MAX_OFFSET_MINUTES = 14 * 60

def parse_timezone_offset(offset_str: Optional[str]) -> int:
    """
    Parse timezone offset from various formats.
    Examples: "300" (minutes), "+05:00", "-08:00"
    Unparseable or out-of-range values fall back to UTC.
    """
    if not offset_str:
        return 0

    offset_str = offset_str.strip()
    minutes = None
    try:
        # If it's already in minutes
        if offset_str.lstrip('+-').isdigit():
            minutes = int(offset_str)

        # If it's in format "+05:00" or "-08:00"
        elif ':' in offset_str:
            sign = -1 if offset_str.startswith('-') else 1
            parts = offset_str.lstrip('+-').split(':')
            hours = int(parts[0])
            mins = int(parts[1]) if len(parts) > 1 else 0
            minutes = sign * (hours * 60 + mins)
    except ValueError:
        print(f"⚠️ Invalid timezone offset {offset_str!r}, using UTC")
        return 0

    if minutes is None:
        return 0

    if not MIN_OFFSET_MINUTES <= minutes <= MAX_OFFSET_MINUTES:
        print(f"⚠️ Timezone offset {offset_str!r} is outside UTC-12:00..UTC+14:00, using UTC")
        return 0

    return minutes

def get_user_now(timezone_offset: int = 0) -> datetime:
    """Get current datetime in user's timezone."""
    utc_now = datetime.now(timezone.utc)
    return utc_now + timedelta(minutes=timezone_offset)

def get_user_today(timezone_offset: int = 0) -> date:
    """Get today's date in user's timezone. Weight entries are keyed by this date."""
    return get_user_now(timezone_offset).date()

# FastAPI dependency to extract timezone from headers
async def get_timezone_offset(
    x_timezone_offset: Optional[str] = Header(None),
    x_timezone_string: Optional[str] = Header(None)
) -> int:
    """
    Extract timezone offset from request headers.
    Returns offset in minutes from UTC.
    """
    # Try the direct offset first
    if x_timezone_offset:
        return parse_timezone_offset(x_timezone_offset)

    # Try parsing the string format
    if x_timezone_string:
        return parse_timezone_offset(x_timezone_string)

    # Default to UTC
    return 0
