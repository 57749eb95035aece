"""Clock helpers. Times are minutes since the day's midnight and may run past 24:00."""

from typing import Union

MINUTES_PER_DAY = 24 * 60


def parse_clock(value: str) -> int:
    """Convert 'HH:MM' into minutes since midnight"""
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def format_clock(minutes: Union[int, float]) -> str:
    """Format minutes as 'HH:MM', wrapping past 24:00"""
    total = int(round(minutes)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def is_next_day(minutes: Union[int, float]) -> bool:
    return minutes >= MINUTES_PER_DAY
