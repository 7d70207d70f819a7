"""Human-readable labels for entry windows, used in conflict and preview payloads."""
from datetime import time
from typing import Iterable

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_days_of_week(days: Iterable[int] | None) -> str:
    values = sorted(set(days or ()))
    if not values:
        return "No days"
    if len(values) == 7:
        return "Every day"
    if values == [1, 2, 3, 4, 5]:
        return "Weekdays"
    if values == [0, 6]:
        return "Weekends"
    return ", ".join(DAY_NAMES[d] for d in values if 0 <= d <= 6)


def format_time(value: time | None) -> str:
    if value is None:
        return ""
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{value.hour % 12 or 12}:{value.minute:02d} {suffix}"


def format_time_range(start: time | None, end: time | None) -> str:
    if start is None and end is None:
        return "All day"
    if start is None:
        return f"Until {format_time(end)}"
    if end is None:
        return f"From {format_time(start)}"
    return f"{format_time(start)} - {format_time(end)}"
