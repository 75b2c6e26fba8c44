"""Due-date expressions: absolute, relative and weekday forms.

Pure functions; `today` is always passed in by the caller.
"""

import re
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from .errors import InvalidDateError

_RELATIVE = re.compile(r"^\+(\d+)([dw])$")

_WEEKDAYS: Dict[str, int] = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thu": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}


def _parse_absolute(text: str) -> Optional[date]:
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def next_weekday(start: date, weekday: int) -> date:
    """First date strictly after `start` that falls on `weekday` (Mon=0)."""
    ahead = (weekday - start.weekday()) % 7
    return start + timedelta(days=ahead or 7)


def parse_due(value: str, today: date) -> date:
    """Resolve `YYYY-MM-DD`, today, tomorrow, +Nd, +Nw or a weekday name."""
    text = (value or "").strip().lower()

    absolute = _parse_absolute(text)
    if absolute is not None:
        return absolute

    if text == "today":
        return today
    if text == "tomorrow":
        return today + timedelta(days=1)

    match = _RELATIVE.match(text)
    if match:
        amount = int(match.group(1))
        try:
            delta = timedelta(days=amount) if match.group(2) == "d" else timedelta(weeks=amount)
            return today + delta
        except OverflowError:
            raise InvalidDateError(value) from None

    if text in _WEEKDAYS:
        return next_weekday(today, _WEEKDAYS[text])

    raise InvalidDateError(value)


__all__ = ["parse_due", "next_weekday"]
