"""Timestamp parsing and calendar-day utilities."""
from datetime import date, datetime, time, timezone
from typing import Union

from dateutil import parser

from spendwatch.errors import MalformedDateError

DateLike = Union[datetime, date, str]

_PARSE_DEFAULT = datetime(1970, 1, 1)


def ensure_utc(value: Union[datetime, date]) -> datetime:
    """
    Return an aware datetime.

    Naive datetimes are assumed to be UTC, bare dates become midnight UTC,
    and aware datetimes are converted to UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise MalformedDateError(value)


def parse_timestamp(s: DateLike, field: str = "date") -> datetime:
    """
    Parse a timestamp into an aware UTC datetime.

    Supports:
    - datetime / date objects (passed through ``ensure_utc``)
    - ISO format with "Z" suffix: "2024-01-02T09:10:00Z"
    - ISO format with timezone: "2024-01-02T09:10:00+00:00"
    - ISO format without timezone or date only: "2024-01-02"
    - Space-separated: "2024-01-02 09:10:00"
    - Other common forms via dateutil, day first: "02/01/2024", "2 Jan 2024"

    Raises:
        MalformedDateError: If the value cannot be parsed. There is no
            fallback to the current time.
    """
    if isinstance(s, (datetime, date)):
        return ensure_utc(s)
    if not isinstance(s, str) or not s.strip():
        raise MalformedDateError(s, field)

    text = s.strip()

    # Convert trailing "Z" to "+00:00" for ISO format compatibility
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    # Anything else, e.g. the "02/01/2024" display format; fixed default so a
    # partial date never borrows from the current day
    try:
        return ensure_utc(parser.parse(text, dayfirst=True, default=_PARSE_DEFAULT))
    except (ValueError, OverflowError):
        pass

    raise MalformedDateError(s, field)


def start_of_day(value: Union[datetime, date]) -> datetime:
    """Midnight UTC of the calendar day containing ``value``."""
    return datetime.combine(ensure_utc(value).date(), time.min, tzinfo=timezone.utc)


def days_between(target: Union[datetime, date], reference: Union[datetime, date]) -> int:
    """
    Whole calendar days from ``reference`` to ``target``; time of day is ignored.

    Both days are read in ``reference``'s timezone, so an evening ``now`` at
    -05:00 is still that evening's day. Naive values and bare dates are UTC.
    """
    if not (isinstance(reference, datetime) and reference.tzinfo is not None):
        reference = ensure_utc(reference)
    target = ensure_utc(target).astimezone(reference.tzinfo)
    return (target.date() - reference.date()).days
