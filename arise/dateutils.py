"""Local-time date helpers.

Every date and timestamp ARISE writes is computed here from the local wall
clock and stored as a plain string:

* dates       ``YYYY-MM-DD``
* timestamps  ``YYYY-MM-DD HH:MM:SS``

The database's own ``CURRENT_TIMESTAMP`` resolves in UTC, which files
late-night entries under the wrong day, so it is never used.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_date_string(when: date | datetime | None = None) -> str:
    """``YYYY-MM-DD`` for *when* (default: now) in local time."""
    if when is None:
        when = datetime.now()
    return when.strftime(DATE_FORMAT)


def local_datetime_string(when: datetime | None = None) -> str:
    """``YYYY-MM-DD HH:MM:SS`` for *when* (default: now) in local time."""
    if when is None:
        when = datetime.now()
    return when.strftime(DATETIME_FORMAT)


def parse_local_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` as a local calendar date.

    Only the date portion is read, so a full timestamp string works too.
    No timezone conversion is ever applied.
    """
    return datetime.strptime(value[:10], DATE_FORMAT).date()


def today_string() -> str:
    return local_date_string()


def yesterday_string(today: date | None = None) -> str:
    """The calendar day before *today* (default: the local current date)."""
    today = today or date.today()
    return local_date_string(today - timedelta(days=1))


def weekday_index(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6.

    Recurrence patterns store days in this convention; Python's
    :meth:`date.weekday` starts at Monday = 0.
    """
    return (day.weekday() + 1) % 7
