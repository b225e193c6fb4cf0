"""Mini README: Civil calendar helpers pinned to the configured timezone.

Structure:
    * parse_instant - coerce strings, dates and datetimes into aware instants.
    * to_civil_date / day_bounds - civil day of an instant and its boundaries.
    * days_in_month / iter_civil_days - calendar arithmetic used by proration.
    * minutes_between / calendar_days_between - interval helpers whose
      truncation rules match the reporting formulas.

Every other component derives dates through this module, so the zone is read
from ``get_settings().timezone`` here and nowhere else. Naive datetimes and
ISO datetime strings without an offset are interpreted as UTC; plain ``date``
values and bare ``YYYY-MM-DD`` strings are interpreted as local midnight.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Tuple, Union
from zoneinfo import ZoneInfo

from .configuration import get_settings
from .errors import InvalidInputError

InstantLike = Union[datetime, date, str]

_END_OF_DAY = time(23, 59, 59, 999000)


def civil_zone() -> ZoneInfo:
    """Return the zone used to derive civil dates."""

    return get_settings().zone


def now() -> datetime:
    """Current instant expressed in the civil zone."""

    return datetime.now(civil_zone())


def _local_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=civil_zone())


def parse_instant(value: InstantLike) -> datetime:
    """Return an aware datetime for ``value`` or raise ``InvalidInputError``."""

    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        return _local_midnight(value)
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in {"Z", "z"}:
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                # A bare YYYY-MM-DD names a civil day, not a UTC instant.
                return _local_midnight(date.fromisoformat(text))
            instant = datetime.fromisoformat(text)
        except ValueError as error:
            raise InvalidInputError(f"Unparseable instant: {value!r}") from error
    else:
        raise InvalidInputError(f"Unsupported instant type: {type(value).__name__}")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def to_local(value: InstantLike) -> datetime:
    """Express ``value`` in the civil zone."""

    return parse_instant(value).astimezone(civil_zone())


def to_civil_date(value: InstantLike) -> date:
    """Civil date of an instant in the configured zone."""

    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_local(value).date()


def day_bounds(day: InstantLike) -> Tuple[datetime, datetime]:
    """Return 00:00:00.000 and 23:59:59.999 local for the civil day of ``day``."""

    civil_day = to_civil_date(day)
    zone = civil_zone()
    return (
        datetime.combine(civil_day, time.min, tzinfo=zone),
        datetime.combine(civil_day, _END_OF_DAY, tzinfo=zone),
    )


def days_in_month(day: InstantLike) -> int:
    civil_day = to_civil_date(day)
    return calendar.monthrange(civil_day.year, civil_day.month)[1]


def iter_civil_days(start: InstantLike, end: InstantLike) -> Iterator[date]:
    """Yield every civil date from ``start`` through ``end`` inclusive."""

    current = to_civil_date(start)
    last = to_civil_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def minutes_between(end: InstantLike, start: InstantLike) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero."""

    seconds = (parse_instant(end) - parse_instant(start)).total_seconds()
    return math.trunc(seconds / 60)


def calendar_days_between(end: InstantLike, start: InstantLike) -> int:
    """Number of civil midnights crossed going from ``start`` to ``end``."""

    return (to_civil_date(end) - to_civil_date(start)).days
