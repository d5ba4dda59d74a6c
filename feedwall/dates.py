"""Date parsing and the two display filters used by the templates."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from dateutil import parser as dp

logger = logging.getLogger(__name__)

DateLike = Union[datetime, str, None]

# Average month/year lengths in days, used for the coarse buckets.
_DAYS_PER_MONTH = 30.436875
_DAYS_PER_YEAR = 365.2425

# Fields missing from a date string are filled from this; a year left at 1
# means the string named no year.
_MISSING_FIELDS = datetime(1, 1, 1)


def parse_date(value: DateLike) -> Optional[datetime]:
    """Return a timezone-aware datetime, or None for empty/unparseable input.

    Naive values are assumed to be UTC.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dp.parse(str(value), default=_MISSING_FIELDS)
        except (ValueError, OverflowError) as exc:
            logger.debug("Unable to parse date %r: %s", value, exc)
            return None
        if parsed.year == _MISSING_FIELDS.year:
            logger.debug("Ignoring date without a year: %r", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _relative_phrase(seconds: int) -> str:
    minutes = round(seconds / 60)
    hours = round(minutes / 60)
    days = round(hours / 24)
    months = round(days / _DAYS_PER_MONTH)
    years = round(days / _DAYS_PER_YEAR)

    if seconds <= 44:
        return "a few seconds"
    if minutes <= 1:
        return "a minute"
    if minutes < 45:
        return f"{minutes} minutes"
    if hours <= 1:
        return "an hour"
    if hours < 22:
        return f"{hours} hours"
    if days <= 1:
        return "a day"
    if days < 26:
        return f"{days} days"
    if months <= 1:
        return "a month"
    if months < 11:
        return f"{months} months"
    if years <= 1:
        return "a year"
    return f"{years} years"


def time_ago(value: DateLike, now: Optional[datetime] = None) -> str:
    """Describe ``value`` relative to ``now``, e.g. ``"3 hours ago"``."""
    moment = parse_date(value)
    if moment is None:
        return ""
    reference = parse_date(now) or datetime.now(timezone.utc)
    delta = (reference - moment).total_seconds()
    phrase = _relative_phrase(round(abs(delta)))
    if delta < 0:
        return f"in {phrase}"
    return f"{phrase} ago"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def formatted_full_date(value: DateLike) -> str:
    """Format as ``"October 17th 2013, 2:05 pm"`` in the value's own timezone."""
    moment = parse_date(value)
    if moment is None:
        return ""
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return (
        f"{moment.strftime('%B')} {_ordinal(moment.day)} {moment.year}, "
        f"{hour}:{moment.minute:02d} {meridiem}"
    )
