"""
Date parsing and clock helpers for the date/time visibility control.

Stored values use fixed, locale-independent formats:
- date fields:      YYYYMMDD             (e.g. 20240115)
- date-time fields: YYYY-MM-DD HH:MM:SS  (e.g. 2024-01-15 14:30:00)
"""

import re
from datetime import datetime, tzinfo
from typing import Callable

from dateutil import tz

from datetime_control.core.schema import DateGranularity

DATE_ONLY_FORMAT = "%Y%m%d"
DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# strptime accepts single-digit components, so the shape is checked first
_DATE_ONLY_PATTERN = re.compile(r"^\d{8}$")
_DATE_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

DEFAULT_TIMEZONE = "UTC"


def get_reference_timezone(name: str | None = None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to UTC.

    Args:
        name: Timezone name such as "Europe/Berlin". None or empty means UTC.

    Returns:
        A tzinfo instance.
    """
    if not name:
        return tz.UTC
    zone = tz.gettz(name)
    return zone if zone is not None else tz.UTC


def parse_field_value(
    raw_value: str | None,
    granularity: DateGranularity,
    timezone: tzinfo,
) -> datetime | None:
    """Parse a raw stored field value into a timezone-aware datetime.

    Date-only values become midnight in the reference timezone.
    Returns None if the value does not match the expected format.

    Args:
        raw_value: The unformatted value as stored by the host.
        granularity: Whether the field stores a date or a date-time.
        timezone: The reference timezone.

    Returns:
        An aware datetime, or None if parsing fails.
    """
    if not raw_value or not isinstance(raw_value, str):
        return None

    value = raw_value.strip()

    if granularity is DateGranularity.DATE_ONLY:
        pattern, fmt = _DATE_ONLY_PATTERN, DATE_ONLY_FORMAT
    elif granularity is DateGranularity.DATE_TIME:
        pattern, fmt = _DATE_TIME_PATTERN, DATE_TIME_FORMAT
    else:
        return None

    if not pattern.match(value):
        return None

    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return None

    return parsed.replace(tzinfo=timezone)


def current_instant(
    timezone: tzinfo,
    granularity: DateGranularity,
    now_provider: Callable[[], datetime] | None = None,
) -> datetime:
    """Return "now" in the reference timezone.

    For date-only comparisons the result is truncated to midnight so the
    comparison is day-granular.

    Args:
        timezone: The reference timezone.
        granularity: Granularity of the field being compared against.
        now_provider: Optional clock. Naive results are read as wall-clock
            time in the reference timezone.

    Returns:
        An aware datetime.
    """
    now = now_provider() if now_provider is not None else datetime.now(timezone)

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone)
    else:
        now = now.astimezone(timezone)

    if granularity is DateGranularity.DATE_ONLY:
        now = now.replace(hour=0, minute=0, second=0, microsecond=0)

    return now


def is_truthy(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
