"""RFC 3339 timestamp parsing and Zeek-style epoch rendering.

Accepts ``YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)`` with 1-9
fractional digits. ``T``/``Z`` may be lowercase. Leap seconds (``:60``) are
rejected, as are out-of-range calendar fields.
"""

import re
from datetime import date

from corelight_tsv.errors import TimestampError
from corelight_tsv.models import Timestamp

_RFC3339_RE = re.compile(
    r'(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})'
    r'[Tt]'
    r'(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})'
    r'(?:\.(?P<fraction>\d{1,9}))?'
    r'(?P<zone>[Zz]|[+-]\d{2}:\d{2})',
    re.ASCII,
)

_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()


def _zone_offset(zone: str) -> int:
    """Offset east of UTC in seconds."""
    if zone in ("Z", "z"):
        return 0
    hours = int(zone[1:3])
    minutes = int(zone[4:6])
    if hours > 23 or minutes > 59:
        raise TimestampError(f"invalid zone offset {zone!r}")
    offset = hours * 3600 + minutes * 60
    return -offset if zone[0] == "-" else offset


def parse_rfc3339(text: str) -> Timestamp:
    """Parse *text* into an exact :class:`Timestamp`.

    Raises TimestampError for anything that is not a complete RFC 3339
    date-time.
    """
    m = _RFC3339_RE.fullmatch(text)
    if not m:
        raise TimestampError(f"not an RFC 3339 timestamp: {text!r}")

    try:
        day = date(int(m.group("year")), int(m.group("month")), int(m.group("day")))
    except ValueError as e:
        raise TimestampError(f"invalid date in {text!r}: {e}") from e

    hour = int(m.group("hour"))
    minute = int(m.group("minute"))
    second = int(m.group("second"))
    if hour > 23 or minute > 59 or second > 59:
        raise TimestampError(f"invalid time of day in {text!r}")

    fraction = m.group("fraction") or ""
    nsec = int(fraction.ljust(9, "0")) if fraction else 0

    days = day.toordinal() - _EPOCH_ORDINAL
    sec = days * 86400 + hour * 3600 + minute * 60 + second
    sec -= _zone_offset(m.group("zone"))
    return Timestamp(sec=sec, nsec=nsec)


def format_epoch(ts: Timestamp) -> str:
    """Render *ts* as epoch seconds with exactly six decimals.

    Goes through a float of the nanosecond count, which is what existing
    Zeek TSV consumers were fed; sub-microsecond digits are rounded away.
    """
    return "%.6f" % (float(ts.unix_nano()) / 1e9)
