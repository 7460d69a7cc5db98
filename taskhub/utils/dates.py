"""Date handling shared by validation, task writes and stats.

The store keeps naive UTC datetimes. Input without an offset is local time,
so both stored due dates and the start-of-day cutoff are converted from the
local frame the same way.
"""

from datetime import date, datetime, time, timezone


def to_naive_utc(value):
    # astimezone() treats a naive value as local time
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_due_date(value):
    """Parse an ISO-8601 date or datetime string into a naive UTC datetime.

    ``None`` passes through. A date-only value means local midnight of that
    day; a datetime without an offset is local time.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return to_naive_utc(parsed)


def start_of_day_utc(day=None):
    """Local midnight of ``day`` (default today), as a naive UTC datetime."""
    return to_naive_utc(datetime.combine(day or date.today(), time.min))
