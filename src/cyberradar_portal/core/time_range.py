import re
from datetime import UTC, datetime, time, timedelta
from typing import Any

from cyberradar_portal.domain import TimeRange

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

TODAY_LABEL = "Today"
CUSTOM_LABEL = "Custom range"
PREVIOUS_LABEL = "Previous period"

EARLIEST = datetime.min.replace(tzinfo=UTC)
LATEST = datetime.max.replace(tzinfo=UTC)


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or timestamp into an aware UTC datetime.

    Returns ``None`` for anything that cannot be parsed or that falls outside
    the representable UTC range. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError:
        return None


def utc_day_start(moment: datetime) -> datetime:
    return datetime.combine(moment.astimezone(UTC).date(), time.min, tzinfo=UTC)


def shift(moment: datetime, delta: timedelta) -> datetime:
    """``moment + delta``, saturating at the ends of the datetime range."""
    try:
        return moment + delta
    except OverflowError:
        return LATEST if delta > timedelta(0) else EARLIEST


def _days_before(moment: datetime, days: int) -> datetime:
    if days >= (moment - EARLIEST).days:
        return EARLIEST
    return moment - timedelta(days=days)


def _is_date_only(value: str | None) -> bool:
    return bool(value) and bool(_DATE_ONLY.match(value.strip()))


def resolve_time_range(
    days: int | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    now: datetime | None = None,
) -> TimeRange:
    """Resolve request parameters into a canonical UTC window.

    Explicit ``start_date``/``end_date`` win over ``days``. A date-only
    ``end_date`` is inclusive, so the window ends at the start of the next
    UTC day. Unparseable dates are ignored. Bounds that would leave the
    datetime range are pinned to ``EARLIEST``/``LATEST``.
    """
    now = parse_iso_datetime(now) if now is not None else datetime.now(UTC)
    if now is None:
        now = datetime.now(UTC)

    start = parse_iso_datetime(start_date)
    end = parse_iso_datetime(end_date)
    if end is not None and _is_date_only(end_date):
        end = shift(utc_day_start(end), timedelta(days=1))

    if start is not None or end is not None:
        range_start = utc_day_start(start if start is not None else now)
        range_end = end if end is not None else now
        # inverted input collapses to an empty window at the end bound
        return TimeRange(
            start=min(range_start, range_end),
            end=range_end,
            days=None,
            label=CUSTOM_LABEL,
        )

    if not days or days < 0:
        return TimeRange(start=utc_day_start(now), end=now, days=0, label=TODAY_LABEL)

    return TimeRange(
        start=utc_day_start(_days_before(now, days)),
        end=now,
        days=days,
        label=f"{days} days",
    )


def previous_period(current: TimeRange) -> TimeRange:
    """The interval of equal length that ends where ``current`` starts.

    Near ``EARLIEST`` the start is pinned there, so the previous period is
    shorter than ``current``.
    """
    return TimeRange(
        start=shift(current.start, -current.duration),
        end=current.start,
        days=current.days,
        label=PREVIOUS_LABEL,
    )
