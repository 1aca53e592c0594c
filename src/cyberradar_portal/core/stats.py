"""Headline dashboard statistics for a window of alerts."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from cyberradar_portal.core.compliance import ComplianceSummary, aggregate_compliance
from cyberradar_portal.core.severity import normalize_severity
from cyberradar_portal.core.threat_score import round_half_up
from cyberradar_portal.core.time_range import utc_day_start
from cyberradar_portal.core.topics import topics_for
from cyberradar_portal.domain import Alert, Severity

URGENT_AI_SCORE = 90.0
URGENT_LIMIT = 5
RECENT_LIMIT = 10
UNKNOWN_SOURCE = "Unknown"

COUNTED_SEVERITIES: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
)


@dataclass(frozen=True, slots=True)
class SourceCount:
    source: str
    count: int


@dataclass(frozen=True, slots=True)
class DailyCount:
    date: date
    total: int
    critical: int


@dataclass(frozen=True, slots=True)
class PortalStats:
    total_alerts: int = 0
    by_severity: dict[Severity, int] = field(
        default_factory=lambda: dict.fromkeys(COUNTED_SEVERITIES, 0)
    )
    actively_exploited: int = 0
    zero_days: int = 0
    by_topic: dict[str, int] = field(default_factory=dict)
    by_source: tuple[SourceCount, ...] = ()
    compliance: ComplianceSummary = field(default_factory=ComplianceSummary)
    urgent_alerts: tuple[Alert, ...] = ()
    recent_alerts: tuple[Alert, ...] = ()


def is_urgent(alert: Alert) -> bool:
    return (
        alert.is_actively_exploited
        or alert.is_zero_day
        or (alert.ai_score is not None and alert.ai_score >= URGENT_AI_SCORE)
    )


def build_portal_stats(alerts: Sequence[Alert]) -> PortalStats:
    """Summarise ``alerts``, which are expected in display order (highest score first)."""
    by_severity = dict.fromkeys(COUNTED_SEVERITIES, 0)
    by_topic: Counter[str] = Counter()
    by_source: Counter[str] = Counter()
    exploited = zero_days = 0

    for alert in alerts:
        severity = normalize_severity(alert.severity)
        if severity in by_severity:
            by_severity[severity] += 1
        by_source[alert.source_name or alert.source_id or UNKNOWN_SOURCE] += 1
        by_topic.update(topics_for(alert))
        exploited += alert.is_actively_exploited
        zero_days += alert.is_zero_day

    sources = sorted(
        (SourceCount(source=name, count=count) for name, count in by_source.items()),
        key=lambda item: item.count,
        reverse=True,
    )

    return PortalStats(
        total_alerts=len(alerts),
        by_severity=by_severity,
        actively_exploited=exploited,
        zero_days=zero_days,
        by_topic=dict(by_topic),
        by_source=tuple(sources),
        compliance=aggregate_compliance(alerts),
        urgent_alerts=tuple([alert for alert in alerts if is_urgent(alert)][:URGENT_LIMIT]),
        recent_alerts=tuple(alerts[:RECENT_LIMIT]),
    )


def daily_counts(alerts: Sequence[Alert], now: datetime, days: int = 7) -> list[DailyCount]:
    """Per-UTC-day totals for the last ``days`` days including today, oldest first."""
    today = utc_day_start(now)
    buckets: list[DailyCount] = []
    for offset in range(days - 1, -1, -1):
        day_start = today - timedelta(days=offset)
        day_end = day_start + timedelta(days=1)
        in_day = [
            alert
            for alert in alerts
            if alert.timestamp is not None and day_start <= alert.timestamp < day_end
        ]
        buckets.append(
            DailyCount(
                date=day_start.date(),
                total=len(in_day),
                critical=sum(
                    1 for alert in in_day if normalize_severity(alert.severity) is Severity.CRITICAL
                ),
            )
        )
    return buckets


def change_percent(current: int, previous: int) -> float:
    """Relative change against the previous period, one decimal place."""
    if previous <= 0:
        return 0.0
    return round_half_up((current - previous) / previous * 1000) / 10
