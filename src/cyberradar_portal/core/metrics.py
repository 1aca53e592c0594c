"""Workflow compliance metrics for the evidence pack.

Answers "how fast did we react" for a window of alerts: how many were
acknowledged and resolved, the mean time to acknowledge and to resolve,
and which critical or high alerts are still open.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from cyberradar_portal.core.severity import normalize_severity
from cyberradar_portal.core.threat_score import round_half_up
from cyberradar_portal.domain import Alert, AlertStatus, AlertStatusValue, Severity, TimeRange

UNRESOLVED_LIMIT = 20
UNRESOLVED_SEVERITIES = frozenset({Severity.CRITICAL, Severity.HIGH})


@dataclass(frozen=True, slots=True)
class SeverityProgress:
    total: int = 0
    acknowledged: int = 0
    resolved: int = 0


@dataclass(frozen=True, slots=True)
class UnresolvedAlert:
    alert_id: str
    title: str
    severity: Severity
    days_open: int


@dataclass(frozen=True, slots=True)
class ComplianceMetrics:
    window: TimeRange
    total_alerts: int = 0
    acknowledged: int = 0
    acknowledged_percent: int = 0
    resolved: int = 0
    resolved_percent: int = 0
    dismissed: int = 0
    avg_response_time_hours: float | None = None
    avg_resolution_time_hours: float | None = None
    by_status: dict[AlertStatusValue, int] = field(
        default_factory=lambda: dict.fromkeys(AlertStatusValue, 0)
    )
    by_severity: dict[Severity, SeverityProgress] = field(default_factory=dict)
    unresolved: tuple[UnresolvedAlert, ...] = ()


def mean_hours(durations: list[timedelta]) -> float | None:
    """Mean of ``durations`` in hours, one decimal, rounded half up."""
    if not durations:
        return None
    hours = sum(durations, timedelta(0)) / len(durations) / timedelta(hours=1)
    return round_half_up(hours * 10) / 10


def percent_of(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole > 0 else 0


def compliance_metrics(
    alerts: Iterable[Alert],
    statuses: Mapping[str, AlertStatus],
    window: TimeRange,
    now: datetime | None = None,
) -> ComplianceMetrics:
    """Reaction metrics for ``alerts`` given their workflow ``statuses``.

    Alerts with no entry in ``statuses`` count as new. Alerts timestamped
    outside ``window`` are ignored; alerts without a timestamp are counted.
    Response time runs from publication to acknowledgement, resolution time
    from acknowledgement to resolution.
    """
    now = now or datetime.now(UTC)

    total = acknowledged = resolved = dismissed = 0
    by_status = dict.fromkeys(AlertStatusValue, 0)
    by_severity: dict[Severity, SeverityProgress] = {}
    response_times: list[timedelta] = []
    resolution_times: list[timedelta] = []
    unresolved: list[UnresolvedAlert] = []

    for alert in alerts:
        published = alert.timestamp
        if published is not None and not window.contains(published):
            continue

        total += 1
        status = statuses.get(alert.id)
        value = status.status if status is not None else AlertStatusValue.NEW
        by_status[value] += 1

        severity = normalize_severity(alert.severity)
        progress = by_severity.get(severity, SeverityProgress())
        was_acknowledged = was_resolved = False

        acknowledged_at = status.acknowledged_at if status is not None else None
        if acknowledged_at is not None and published is not None:
            acknowledged += 1
            was_acknowledged = True
            response_times.append(acknowledged_at - published)

        if value is AlertStatusValue.RESOLVED:
            resolved += 1
            was_resolved = True
            if status.resolved_at is not None and acknowledged_at is not None:
                resolution_times.append(status.resolved_at - acknowledged_at)
        elif value is AlertStatusValue.DISMISSED:
            dismissed += 1

        by_severity[severity] = SeverityProgress(
            total=progress.total + 1,
            acknowledged=progress.acknowledged + was_acknowledged,
            resolved=progress.resolved + was_resolved,
        )

        if severity in UNRESOLVED_SEVERITIES and (status is None or status.is_open):
            age = (now - published) / timedelta(days=1) if published is not None else 0.0
            unresolved.append(
                UnresolvedAlert(
                    alert_id=alert.id,
                    title=alert.display_title,
                    severity=severity,
                    days_open=max(0, round_half_up(age)),
                )
            )

    unresolved.sort(key=lambda item: item.days_open, reverse=True)
    return ComplianceMetrics(
        window=window,
        total_alerts=total,
        acknowledged=acknowledged,
        acknowledged_percent=percent_of(acknowledged, total),
        resolved=resolved,
        resolved_percent=percent_of(resolved, total),
        dismissed=dismissed,
        avg_response_time_hours=mean_hours(response_times),
        avg_resolution_time_hours=mean_hours(resolution_times),
        by_status=by_status,
        by_severity=by_severity,
        unresolved=tuple(unresolved[:UNRESOLVED_LIMIT]),
    )
