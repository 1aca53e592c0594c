"""Daily threat score: one 0-100 risk signal for a window of alerts."""

import math
from collections.abc import Iterable
from typing import Any, Protocol

from cyberradar_portal.core.severity import normalize_severity
from cyberradar_portal.domain import Severity, ThreatLevel, ThreatLevelName

CRITICAL_WEIGHT, CRITICAL_CAP = 5.0, 30.0
HIGH_WEIGHT, HIGH_CAP = 1.5, 20.0
EXPLOITED_WEIGHT, EXPLOITED_CAP = 12.0, 25.0
ZERO_DAY_BONUS = 15.0
WORST_ALERT_FACTOR = 0.1

# evaluated top down, first match wins
_LEVELS: tuple[tuple[int, ThreatLevelName, str, str, str], ...] = (
    (75, ThreatLevelName.CRITICAL, "Critical", "red", "🔴"),
    (50, ThreatLevelName.ELEVATED, "Elevated", "orange", "🟠"),
    (30, ThreatLevelName.MODERATE, "Moderate", "amber", "🟡"),
    (0, ThreatLevelName.NORMAL, "Normal", "emerald", "🟢"),
)


class ThreatSignal(Protocol):
    """The alert fields the score depends on."""

    @property
    def severity(self) -> Any:
        ...

    @property
    def is_actively_exploited(self) -> bool:
        ...

    @property
    def is_zero_day(self) -> bool:
        ...

    @property
    def ai_score(self) -> float | None:
        ...


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def threat_level_for(score: int) -> ThreatLevel:
    for threshold, level, label, color, emoji in _LEVELS:
        if score >= threshold:
            return ThreatLevel(score=score, level=level, label=label, color=color, emoji=emoji)
    _, level, label, color, emoji = _LEVELS[-1]
    return ThreatLevel(score=score, level=level, label=label, color=color, emoji=emoji)


def calculate_threat_score(
    critical: int,
    high: int,
    exploited: int,
    zero_days: int,
    max_ai_score: float,
    total: int,
) -> ThreatLevel:
    """Weighted, per-term capped score from pre-computed counts."""
    if total <= 0:
        return threat_level_for(0)

    raw = (
        min(critical * CRITICAL_WEIGHT, CRITICAL_CAP)
        + min(high * HIGH_WEIGHT, HIGH_CAP)
        + min(exploited * EXPLOITED_WEIGHT, EXPLOITED_CAP)
        + (ZERO_DAY_BONUS if zero_days > 0 else 0.0)
        + max(max_ai_score, 0.0) * WORST_ALERT_FACTOR
    )
    return threat_level_for(round_half_up(min(max(raw, 0.0), 100.0)))


def score_alerts(alerts: Iterable[ThreatSignal]) -> ThreatLevel:
    """Score a window of alerts. Order of ``alerts`` never matters."""
    total = critical = high = exploited = zero_days = 0
    max_ai_score = 0.0

    for alert in alerts:
        total += 1
        severity = normalize_severity(alert.severity)
        if severity is Severity.CRITICAL:
            critical += 1
        elif severity is Severity.HIGH:
            high += 1
        if alert.is_actively_exploited:
            exploited += 1
        if alert.is_zero_day:
            zero_days += 1
        if alert.ai_score is not None and alert.ai_score > max_ai_score:
            max_ai_score = float(alert.ai_score)

    return calculate_threat_score(critical, high, exploited, zero_days, max_ai_score, total)
