"""Domain models for alerts and derived dashboard signals."""

from cyberradar_portal.domain.models import (
    Alert,
    AlertAction,
    AlertActionType,
    AlertCompliance,
    AlertPage,
    AlertStatus,
    AlertStatusValue,
    ComplianceTag,
    Framework,
    Severity,
    ThreatLevel,
    ThreatLevelName,
    TimeRange,
)

__all__ = [
    "Alert",
    "AlertAction",
    "AlertActionType",
    "AlertCompliance",
    "AlertPage",
    "AlertStatus",
    "AlertStatusValue",
    "ComplianceTag",
    "Framework",
    "Severity",
    "ThreatLevel",
    "ThreatLevelName",
    "TimeRange",
]
