__version__ = "0.1.0"

from cyberradar_portal.config import Settings
from cyberradar_portal.core import (
    aggregate_compliance,
    categorize_alert,
    compliance_metrics,
    normalize_severity,
    previous_period,
    resolve_time_range,
    score_alerts,
)
from cyberradar_portal.core.portal import Portal, open_portal
from cyberradar_portal.domain import (
    Alert,
    AlertAction,
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
from cyberradar_portal.query import AlertQuery, AlertQueryFacade, AlertWorkflow

__all__ = [
    "__version__",
    "Settings",
    "Portal",
    "open_portal",
    "AlertQuery",
    "AlertQueryFacade",
    "AlertWorkflow",
    "Alert",
    "AlertAction",
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
    "aggregate_compliance",
    "categorize_alert",
    "compliance_metrics",
    "normalize_severity",
    "previous_period",
    "resolve_time_range",
    "score_alerts",
]
