"""Pure dashboard computations over already-fetched alerts."""

from cyberradar_portal.core.compliance import (
    ComplianceSummary,
    FrameworkCounts,
    aggregate_compliance,
    requires_reporting,
)
from cyberradar_portal.core.metrics import ComplianceMetrics, compliance_metrics
from cyberradar_portal.core.severity import normalize_severity, severity_rank
from cyberradar_portal.core.threat_score import calculate_threat_score, score_alerts
from cyberradar_portal.core.time_range import (
    parse_iso_datetime,
    previous_period,
    resolve_time_range,
)
from cyberradar_portal.core.topics import TOPICS, categorize_alert, topics_for
from cyberradar_portal.core.workflow import apply_action, empty_status

__all__ = [
    "ComplianceMetrics",
    "ComplianceSummary",
    "FrameworkCounts",
    "TOPICS",
    "aggregate_compliance",
    "apply_action",
    "calculate_threat_score",
    "categorize_alert",
    "compliance_metrics",
    "empty_status",
    "normalize_severity",
    "parse_iso_datetime",
    "previous_period",
    "requires_reporting",
    "resolve_time_range",
    "score_alerts",
    "severity_rank",
    "topics_for",
]
