"""Core domain models for alerts, time windows and derived threat signals."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any


class Severity(StrEnum):
    """Canonical alert severity taxonomy."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"
    UNKNOWN = "unknown"


class ThreatLevelName(StrEnum):
    NORMAL = "normal"
    MODERATE = "moderate"
    ELEVATED = "elevated"
    CRITICAL = "critical"


class AlertStatusValue(StrEnum):
    """Where an alert stands in the analyst workflow."""

    NEW = "new"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class AlertActionType(StrEnum):
    ACKNOWLEDGED = "acknowledged"
    ASSESSED = "assessed"
    ASSIGNED = "assigned"
    STATUS_CHANGED = "status_changed"
    COMMENT_ADDED = "comment_added"
    EVIDENCE_EXPORTED = "evidence_exported"
    BOARD_REPORTED = "board_reported"
    MELDUNG_STARTED = "meldung_started"
    TICKET_CREATED = "ticket_created"
    DISMISSED = "dismissed"


class Framework(StrEnum):
    """Regulatory frameworks an alert can be tagged for."""

    NIS2 = "nis2"
    DORA = "dora"
    GDPR = "gdpr"


@dataclass(frozen=True, slots=True)
class ComplianceTag:
    """Relevance verdict for one regulatory framework."""

    relevant: str
    confidence: str = "low"
    reasoning: str = ""
    reporting_required: bool | None = None
    reporting_deadline_hours: int | None = None
    references: tuple[str, ...] = ()
    action_items: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AlertCompliance:
    nis2: ComplianceTag | None = None
    dora: ComplianceTag | None = None
    gdpr: ComplianceTag | None = None

    def tag(self, framework: Framework) -> ComplianceTag | None:
        return getattr(self, framework.value)


@dataclass(frozen=True, slots=True)
class Alert:
    """An enriched security alert as stored in the alert store."""

    id: str
    title: str
    severity: Severity = Severity.UNKNOWN
    ai_score: float | None = None
    is_actively_exploited: bool = False
    is_zero_day: bool = False
    alert_type: str | None = None
    source_id: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    source_category: str | None = None
    published_at: datetime | None = None
    fetched_at: datetime | None = None
    title_de: str | None = None
    description: str = ""
    summary: str | None = None
    summary_de: str | None = None
    cvss_score: float | None = None
    epss_score: float | None = None
    epss_percentile: float | None = None
    cve_ids: tuple[str, ...] = ()
    affected_vendors: tuple[str, ...] = ()
    affected_products: tuple[str, ...] = ()
    affected_versions: tuple[str, ...] = ()
    compliance: AlertCompliance | None = None

    @property
    def timestamp(self) -> datetime | None:
        """Publication time, falling back to ingestion time."""
        return self.published_at or self.fetched_at

    @property
    def display_title(self) -> str:
        return self.title_de or self.title


@dataclass(frozen=True, slots=True)
class TimeRange:
    """A UTC half-open interval ``[start, end)``.

    ``days`` is ``None`` for an explicit custom range and the rolling window
    size otherwise.
    """

    start: datetime
    end: datetime
    days: int | None
    label: str

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_custom(self) -> bool:
        return self.days is None

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True, slots=True)
class ThreatLevel:
    """Aggregate 0-100 risk signal for a window of alerts."""

    score: int
    level: ThreatLevelName
    label: str
    color: str
    emoji: str


@dataclass(frozen=True, slots=True)
class AlertPage:
    """One page of alerts returned by the query facade."""

    alerts: tuple[Alert, ...] = field(default_factory=tuple)
    total: int = 0
    page: int = 1
    page_size: int = 25

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


@dataclass(frozen=True, slots=True)
class AlertStatus:
    """Mutable workflow state of one alert, stored one document per alert.

    ``alert_id`` doubles as the document id and the partition key.
    """

    alert_id: str
    status: AlertStatusValue = AlertStatusValue.NEW
    tenant_id: str = "default"
    assigned_to: str | None = None
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None
    resolved_at: datetime | None = None
    priority: str | None = None
    notes: str | None = None
    ticket_ref: str | None = None
    last_updated_at: datetime | None = None
    last_updated_by: str = "system"

    @property
    def is_open(self) -> bool:
        return self.status not in (AlertStatusValue.RESOLVED, AlertStatusValue.DISMISSED)


@dataclass(frozen=True, slots=True)
class AlertAction:
    """One append-only audit record of something an analyst did to an alert."""

    id: str
    alert_id: str
    action: AlertActionType
    performed_by: str
    performed_at: datetime
    tenant_id: str = "default"
    details: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
