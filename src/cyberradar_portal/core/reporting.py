"""Regulatory reporting hints for alerts (NIS2 reporting obligation)."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from cyberradar_portal.core.severity import normalize_severity
from cyberradar_portal.domain import Alert, Framework, Severity

ReportingSeverity = Literal["critical", "high", "medium"]

EARLY_WARNING_DELAY = timedelta(hours=24)
NOTIFICATION_DELAY = timedelta(hours=72)
FINAL_REPORT_DELAY = timedelta(days=30)
CRITICAL_CVSS = 9.0

BSI_PORTAL_URL = "https://mip2.bsi.bund.de"


@dataclass(frozen=True, slots=True)
class ReportingDeadlines:
    noticed_at: datetime
    early_warning: datetime
    notification: datetime
    final_report: datetime


@dataclass(frozen=True, slots=True)
class ReportingLink:
    framework: Framework
    label: str
    url: str
    authority: str


REPORTING_LINKS: dict[Framework, ReportingLink] = {
    Framework.NIS2: ReportingLink(
        framework=Framework.NIS2,
        label="BSI MIP (NIS2/BSIG)",
        url="https://mip2.bsi.bund.de/de/meldestellen-uebersicht/",
        authority="BSI",
    ),
    Framework.DORA: ReportingLink(
        framework=Framework.DORA,
        label="BaFin MVP-Portal (DORA)",
        url="https://www.bafin.de/DE/DieBaFin/Service/MVP-Portal/mvp_portal_node.html",
        authority="BaFin",
    ),
    Framework.GDPR: ReportingLink(
        framework=Framework.GDPR,
        label="DSK Aufsichtsbehörden (DSGVO)",
        url="https://www.datenschutzkonferenz-online.de/aufsichtsbehoerden.html",
        authority="Landes-/Bundesdatenschutzbehörde",
    ),
}


def is_reporting_relevant(alert: Alert) -> bool:
    """Whether an alert should be flagged for a NIS2 report."""
    nis2 = alert.compliance.nis2 if alert.compliance is not None else None
    critical = normalize_severity(alert.severity) is Severity.CRITICAL

    if nis2 is not None and nis2.reporting_required:
        return True
    if nis2 is not None and nis2.relevant == "yes" and alert.is_actively_exploited:
        return True
    if alert.is_actively_exploited and critical and (alert.cvss_score or 0.0) >= CRITICAL_CVSS:
        return True
    return alert.is_zero_day and critical


def reporting_deadlines(noticed_at: datetime) -> ReportingDeadlines:
    return ReportingDeadlines(
        noticed_at=noticed_at,
        early_warning=noticed_at + EARLY_WARNING_DELAY,
        notification=noticed_at + NOTIFICATION_DELAY,
        final_report=noticed_at + FINAL_REPORT_DELAY,
    )


def reporting_severity(alert: Alert) -> ReportingSeverity:
    if alert.is_actively_exploited and normalize_severity(alert.severity) is Severity.CRITICAL:
        return "critical"
    if alert.is_actively_exploited or alert.is_zero_day:
        return "high"
    return "medium"


def reporting_links(
    nis2: bool = False, dora: bool = False, gdpr: bool = False
) -> list[ReportingLink]:
    applicable = {Framework.NIS2: nis2, Framework.DORA: dora, Framework.GDPR: gdpr}
    return [REPORTING_LINKS[framework] for framework, flag in applicable.items() if flag]
