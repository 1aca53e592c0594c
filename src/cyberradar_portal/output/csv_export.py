import csv
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from cyberradar_portal.core.compliance import requires_reporting
from cyberradar_portal.core.topics import topics_for
from cyberradar_portal.domain import Alert

LIST_SEPARATOR = "; "

COLUMNS: tuple[str, ...] = (
    "id",
    "title",
    "severity",
    "aiScore",
    "cvssScore",
    "epssScore",
    "isActivelyExploited",
    "isZeroDay",
    "alertType",
    "sourceName",
    "publishedAt",
    "fetchedAt",
    "cveIds",
    "affectedVendors",
    "affectedProducts",
    "topics",
    "nis2",
    "dora",
    "gdpr",
    "reportingRequired",
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, tuple | list):
        return LIST_SEPARATOR.join(str(item) for item in value)
    return str(value)


def alert_row(alert: Alert) -> dict[str, str]:
    compliance = alert.compliance
    row = {
        "id": alert.id,
        "title": alert.title,
        "severity": alert.severity.value,
        "aiScore": alert.ai_score,
        "cvssScore": alert.cvss_score,
        "epssScore": alert.epss_score,
        "isActivelyExploited": alert.is_actively_exploited,
        "isZeroDay": alert.is_zero_day,
        "alertType": alert.alert_type,
        "sourceName": alert.source_name or alert.source_id,
        "publishedAt": alert.published_at,
        "fetchedAt": alert.fetched_at,
        "cveIds": alert.cve_ids,
        "affectedVendors": alert.affected_vendors,
        "affectedProducts": alert.affected_products,
        "topics": topics_for(alert),
        "nis2": compliance.nis2.relevant if compliance and compliance.nis2 else None,
        "dora": compliance.dora.relevant if compliance and compliance.dora else None,
        "gdpr": compliance.gdpr.relevant if compliance and compliance.gdpr else None,
        "reportingRequired": requires_reporting(alert),
    }
    return {column: _cell(row[column]) for column in COLUMNS}


class CsvAlertExporter:
    """Writes alerts as CSV with a fixed header row."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def name(self) -> str:
        return "csv"

    @property
    def path(self) -> Path:
        return self._path

    async def export(self, alerts: Sequence[Alert]) -> int:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=COLUMNS)
            writer.writeheader()
            for alert in alerts:
                writer.writerow(alert_row(alert))
        return len(alerts)
