import math
from typing import Any

from cyberradar_portal.core.severity import normalize_severity
from cyberradar_portal.core.time_range import parse_iso_datetime
from cyberradar_portal.domain import Alert, AlertCompliance, ComplianceTag

_RELEVANCE = frozenset({"yes", "no", "conditional"})
_CONFIDENCE = frozenset({"high", "medium", "low"})


class AlertDocumentParser:
    """Parser for alert documents as stored by the enrichment pipeline.

    Documents use camelCase keys, for example:
    {
        "id": "...",
        "title": "...",
        "severity": "critical" or legacy "KRITISCH",
        "aiScore": 87,
        "publishedAt": "2025-01-14T12:00:00.000Z",
        "compliance": {"nis2": {"relevant": "yes", ...}, ...}
    }
    """

    def parse(self, document: dict[str, Any]) -> Alert | None:
        """Parse one document.

        Returns None when the document lacks an id; every other field falls
        back to a neutral default.
        """
        if not isinstance(document, dict):
            return None

        alert_id = document.get("id")
        if not alert_id:
            return None

        return Alert(
            id=str(alert_id),
            title=self._text(document.get("title")) or "",
            title_de=self._text(document.get("titleDe")),
            description=self._text(document.get("description")) or "",
            summary=self._text(document.get("summary")),
            summary_de=self._text(document.get("summaryDe")),
            severity=normalize_severity(document.get("severity")),
            ai_score=self._number(document.get("aiScore")),
            cvss_score=self._number(document.get("cvssScore")),
            epss_score=self._number(document.get("epssScore")),
            epss_percentile=self._number(document.get("epssPercentile")),
            is_actively_exploited=document.get("isActivelyExploited") is True,
            is_zero_day=document.get("isZeroDay") is True,
            alert_type=self._text(document.get("alertType")),
            source_id=self._text(document.get("sourceId")),
            source_name=self._text(document.get("sourceName")),
            source_url=self._text(document.get("sourceUrl")),
            source_category=self._text(document.get("sourceCategory")),
            published_at=parse_iso_datetime(document.get("publishedAt")),
            fetched_at=parse_iso_datetime(document.get("fetchedAt")),
            cve_ids=self._strings(document.get("cveIds")),
            affected_vendors=self._strings(document.get("affectedVendors")),
            affected_products=self._strings(document.get("affectedProducts")),
            affected_versions=self._strings(document.get("affectedVersions")),
            compliance=self._compliance(document.get("compliance")),
        )

    def parse_many(self, documents: list[dict[str, Any]]) -> list[Alert]:
        alerts: list[Alert] = []
        for document in documents:
            alert = self.parse(document)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _compliance(self, value: Any) -> AlertCompliance | None:
        if not isinstance(value, dict):
            return None
        return AlertCompliance(
            nis2=self._tag(value.get("nis2")),
            dora=self._tag(value.get("dora")),
            gdpr=self._tag(value.get("gdpr")),
        )

    def _tag(self, value: Any) -> ComplianceTag | None:
        if not isinstance(value, dict):
            return None

        relevant = str(value.get("relevant") or "").strip().lower()
        if relevant not in _RELEVANCE:
            return None

        confidence = str(value.get("confidence") or "").strip().lower()
        reporting_required = value.get("reportingRequired")
        deadline = self._number(value.get("reportingDeadlineHours"))

        return ComplianceTag(
            relevant=relevant,
            confidence=confidence if confidence in _CONFIDENCE else "low",
            reasoning=self._text(value.get("reasoning")) or "",
            reporting_required=reporting_required if isinstance(reporting_required, bool) else None,
            reporting_deadline_hours=int(deadline) if deadline is not None else None,
            references=self._strings(value.get("references")),
            action_items=self._strings(value.get("actionItemsDe")),
        )

    @staticmethod
    def _text(value: Any) -> str | None:
        if value is None:
            return None
        text = str(value)
        return text or None

    @staticmethod
    def _number(value: Any) -> float | None:
        if isinstance(value, bool) or value is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    @staticmethod
    def _strings(value: Any) -> tuple[str, ...]:
        if not isinstance(value, list):
            return ()
        return tuple(str(item) for item in value if item is not None and str(item))
