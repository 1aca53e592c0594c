from datetime import UTC, datetime

import pytest

from cyberradar_portal.domain import Severity
from cyberradar_portal.query.parser import AlertDocumentParser


@pytest.fixture
def parser() -> AlertDocumentParser:
    return AlertDocumentParser()


FULL_DOCUMENT = {
    "id": "alert-1",
    "title": "Exchange Server RCE",
    "titleDe": "Exchange Server Schwachstelle",
    "description": "Remote code execution",
    "summaryDe": "Kurzfassung",
    "severity": "KRITISCH",
    "aiScore": 91,
    "cvssScore": "9.8",
    "epssScore": 0.97,
    "isActivelyExploited": True,
    "isZeroDay": False,
    "alertType": "vulnerability",
    "sourceId": "cisa-kev",
    "sourceName": "CISA KEV",
    "publishedAt": "2025-01-14T12:00:00.000Z",
    "fetchedAt": "2025-01-14T12:05:00.000Z",
    "cveIds": ["CVE-2025-0001", None, ""],
    "affectedVendors": ["Microsoft"],
    "affectedProducts": ["Exchange Server"],
    "compliance": {
        "nis2": {
            "relevant": "yes",
            "confidence": "high",
            "reasoning": "KRITIS operator",
            "reportingRequired": True,
            "reportingDeadlineHours": 24,
            "references": ["§30 BSIG"],
            "actionItemsDe": ["Patch einspielen"],
        },
        "dora": {"relevant": "maybe"},
        "gdpr": {"relevant": "CONDITIONAL", "confidence": "certain"},
    },
}


class TestAlertDocumentParser:
    def test_parses_full_document(self, parser: AlertDocumentParser) -> None:
        alert = parser.parse(FULL_DOCUMENT)

        assert alert is not None
        assert alert.id == "alert-1"
        assert alert.display_title == "Exchange Server Schwachstelle"
        assert alert.severity is Severity.CRITICAL
        assert alert.ai_score == 91.0
        assert alert.cvss_score == 9.8
        assert alert.is_actively_exploited is True
        assert alert.published_at == datetime(2025, 1, 14, 12, tzinfo=UTC)
        assert alert.cve_ids == ("CVE-2025-0001",)
        assert alert.affected_vendors == ("Microsoft",)

    def test_parses_compliance(self, parser: AlertDocumentParser) -> None:
        alert = parser.parse(FULL_DOCUMENT)

        assert alert is not None and alert.compliance is not None
        nis2 = alert.compliance.nis2
        assert nis2 is not None
        assert nis2.relevant == "yes"
        assert nis2.confidence == "high"
        assert nis2.reporting_required is True
        assert nis2.reporting_deadline_hours == 24
        assert nis2.action_items == ("Patch einspielen",)
        assert alert.compliance.dora is None
        assert alert.compliance.gdpr is not None
        assert alert.compliance.gdpr.relevant == "conditional"
        assert alert.compliance.gdpr.confidence == "low"

    def test_missing_id_returns_none(self, parser: AlertDocumentParser) -> None:
        assert parser.parse({"title": "no id"}) is None
        assert parser.parse({"id": "", "title": "empty id"}) is None

    def test_non_dict_returns_none(self, parser: AlertDocumentParser) -> None:
        assert parser.parse("not a document") is None  # type: ignore[arg-type]

    def test_minimal_document_defaults(self, parser: AlertDocumentParser) -> None:
        alert = parser.parse({"id": 42})

        assert alert is not None
        assert alert.id == "42"
        assert alert.title == ""
        assert alert.severity is Severity.UNKNOWN
        assert alert.ai_score is None
        assert alert.timestamp is None
        assert alert.compliance is None

    def test_malformed_fields_fall_back(self, parser: AlertDocumentParser) -> None:
        alert = parser.parse(
            {
                "id": "x",
                "aiScore": "high",
                "cvssScore": True,
                "isActivelyExploited": "true",
                "publishedAt": "yesterday",
                "cveIds": "CVE-2025-0001",
                "compliance": ["nis2"],
            }
        )

        assert alert is not None
        assert alert.ai_score is None
        assert alert.cvss_score is None
        assert alert.is_actively_exploited is False
        assert alert.published_at is None
        assert alert.cve_ids == ()
        assert alert.compliance is None

    def test_parse_many_skips_bad_rows(self, parser: AlertDocumentParser) -> None:
        alerts = parser.parse_many([{"id": "a"}, {"title": "no id"}, {"id": "b"}])
        assert [alert.id for alert in alerts] == ["a", "b"]

    def test_non_finite_numbers_dropped(self, parser: AlertDocumentParser) -> None:
        alerts = parser.parse_many(
            [
                {
                    "id": "nan",
                    "aiScore": "NaN",
                    "epssScore": float("inf"),
                    "compliance": {"nis2": {"relevant": "yes", "reportingDeadlineHours": "NaN"}},
                },
                {
                    "id": "inf",
                    "cvssScore": "-Infinity",
                    "compliance": {"nis2": {"relevant": "yes", "reportingDeadlineHours": "Infinity"}},
                },
            ]
        )

        assert [alert.id for alert in alerts] == ["nan", "inf"]
        assert alerts[0].ai_score is None
        assert alerts[0].epss_score is None
        assert alerts[0].compliance.nis2.reporting_deadline_hours is None
        assert alerts[1].cvss_score is None
        assert alerts[1].compliance.nis2.reporting_deadline_hours is None
