import re
from datetime import UTC, datetime
from typing import Any

from cyberradar_portal.api.models import SqlQuerySpec
from cyberradar_portal.query.params import AlertQuery

CVE_PATTERN = re.compile(r"CVE-\d{4}-\d{4,7}", re.IGNORECASE)

PROCESSED_ONLY = "c.isProcessed = true"

# publishedAt is optional on older documents, fetchedAt is always set
_MISSING_PUBLISHED = (
    "((NOT IS_DEFINED(c.publishedAt)) OR IS_NULL(c.publishedAt) OR c.publishedAt = '')"
)
_FROM_CLAUSE = (
    f"((IS_DEFINED(c.publishedAt) AND c.publishedAt >= @from) "
    f"OR ({_MISSING_PUBLISHED} AND c.fetchedAt >= @from))"
)
_TO_CLAUSE = (
    f"((IS_DEFINED(c.publishedAt) AND c.publishedAt < @to) "
    f"OR ({_MISSING_PUBLISHED} AND c.fetchedAt < @to))"
)


def _framework_relevant(framework: str) -> str:
    return (
        f"(IS_DEFINED(c.compliance) AND IS_DEFINED(c.compliance.{framework}) "
        f"AND NOT IS_NULL(c.compliance.{framework}) "
        f"AND c.compliance.{framework}.relevant != 'no')"
    )


def _framework_reporting(framework: str) -> str:
    return (
        f"(IS_DEFINED(c.compliance) AND IS_DEFINED(c.compliance.{framework}) "
        f"AND IS_DEFINED(c.compliance.{framework}.reportingRequired) "
        f"AND c.compliance.{framework}.reportingRequired = true)"
    )


def iso_millis(moment: datetime) -> str:
    # same shape as the stored JavaScript toISOString() values so string order holds
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_alert_sql(query: AlertQuery) -> SqlQuerySpec:
    """Translate the store-side filters of ``query`` into parameterized SQL.

    Topic filtering, sorting and paging are not part of the SQL; the facade
    applies them after the fetch.
    """
    conditions: list[str] = [PROCESSED_ONLY]
    parameters: list[tuple[str, Any]] = []

    if query.severities:
        ors = []
        for index, severity in enumerate(query.severities):
            name = f"@sev{index}"
            ors.append(f"(IS_DEFINED(c.severity) AND LOWER(c.severity) = {name})")
            parameters.append((name, severity))
        conditions.append(f"({' OR '.join(ors)})")

    if query.sources:
        ors = []
        for index, source in enumerate(query.sources):
            name = f"@src{index}"
            ors.append(f"(c.sourceId = {name} OR c.sourceName = {name})")
            parameters.append((name, source))
        conditions.append(f"({' OR '.join(ors)})")

    if query.alert_types:
        ors = []
        for index, alert_type in enumerate(query.alert_types):
            name = f"@type{index}"
            ors.append(f"c.alertType = {name}")
            parameters.append((name, alert_type))
        conditions.append(f"({' OR '.join(ors)})")

    if query.exploited_only:
        conditions.append("c.isActivelyExploited = true")

    if query.search:
        search_ors = [
            "CONTAINS(c.title, @search, true)",
            "(IS_DEFINED(c.titleDe) AND CONTAINS(c.titleDe, @search, true))",
            "(IS_DEFINED(c.summaryDe) AND CONTAINS(c.summaryDe, @search, true))",
            "(IS_DEFINED(c.summary) AND CONTAINS(c.summary, @search, true))",
            "CONTAINS(c.description, @search, true)",
        ]
        cve = CVE_PATTERN.search(query.search)
        if cve:
            search_ors.append("(IS_DEFINED(c.cveIds) AND ARRAY_CONTAINS(c.cveIds, @cve))")
            parameters.append(("@cve", cve.group(0).upper()))
        parameters.append(("@search", query.search))
        conditions.append(f"({' OR '.join(search_ors)})")

    if query.start is not None:
        conditions.append(_FROM_CLAUSE)
        parameters.append(("@from", iso_millis(query.start)))
    if query.end is not None:
        conditions.append(_TO_CLAUSE)
        parameters.append(("@to", iso_millis(query.end)))

    if query.frameworks:
        ors = [_framework_relevant(framework) for framework in query.frameworks]
        conditions.append(f"({' OR '.join(ors)})")

    if query.reporting_only:
        ors = [_framework_reporting(framework) for framework in ("nis2", "dora", "gdpr")]
        conditions.append(f"({' OR '.join(ors)})")

    return SqlQuerySpec(
        query=f"SELECT * FROM c WHERE {' AND '.join(conditions)}",
        parameters=tuple(parameters),
    )


def alert_by_id_sql(alert_id: str) -> SqlQuerySpec:
    return SqlQuerySpec(query="SELECT * FROM c WHERE c.id = @id", parameters=(("@id", alert_id),))
