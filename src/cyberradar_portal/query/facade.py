from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

import structlog

from cyberradar_portal.api.models import SqlQuerySpec
from cyberradar_portal.core.severity import severity_rank
from cyberradar_portal.core.topics import topics_for
from cyberradar_portal.domain import Alert, AlertPage
from cyberradar_portal.query.builder import alert_by_id_sql, build_alert_sql
from cyberradar_portal.query.params import AlertQuery, SortDir, SortKey
from cyberradar_portal.query.parser import AlertDocumentParser

logger = structlog.get_logger(__name__)


@runtime_checkable
class AlertStore(Protocol):
    """Protocol for document stores holding enriched alerts."""

    async def query_documents(self, spec: SqlQuerySpec) -> list[dict[str, Any]]:
        ...


_SORT_KEYS: dict[SortKey, Callable[[Alert], Any]] = {
    "score": lambda alert: alert.ai_score,
    "date": lambda alert: alert.published_at,
    "severity": lambda alert: severity_rank(alert.severity),
}


def sort_alerts(alerts: list[Alert], sort_by: SortKey, sort_dir: SortDir) -> list[Alert]:
    """Sort by score, date or severity rank. Alerts missing the key go last."""
    key = _SORT_KEYS[sort_by]
    present = [alert for alert in alerts if key(alert) is not None]
    missing = [alert for alert in alerts if key(alert) is None]
    present.sort(key=key, reverse=sort_dir == "DESC")
    return present + missing


class AlertQueryFacade:
    """Single entry point to the alert store for request handlers.

    Store-side filters run as SQL. Topic filtering, sorting and paging run
    here on the fetched rows.
    """

    def __init__(self, store: AlertStore, parser: AlertDocumentParser | None = None) -> None:
        self._store = store
        self._parser = parser or AlertDocumentParser()

    async def _fetch(self, spec: SqlQuerySpec) -> list[Alert]:
        documents = await self._store.query_documents(spec)
        alerts = self._parser.parse_many(documents)
        skipped = len(documents) - len(alerts)
        if skipped:
            logger.debug("documents_skipped", count=skipped)
        return alerts

    async def fetch_matching(self, query: AlertQuery) -> list[Alert]:
        """Every alert matching ``query``'s filters, sorted, without paging."""
        query.validate()
        alerts = await self._fetch(build_alert_sql(query))

        if query.topics:
            wanted = set(query.topics)
            alerts = [alert for alert in alerts if wanted.intersection(topics_for(alert))]

        return sort_alerts(alerts, query.sort_by, query.sort_dir)

    async def query(self, query: AlertQuery) -> AlertPage:
        alerts = await self.fetch_matching(query)
        total = len(alerts)
        page = alerts[query.offset : query.offset + query.page_size]

        logger.info("alerts_queried", total=total, page=query.page, page_size=query.page_size)
        return AlertPage(
            alerts=tuple(page), total=total, page=query.page, page_size=query.page_size
        )

    async def fetch_window(
        self,
        start: datetime | None,
        end: datetime | None,
        sort_by: SortKey = "score",
        sort_dir: SortDir = "DESC",
    ) -> list[Alert]:
        """Every processed alert published in ``[start, end)``, sorted."""
        return await self.fetch_matching(
            AlertQuery(start=start, end=end, sort_by=sort_by, sort_dir=sort_dir)
        )

    async def get_alert(self, alert_id: str) -> Alert | None:
        alerts = await self._fetch(alert_by_id_sql(alert_id))
        return alerts[0] if alerts else None
