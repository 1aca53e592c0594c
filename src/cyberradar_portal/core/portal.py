from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from cyberradar_portal.api import AlertSearchClient, CosmosAlertStore, SearchPage, severity_filter
from cyberradar_portal.api.exceptions import NotConfiguredError
from cyberradar_portal.config import Settings
from cyberradar_portal.core.compliance import requires_reporting
from cyberradar_portal.core.metrics import ComplianceMetrics, compliance_metrics
from cyberradar_portal.core.stats import (
    DailyCount,
    PortalStats,
    build_portal_stats,
    change_percent,
    daily_counts,
)
from cyberradar_portal.core.threat_score import score_alerts
from cyberradar_portal.core.time_range import previous_period, utc_day_start
from cyberradar_portal.core.topics import topics_for
from cyberradar_portal.core.workflow import empty_status
from cyberradar_portal.domain import (
    Alert,
    AlertAction,
    AlertPage,
    AlertStatus,
    Severity,
    ThreatLevel,
    TimeRange,
)
from cyberradar_portal.output import AlertExporter
from cyberradar_portal.query import AlertQuery, AlertQueryFacade, AlertWorkflow

logger = structlog.get_logger(__name__)

MAX_SEARCH_RESULTS = 50
TREND_DAYS = 7
EVIDENCE_DEFAULT_DAYS = 30


@dataclass(frozen=True, slots=True)
class AlertSummary:
    alert: Alert
    topics: tuple[str, ...]
    reporting_required: bool

    @classmethod
    def of(cls, alert: Alert) -> "AlertSummary":
        return cls(alert=alert, topics=topics_for(alert), reporting_required=requires_reporting(alert))


@dataclass(frozen=True, slots=True)
class AlertListing:
    window: TimeRange
    page: AlertPage
    summaries: tuple[AlertSummary, ...] = ()


@dataclass(frozen=True, slots=True)
class Trend:
    previous_period_total: int
    change_percent: float
    previous_period_by_severity: dict[Severity, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DashboardStats:
    window: TimeRange
    stats: PortalStats
    threat_level: ThreatLevel
    trend: Trend
    daily_counts: tuple[DailyCount, ...] = ()


class Portal:
    """Request-scoped operations over long-lived store and search clients.

    The clients are created once per process (see ``open_portal``) and
    handed in; nothing here creates or re-initializes a client.
    """

    def __init__(
        self,
        facade: AlertQueryFacade,
        search: AlertSearchClient | None = None,
        workflow: AlertWorkflow | None = None,
    ) -> None:
        self._facade = facade
        self._search = search
        self._workflow = workflow

    async def list_alerts(
        self, params: Mapping[str, str], now: datetime | None = None
    ) -> AlertListing:
        query, window = AlertQuery.from_params(params, now=now)
        page = await self._facade.query(query)
        return AlertListing(
            window=window,
            page=page,
            summaries=tuple(AlertSummary.of(alert) for alert in page.alerts),
        )

    async def get_alert(self, alert_id: str) -> Alert | None:
        return await self._facade.get_alert(alert_id)

    async def stats(self, params: Mapping[str, str], now: datetime | None = None) -> DashboardStats:
        """Headline stats, threat level and trend for the requested window."""
        now = now or datetime.now(UTC)
        _, window = AlertQuery.from_params(params, now=now)

        alerts = await self._facade.fetch_window(window.start, window.end)
        previous = previous_period(window)
        previous_alerts = await self._facade.fetch_window(previous.start, previous.end)

        trend_start = utc_day_start(now) - timedelta(days=TREND_DAYS - 1)
        trend_alerts = await self._facade.fetch_window(trend_start, now, sort_by="date", sort_dir="ASC")

        stats = build_portal_stats(alerts)
        previous_stats = build_portal_stats(previous_alerts)

        logger.info(
            "stats_built",
            window_start=window.start.isoformat(),
            window_end=window.end.isoformat(),
            total=stats.total_alerts,
            previous_total=previous_stats.total_alerts,
        )
        return DashboardStats(
            window=window,
            stats=stats,
            threat_level=score_alerts(alerts),
            trend=Trend(
                previous_period_total=previous_stats.total_alerts,
                change_percent=change_percent(stats.total_alerts, previous_stats.total_alerts),
                previous_period_by_severity=previous_stats.by_severity,
            ),
            daily_counts=tuple(daily_counts(trend_alerts, now, days=TREND_DAYS)),
        )

    async def search(
        self, text: str, top: int = 20, skip: int = 0, severity: str | None = None
    ) -> SearchPage:
        if self._search is None:
            raise NotConfiguredError(
                "Search is not configured. Expected SEARCH_ENDPOINT, SEARCH_INDEX and SEARCH_API_KEY."
            )
        if not text or not text.strip():
            raise ValueError("search text is required")

        return await self._search.search(
            text.strip(),
            top=min(max(top, 1), MAX_SEARCH_RESULTS),
            skip=max(skip, 0),
            filter=severity_filter(severity) if severity else None,
        )

    async def export(
        self, params: Mapping[str, str], exporter: AlertExporter, now: datetime | None = None
    ) -> int:
        """Write every alert matching ``params`` to ``exporter``. Defaults to a 30 day window."""
        query, window = AlertQuery.from_params(params, now=now, default_days=EVIDENCE_DEFAULT_DAYS)
        alerts = await self._facade.fetch_matching(query)
        written = await exporter.export(alerts)
        logger.info("alerts_exported", exporter=exporter.name, count=written, label=window.label)
        return written

    def _require_workflow(self) -> AlertWorkflow:
        if self._workflow is None:
            raise NotConfiguredError("Alert workflow is not configured.")
        return self._workflow

    async def evidence_pack(
        self, params: Mapping[str, str], now: datetime | None = None
    ) -> ComplianceMetrics:
        """Reaction metrics for every alert in the window. Defaults to 30 days."""
        workflow = self._require_workflow()
        now = now or datetime.now(UTC)
        _, window = AlertQuery.from_params(params, now=now, default_days=EVIDENCE_DEFAULT_DAYS)

        alerts = await self._facade.fetch_window(window.start, window.end)
        statuses = await workflow.get_statuses(alert.id for alert in alerts)
        metrics = compliance_metrics(alerts, statuses, window, now=now)

        logger.info(
            "evidence_pack_built",
            label=window.label,
            total=metrics.total_alerts,
            acknowledged=metrics.acknowledged,
            unresolved=len(metrics.unresolved),
        )
        return metrics

    async def alert_status(self, alert_id: str, now: datetime | None = None) -> AlertStatus:
        """Stored status of one alert, or a fresh "new" status if it has none."""
        alert_id = (alert_id or "").strip()
        if not alert_id:
            raise ValueError("alert_id is required")
        status = await self._require_workflow().get_status(alert_id)
        return status if status is not None else empty_status(alert_id, now)

    async def alert_statuses(self, alert_ids: Iterable[str]) -> dict[str, AlertStatus]:
        ids = [alert_id.strip() for alert_id in alert_ids if alert_id and alert_id.strip()]
        if not ids:
            raise ValueError("at least one alert id is required")
        return await self._require_workflow().get_statuses(ids)

    async def record_action(
        self,
        alert_id: str,
        action: str,
        performed_by: str,
        details: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        now: datetime | None = None,
    ) -> AlertAction:
        return await self._require_workflow().record_action(
            alert_id,
            action,
            performed_by,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            now=now,
        )

    async def alert_actions(self, alert_id: str) -> list[AlertAction]:
        alert_id = (alert_id or "").strip()
        if not alert_id:
            raise ValueError("alert_id is required")
        return await self._require_workflow().get_actions(alert_id)


@asynccontextmanager
async def open_portal(settings: Settings) -> AsyncIterator[Portal]:
    """Build the process-scoped clients from ``settings`` and yield a ``Portal``.

    One store client per container: alerts, workflow statuses and the
    action log. The search client is only created when search is configured.
    """
    store_settings = settings.require_store()

    def container(name: str) -> CosmosAlertStore:
        return CosmosAlertStore(
            endpoint=store_settings.endpoint,
            key=store_settings.key,
            database=store_settings.database,
            container=name,
        )

    async with AsyncExitStack() as stack:
        store = await stack.enter_async_context(container(store_settings.container))
        workflow = AlertWorkflow(
            status_store=await stack.enter_async_context(container(store_settings.status_container)),
            action_store=await stack.enter_async_context(container(store_settings.actions_container)),
        )

        search = None
        if settings.search.is_configured:
            search = await stack.enter_async_context(
                AlertSearchClient(
                    endpoint=settings.search.endpoint,
                    index=settings.search.index,
                    api_key=settings.search.api_key,
                )
            )

        yield Portal(AlertQueryFacade(store), search=search, workflow=workflow)
