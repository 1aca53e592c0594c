import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

import structlog

from cyberradar_portal.api.models import SqlQuerySpec
from cyberradar_portal.core.time_range import parse_iso_datetime
from cyberradar_portal.core.workflow import PRIORITIES, apply_action
from cyberradar_portal.domain import AlertAction, AlertActionType, AlertStatus, AlertStatusValue
from cyberradar_portal.query.builder import iso_millis

logger = structlog.get_logger(__name__)

STATUS_BATCH_SIZE = 200

STATUSES_BY_IDS_SQL = "SELECT * FROM c WHERE ARRAY_CONTAINS(@ids, c.alertId)"
ACTIONS_BY_ALERT_SQL = "SELECT * FROM c WHERE c.alertId = @alertId"


@runtime_checkable
class WorkflowStore(Protocol):
    """Document container that can also take writes."""

    async def query_documents(self, spec: SqlQuerySpec) -> list[dict[str, Any]]:
        ...

    async def create_document(
        self, document: dict[str, Any], partition_key: str, upsert: bool = False
    ) -> dict[str, Any]:
        ...


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _iso(moment: datetime | None) -> str | None:
    return iso_millis(moment) if moment is not None else None


def status_from_document(document: dict[str, Any]) -> AlertStatus | None:
    alert_id = _text(document.get("alertId")) or _text(document.get("id"))
    if alert_id is None:
        return None
    try:
        status = AlertStatusValue(document.get("status") or AlertStatusValue.NEW)
    except ValueError:
        status = AlertStatusValue.NEW
    priority = _text(document.get("priority"))
    return AlertStatus(
        alert_id=alert_id,
        status=status,
        tenant_id=_text(document.get("tenantId")) or "default",
        assigned_to=_text(document.get("assignedTo")),
        acknowledged_by=_text(document.get("acknowledgedBy")),
        acknowledged_at=parse_iso_datetime(document.get("acknowledgedAt")),
        resolved_at=parse_iso_datetime(document.get("resolvedAt")),
        priority=priority if priority in PRIORITIES else None,
        notes=_text(document.get("notes")),
        ticket_ref=_text(document.get("ticketRef")),
        last_updated_at=parse_iso_datetime(document.get("lastUpdatedAt")),
        last_updated_by=_text(document.get("lastUpdatedBy")) or "system",
    )


def status_to_document(status: AlertStatus) -> dict[str, Any]:
    return {
        "id": status.alert_id,
        "alertId": status.alert_id,
        "tenantId": status.tenant_id,
        "status": status.status.value,
        "assignedTo": status.assigned_to,
        "acknowledgedBy": status.acknowledged_by,
        "acknowledgedAt": _iso(status.acknowledged_at),
        "resolvedAt": _iso(status.resolved_at),
        "priority": status.priority,
        "notes": status.notes,
        "ticketRef": status.ticket_ref,
        "lastUpdatedAt": _iso(status.last_updated_at),
        "lastUpdatedBy": status.last_updated_by,
    }


def action_from_document(document: dict[str, Any]) -> AlertAction | None:
    action_id = _text(document.get("id"))
    alert_id = _text(document.get("alertId"))
    performed_at = parse_iso_datetime(document.get("performedAt"))
    if action_id is None or alert_id is None or performed_at is None:
        return None
    try:
        action = AlertActionType(document.get("action"))
    except ValueError:
        return None

    details = document.get("details")
    metadata = document.get("metadata")
    metadata = metadata if isinstance(metadata, dict) else {}
    return AlertAction(
        id=action_id,
        alert_id=alert_id,
        action=action,
        performed_by=_text(document.get("performedBy")) or "",
        performed_at=performed_at,
        tenant_id=_text(document.get("tenantId")) or "default",
        details=details if isinstance(details, dict) else {},
        ip_address=_text(metadata.get("ipAddress")),
        user_agent=_text(metadata.get("userAgent")),
    )


def action_to_document(action: AlertAction) -> dict[str, Any]:
    document: dict[str, Any] = {
        "id": action.id,
        "alertId": action.alert_id,
        "tenantId": action.tenant_id,
        "action": action.action.value,
        "performedBy": action.performed_by,
        "performedAt": iso_millis(action.performed_at),
        "details": action.details,
    }
    metadata = {
        key: value
        for key, value in (("ipAddress", action.ip_address), ("userAgent", action.user_agent))
        if value
    }
    if metadata:
        document["metadata"] = metadata
    return document


class AlertWorkflow:
    """Analyst workflow over two containers.

    The actions container is an append-only audit log. The status container
    holds one document per alert, replaced on every change. Both are
    partitioned by alert id.
    """

    def __init__(self, status_store: WorkflowStore, action_store: WorkflowStore) -> None:
        self._statuses = status_store
        self._actions = action_store

    async def get_statuses(self, alert_ids: Iterable[str]) -> dict[str, AlertStatus]:
        """Stored statuses keyed by alert id. Alerts never touched are absent."""
        ids = list(dict.fromkeys(alert_id for alert_id in alert_ids if alert_id))
        statuses: dict[str, AlertStatus] = {}
        for offset in range(0, len(ids), STATUS_BATCH_SIZE):
            batch = ids[offset : offset + STATUS_BATCH_SIZE]
            documents = await self._statuses.query_documents(
                SqlQuerySpec(STATUSES_BY_IDS_SQL, (("@ids", batch),))
            )
            for document in documents:
                status = status_from_document(document)
                if status is not None:
                    statuses[status.alert_id] = status

        logger.debug("statuses_loaded", requested=len(ids), found=len(statuses))
        return statuses

    async def get_status(self, alert_id: str) -> AlertStatus | None:
        return (await self.get_statuses([alert_id])).get(alert_id)

    async def get_actions(self, alert_id: str) -> list[AlertAction]:
        """Audit trail for one alert, newest first."""
        documents = await self._actions.query_documents(
            SqlQuerySpec(ACTIONS_BY_ALERT_SQL, (("@alertId", alert_id),))
        )
        actions = [
            action
            for action in (action_from_document(document) for document in documents)
            if action is not None
        ]
        actions.sort(key=lambda action: action.performed_at, reverse=True)
        return actions

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
        """Append ``action`` to the audit log and update the alert's status.

        Raises ``ValueError`` for a missing alert id, action or actor and for
        an unknown action. Audit-only actions leave the status untouched.
        """
        alert_id = (alert_id or "").strip()
        performed_by = (performed_by or "").strip()
        action_name = (action or "").strip()
        if not alert_id or not action_name or not performed_by:
            raise ValueError("alert_id, action and performed_by are required")
        try:
            action_type = AlertActionType(action_name)
        except ValueError:
            raise ValueError(f"Invalid action: {action_name}") from None

        now = now or datetime.now(UTC)
        record = AlertAction(
            id=str(uuid.uuid4()),
            alert_id=alert_id,
            action=action_type,
            performed_by=performed_by,
            performed_at=now,
            details=dict(details or {}),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self._actions.create_document(action_to_document(record), partition_key=alert_id)

        existing = await self.get_status(alert_id)
        status = apply_action(existing, alert_id, action_type, performed_by, record.details, now)
        if status is not None:
            await self._statuses.create_document(
                status_to_document(status), partition_key=alert_id, upsert=True
            )

        logger.info(
            "alert_action_recorded",
            alert_id=alert_id,
            action=action_type.value,
            status=status.status.value if status is not None else None,
        )
        return record
