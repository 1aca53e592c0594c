from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from cyberradar_portal.domain import AlertActionType, AlertStatus, AlertStatusValue

PRIORITIES = frozenset({"critical", "high", "medium", "low"})

# fields an action may set; anything else on AlertStatus is bookkeeping
_UPDATABLE = (
    "status",
    "assigned_to",
    "acknowledged_by",
    "acknowledged_at",
    "resolved_at",
    "priority",
    "notes",
    "ticket_ref",
)


def empty_status(alert_id: str, now: datetime | None = None) -> AlertStatus:
    """Status reported for an alert nobody has touched yet."""
    return AlertStatus(alert_id=alert_id, last_updated_at=now or datetime.now(UTC))


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def status_updates(
    action: AlertActionType,
    performed_by: str,
    details: Mapping[str, Any],
    now: datetime,
) -> dict[str, Any]:
    """Status fields an action changes. Empty when the action is audit-only."""
    if action is AlertActionType.ACKNOWLEDGED:
        return {
            "status": AlertStatusValue.ACKNOWLEDGED,
            "acknowledged_by": performed_by,
            "acknowledged_at": now,
        }

    if action is AlertActionType.ASSIGNED:
        assignee = _text(details.get("assignedTo"))
        return {
            "status": AlertStatusValue.IN_PROGRESS,
            "assigned_to": assignee.strip() if assignee and assignee.strip() else performed_by,
        }

    if action is AlertActionType.STATUS_CHANGED:
        try:
            new_status = AlertStatusValue(_text(details.get("newStatus")) or "")
        except ValueError:
            new_status = AlertStatusValue.IN_PROGRESS
        updates: dict[str, Any] = {"status": new_status}
        if new_status is AlertStatusValue.RESOLVED:
            updates["resolved_at"] = now
        return updates

    if action is AlertActionType.DISMISSED:
        return {"status": AlertStatusValue.DISMISSED}

    if action is AlertActionType.COMMENT_ADDED:
        return {"notes": _text(details.get("comment"))}

    if action is AlertActionType.TICKET_CREATED:
        return {"ticket_ref": _text(details.get("ticketRef"))}

    if action is AlertActionType.ASSESSED:
        priority = (_text(details.get("priority")) or "").lower()
        return {"priority": priority} if priority in PRIORITIES else {}

    return {}


def merge_status(
    existing: AlertStatus | None,
    alert_id: str,
    updates: Mapping[str, Any],
    performed_by: str,
    now: datetime,
) -> AlertStatus:
    """Overlay ``updates`` on ``existing``.

    A field keeps its stored value when the update leaves it unset or
    ``None``, so an update can never clear a field.
    """
    base = existing or AlertStatus(alert_id=alert_id)
    changes = {
        name: updates[name] for name in _UPDATABLE if updates.get(name) is not None
    }
    return replace(
        base,
        alert_id=alert_id,
        last_updated_at=now,
        last_updated_by=performed_by,
        **changes,
    )


def apply_action(
    existing: AlertStatus | None,
    alert_id: str,
    action: AlertActionType,
    performed_by: str,
    details: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> AlertStatus | None:
    """New status after ``action``, or ``None`` when the action only goes to the audit log."""
    now = now or datetime.now(UTC)
    updates = status_updates(action, performed_by, details or {}, now)
    if not updates:
        return None
    return merge_status(existing, alert_id, updates, performed_by, now)
