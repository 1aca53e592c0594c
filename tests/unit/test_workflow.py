from datetime import UTC, datetime

import pytest

from cyberradar_portal.core.workflow import (
    apply_action,
    empty_status,
    merge_status,
    status_updates,
)
from cyberradar_portal.domain import AlertActionType, AlertStatus, AlertStatusValue

NOW = datetime(2025, 3, 10, 15, tzinfo=UTC)
EARLIER = datetime(2025, 3, 9, 8, tzinfo=UTC)


def test_empty_status():
    status = empty_status("a1", NOW)

    assert status.alert_id == "a1"
    assert status.status is AlertStatusValue.NEW
    assert status.tenant_id == "default"
    assert status.last_updated_by == "system"
    assert status.last_updated_at == NOW
    assert status.assigned_to is None and status.acknowledged_at is None
    assert status.is_open


class TestStatusUpdates:
    def test_acknowledged(self) -> None:
        assert status_updates(AlertActionType.ACKNOWLEDGED, "anna", {}, NOW) == {
            "status": AlertStatusValue.ACKNOWLEDGED,
            "acknowledged_by": "anna",
            "acknowledged_at": NOW,
        }

    def test_assigned_to_named_analyst(self) -> None:
        updates = status_updates(AlertActionType.ASSIGNED, "anna", {"assignedTo": " ben "}, NOW)
        assert updates == {"status": AlertStatusValue.IN_PROGRESS, "assigned_to": "ben"}

    @pytest.mark.parametrize("details", [{}, {"assignedTo": "  "}, {"assignedTo": 42}])
    def test_assigned_falls_back_to_actor(self, details: dict) -> None:
        updates = status_updates(AlertActionType.ASSIGNED, "anna", details, NOW)
        assert updates["assigned_to"] == "anna"

    def test_status_changed_to_resolved_stamps_time(self) -> None:
        updates = status_updates(
            AlertActionType.STATUS_CHANGED, "anna", {"newStatus": "resolved"}, NOW
        )
        assert updates == {"status": AlertStatusValue.RESOLVED, "resolved_at": NOW}

    @pytest.mark.parametrize("details", [{}, {"newStatus": "closed"}, {"newStatus": 3}])
    def test_status_changed_defaults_to_in_progress(self, details: dict) -> None:
        updates = status_updates(AlertActionType.STATUS_CHANGED, "anna", details, NOW)
        assert updates == {"status": AlertStatusValue.IN_PROGRESS}

    def test_dismissed(self) -> None:
        assert status_updates(AlertActionType.DISMISSED, "anna", {}, NOW) == {
            "status": AlertStatusValue.DISMISSED
        }

    def test_comment_and_ticket(self) -> None:
        assert status_updates(AlertActionType.COMMENT_ADDED, "anna", {"comment": "patched"}, NOW) == {
            "notes": "patched"
        }
        assert status_updates(
            AlertActionType.TICKET_CREATED, "anna", {"ticketRef": "SEC-12"}, NOW
        ) == {"ticket_ref": "SEC-12"}

    def test_assessed_priority(self) -> None:
        assert status_updates(AlertActionType.ASSESSED, "anna", {"priority": "HIGH"}, NOW) == {
            "priority": "high"
        }
        assert status_updates(AlertActionType.ASSESSED, "anna", {"priority": "urgent"}, NOW) == {}

    @pytest.mark.parametrize(
        "action",
        [
            AlertActionType.EVIDENCE_EXPORTED,
            AlertActionType.BOARD_REPORTED,
            AlertActionType.MELDUNG_STARTED,
        ],
    )
    def test_audit_only_actions(self, action: AlertActionType) -> None:
        assert status_updates(action, "anna", {"anything": 1}, NOW) == {}


class TestMergeStatus:
    def test_new_status_from_nothing(self) -> None:
        status = merge_status(None, "a1", {"notes": "seen"}, "anna", NOW)

        assert status.status is AlertStatusValue.NEW
        assert status.notes == "seen"
        assert (status.last_updated_at, status.last_updated_by) == (NOW, "anna")

    def test_keeps_existing_fields(self) -> None:
        existing = AlertStatus(
            alert_id="a1",
            status=AlertStatusValue.ACKNOWLEDGED,
            acknowledged_by="anna",
            acknowledged_at=EARLIER,
            ticket_ref="SEC-1",
            last_updated_by="anna",
        )

        status = merge_status(
            existing, "a1", {"status": AlertStatusValue.IN_PROGRESS, "assigned_to": "ben"}, "ben", NOW
        )

        assert status.status is AlertStatusValue.IN_PROGRESS
        assert status.assigned_to == "ben"
        assert status.acknowledged_by == "anna"
        assert status.acknowledged_at == EARLIER
        assert status.ticket_ref == "SEC-1"
        assert status.last_updated_by == "ben"

    def test_none_never_clears(self) -> None:
        existing = AlertStatus(alert_id="a1", notes="first note")
        status = merge_status(existing, "a1", {"notes": None}, "anna", NOW)
        assert status.notes == "first note"
        assert status.last_updated_at == NOW


class TestApplyAction:
    def test_audit_only_action_returns_none(self) -> None:
        assert apply_action(None, "a1", AlertActionType.BOARD_REPORTED, "anna", now=NOW) is None

    def test_acknowledge_then_resolve(self) -> None:
        acknowledged = apply_action(None, "a1", AlertActionType.ACKNOWLEDGED, "anna", now=EARLIER)
        resolved = apply_action(
            acknowledged,
            "a1",
            AlertActionType.STATUS_CHANGED,
            "ben",
            {"newStatus": "resolved"},
            now=NOW,
        )

        assert resolved is not None
        assert resolved.status is AlertStatusValue.RESOLVED
        assert resolved.acknowledged_at == EARLIER
        assert resolved.resolved_at == NOW
        assert not resolved.is_open

    def test_comment_with_non_text_still_touches_status(self) -> None:
        existing = AlertStatus(alert_id="a1", notes="kept")
        status = apply_action(existing, "a1", AlertActionType.COMMENT_ADDED, "anna", {"comment": 5}, NOW)

        assert status is not None
        assert status.notes == "kept"
        assert status.last_updated_by == "anna"
