"""
Unit tests for AuditService and the audit trail written by EventService.
"""

import pytest

from homies.app.services.audit_service import AuditService


@pytest.fixture
def audit_service(db):
    return AuditService(db)


class TestAuditService:
    """Tests for writing and reading audit records."""

    @pytest.mark.asyncio
    async def test_log_and_list(self, audit_service):
        await audit_service.log("user-1", "create", "event", 7, {"name": "Dog walk"})

        [entry] = await audit_service.list_logs()

        assert entry["user_id"] == "user-1"
        assert entry["action"] == "create"
        assert entry["object_type"] == "event"
        assert entry["object_id"] == 7
        assert entry["details"] == {"name": "Dog walk"}
        assert entry["timestamp"] is not None

    @pytest.mark.asyncio
    async def test_list_filters(self, audit_service):
        await audit_service.log("user-1", "join", "event", 1)
        await audit_service.log("user-2", "join", "event", 1)
        await audit_service.log("user-1", "leave", "event", 2)

        assert len(await audit_service.list_logs(user_id="user-1")) == 2
        assert len(await audit_service.list_logs(action="join")) == 2
        assert len(await audit_service.list_logs(object_id=2)) == 1
        assert await audit_service.list_logs(object_type="booking") == []

    @pytest.mark.asyncio
    async def test_list_newest_first_with_pagination(self, audit_service):
        for event_id in (1, 2, 3):
            await audit_service.log("user-1", "join", "event", event_id)

        page = await audit_service.list_logs(limit=2)
        rest = await audit_service.list_logs(limit=2, offset=2)

        assert [entry["object_id"] for entry in page] == [3, 2]
        assert [entry["object_id"] for entry in rest] == [1]

    @pytest.mark.asyncio
    async def test_details_optional(self, audit_service):
        await audit_service.log(None, "leave", "event")

        [entry] = await audit_service.list_logs()

        assert entry["user_id"] is None
        assert entry["object_id"] is None
        assert entry["details"] is None


class TestEventAuditTrail:
    """Tests for the actions EventService records."""

    @pytest.mark.asyncio
    async def test_event_lifecycle_is_recorded(self, event_service, event_form, sample_type):
        event_id = await event_service.add_event(event_form(type_id=sample_type()), "organiser")
        await event_service.update_event(event_id, event_form(name="Renamed Event", type_id=1), "organiser")
        await event_service.join_event(event_id, "helper")
        await event_service.leave_event(event_id, "helper")

        logs = await event_service.audit.list_logs(object_type="event", object_id=event_id)

        assert [entry["action"] for entry in logs] == ["leave", "join", "update", "create"]
        assert logs[1]["user_id"] == "helper"
        assert logs[2]["details"]["name"] == "Renamed Event"

    @pytest.mark.asyncio
    async def test_refused_operations_are_not_recorded(self, event_service, sample_event, event_form):
        event_id = sample_event(organiser_id="organiser")

        await event_service.update_event(event_id, event_form(), "intruder")
        await event_service.leave_event(event_id, "intruder")
        await event_service.join_event(99, "intruder")

        assert await event_service.audit.list_logs() == []
