import pytest

from models.tool_result import ErrorKind
from conftest import NOW, VENUE


async def run(dispatcher, tool, args=None):
    return await dispatcher.execute("venue", tool, args or {}, VENUE)


# ---------- events ----------

@pytest.mark.asyncio
async def test_list_events_is_tenant_scoped_and_date_ordered(dispatcher):
    result = await run(dispatcher, "list_events")
    assert [e["event_id"] for e in result.data] == ["E_SOON", "E1", "E2"]


@pytest.mark.asyncio
async def test_list_events_filters(dispatcher):
    by_status = await run(dispatcher, "list_events", {"status": "inquiry"})
    assert [e["event_id"] for e in by_status.data] == ["E2"]

    by_client = await run(dispatcher, "list_events", {"client_id": "C1"})
    assert {e["event_id"] for e in by_client.data} == {"E1", "E_SOON"}

    window = await run(dispatcher, "list_events", {"start_date": "2025-06-20", "end_date": "2025-07-20"})
    assert [e["event_id"] for e in window.data] == ["E1"]


@pytest.mark.asyncio
async def test_list_events_bare_end_date_includes_the_whole_day(dispatcher):
    # E1 starts at 12:00Z on 2025-07-11
    same_day = await run(dispatcher, "list_events", {"start_date": "2025-07-11", "end_date": "2025-07-11"})
    assert [e["event_id"] for e in same_day.data] == ["E1"]

    before_noon = await run(dispatcher, "list_events", {"start_date": "2025-07-11", "end_date": "2025-07-11T11:00:00Z"})
    assert before_noon.data == []


@pytest.mark.asyncio
async def test_list_events_rejects_bad_dates(dispatcher):
    result = await run(dispatcher, "list_events", {"start_date": "next tuesday"})
    assert result.error_kind == ErrorKind.VALIDATION_ERROR
    assert "start_date" in result.message


@pytest.mark.asyncio
async def test_get_event_summary(dispatcher):
    result = await run(dispatcher, "get_event_summary", {"event_id": "E1"})

    assert result.data["event"]["event_id"] == "E1"
    assert result.data["element_count"] == 1
    assert result.data["total_amount"] == 250.0
    assert result.data["open_task_count"] == 2
    assert result.data["guest_stats"]["expected_attendance"] == 2


@pytest.mark.asyncio
async def test_create_event_starts_as_inquiry(dispatcher, store):
    result = await run(
        dispatcher, "create_event",
        {"venue_id": "V1", "name": "Corporate dinner", "date": "2025-09-01T19:00:00Z", "client_id": "C2"},
    )

    assert result.ok
    assert result.data["status"] == "inquiry"
    assert result.data["venue_id"] == "V1"
    assert result.data["date"].startswith("2025-09-01T19:00:00")
    assert await store.events.get(result.data["event_id"]) is not None


@pytest.mark.asyncio
async def test_create_event_for_another_venue_is_unauthorized(dispatcher):
    result = await run(dispatcher, "create_event", {"venue_id": "V2", "name": "Sneaky", "date": "2025-09-01"})
    assert result.error_kind == ErrorKind.UNAUTHORIZED


@pytest.mark.asyncio
async def test_create_event_with_unknown_client_is_not_found(dispatcher):
    result = await run(dispatcher, "create_event", {"venue_id": "V1", "name": "X", "date": "2025-09-01", "client_id": "C9"})
    assert result.error_kind == ErrorKind.NOT_FOUND


# ---------- vendors ----------

@pytest.mark.asyncio
async def test_list_vendors_with_status_filter(dispatcher):
    everyone = await run(dispatcher, "list_vendors")
    assert {v["vendor_id"] for v in everyone.data} == {"VD1", "VD2"}

    rejected = await run(dispatcher, "list_vendors", {"approval_status": "rejected"})
    assert [v["name"] for v in rejected.data] == ["DJ Max"]


@pytest.mark.asyncio
async def test_update_vendor_approval(dispatcher, store):
    result = await run(dispatcher, "update_vendor_approval", {"venue_vendor_id": "VV2", "approval_status": "approved"})

    assert result.ok
    assert result.data["approval_status"] == "approved"
    assert store.venue_vendors.raw("VV2")["approval_status"] == "approved"
    (action,) = await store.action_history.list(action_type="vendor_approval_changed")
    assert action.metadata == {"venue_vendor_id": "VV2", "previous_status": "rejected"}


@pytest.mark.asyncio
async def test_vendor_approval_history_is_written_before_the_status(dispatcher, store, monkeypatch):
    async def broken(item_id, changes, *, expect=None):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(store.venue_vendors, "update", broken)
    result = await run(dispatcher, "update_vendor_approval", {"venue_vendor_id": "VV2", "approval_status": "approved"})

    assert result.error_kind == ErrorKind.EXECUTION_ERROR
    assert store.venue_vendors.raw("VV2")["approval_status"] == "rejected"
    assert len(await store.action_history.list(action_type="vendor_approval_changed")) == 1


@pytest.mark.asyncio
async def test_update_vendor_approval_only_accepts_decisions(dispatcher):
    result = await run(dispatcher, "update_vendor_approval", {"venue_vendor_id": "VV2", "approval_status": "pending"})
    assert result.error_kind == ErrorKind.VALIDATION_ERROR


# ---------- elements ----------

@pytest.mark.asyncio
async def test_create_element_decodes_availability_rules(dispatcher):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV1", "name": "Peony arch", "category": "Flowers", "price": 1200.0,
        "availability_rules": '{"lead_time_days": 21, "blackout_dates": ["2025-12-25"], "season": "spring"}',
    })

    assert result.ok
    rules = result.data["availability_rules"]
    assert rules["lead_time_days"] == 21
    assert rules["blackout_dates"] == ["2025-12-25"]
    assert rules["season"] == "spring"


@pytest.mark.asyncio
async def test_create_element_keeps_undecodable_rules_as_text(dispatcher):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV1", "name": "Peony arch", "category": "Flowers", "price": 1200.0,
        "availability_rules": "book three weeks ahead",
    })
    assert result.data["availability_rules"] == "book three weeks ahead"


@pytest.mark.asyncio
async def test_create_element_with_ill_typed_rules_is_validation_error(dispatcher):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV1", "name": "Peony arch", "category": "Flowers", "price": 1200.0,
        "availability_rules": '{"lead_time_days": "soon"}',
    })
    assert result.error_kind == ErrorKind.VALIDATION_ERROR
    assert "availability_rules" in result.message


@pytest.mark.asyncio
async def test_ill_typed_rules_on_foreign_link_is_validation_error(dispatcher, store):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV3", "name": "Soup", "category": "Catering", "price": 5.0,
        "availability_rules": '{"lead_time_days": "soon"}',
    })

    assert result.error_kind == ErrorKind.VALIDATION_ERROR
    assert store.venue_vendors.calls == []


@pytest.mark.asyncio
async def test_create_element_defaults_rules(dispatcher):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV1", "name": "Bud vase", "category": "Flowers", "price": 15,
    })
    assert result.data["availability_rules"] == {"lead_time_days": 0, "blackout_dates": []}


@pytest.mark.asyncio
async def test_create_element_for_foreign_vendor_link_is_unauthorized(dispatcher):
    result = await run(dispatcher, "create_element", {
        "venue_vendor_id": "VV3", "name": "Soup", "category": "Catering", "price": 5.0,
    })
    assert result.error_kind == ErrorKind.UNAUTHORIZED


@pytest.mark.asyncio
async def test_update_element(dispatcher):
    result = await run(dispatcher, "update_element", {"element_id": "X", "price": 275.0})

    assert result.data["price"] == 275.0
    assert result.data["name"] == "Rose centerpiece"


# ---------- messages ----------

@pytest.mark.asyncio
async def test_send_direct_message_to_directory_vendor(dispatcher):
    result = await run(dispatcher, "send_message", {
        "recipient_id": "VD1", "recipient_type": "vendor", "content": "Roses confirmed?",
    })

    assert result.data["thread_id"] == "direct-V1-VD1"
    assert result.data["event_id"] is None


@pytest.mark.asyncio
async def test_send_message_about_event_to_its_client(dispatcher):
    result = await run(dispatcher, "send_message", {
        "recipient_id": "C1", "recipient_type": "client", "content": "Menu attached", "event_id": "E1",
    })
    assert result.data["thread_id"] == "event-E1"


@pytest.mark.asyncio
@pytest.mark.parametrize("args", [
    {"recipient_id": "VD3", "recipient_type": "vendor", "content": "Join us?"},
    {"recipient_id": "C2", "recipient_type": "client", "content": "Hi", "event_id": "E1"},
    {"recipient_id": "C9", "recipient_type": "client", "content": "Hi"},
    {"recipient_id": "C1", "recipient_type": "client", "content": "Hi", "event_id": "E3"},
])
async def test_send_message_to_unrelated_party_is_unauthorized(dispatcher, args):
    result = await run(dispatcher, "send_message", args)
    assert result.error_kind == ErrorKind.UNAUTHORIZED


# ---------- dashboard ----------

@pytest.mark.asyncio
async def test_get_venue_dashboard(dispatcher):
    result = await run(dispatcher, "get_venue_dashboard")

    assert result.data["event_counts"] == {"in_planning": 1, "confirmed": 1, "inquiry": 1}
    assert result.data["overdue_tasks"] == 2
    assert result.data["unread_messages"] == 1


@pytest.mark.asyncio
async def test_get_overdue_tasks_oldest_first(dispatcher):
    result = await run(dispatcher, "get_overdue_tasks")
    assert [t["task_id"] for t in result.data] == ["T4", "T2"]
