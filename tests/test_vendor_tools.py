import pytest

from models.tool_result import ErrorKind
from conftest import NOW, VENDOR


async def run(dispatcher, tool, args):
    return await dispatcher.execute("vendor", tool, args, VENDOR)


@pytest.mark.asyncio
async def test_get_assigned_task(dispatcher):
    result = await run(dispatcher, "get_task_details", {"task_id": "T2"})

    assert result.data["task_id"] == "T2"
    assert result.data["assigned_to_type"] == "vendor"


@pytest.mark.asyncio
async def test_complete_assigned_task(dispatcher, store):
    result = await run(dispatcher, "complete_task", {"task_id": "T2"})

    assert result.data["status"] == "completed"
    assert store.tasks.raw("T2")["status"] == "completed"
    (action,) = await store.action_history.list(action_type="task_completed")
    assert action.actor_role == "vendor"
    assert action.event_id == "E1"


@pytest.mark.asyncio
async def test_reply_goes_to_the_threads_venue(dispatcher, store):
    result = await run(dispatcher, "send_message_to_venue", {"thread_id": "direct-V1-VD1", "content": "Roses confirmed"})

    assert result.ok
    assert result.data["recipient_id"] == "V1"
    assert result.data["recipient_type"] == "venue"
    assert result.data["sender_id"] == "VD1"
    assert result.data["thread_id"] == "direct-V1-VD1"
    assert len(await store.messages.list(thread_id="direct-V1-VD1")) == 2


@pytest.mark.asyncio
async def test_reply_to_unknown_thread_is_not_found(dispatcher):
    result = await run(dispatcher, "send_message_to_venue", {"thread_id": "nope", "content": "hello?"})
    assert result.error_kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_reply_to_someone_elses_thread_is_unauthorized(dispatcher):
    result = await run(dispatcher, "send_message_to_venue", {"thread_id": "event-E2", "content": "hi"})
    assert result.error_kind == ErrorKind.UNAUTHORIZED


@pytest.mark.asyncio
async def test_reply_in_thread_without_venue_is_precondition_failed(dispatcher, store):
    store.messages.seed(
        message_id="M9", thread_id="odd", sender_id="C1", sender_type="client",
        recipient_id="VD1", recipient_type="vendor", content="hello", created_at=NOW,
    )
    result = await run(dispatcher, "send_message_to_venue", {"thread_id": "odd", "content": "hi"})
    assert result.error_kind == ErrorKind.PRECONDITION_FAILED


@pytest.mark.asyncio
async def test_mark_message_as_read(dispatcher):
    result = await run(dispatcher, "mark_message_as_read", {"message_id": "M2"})
    assert result.data["read"] is True


@pytest.mark.asyncio
async def test_add_crew_to_booked_event(dispatcher):
    result = await run(dispatcher, "add_guest", {"event_id": "E1", "name": "Sound tech", "title": "crew"})

    assert result.ok
    assert result.data["event_id"] == "E1"
    assert result.data["title"] == "crew"
