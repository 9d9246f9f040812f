import json

import pytest

from agent.sdk import build_agent, build_function_tools
from conftest import CLIENT, VENDOR, VENUE


def test_function_tools_mirror_the_catalogue(dispatcher):
    tools = build_function_tools(dispatcher, "vendor", VENDOR)

    assert [t.name for t in tools] == [
        "get_task_details", "complete_task", "send_message_to_venue", "mark_message_as_read", "add_guest",
    ]
    assert all(t.params_json_schema["additionalProperties"] is False for t in tools)


@pytest.mark.asyncio
async def test_invocation_goes_through_the_dispatcher(dispatcher):
    tools = {t.name: t for t in build_function_tools(dispatcher, "client", CLIENT)}

    out = await tools["get_task_details"].on_invoke_tool(None, json.dumps({"task_id": "T1"}))
    assert json.loads(out)["task_id"] == "T1"


@pytest.mark.asyncio
async def test_failures_come_back_as_error_payloads(dispatcher):
    tools = {t.name: t for t in build_function_tools(dispatcher, "client", CLIENT)}

    denied = await tools["get_task_details"].on_invoke_tool(None, json.dumps({"task_id": "T4"}))
    garbled = await tools["get_task_details"].on_invoke_tool(None, "{task_id: T1")

    assert "error" in json.loads(denied)
    assert "not valid JSON" in json.loads(garbled)["error"]


@pytest.mark.asyncio
async def test_build_agent_instructions(dispatcher, builder):
    scope = await builder.build_venue_tenant_scope(VENUE)
    agent = build_agent(dispatcher, "venue", VENUE, scope, model="gpt-4.1-mini", preamble="You help venues.")

    assert agent.instructions.startswith("You help venues.")
    assert "=== SUMMARY ===" in agent.instructions
    assert "=== TOOLS REFERENCE ===" in agent.instructions
    assert len(agent.tools) == 10


def test_unknown_kind_is_rejected(dispatcher):
    with pytest.raises(ValueError):
        build_function_tools(dispatcher, "admin", CLIENT)
