# agent/sdk.py
"""
Bridge from a tool catalogue to the openai-agents SDK. Every FunctionTool
invocation goes through the dispatcher, so the SDK never calls a handler
directly and never sees an exception from one.
"""
from __future__ import annotations

import json
from typing import List, Optional, Union

from agents import Agent, FunctionTool, RunHooks

from agent.dispatcher import ToolDispatcher
from agent.prompts import Scope, render_brief, render_tools_reference
from agent.tool_registry import get_registry
from agent.tools import ToolSpec, schema_for
from models.identity import AgentKind, Identity
from models.tool_result import ErrorKind, ToolFailure, to_model_payload
from observability.obs import safe_update_current_span_io, span_attrs
from observability.telemetry import mark_error
from shared.config import get_settings
from tools.base import summarize

AGENT_NAMES = {
    AgentKind.CLIENT: "Event planning assistant",
    AgentKind.VENUE: "Venue operations assistant",
    AgentKind.VENUE_EVENT: "Venue event assistant",
    AgentKind.VENDOR: "Vendor assistant",
}


class ToolTraceHooks(RunHooks):
    async def on_tool_end(self, context, agent, tool, result: str):
        """Fires after any tool finishes, including non-catalogue tools."""
        try:
            tool_name = getattr(tool, "name", "unknown")
            with span_attrs(
                "hook.tool_end",
                agent=getattr(agent, "name", "unknown"),
                operation="tool_end",
                tool=tool_name,
            ):
                try:
                    summarized = summarize(json.loads(result))
                except (TypeError, ValueError):
                    summarized = {"str": str(result)[:200]}
                safe_update_current_span_io(output={"tool": tool_name, "result": summarized}, redact=True)
        except Exception as e:
            # hooks must never break the run
            mark_error(e, kind="HookError.tool_end")


def _function_tool(
    dispatcher: ToolDispatcher,
    kind: AgentKind,
    name: str,
    spec: ToolSpec,
    identity: Identity,
) -> FunctionTool:
    async def on_invoke_tool(ctx, input_str: str) -> str:
        try:
            raw = json.loads(input_str) if input_str else {}
        except ValueError:
            result = ToolFailure(
                error_kind=ErrorKind.VALIDATION_ERROR,
                message=f"Arguments for {name} were not valid JSON",
            )
        else:
            result = await dispatcher.execute(kind, name, raw, identity)
        return json.dumps(to_model_payload(result), default=str)

    return FunctionTool(
        name=name,
        description=spec.description,
        params_json_schema=schema_for(spec.args_model),
        on_invoke_tool=on_invoke_tool,
        strict_json_schema=False,
    )


def build_function_tools(
    dispatcher: ToolDispatcher,
    kind: Union[AgentKind, str],
    identity: Identity,
) -> List[FunctionTool]:
    registry = get_registry(kind)
    if registry is None:
        raise ValueError(f"Unknown agent kind: {kind}")
    return [
        _function_tool(dispatcher, registry.kind, name, spec, identity)
        for name, spec in registry.items()
    ]


def build_instructions(kind: Union[AgentKind, str], scope: Scope) -> str:
    return render_brief(scope) + "\n\n" + render_tools_reference(kind)


def build_agent(
    dispatcher: ToolDispatcher,
    kind: Union[AgentKind, str],
    identity: Identity,
    scope: Scope,
    *,
    model: Optional[str] = None,
    preamble: str = "",
) -> Agent:
    """
    An Agent whose instructions are the snapshot brief plus the tools
    reference. `preamble` is the host's own system prompt, placed first.
    """
    kind = AgentKind(kind)
    instructions = build_instructions(kind, scope)
    if preamble:
        instructions = preamble.rstrip() + "\n\n" + instructions
    return Agent(
        name=AGENT_NAMES[kind],
        instructions=instructions,
        tools=build_function_tools(dispatcher, kind, identity),
        model=model or get_settings().agent_model,
    )
