from __future__ import annotations

from typing import Iterable, List, Union

from agent.dispatcher import ToolDispatcher
from models.identity import AgentKind, Identity
from models.tool_result import ToolCallPlan, ToolCallRecord
from observability.obs import span_step
from shared import time


async def execute_tool_calls(
    dispatcher: ToolDispatcher,
    kind: Union[AgentKind, str],
    plans: Iterable[ToolCallPlan],
    identity: Identity,
) -> List[ToolCallRecord]:
    """
    Run the model's planned calls in order. A failed call is recorded and
    the next one still runs; later calls see the writes of earlier ones.
    """
    plans = list(plans)
    records: List[ToolCallRecord] = []

    with span_step(
        "execute_tools",
        kind="node",
        node="execute_tools",
        tool_count=len(plans),
    ):
        for plan in plans:
            result = await dispatcher.execute(kind, plan.tool, plan.args, identity)
            records.append(ToolCallRecord(
                tool=plan.tool,
                args=plan.args,
                id=plan.id,
                result=result,
                timestamp=time.utcnow(),
            ))

    return records
