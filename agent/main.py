# agent/main.py
"""
Composition root: wires Firestore, the data store, the context builder
and the dispatcher, then serves one conversational turn at a time.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Union

from agents import Runner
from langfuse import observe

from agent.context import ContextBuilder
from agent.dispatcher import ToolDispatcher
from agent.prompts import Scope
from agent.sdk import ToolTraceHooks, build_agent
from db.base import create_db
from models.identity import AgentKind, Identity
from observability.telemetry import set_identity_trace_attrs
from shared.config import Settings, get_settings
from store.data_store import DataStore, create_firestore_data_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Engine:
    store: DataStore
    builder: ContextBuilder
    dispatcher: ToolDispatcher
    settings: Settings


def create_engine(settings: Optional[Settings] = None, store: Optional[DataStore] = None) -> Engine:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)
    if store is None:
        store = create_firestore_data_store(create_db(settings), settings)
    return Engine(
        store=store,
        builder=ContextBuilder(store, timeout_s=settings.context_timeout_s),
        dispatcher=ToolDispatcher(store, timeout_s=settings.tool_timeout_s),
        settings=settings,
    )


async def build_scope(engine: Engine, kind: AgentKind, identity: Identity, event_id: Optional[str]) -> Scope:
    if kind in (AgentKind.CLIENT, AgentKind.VENUE_EVENT) and not event_id:
        raise ValueError(f"The {kind.value} assistant needs an event_id")
    if kind == AgentKind.CLIENT:
        return await engine.builder.build_client_scope(identity, event_id)
    if kind == AgentKind.VENUE:
        return await engine.builder.build_venue_tenant_scope(identity)
    if kind == AgentKind.VENUE_EVENT:
        return await engine.builder.build_venue_event_scope(identity, event_id)
    return await engine.builder.build_vendor_scope(identity)


@observe(name="agent-turn")  # root trace for this request
async def run_turn(
    engine: Engine,
    kind: Union[AgentKind, str],
    identity: Identity,
    text: str,
    *,
    event_id: Optional[str] = None,
    preamble: str = "",
) -> str:
    """Fresh snapshot, fresh agent, one model run. Nothing is kept between turns."""
    kind = AgentKind(kind)
    with set_identity_trace_attrs(identity, kind=kind, scope_id=event_id):
        scope = await build_scope(engine, kind, identity, event_id)
        agent = build_agent(engine.dispatcher, kind, identity, scope, preamble=preamble)
        result = await Runner.run(agent, text, hooks=ToolTraceHooks())
        logger.info("[TURN] %s %s done", kind.value, identity.actor_id)
        return str(result.final_output)


async def main():
    if len(sys.argv) < 3:
        print("usage: python -m agent.main <client|venue|venue_event|vendor> <actor_id> [event_id]")
        return
    kind = AgentKind(sys.argv[1])
    identity = Identity(actor_id=sys.argv[2], actor_role=kind.role)
    event_id = sys.argv[3] if len(sys.argv) > 3 else None
    engine = create_engine()

    while True:
        user_input = input("You: ")
        if user_input.strip().lower() in {"exit", "quit"}:
            break
        reply = await run_turn(engine, kind, identity, user_input, event_id=event_id)
        print(f"Assistant: {reply}")


if __name__ == "__main__":
    asyncio.run(main())
