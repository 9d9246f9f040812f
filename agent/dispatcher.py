# agent/dispatcher.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from agent.errors import AgentError, InvalidArguments, NotFound, ToolNotFound, Unauthorized
from agent.tool_registry import get_registry
from agent.tools import ToolArgs, ToolSpec
from models.identity import AgentKind, Identity
from models.tool_result import ErrorKind, ToolCallResult, ToolFailure, ToolSuccess, to_model_payload
from observability.obs import safe_update_current_span_io, span_attrs
from observability.telemetry import mark_error, set_identity_trace_attrs
from shared import time
from shared.config import get_settings
from store.base import EntityNotFoundError, GuardFailedError
from store.data_store import DataStore
from tools.base import ToolContext, dump

logger = logging.getLogger(__name__)


def _validate(spec: ToolSpec, tool_name: str, raw_arguments: Any) -> ToolArgs:
    if raw_arguments is None:
        raw_arguments = {}
    if not isinstance(raw_arguments, Mapping):
        raise InvalidArguments(f"Arguments for {tool_name} must be a JSON object")
    try:
        return spec.args_model.model_validate(dict(raw_arguments))
    except ValidationError as e:
        errors = e.errors()
        fields = [".".join(str(p) for p in err["loc"]) or "(arguments)" for err in errors]
        details = "; ".join(f"{f}: {err['msg']}" for f, err in zip(fields, errors))
        raise InvalidArguments(f"Invalid arguments for {tool_name}: {details}", fields=fields)


class ToolDispatcher:
    """
    Single entry point for model-issued tool calls.

    Order of checks: resolve the tool, validate its arguments, check the
    identity's role against the catalogue, then run the handler (which
    re-reads and checks ownership of everything it references before it
    writes). Nothing raises out of `execute`; every outcome is a
    ToolSuccess or a ToolFailure.
    """

    def __init__(
        self,
        store: DataStore,
        *,
        timeout_s: Optional[float] = None,
        clock: time.Clock = time.utcnow,
    ):
        self.store = store
        self.timeout_s = timeout_s if timeout_s is not None else get_settings().tool_timeout_s
        self.clock = clock

    async def execute(
        self,
        kind: Union[AgentKind, str],
        tool_name: str,
        raw_arguments: Any,
        identity: Identity,
    ) -> ToolCallResult:
        kind_label = getattr(kind, "value", kind)
        with set_identity_trace_attrs(identity, kind=kind):
            with span_attrs(f"tool.{tool_name}", agent=kind_label, operation="tool", tool=tool_name):
                safe_update_current_span_io(input={"args": raw_arguments}, redact=True)
                result = await self._run(kind, tool_name, raw_arguments, identity)
                safe_update_current_span_io(output=to_model_payload(result), redact=True)
                return result

    async def _run(
        self,
        kind: Union[AgentKind, str],
        tool_name: str,
        raw_arguments: Any,
        identity: Identity,
    ) -> ToolCallResult:
        registry = get_registry(kind)
        spec = registry.get(tool_name) if registry else None
        try:
            if spec is None:
                raise ToolNotFound(f"Unknown tool '{tool_name}' for the {getattr(kind, 'value', kind)} assistant")

            args = _validate(spec, tool_name, raw_arguments)

            if identity.actor_role != registry.kind.role:
                raise Unauthorized(
                    f"{identity.actor_role.value} identity cannot use {registry.kind.value} tools"
                )

            ctx = ToolContext(store=self.store, identity=identity, now=self.clock())
            out = await asyncio.wait_for(spec.fn(args, ctx), timeout=self.timeout_s)
            logger.info("[DISPATCH] %s.%s ok actor=%s", registry.kind.value, tool_name, identity.actor_id)
            return ToolSuccess(data=dump(out))

        except AgentError as e:
            return self._fail(e, tool_name, identity)
        except GuardFailedError as e:
            # ownership changed between the check and the write
            return self._fail(Unauthorized(str(e)), tool_name, identity)
        except EntityNotFoundError as e:
            return self._fail(NotFound(e.collection, e.item_id), tool_name, identity)
        except asyncio.TimeoutError as e:
            logger.error("[DISPATCH] %s timed out after %ss actor=%s", tool_name, self.timeout_s, identity.actor_id)
            mark_error(e, kind="ToolTimeout")
            return ToolFailure(
                error_kind=ErrorKind.EXECUTION_ERROR,
                message=f"Tool '{tool_name}' timed out after {self.timeout_s}s",
            )
        except Exception as e:
            logger.exception("[DISPATCH] %s failed actor=%s", tool_name, identity.actor_id)
            mark_error(e, kind="ToolError")
            return ToolFailure(error_kind=ErrorKind.EXECUTION_ERROR, message=str(e) or type(e).__name__)

    def _fail(self, e: AgentError, tool_name: str, identity: Identity) -> ToolFailure:
        if e.kind == ErrorKind.UNAUTHORIZED:
            logger.warning("[DISPATCH] %s unauthorized actor=%s: %s", tool_name, identity.actor_id, e.message)
        else:
            logger.info("[DISPATCH] %s %s actor=%s: %s", tool_name, e.kind.value, identity.actor_id, e.message)
        mark_error(e, kind=f"Tool.{e.kind.value}")
        return ToolFailure(error_kind=e.kind, message=e.public_message)
