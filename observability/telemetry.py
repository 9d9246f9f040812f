# telemetry.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from langfuse import propagate_attributes
from observability.langfuse_client import langfuse

from models.identity import AgentKind, Identity
Json = Dict[str, Any]


def _enum_to_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    return str(getattr(x, "value", x))


def _collect_tags(values: Iterable[Any]) -> list[str]:
    out: list[str] = []
    seen = set()
    for v in values:
        s = _enum_to_str(v)
        if s and s.strip() and s not in seen:
            out.append(s.strip())
            seen.add(s)
    return out


def set_identity_trace_attrs(
    identity: Identity,
    *,
    kind: Optional[AgentKind] = None,
    scope_id: Optional[str] = None,
    extra_metadata: Optional[Json] = None,
):
    """
    Propagate who is acting to every span opened inside the returned
    context manager. Only ids and enum values; never entity payloads.
    """
    tags = _collect_tags([identity.actor_role, kind])

    meta: Json = {"actor.role": _enum_to_str(identity.actor_role)}
    if kind is not None:
        meta["agent.kind"] = _enum_to_str(kind)
    if scope_id:
        meta["scope.id"] = scope_id
    if extra_metadata:
        # caller-provided, already deliberate
        meta.update(extra_metadata)

    return propagate_attributes(
        user_id=identity.actor_id,
        session_id=scope_id,
        tags=tags,
        metadata=meta,
    )


def mark_error(exc: Exception, *, kind: str = "UnhandledError", span=None, extra: Optional[Json] = None) -> None:
    """
    Minimal error marking; no payload dumping. Add explicit `extra` if needed.
    """
    meta = {"status": "error", "error.kind": kind, "error.type": type(exc).__name__}
    if extra:
        meta["error.extra"] = extra

    if span is not None:
        try:
            span.update(metadata=meta)
        except Exception:
            pass

    try:
        langfuse.update_current_span(
            metadata=meta,
            status_message=str(exc),
            level="ERROR",
        )
    except Exception:
        # Never let observability crash business logic
        pass
