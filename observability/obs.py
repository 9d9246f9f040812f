# obs.py (Langfuse v3-compatible)
from __future__ import annotations

import time
from functools import wraps
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Optional, Mapping, ParamSpec, TypeVar
from observability.langfuse_client import langfuse
from observability.telemetry import mark_error

# never leave the process in span input/output; ids and statuses are fine
SENSITIVE_FIELDS = {"content", "email", "phone", "notes", "form_response", "dietary_restrictions"}

P = ParamSpec("P")
T = TypeVar("T")


def _dump(obj: Any) -> Any:
    md = getattr(obj, "model_dump", None)
    if callable(md):
        try:
            return md(mode="json")
        except Exception:
            return obj
    if isinstance(obj, list):
        return [_dump(v) for v in obj]
    return obj


def _maybe_redact(v: Any, *, redact: bool) -> Any:
    if not redact:
        return v
    if isinstance(v, list):
        return [_maybe_redact(x, redact=True) for x in v]
    if isinstance(v, Mapping):
        return {k: ("***" if k in SENSITIVE_FIELDS else _maybe_redact(val, redact=True)) for k, val in v.items()}
    return v


def _elapsed_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)


def _safe_span_update(span, **fields: Any) -> None:
    try:
        span.update(**fields)
    except Exception:
        # Never let observability crash business logic
        pass


def instrument_io(
    *,
    name: str,
    input_fn: Optional[Callable[..., Any]] = None,
    output_fn: Optional[Callable[[Any], Any]] = None,
    redact: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Wrap an async method in a span. input_fn receives the call's arguments,
    output_fn the result; both should return small summaries, not payloads.
    """
    def deco(fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            t0 = time.perf_counter()
            with langfuse.start_as_current_span(name=name) as s:
                if input_fn is not None:
                    try:
                        _safe_span_update(s, input=_maybe_redact(_dump(input_fn(*args, **kwargs)), redact=redact))
                    except Exception:
                        pass
                try:
                    out = await fn(*args, **kwargs)
                except Exception as e:
                    _safe_span_update(
                        s,
                        metadata={"status": "error", "error.kind": type(e).__name__, "duration.ms": _elapsed_ms(t0)},
                    )
                    mark_error(e, kind="InstrumentedIOError", span=s)
                    raise
                if output_fn is not None:
                    try:
                        _safe_span_update(s, output=_maybe_redact(_dump(output_fn(out)), redact=redact))
                    except Exception:
                        pass
                _safe_span_update(s, metadata={"status": "ok", "duration.ms": _elapsed_ms(t0)})
                return out
        return wrapper
    return deco


@contextmanager
def span_attrs(name: str, **attrs: Any):
    """Nested span carrying fixed metadata (tool name, agent kind, ...)."""
    t0 = time.perf_counter()
    with langfuse.start_as_current_observation(name=name, as_type="span") as s:
        if attrs:
            _safe_span_update(s, metadata=dict(attrs))
        try:
            yield s
        except Exception as e:
            _safe_span_update(
                s,
                metadata={"status": "error", "error.kind": type(e).__name__, "duration.ms": _elapsed_ms(t0)},
                status_message=str(e),
                level="ERROR",
            )
            raise
        _safe_span_update(s, metadata={"status": "ok", "duration.ms": _elapsed_ms(t0)})


def safe_update_current_span_io(*, input: Optional[Any] = None,
                                output: Optional[Any] = None,
                                redact: bool = False) -> None:
    try:
        payload = {}
        if input is not None:
            payload["input"] = _maybe_redact(_dump(input), redact=redact)
        if output is not None:
            payload["output"] = _maybe_redact(_dump(output), redact=redact)
        if payload:
            langfuse.update_current_span(**payload)
    except Exception:
        pass


@contextmanager
def span_step(name: str, *, kind: str, **attrs):
    with span_attrs(name, **attrs) as s:
        try:
            yield s
        except Exception as e:
            # single place to mark + rethrow
            mark_error(e, kind=kind, span=s)
            raise
