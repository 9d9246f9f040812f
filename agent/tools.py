# agent/tools.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Awaitable, Callable, Dict, Iterator, List, Literal, Mapping, Optional, Type, Union
from typing import get_args, get_origin

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from models.identity import AgentKind
from models.tool_result import FieldShape, ToolDefinition
from shared import time

ToolFn = Callable[[Any, Any], Awaitable[Any]]


def _check_iso_datetime(value: str) -> str:
    try:
        time.parse_datetime(value)
    except ValueError:
        raise ValueError("must be an ISO 8601 date or datetime, e.g. 2025-06-15 or 2025-06-15T18:00:00Z")
    return value


Id = Annotated[str, Field(min_length=1)]
IsoDateTime = Annotated[str, AfterValidator(_check_iso_datetime)]
Email = Annotated[str, Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]


class ToolArgs(BaseModel):
    """
    Base for every tool's argument model. Strict: the model must send the
    declared JSON types, and unknown keys are rejected.
    """
    model_config = ConfigDict(extra="forbid", strict=True)


class NoArgs(ToolArgs):
    pass


@dataclass(frozen=True)
class ToolSpec:
    fn: ToolFn
    args_model: Type[ToolArgs]
    description: str = "No description provided."

    def definition(self, name: str) -> ToolDefinition:
        return ToolDefinition(
            name=name,
            description=self.description,
            input_shape=input_shape(self.args_model),
        )


class ToolRegistry:
    """
    A role's catalogue: every member of `names` bound to exactly one ToolSpec.
    Built at import time and read-only afterwards.
    """

    def __init__(self, kind: AgentKind, names: Type[Enum], tools: Mapping[Enum, ToolSpec]):
        missing = [n.value for n in names if n not in tools]
        extra = [getattr(n, "value", n) for n in tools if not isinstance(n, names)]
        if missing or extra:
            raise ValueError(
                f"{kind.value} catalogue out of sync with {names.__name__}: "
                f"missing={missing} extra={extra}"
            )
        self.kind = kind
        self.names = names
        self._tools: Mapping[str, ToolSpec] = MappingProxyType({n.value: tools[n] for n in names})

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def items(self):
        return self._tools.items()

    def definitions(self) -> List[ToolDefinition]:
        return [spec.definition(name) for name, spec in self._tools.items()]


# --- input shape ----------------------------------------------------------------

_KINDS = {str: "string", bool: "boolean", int: "integer", float: "number"}


def _unwrap_optional(field_type):
    if get_origin(field_type) is Union:
        non_none = [a for a in get_args(field_type) if a is not type(None)]
        if len(non_none) == 1:
            return _unwrap_optional(non_none[0])
    if get_origin(field_type) is Annotated:
        return _unwrap_optional(get_args(field_type)[0])
    return field_type


def _field_kind(field_type) -> tuple[str, Optional[List[Any]]]:
    base = _unwrap_optional(field_type)
    if get_origin(base) is Literal:
        values = list(get_args(base))
        return _KINDS.get(type(values[0]), "string"), values
    if base in _KINDS:
        return _KINDS[base], None
    # datetimes and anything exotic travel as strings
    if base is datetime:
        return "string", None
    raise TypeError(f"Tool argument type {base!r} has no flat JSON kind")


def input_shape(args_model: Type[BaseModel]) -> List[FieldShape]:
    shapes: List[FieldShape] = []
    for field_name, field_info in args_model.model_fields.items():
        kind, enum = _field_kind(field_info.annotation)
        shapes.append(FieldShape(
            name=field_name,
            kind=kind,
            required=field_info.is_required(),
            enum=enum,
            description=field_info.description,
        ))
    return shapes


# --- reference rendering ------------------------------------------------------

def render_tool_reference(definition: ToolDefinition) -> str:
    """Render a single tool reference block."""
    lines = []
    lines.append("-" * 40)
    lines.append(f"TOOL: {definition.name}")
    lines.append(f"Purpose: {definition.description}")
    lines.append("")
    lines.append("Arguments (JSON object):")

    for f in definition.input_shape:
        req_label = "required" if f.required else "optional"
        kind = " | ".join(repr(v) for v in f.enum) if f.enum else f.kind
        lines.append(f"  {f.name:22s} ({kind}, {req_label})")
        if f.description:
            lines.append(f"      {f.description}")

    lines.append("-" * 40)
    return "\n".join(lines)


def build_tools_reference(registry: ToolRegistry) -> str:
    blocks = [render_tool_reference(d) for d in registry.definitions()]
    return "=== TOOLS REFERENCE ===\n" + "\n\n".join(blocks)


def schema_for(args_model: Type[BaseModel]) -> Dict[str, Any]:
    """JSON schema handed to the function-calling API."""
    schema = args_model.model_json_schema()
    schema.setdefault("additionalProperties", False)
    return schema
