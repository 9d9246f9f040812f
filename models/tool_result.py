from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    UNAUTHORIZED = "Unauthorized"
    VALIDATION_ERROR = "ValidationError"
    PRECONDITION_FAILED = "PreconditionFailed"
    TOOL_NOT_FOUND = "ToolNotFound"
    EXECUTION_ERROR = "ExecutionError"


class ToolSuccess(BaseModel):
    ok: Literal[True] = True
    data: Any = None

    model_config = {"frozen": True}


class ToolFailure(BaseModel):
    ok: Literal[False] = False
    error_kind: ErrorKind
    message: str

    model_config = {"frozen": True}


ToolCallResult = Union[ToolSuccess, ToolFailure]


def to_model_payload(result: ToolCallResult) -> Any:
    """
    What goes back to the model: the raw data on success, {"error": ...}
    on failure. The function-calling protocol has no separate error channel.
    """
    if isinstance(result, ToolSuccess):
        return result.data
    return {"error": result.message}


class ToolCallPlan(BaseModel):
    """One tool call as planned by the model."""
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None


class ToolCallRecord(BaseModel):
    tool: str
    args: Dict[str, Any]
    id: Optional[str] = None
    result: ToolCallResult
    timestamp: datetime


class FieldShape(BaseModel):
    """One argument of a tool, as advertised to the model and used for validation."""
    name: str
    kind: Literal["string", "integer", "number", "boolean"]
    required: bool
    enum: Optional[List[Any]] = None
    description: Optional[str] = None


class ToolDefinition(BaseModel):
    name: str
    description: str
    input_shape: List[FieldShape]
