from typing import Iterable, Optional

from models.tool_result import ErrorKind

# What the end user sees for both missing and foreign entities, so a
# caller can never tell another tenant's record from a non-existent one.
NOT_FOUND_MESSAGE = "Couldn't find that item, or it isn't available to you."


class AgentError(Exception):
    """Base for every failure the engine reports as a typed result."""
    kind: ErrorKind = ErrorKind.EXECUTION_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        return self.message


class NotFound(AgentError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        detail = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(detail)
        self.entity = entity
        self.entity_id = entity_id

    @property
    def public_message(self) -> str:
        return NOT_FOUND_MESSAGE


class Unauthorized(AgentError):
    kind = ErrorKind.UNAUTHORIZED

    @property
    def public_message(self) -> str:
        return NOT_FOUND_MESSAGE


class InvalidArguments(AgentError):
    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields = list(fields)


class PreconditionFailed(AgentError):
    kind = ErrorKind.PRECONDITION_FAILED


class ToolNotFound(AgentError):
    kind = ErrorKind.TOOL_NOT_FOUND
