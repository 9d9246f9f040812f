from enum import Enum
from pydantic import BaseModel, Field


class Role(str, Enum):
    CLIENT = "client"
    VENUE = "venue"
    VENDOR = "vendor"


class AgentKind(str, Enum):
    """Which tool catalogue (and which assistant) a request is served by."""
    CLIENT = "client"
    VENUE = "venue"              # tenant-wide venue operations
    VENUE_EVENT = "venue_event"  # one event, managed by its venue
    VENDOR = "vendor"

    @property
    def role(self) -> Role:
        return _KIND_ROLES[self]


_KIND_ROLES = {
    AgentKind.CLIENT: Role.CLIENT,
    AgentKind.VENUE: Role.VENUE,
    AgentKind.VENUE_EVENT: Role.VENUE,
    AgentKind.VENDOR: Role.VENDOR,
}


class Identity(BaseModel):
    """Who is acting. Supplied by the caller on every request, never stored."""
    actor_id: str = Field(..., min_length=1)
    actor_role: Role

    model_config = {"extra": "forbid", "frozen": True}
