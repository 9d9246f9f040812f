from datetime import date as calendar_date, datetime
from typing import Literal, Optional
from pydantic import BaseModel

EventStatus = Literal[
    "inquiry",
    "pending_confirmation",
    "confirmed",
    "in_planning",
    "finalized",
    "completed",
    "cancelled",
]


class Event(BaseModel):
    event_id: str
    name: str
    description: Optional[str] = None
    date: datetime
    client_id: Optional[str] = None   # inquiries may not have a client yet
    venue_id: str
    status: EventStatus = "inquiry"
    rsvp_deadline: Optional[calendar_date] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
