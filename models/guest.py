from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

RsvpStatus = Literal["yes", "no", "undecided"]


class Guest(BaseModel):
    guest_id: str
    event_id: str
    name: str
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    rsvp_status: RsvpStatus = "undecided"
    dietary_restrictions: Optional[str] = None
    plus_one: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class GuestStats(BaseModel):
    total: int = 0
    yes: int = 0
    no: int = 0
    undecided: int = 0
    expected_attendance: int = 0   # confirmed guests plus their plus-ones
