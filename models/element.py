from datetime import datetime
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field

ElementStatus = Literal["to-do", "in_progress", "completed", "needs_attention"]


class AvailabilityRules(BaseModel):
    lead_time_days: int = 0
    blackout_dates: List[str] = Field(default_factory=list)   # YYYY-MM-DD

    model_config = {"extra": "allow"}   # seasonal pricing etc. is carried through untouched


class Element(BaseModel):
    """An offering a vendor sells through a venue."""
    element_id: str
    venue_vendor_id: str
    name: str
    category: Optional[str] = None
    price: float = 0
    description: Optional[str] = None
    # A literal string survives when the rules were supplied as text the assistant could not encode.
    availability_rules: Union[AvailabilityRules, str] = Field(default_factory=AvailabilityRules)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class EventElement(BaseModel):
    """An offering booked for one event, with the agreed amount."""
    event_element_id: str
    event_id: str
    element_id: str
    status: ElementStatus = "to-do"
    customization: Optional[str] = None
    amount: float
    contract_completed: bool = False
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
