from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from models.action_history import ActionHistoryRecord
from models.element import Element, EventElement
from models.event import Event
from models.guest import Guest
from models.message import Message
from models.parties import ApprovalStatus, Client, Space, Venue, Vendor
from models.task import Task

UNKNOWN_VENDOR = "Unknown"


class Offering(BaseModel):
    """Catalogue view of an element, flattened for the brief."""
    element_id: str
    name: str
    category: Optional[str] = None
    price: float
    vendor_id: Optional[str] = None
    vendor_name: str = UNKNOWN_VENDOR
    description: Optional[str] = None


class VendorDirectoryEntry(BaseModel):
    venue_vendor_id: str
    vendor_id: str
    name: str = UNKNOWN_VENDOR
    approval_status: ApprovalStatus
    offering_count: int = 0


class EnrichedEventElement(EventElement):
    element: Optional[Element] = None
    vendor_name: str = UNKNOWN_VENDOR


class VenueSummary(BaseModel):
    event_counts: Dict[str, int] = Field(default_factory=dict)   # by event status
    task_counts: Dict[str, int] = Field(default_factory=dict)    # by task status
    overdue_tasks: int = 0
    unread_messages: int = 0


class ClientScope(BaseModel):
    scope: Literal["client"] = "client"
    client: Client
    event: Event
    venue: Venue
    event_elements: List[EnrichedEventElement]
    tasks: List[Task]
    guests: List[Guest]
    offerings: List[Offering]
    vendors: List[VendorDirectoryEntry]
    messages: List[Message]
    spaces: List[Space]
    recent_actions: List[ActionHistoryRecord]
    as_of: datetime


class VenueTenantScope(BaseModel):
    scope: Literal["venue_tenant"] = "venue_tenant"
    venue: Venue
    events: List[Event]
    tasks: List[Task]
    messages: List[Message]
    offerings: List[Offering]
    vendors: List[VendorDirectoryEntry]
    spaces: List[Space]
    recent_actions: List[ActionHistoryRecord]
    summary: VenueSummary
    as_of: datetime


class VenueEventScope(BaseModel):
    scope: Literal["venue_event"] = "venue_event"
    venue: Venue
    event: Event
    client: Optional[Client] = None
    event_elements: List[EnrichedEventElement]
    tasks: List[Task]
    guests: List[Guest]
    messages: List[Message]
    offerings: List[Offering]
    vendors: List[VendorDirectoryEntry]
    spaces: List[Space]
    recent_actions: List[ActionHistoryRecord]
    as_of: datetime


class VendorScope(BaseModel):
    scope: Literal["vendor"] = "vendor"
    vendor: Vendor
    events: List[Event]
    tasks: List[Task]
    messages: List[Message]
    offerings: List[Offering]
    recent_actions: List[ActionHistoryRecord]
    as_of: datetime
