from datetime import datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

ApprovalStatus = Literal["pending", "approved", "rejected", "n/a"]


class Client(BaseModel):
    client_id: str
    name: str
    email: str
    phone: Optional[str] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class Venue(BaseModel):
    venue_id: str
    name: str
    description: Optional[str] = None
    address: Dict[str, Any] = Field(default_factory=dict)  # {street, city, state, zip, country}

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class Vendor(BaseModel):
    vendor_id: str
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    description: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class VenueVendor(BaseModel):
    """A vendor's membership in a venue's directory; offerings hang off this link."""
    venue_vendor_id: str
    venue_id: str
    vendor_id: str
    approval_status: ApprovalStatus = "pending"

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class Space(BaseModel):
    space_id: str
    venue_id: str
    name: str
    description: Optional[str] = None
    capacity: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
