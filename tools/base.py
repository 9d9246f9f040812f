from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from agent.errors import NotFound, PreconditionFailed, Unauthorized
from models.element import AvailabilityRules, Element
from models.event import Event
from models.identity import Identity, Role
from models.message import Message
from models.parties import VenueVendor
from models.scope import UNKNOWN_VENDOR
from shared import time
from store.data_store import DataStore

logger = logging.getLogger(__name__)

Json = Dict[str, Any]


@dataclass(frozen=True)
class ToolContext:
    """Everything a handler may touch: the store, who is acting, and a fixed 'now'."""
    store: DataStore
    identity: Identity
    now: datetime

    @property
    def actor_id(self) -> str:
        return self.identity.actor_id

    @property
    def role(self) -> Role:
        return self.identity.actor_role


def dump(out: Any) -> Any:
    """JSON-ready copy of a handler result."""
    if isinstance(out, BaseModel):
        return out.model_dump(mode="json")
    if isinstance(out, dict):
        return {k: dump(v) for k, v in out.items()}
    if isinstance(out, (list, tuple)):
        return [dump(v) for v in out]
    if isinstance(out, datetime):
        return out.isoformat()
    return out


def summarize(out: Any) -> Dict[str, Any]:
    if out is None:
        return {"kind": "none"}
    if isinstance(out, dict):
        return {k: out[k] for k in list(out)[:6]}
    if isinstance(out, list):
        return {"list_len": len(out)}
    return {"repr": str(out)[:200]}


def decode_structured(value: Optional[str]) -> Any:
    """
    Decode a string-encoded object/array argument. Models sometimes write
    plain prose where JSON was asked for; that text is kept as-is.
    """
    if value is None:
        return None
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.info("[TOOLS] structured argument was not JSON, keeping literal text")
        return value


# --- ownership ----------------------------------------------------------------

def deny(ctx: ToolContext, what: str, item_id: str) -> Unauthorized:
    logger.warning(
        "[AUTH] %s %s denied %s %s", ctx.role.value, ctx.actor_id, what, item_id
    )
    return Unauthorized(f"{what} {item_id} does not belong to this {ctx.role.value}")


async def get_event(ctx: ToolContext, event_id: str) -> Event:
    event = await ctx.store.events.get(event_id)
    if event is None:
        raise NotFound("Event", event_id)
    return event


async def require_client_event(ctx: ToolContext, event_id: str) -> Event:
    event = await get_event(ctx, event_id)
    if event.client_id != ctx.actor_id:
        raise deny(ctx, "event", event_id)
    return event


async def require_venue_event(ctx: ToolContext, event_id: str) -> Event:
    event = await get_event(ctx, event_id)
    if event.venue_id != ctx.actor_id:
        raise deny(ctx, "event", event_id)
    return event


async def require_venue_vendor(ctx: ToolContext, venue_vendor_id: str) -> VenueVendor:
    link = await ctx.store.venue_vendors.get(venue_vendor_id)
    if link is None:
        raise NotFound("Vendor link", venue_vendor_id)
    if link.venue_id != ctx.actor_id:
        raise deny(ctx, "vendor link", venue_vendor_id)
    return link


async def require_venue_element(ctx: ToolContext, element_id: str) -> Element:
    element = await ctx.store.elements.get(element_id)
    if element is None:
        raise NotFound("Element", element_id)
    link = await ctx.store.venue_vendors.get(element.venue_vendor_id)
    if link is None or link.venue_id != ctx.actor_id:
        raise deny(ctx, "element", element_id)
    return element


async def vendor_links(store: DataStore, vendor_id: str) -> List[VenueVendor]:
    return await store.venue_vendors.list(vendor_id=vendor_id)


async def vendor_event_ids(store: DataStore, vendor_id: str) -> List[str]:
    """Distinct events that have at least one of the vendor's offerings attached."""
    links = await vendor_links(store, vendor_id)
    if not links:
        return []
    elements = await store.elements.list(venue_vendor_id=[l.venue_vendor_id for l in links])
    if not elements:
        return []
    attached = await store.event_elements.list(element_id=[e.element_id for e in elements])
    return list(dict.fromkeys(ee.event_id for ee in attached))


async def require_vendor_event(ctx: ToolContext, event_id: str) -> Event:
    event = await get_event(ctx, event_id)
    if event_id not in await vendor_event_ids(ctx.store, ctx.actor_id):
        raise deny(ctx, "event", event_id)
    return event


async def require_message_recipient(ctx: ToolContext, message_id: str) -> Message:
    message = await ctx.store.messages.get(message_id)
    if message is None:
        raise NotFound("Message", message_id)
    if message.recipient_id != ctx.actor_id:
        raise deny(ctx, "message", message_id)
    return message


# --- lookups --------------------------------------------------------------------

async def vendor_names(store: DataStore, venue_vendor_ids: Iterable[str]) -> Dict[str, str]:
    """venue_vendor_id -> vendor display name; unknown links are left out."""
    ids = list(dict.fromkeys(venue_vendor_ids))
    if not ids:
        return {}
    links = await store.venue_vendors.list(venue_vendor_id=ids)
    vendors = await store.vendors.list(vendor_id=list({l.vendor_id for l in links})) if links else []
    by_vendor = {v.vendor_id: v.name for v in vendors}
    return {l.venue_vendor_id: by_vendor.get(l.vendor_id, UNKNOWN_VENDOR) for l in links}


# --- domain rules ---------------------------------------------------------------

def element_unavailable_reason(element: Element, event_date: datetime, now: datetime) -> Optional[str]:
    """None when the element can be booked for event_date, otherwise why not."""
    rules = element.availability_rules
    if not isinstance(rules, AvailabilityRules):
        # free-text rules cannot be evaluated; nothing to enforce
        return None

    days_left = time.days_until(event_date, now)
    if days_left < rules.lead_time_days:
        return (
            f"{element.name} needs {rules.lead_time_days} days of lead time; "
            f"the event is {days_left} days away"
        )
    if time.date_key(event_date) in rules.blackout_dates:
        return f"{element.name} is not available on {time.date_key(event_date)}"
    return None


def ensure_element_available(element: Element, event: Event, now: datetime) -> None:
    reason = element_unavailable_reason(element, event.date, now)
    if reason:
        raise PreconditionFailed(f"Element is not available for this date: {reason}")


# --- writes ----------------------------------------------------------------------

async def log_action(
    ctx: ToolContext,
    event_id: Optional[str],
    action_type: str,
    description: str,
    metadata: Optional[Json] = None,
) -> None:
    await ctx.store.action_history.create({
        "event_id": event_id,
        "actor_id": ctx.actor_id,
        "actor_role": ctx.role.value,
        "action_type": action_type,
        "description": description,
        "metadata": metadata,
        "created_at": ctx.now,
    })


def event_thread_id(event_id: str) -> str:
    return f"event-{event_id}"


def direct_thread_id(sender_id: str, recipient_id: str) -> str:
    return f"direct-{sender_id}-{recipient_id}"


async def send_message(
    ctx: ToolContext,
    *,
    thread_id: str,
    recipient_id: str,
    recipient_type: Role,
    content: str,
    event_id: Optional[str] = None,
    action_required: bool = False,
) -> Message:
    message = await ctx.store.messages.create({
        "thread_id": thread_id,
        "event_id": event_id,
        "sender_id": ctx.actor_id,
        "sender_type": ctx.role.value,
        "recipient_id": recipient_id,
        "recipient_type": Role(recipient_type).value,
        "content": content,
        "attachments": [],
        "action_required": action_required,
        "read": False,
        "created_at": ctx.now,
    })
    # in-app notification record; delivery happens elsewhere
    await ctx.store.notifications.create({
        "user_id": recipient_id,
        "user_type": Role(recipient_type).value,
        "notification_type": "message_received",
        "title": "New Message",
        "content": content[:100],
        "action_url": f"/events/{event_id}/messages" if event_id else "/messages",
        "read": False,
    })
    return message
