from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError

from agent.errors import InvalidArguments, NotFound, PreconditionFailed
from agent.tools import Id, ToolArgs
from models.element import AvailabilityRules, Element, ElementStatus, EventElement
from models.scope import UNKNOWN_VENDOR, Offering
from store.base import drop_nones
from tools.aggregates import venue_catalogue
from tools.base import (
    ToolContext,
    decode_structured,
    deny,
    dump,
    ensure_element_available,
    log_action,
    require_client_event,
    require_venue_element,
    require_venue_event,
    require_venue_vendor,
)


def _availability_rules(raw: Optional[str]) -> Any:
    """Structured rules when the text decodes to an object, the literal text otherwise."""
    if raw is None:
        return None
    decoded = decode_structured(raw)
    if not isinstance(decoded, dict):
        return raw
    try:
        return AvailabilityRules.model_validate(decoded).model_dump()
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise InvalidArguments(f"availability_rules: {problems}", fields=["availability_rules"])


async def _get_event_element(ctx: ToolContext, event_element_id: str) -> EventElement:
    ee = await ctx.store.event_elements.get(event_element_id)
    if ee is None:
        raise NotFound("Event element", event_element_id)
    return ee


async def _venue_event_element(ctx: ToolContext, event_element_id: str) -> EventElement:
    ee = await _get_event_element(ctx, event_element_id)
    await require_venue_event(ctx, ee.event_id)
    return ee


# ---------------------------------------------------------------------------
# client
# ---------------------------------------------------------------------------

class GetElementDetailsArgs(ToolArgs):
    element_id: Id


async def get_element_details(args: GetElementDetailsArgs, ctx: ToolContext) -> Dict[str, Any]:
    element = await ctx.store.elements.get(args.element_id)
    if element is None:
        raise NotFound("Element", args.element_id)
    link = await ctx.store.venue_vendors.get(element.venue_vendor_id)
    client_venues = {e.venue_id for e in await ctx.store.events.list(client_id=ctx.actor_id)}
    if link is None or link.venue_id not in client_venues:
        raise deny(ctx, "element", args.element_id)

    vendor = await ctx.store.vendors.get(link.vendor_id)
    return {
        **dump(element),
        "vendor_id": link.vendor_id,
        "vendor_name": vendor.name if vendor else UNKNOWN_VENDOR,
    }


class SearchAvailableElementsArgs(ToolArgs):
    venue_id: Id
    search_term: Optional[str] = Field(None, description="Matched against name and description")
    category: Optional[str] = None
    max_price: Optional[float] = Field(None, ge=0)


async def search_available_elements(args: SearchAvailableElementsArgs, ctx: ToolContext) -> List[Offering]:
    client_venues = {e.venue_id for e in await ctx.store.events.list(client_id=ctx.actor_id)}
    if args.venue_id not in client_venues:
        raise deny(ctx, "venue", args.venue_id)

    offerings, directory = await venue_catalogue(ctx.store, args.venue_id)
    rejected = {d.vendor_id for d in directory if d.approval_status == "rejected"}
    term = (args.search_term or "").strip().lower()

    out = []
    for o in offerings:
        if o.vendor_id in rejected:
            continue
        if args.category and (o.category or "").lower() != args.category.lower():
            continue
        if args.max_price is not None and o.price > args.max_price:
            continue
        if term and term not in f"{o.name} {o.description or ''}".lower():
            continue
        out.append(o)
    return out


class ClientAddElementArgs(ToolArgs):
    event_id: Id
    element_id: Id
    customization: Optional[str] = None


async def client_add_element_to_event(args: ClientAddElementArgs, ctx: ToolContext) -> EventElement:
    event = await require_client_event(ctx, args.event_id)
    element = await ctx.store.elements.get(args.element_id)
    if element is None:
        raise NotFound("Element", args.element_id)
    link = await ctx.store.venue_vendors.get(element.venue_vendor_id)
    if link is None or link.venue_id != event.venue_id:
        raise deny(ctx, "element", args.element_id)
    if link.approval_status == "rejected":
        raise PreconditionFailed(f"{element.name} is not offered at this venue")
    ensure_element_available(element, event, ctx.now)

    ee = await ctx.store.event_elements.create({
        "event_id": event.event_id,
        "element_id": element.element_id,
        "status": "to-do",
        "customization": args.customization,
        "amount": element.price,
    })
    await log_action(
        ctx, event.event_id, "element_added", f"Added {element.name} to the event",
        {"element_id": element.element_id, "event_element_id": ee.event_element_id},
    )
    return ee


class RequestElementChangeArgs(ToolArgs):
    event_element_id: Id
    change_description: str = Field(..., min_length=1)
    urgent: bool = False


async def request_element_change(args: RequestElementChangeArgs, ctx: ToolContext) -> Dict[str, Any]:
    ee = await _get_event_element(ctx, args.event_element_id)
    event = await require_client_event(ctx, ee.event_id)
    element = await ctx.store.elements.get(ee.element_id)
    label = element.name if element else "an element"

    task = await ctx.store.tasks.create({
        "event_id": event.event_id,
        "assigned_to_id": event.venue_id,
        "assigned_to_type": "venue",
        "status": "pending",
        "name": f"Change request: {label}",
        "description": args.change_description,
        "priority": "high" if args.urgent else "medium",
        "created_by": ctx.actor_id,
    })
    await log_action(
        ctx, event.event_id, "element_change_requested", f"Requested a change to {label}",
        {"event_element_id": ee.event_element_id, "task_id": task.task_id, "urgent": args.urgent},
    )
    return {"task": task, "message": "Your request was sent to the venue."}


# ---------------------------------------------------------------------------
# venue, one event
# ---------------------------------------------------------------------------

class VenueAddElementArgs(ToolArgs):
    event_id: Id
    element_id: Id
    amount: float = Field(..., ge=0, description="Agreed price for this event")
    customization: Optional[str] = None
    notes: Optional[str] = None


async def venue_add_element_to_event(args: VenueAddElementArgs, ctx: ToolContext) -> EventElement:
    event = await require_venue_event(ctx, args.event_id)
    element = await require_venue_element(ctx, args.element_id)
    ensure_element_available(element, event, ctx.now)

    ee = await ctx.store.event_elements.create({
        "event_id": event.event_id,
        "element_id": element.element_id,
        "status": "to-do",
        "customization": args.customization,
        "amount": args.amount,
        "notes": args.notes,
    })
    await log_action(
        ctx, event.event_id, "element_added", f"Added {element.name} to the event",
        {"element_id": element.element_id, "event_element_id": ee.event_element_id, "amount": args.amount},
    )
    return ee


class UpdateEventElementStatusArgs(ToolArgs):
    event_element_id: Id
    new_status: ElementStatus


async def update_event_element_status(args: UpdateEventElementStatusArgs, ctx: ToolContext) -> EventElement:
    ee = await _venue_event_element(ctx, args.event_element_id)
    await log_action(
        ctx, ee.event_id, "element_status_changed", f"Element status changed to {args.new_status}",
        {"event_element_id": ee.event_element_id, "previous_status": ee.status, "new_status": args.new_status},
    )
    return await ctx.store.event_elements.update(
        ee.event_element_id, {"status": args.new_status}, expect={"event_id": ee.event_id}
    )


class UpdateEventElementArgs(ToolArgs):
    event_element_id: Id
    customization: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    contract_completed: Optional[bool] = None


async def update_event_element(args: UpdateEventElementArgs, ctx: ToolContext) -> EventElement:
    changes = drop_nones(args.model_dump(exclude={"event_element_id"}))
    if not changes:
        raise InvalidArguments("Nothing to update")
    ee = await _venue_event_element(ctx, args.event_element_id)
    return await ctx.store.event_elements.update(ee.event_element_id, changes, expect={"event_id": ee.event_id})


class RemoveElementArgs(ToolArgs):
    event_element_id: Id
    reason: Optional[str] = None


async def remove_element_from_event(args: RemoveElementArgs, ctx: ToolContext) -> Dict[str, Any]:
    ee = await _venue_event_element(ctx, args.event_element_id)
    await ctx.store.event_elements.delete(ee.event_element_id)
    await log_action(
        ctx, ee.event_id, "element_removed", "Removed an element from the event",
        {"event_element_id": ee.event_element_id, "element_id": ee.element_id, "reason": args.reason},
    )
    return {"success": True, "event_element_id": ee.event_element_id}


# ---------------------------------------------------------------------------
# venue, tenant-wide
# ---------------------------------------------------------------------------

class CreateElementArgs(ToolArgs):
    venue_vendor_id: Id
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    availability_rules: Optional[str] = Field(
        None,
        description='JSON object, e.g. {"lead_time_days": 14, "blackout_dates": ["2025-12-25"]}',
    )


async def create_element(args: CreateElementArgs, ctx: ToolContext) -> Element:
    rules = _availability_rules(args.availability_rules) or AvailabilityRules().model_dump()
    link = await require_venue_vendor(ctx, args.venue_vendor_id)
    return await ctx.store.elements.create({
        "venue_vendor_id": link.venue_vendor_id,
        "name": args.name,
        "category": args.category,
        "price": args.price,
        "description": args.description,
        "availability_rules": rules,
    })


class UpdateElementArgs(ToolArgs):
    element_id: Id
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    availability_rules: Optional[str] = Field(None, description="JSON object, same shape as create_element")


async def update_element(args: UpdateElementArgs, ctx: ToolContext) -> Element:
    changes = drop_nones(args.model_dump(exclude={"element_id", "availability_rules"}))
    rules = _availability_rules(args.availability_rules)
    if rules is not None:
        changes["availability_rules"] = rules
    if not changes:
        raise InvalidArguments("Nothing to update")
    element = await require_venue_element(ctx, args.element_id)
    return await ctx.store.elements.update(
        element.element_id, changes, expect={"venue_vendor_id": element.venue_vendor_id}
    )
