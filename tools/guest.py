from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field

from agent.errors import InvalidArguments, NotFound
from agent.tools import Email, Id, ToolArgs
from models.event import Event
from models.guest import Guest, GuestStats, RsvpStatus
from store.base import drop_nones
from tools.aggregates import guest_stats
from tools.base import (
    ToolContext,
    log_action,
    require_client_event,
    require_vendor_event,
    require_venue_event,
)


class AddGuestArgs(ToolArgs):
    event_id: Id
    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    email: Optional[Email] = None
    phone: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    plus_one: bool = False
    notes: Optional[str] = None


class UpdateGuestArgs(ToolArgs):
    guest_id: Id
    name: Optional[str] = None
    email: Optional[Email] = None
    phone: Optional[str] = None
    rsvp_status: Optional[RsvpStatus] = None
    dietary_restrictions: Optional[str] = None
    plus_one: Optional[bool] = None
    notes: Optional[str] = None


class GuestIdArgs(ToolArgs):
    guest_id: Id


class EventIdArgs(ToolArgs):
    event_id: Id


async def _create_guest(ctx: ToolContext, event: Event, args: AddGuestArgs) -> Guest:
    guest = await ctx.store.guests.create({
        **args.model_dump(exclude={"event_id"}),
        "event_id": event.event_id,
        "rsvp_status": "undecided",
    })
    await log_action(
        ctx, event.event_id, "guest_added", f"Added guest {guest.name}", {"guest_id": guest.guest_id}
    )
    return guest


async def _get_guest(ctx: ToolContext, guest_id: str) -> Guest:
    guest = await ctx.store.guests.get(guest_id)
    if guest is None:
        raise NotFound("Guest", guest_id)
    return guest


async def _update_guest(ctx: ToolContext, guest: Guest, args: UpdateGuestArgs) -> Guest:
    changes = drop_nones(args.model_dump(exclude={"guest_id"}))
    return await ctx.store.guests.update(guest.guest_id, changes, expect={"event_id": guest.event_id})


def _require_changes(args: UpdateGuestArgs) -> None:
    if not drop_nones(args.model_dump(exclude={"guest_id"})):
        raise InvalidArguments("Nothing to update")


# --- client ---------------------------------------------------------------------

async def client_add_guest(args: AddGuestArgs, ctx: ToolContext) -> Guest:
    event = await require_client_event(ctx, args.event_id)
    return await _create_guest(ctx, event, args)


async def client_update_guest(args: UpdateGuestArgs, ctx: ToolContext) -> Guest:
    _require_changes(args)
    guest = await _get_guest(ctx, args.guest_id)
    await require_client_event(ctx, guest.event_id)
    return await _update_guest(ctx, guest, args)


async def remove_guest(args: GuestIdArgs, ctx: ToolContext) -> Dict[str, Any]:
    guest = await _get_guest(ctx, args.guest_id)
    await require_client_event(ctx, guest.event_id)
    await ctx.store.guests.delete(guest.guest_id)
    await log_action(
        ctx, guest.event_id, "guest_removed", f"Removed guest {guest.name}", {"guest_id": guest.guest_id}
    )
    return {"success": True, "guest_id": guest.guest_id}


# --- venue ----------------------------------------------------------------------

async def venue_add_guest(args: AddGuestArgs, ctx: ToolContext) -> Guest:
    event = await require_venue_event(ctx, args.event_id)
    return await _create_guest(ctx, event, args)


async def venue_update_guest(args: UpdateGuestArgs, ctx: ToolContext) -> Guest:
    _require_changes(args)
    guest = await _get_guest(ctx, args.guest_id)
    await require_venue_event(ctx, guest.event_id)
    return await _update_guest(ctx, guest, args)


async def get_guest_statistics(args: EventIdArgs, ctx: ToolContext) -> GuestStats:
    event = await require_venue_event(ctx, args.event_id)
    return guest_stats(await ctx.store.guests.list(event_id=event.event_id))


# --- vendor ---------------------------------------------------------------------

async def vendor_add_guest(args: AddGuestArgs, ctx: ToolContext) -> Guest:
    # e.g. a band adding its crew; only events the vendor is booked on
    event = await require_vendor_event(ctx, args.event_id)
    return await _create_guest(ctx, event, args)
