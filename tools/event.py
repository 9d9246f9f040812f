from __future__ import annotations

from datetime import date as calendar_date
from typing import Any, Dict, List, Optional

from pydantic import Field

from agent.errors import InvalidArguments, NotFound
from agent.tools import Id, IsoDateTime, NoArgs, ToolArgs
from models.event import Event, EventStatus
from models.scope import VenueSummary
from shared import time
from store.base import drop_nones
from tools.aggregates import guest_stats, unread_count, venue_summary
from tools.base import ToolContext, deny, log_action, require_venue_event


# --- venue, tenant-wide -----------------------------------------------------------

class ListEventsArgs(ToolArgs):
    status: Optional[EventStatus] = None
    start_date: Optional[IsoDateTime] = Field(None, description="Only events on or after this date")
    end_date: Optional[IsoDateTime] = Field(None, description="Only events on or before this date")
    client_id: Optional[str] = None


async def list_events(args: ListEventsArgs, ctx: ToolContext) -> List[Event]:
    events = await ctx.store.events.list(
        venue_id=ctx.actor_id, status=args.status, client_id=args.client_id, order_by="date"
    )
    if args.start_date:
        start = time.to_utc(args.start_date)
        events = [e for e in events if time.ensure_aware_utc(e.date) >= start]
    if args.end_date:
        end = time.to_utc(args.end_date)
        if time.is_date_only(args.end_date):
            # a bare date covers that whole day
            end_of_day = end + time.ONE_DAY
            events = [e for e in events if time.ensure_aware_utc(e.date) < end_of_day]
        else:
            events = [e for e in events if time.ensure_aware_utc(e.date) <= end]
    return events


class EventIdArgs(ToolArgs):
    event_id: Id


async def get_event_summary(args: EventIdArgs, ctx: ToolContext) -> Dict[str, Any]:
    event = await require_venue_event(ctx, args.event_id)
    elements = await ctx.store.event_elements.list(event_id=event.event_id)
    tasks = await ctx.store.tasks.list(event_id=event.event_id)
    guests = await ctx.store.guests.list(event_id=event.event_id)
    return {
        "event": event,
        "element_count": len(elements),
        "total_amount": sum(ee.amount for ee in elements),
        "open_task_count": sum(1 for t in tasks if not t.is_closed),
        "guest_stats": guest_stats(guests),
    }


class CreateEventArgs(ToolArgs):
    venue_id: Id
    name: str = Field(..., min_length=1)
    date: IsoDateTime
    client_id: Optional[str] = None
    description: Optional[str] = None


async def create_event(args: CreateEventArgs, ctx: ToolContext) -> Event:
    if args.venue_id != ctx.actor_id:
        raise deny(ctx, "venue", args.venue_id)
    if args.client_id and await ctx.store.clients.get(args.client_id) is None:
        raise NotFound("Client", args.client_id)

    event = await ctx.store.events.create({
        "name": args.name,
        "description": args.description,
        "date": time.to_utc(args.date),
        "client_id": args.client_id,
        "venue_id": ctx.actor_id,
        "status": "inquiry",
    })
    await log_action(ctx, event.event_id, "event_created", f"Created event {event.name}")
    return event


async def get_venue_dashboard(args: NoArgs, ctx: ToolContext) -> VenueSummary:
    events = await ctx.store.events.list(venue_id=ctx.actor_id)
    tasks = await ctx.store.tasks.list(event_id=[e.event_id for e in events]) if events else []
    unread = await unread_count(ctx.store, ctx.actor_id)
    return venue_summary(events, tasks, unread, ctx.now)


# --- venue, one event ---------------------------------------------------------------

class UpdateEventStatusArgs(ToolArgs):
    event_id: Id
    new_status: EventStatus


async def update_event_status(args: UpdateEventStatusArgs, ctx: ToolContext) -> Event:
    event = await require_venue_event(ctx, args.event_id)
    await log_action(
        ctx, event.event_id, "event_status_changed", f"Event status changed to {args.new_status}",
        {"previous_status": event.status, "new_status": args.new_status},
    )
    return await ctx.store.events.update(
        event.event_id, {"status": args.new_status}, expect={"venue_id": ctx.actor_id}
    )


class UpdateEventArgs(ToolArgs):
    event_id: Id
    name: Optional[str] = None
    description: Optional[str] = None
    date: Optional[IsoDateTime] = None
    rsvp_deadline: Optional[IsoDateTime] = Field(None, description="YYYY-MM-DD")


async def update_event(args: UpdateEventArgs, ctx: ToolContext) -> Event:
    changes = drop_nones(args.model_dump(exclude={"event_id"}))
    if not changes:
        raise InvalidArguments("Nothing to update")
    if "date" in changes:
        changes["date"] = time.to_utc(changes["date"])
    if "rsvp_deadline" in changes:
        # the calendar day as written, not shifted into UTC
        deadline: calendar_date = time.parse_datetime(changes["rsvp_deadline"]).date()
        changes["rsvp_deadline"] = deadline

    event = await require_venue_event(ctx, args.event_id)
    return await ctx.store.events.update(event.event_id, changes, expect={"venue_id": ctx.actor_id})
