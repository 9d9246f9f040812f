from __future__ import annotations

import logging
from typing import Annotated, Literal, Optional

from pydantic import Field

from agent.errors import NotFound, PreconditionFailed
from agent.tools import Id, ToolArgs
from models.identity import Role
from models.message import Message
from tools.base import (
    ToolContext,
    deny,
    direct_thread_id,
    event_thread_id,
    require_client_event,
    require_message_recipient,
    require_venue_event,
    send_message,
)

logger = logging.getLogger(__name__)

Content = Annotated[str, Field(min_length=1, max_length=5000)]


class MessageIdArgs(ToolArgs):
    message_id: Id


async def mark_message_as_read(args: MessageIdArgs, ctx: ToolContext) -> Message:
    message = await require_message_recipient(ctx, args.message_id)
    if message.read:
        return message
    return await ctx.store.messages.update(
        message.message_id, {"read": True}, expect={"recipient_id": ctx.actor_id}
    )


# --- client -----------------------------------------------------------------------

class ClientMessageArgs(ToolArgs):
    event_id: Id
    content: Content
    action_required: bool = False


async def client_send_message_to_venue(args: ClientMessageArgs, ctx: ToolContext) -> Message:
    event = await require_client_event(ctx, args.event_id)
    return await send_message(
        ctx,
        thread_id=event_thread_id(event.event_id),
        recipient_id=event.venue_id,
        recipient_type=Role.VENUE,
        content=args.content,
        event_id=event.event_id,
        action_required=args.action_required,
    )


# --- venue ------------------------------------------------------------------------

class VenueMessageArgs(ToolArgs):
    recipient_id: Id
    recipient_type: Literal["client", "vendor"]
    content: Content
    event_id: Optional[str] = Field(None, description="Thread the message under this event")
    action_required: bool = False


async def _venue_may_message(ctx: ToolContext, args: VenueMessageArgs, event_client: Optional[str]) -> bool:
    if args.recipient_type == "vendor":
        return bool(await ctx.store.venue_vendors.list(venue_id=ctx.actor_id, vendor_id=args.recipient_id))
    if args.event_id:
        return args.recipient_id == event_client
    events = await ctx.store.events.list(venue_id=ctx.actor_id, client_id=args.recipient_id, limit=1)
    return bool(events)


async def venue_send_message(args: VenueMessageArgs, ctx: ToolContext) -> Message:
    event = await require_venue_event(ctx, args.event_id) if args.event_id else None
    if not await _venue_may_message(ctx, args, event.client_id if event else None):
        raise deny(ctx, f"{args.recipient_type} recipient", args.recipient_id)

    thread_id = event_thread_id(event.event_id) if event else direct_thread_id(ctx.actor_id, args.recipient_id)
    return await send_message(
        ctx,
        thread_id=thread_id,
        recipient_id=args.recipient_id,
        recipient_type=Role(args.recipient_type),
        content=args.content,
        event_id=event.event_id if event else None,
        action_required=args.action_required,
    )


# --- vendor -----------------------------------------------------------------------

class VendorReplyArgs(ToolArgs):
    thread_id: Id
    content: Content


async def vendor_send_message_to_venue(args: VendorReplyArgs, ctx: ToolContext) -> Message:
    """Reply in an existing thread; the venue is whoever took part in its opening message."""
    thread = await ctx.store.messages.list(thread_id=args.thread_id, order_by="created_at")
    if not thread:
        raise NotFound("Thread", args.thread_id)
    if not any(m.involves(ctx.actor_id) for m in thread):
        raise deny(ctx, "thread", args.thread_id)

    first = thread[0]
    if first.sender_type == Role.VENUE:
        venue_id = first.sender_id
    elif first.recipient_type == Role.VENUE:
        venue_id = first.recipient_id
    else:
        logger.info("[MSG] thread %s has no venue participant", args.thread_id)
        raise PreconditionFailed("This conversation has no venue to reply to")

    return await send_message(
        ctx,
        thread_id=args.thread_id,
        recipient_id=venue_id,
        recipient_type=Role.VENUE,
        content=args.content,
        event_id=first.event_id,
    )
