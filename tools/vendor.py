from __future__ import annotations

from typing import List, Literal, Optional

from agent.tools import Id, ToolArgs
from models.parties import ApprovalStatus, VenueVendor
from models.scope import VendorDirectoryEntry
from tools.aggregates import venue_catalogue
from tools.base import ToolContext, log_action, require_venue_vendor


class ListVendorsArgs(ToolArgs):
    approval_status: Optional[ApprovalStatus] = None


async def list_vendors(args: ListVendorsArgs, ctx: ToolContext) -> List[VendorDirectoryEntry]:
    _, directory = await venue_catalogue(ctx.store, ctx.actor_id)
    if args.approval_status:
        directory = [d for d in directory if d.approval_status == args.approval_status]
    return directory


class UpdateVendorApprovalArgs(ToolArgs):
    venue_vendor_id: Id
    approval_status: Literal["approved", "rejected"]


async def update_vendor_approval(args: UpdateVendorApprovalArgs, ctx: ToolContext) -> VenueVendor:
    link = await require_venue_vendor(ctx, args.venue_vendor_id)
    await log_action(
        ctx, None, "vendor_approval_changed",
        f"Vendor {link.vendor_id} marked {args.approval_status}",
        {"venue_vendor_id": link.venue_vendor_id, "previous_status": link.approval_status},
    )
    # guarded: the link must still belong to this venue when the write lands
    return await ctx.store.venue_vendors.update(
        link.venue_vendor_id,
        {"approval_status": args.approval_status},
        expect={"venue_id": ctx.actor_id},
    )
