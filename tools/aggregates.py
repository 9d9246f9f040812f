"""
Read-side aggregations shared by the context builder and the read tools.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from models.element import Element
from models.event import Event
from models.guest import Guest, GuestStats
from models.message import Message
from models.parties import VenueVendor
from models.scope import UNKNOWN_VENDOR, Offering, VendorDirectoryEntry, VenueSummary
from models.task import Task
from shared import time
from store.data_store import DataStore

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_offering(element: Element, vendor_id: Optional[str], vendor_name: str) -> Offering:
    return Offering(
        element_id=element.element_id,
        name=element.name,
        category=element.category,
        price=element.price,
        vendor_id=vendor_id,
        vendor_name=vendor_name,
        description=element.description,
    )


async def _vendor_names_by_id(store: DataStore, links: Iterable[VenueVendor]) -> dict[str, str]:
    vendor_ids = list({l.vendor_id for l in links})
    if not vendor_ids:
        return {}
    return {v.vendor_id: v.name for v in await store.vendors.list(vendor_id=vendor_ids)}


async def venue_catalogue(
    store: DataStore, venue_id: str
) -> tuple[List[Offering], List[VendorDirectoryEntry]]:
    """The venue's offerings and its vendor directory, from one pass over its vendor links."""
    links = await store.venue_vendors.list(venue_id=venue_id)
    if not links:
        return [], []
    elements = await store.elements.list(venue_vendor_id=[l.venue_vendor_id for l in links])
    names = await _vendor_names_by_id(store, links)
    by_link = {l.venue_vendor_id: l for l in links}

    offerings = []
    for e in elements:
        link = by_link.get(e.venue_vendor_id)
        vendor_id = link.vendor_id if link else None
        offerings.append(to_offering(e, vendor_id, names.get(vendor_id, UNKNOWN_VENDOR)))

    per_link = Counter(e.venue_vendor_id for e in elements)
    directory = [
        VendorDirectoryEntry(
            venue_vendor_id=l.venue_vendor_id,
            vendor_id=l.vendor_id,
            name=names.get(l.vendor_id, UNKNOWN_VENDOR),
            approval_status=l.approval_status,
            offering_count=per_link.get(l.venue_vendor_id, 0),
        )
        for l in links
    ]
    return offerings, directory


def is_overdue(task: Task, now: datetime) -> bool:
    return task.due_date is not None and not task.is_closed and time.is_past(task.due_date, now)


async def unread_count(store: DataStore, recipient_id: str) -> int:
    """Unread messages addressed to recipient_id; its own query so no listing cap applies."""
    return len(await store.messages.list(recipient_id=recipient_id, read=False))


def venue_summary(
    events: List[Event],
    tasks: List[Task],
    unread_messages: int,
    now: datetime,
) -> VenueSummary:
    return VenueSummary(
        event_counts=dict(Counter(e.status for e in events)),
        task_counts=dict(Counter(t.status for t in tasks)),
        overdue_tasks=sum(1 for t in tasks if is_overdue(t, now)),
        unread_messages=unread_messages,
    )


def guest_stats(guests: Iterable[Guest]) -> GuestStats:
    stats = GuestStats()
    for g in guests:
        stats.total += 1
        if g.rsvp_status == "yes":
            stats.yes += 1
            stats.expected_attendance += 2 if g.plus_one else 1
        elif g.rsvp_status == "no":
            stats.no += 1
        else:
            stats.undecided += 1
    return stats


async def messages_involving(store: DataStore, actor_id: str, limit: Optional[int] = None) -> List[Message]:
    """Messages sent by or addressed to actor_id, newest first."""
    sent = await store.messages.list(sender_id=actor_id, order_by="created_at", descending=True, limit=limit)
    received = await store.messages.list(recipient_id=actor_id, order_by="created_at", descending=True, limit=limit)
    merged = {m.message_id: m for m in [*sent, *received]}
    out = sorted(merged.values(), key=lambda m: m.created_at or _EPOCH, reverse=True)
    return out[:limit] if limit else out
