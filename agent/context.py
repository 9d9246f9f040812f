# agent/context.py
"""
Role-scoped snapshots for the assistants.

The builder is the authorization boundary for reads: each build first
loads the scoping entity and checks it against the identity, and only
then fans out to the rest of the data. A failed check aborts the whole
build; there are no partial snapshots.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from agent.errors import NotFound, Unauthorized
from models.action_history import ActionHistoryRecord
from models.identity import Identity, Role
from models.scope import (
    UNKNOWN_VENDOR,
    ClientScope,
    EnrichedEventElement,
    VendorScope,
    VenueEventScope,
    VenueTenantScope,
)
from observability.obs import instrument_io
from shared import time
from shared.config import get_settings
from store.data_store import DataStore
from tools.aggregates import messages_involving, to_offering, unread_count, venue_catalogue, venue_summary
from tools.base import vendor_event_ids, vendor_links, vendor_names

logger = logging.getLogger(__name__)

CLIENT_RECENT_ACTIONS = 30
VENUE_EVENT_RECENT_ACTIONS = 30
TENANT_RECENT_ACTIONS = 50
VENDOR_RECENT_ACTIONS = 20
TENANT_MESSAGES = 100


def _scope_summary(scope: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {"scope": getattr(scope, "scope", None)}
    for name in ("events", "tasks", "messages", "offerings", "event_elements", "guests"):
        value = getattr(scope, name, None)
        if value is not None:
            out[f"{name}.count"] = len(value)
    return out


def _identity_input(self, identity: Identity, event_id: Optional[str] = None) -> Dict[str, Any]:
    return {"actor_id": identity.actor_id, "actor_role": identity.actor_role.value, "event_id": event_id}


class ContextBuilder:
    def __init__(
        self,
        store: DataStore,
        *,
        clock: time.Clock = time.utcnow,
        timeout_s: Optional[float] = None,
    ):
        self.store = store
        self.clock = clock
        self.timeout_s = timeout_s if timeout_s is not None else get_settings().context_timeout_s

    # ------------------------------------------------------------------ checks

    def _denied(self, identity: Identity, what: str, item_id: str) -> Unauthorized:
        logger.warning(
            "[CONTEXT] %s %s denied %s %s", identity.actor_role.value, identity.actor_id, what, item_id
        )
        return Unauthorized(f"{what} {item_id} is not visible to {identity.actor_id}")

    def _missing(self, entity: str, item_id: str) -> NotFound:
        logger.info("[CONTEXT] %s %s not found", entity, item_id)
        return NotFound(entity, item_id)

    def _require_role(self, identity: Identity, role: Role) -> None:
        if identity.actor_role != role:
            raise self._denied(identity, f"{role.value} scope for", identity.actor_id)

    # ----------------------------------------------------------------- helpers

    async def _enriched_elements(self, event_id: str) -> List[EnrichedEventElement]:
        event_elements = await self.store.event_elements.list(event_id=event_id)
        if not event_elements:
            return []
        elements = await self.store.elements.list(element_id=[ee.element_id for ee in event_elements])
        by_id = {e.element_id: e for e in elements}
        names = await vendor_names(self.store, [e.venue_vendor_id for e in elements])

        out = []
        for ee in event_elements:
            element = by_id.get(ee.element_id)
            vendor_name = names.get(element.venue_vendor_id, UNKNOWN_VENDOR) if element else UNKNOWN_VENDOR
            out.append(EnrichedEventElement(**ee.model_dump(), element=element, vendor_name=vendor_name))
        return out

    async def _recent_actions(self, event_ids: Iterable[str], limit: int) -> List[ActionHistoryRecord]:
        ids = list(event_ids)
        if not ids:
            return []
        return await self.store.action_history.list(
            event_id=ids, order_by="created_at", descending=True, limit=limit
        )

    async def _bounded(self, coro):
        return await asyncio.wait_for(coro, timeout=self.timeout_s)

    # ------------------------------------------------------------------ client

    @instrument_io(name="context.client",
                   input_fn=_identity_input, output_fn=_scope_summary)
    async def build_client_scope(self, identity: Identity, event_id: str) -> ClientScope:
        return await self._bounded(self._client_scope(identity, event_id))

    async def _client_scope(self, identity: Identity, event_id: str) -> ClientScope:
        self._require_role(identity, Role.CLIENT)
        event = await self.store.events.get(event_id)
        if event is None:
            raise self._missing("Event", event_id)
        if event.client_id != identity.actor_id:
            raise self._denied(identity, "event", event_id)

        (client, venue, event_elements, tasks, guests, (offerings, vendors),
         messages, spaces, recent_actions) = await asyncio.gather(
            self.store.clients.get(identity.actor_id),
            self.store.venues.get(event.venue_id),
            self._enriched_elements(event.event_id),
            self.store.tasks.list(event_id=event.event_id),
            self.store.guests.list(event_id=event.event_id),
            venue_catalogue(self.store, event.venue_id),
            self.store.messages.list(event_id=event.event_id, order_by="created_at"),
            self.store.spaces.list(venue_id=event.venue_id),
            self._recent_actions([event.event_id], CLIENT_RECENT_ACTIONS),
        )
        if client is None:
            raise self._missing("Client", identity.actor_id)
        if venue is None:
            raise self._missing("Venue", event.venue_id)

        return ClientScope(
            client=client,
            event=event,
            venue=venue,
            event_elements=event_elements,
            tasks=tasks,
            guests=guests,
            offerings=offerings,
            vendors=vendors,
            messages=messages,
            spaces=spaces,
            recent_actions=recent_actions,
            as_of=self.clock(),
        )

    # ------------------------------------------------------------------- venue

    @instrument_io(name="context.venue_tenant",
                   input_fn=_identity_input, output_fn=_scope_summary)
    async def build_venue_tenant_scope(self, identity: Identity) -> VenueTenantScope:
        return await self._bounded(self._venue_tenant_scope(identity))

    async def _venue_tenant_scope(self, identity: Identity) -> VenueTenantScope:
        self._require_role(identity, Role.VENUE)
        venue_id = identity.actor_id
        venue = await self.store.venues.get(venue_id)
        if venue is None:
            raise self._missing("Venue", venue_id)

        events = await self.store.events.list(venue_id=venue_id, order_by="date")
        event_ids = [e.event_id for e in events]

        tasks, messages, unread, (offerings, vendors), spaces, recent_actions = await asyncio.gather(
            self.store.tasks.list(event_id=event_ids) if event_ids else asyncio.sleep(0, result=[]),
            messages_involving(self.store, venue_id, limit=TENANT_MESSAGES),
            unread_count(self.store, venue_id),
            venue_catalogue(self.store, venue_id),
            self.store.spaces.list(venue_id=venue_id),
            self._recent_actions(event_ids, TENANT_RECENT_ACTIONS),
        )
        now = self.clock()

        return VenueTenantScope(
            venue=venue,
            events=events,
            tasks=tasks,
            messages=messages,
            offerings=offerings,
            vendors=vendors,
            spaces=spaces,
            recent_actions=recent_actions,
            summary=venue_summary(events, tasks, unread, now),
            as_of=now,
        )

    @instrument_io(name="context.venue_event",
                   input_fn=_identity_input, output_fn=_scope_summary)
    async def build_venue_event_scope(self, identity: Identity, event_id: str) -> VenueEventScope:
        return await self._bounded(self._venue_event_scope(identity, event_id))

    async def _venue_event_scope(self, identity: Identity, event_id: str) -> VenueEventScope:
        self._require_role(identity, Role.VENUE)
        event = await self.store.events.get(event_id)
        if event is None:
            raise self._missing("Event", event_id)
        if event.venue_id != identity.actor_id:
            raise self._denied(identity, "event", event_id)

        (venue, client, event_elements, tasks, guests, messages,
         (offerings, vendors), spaces, recent_actions) = await asyncio.gather(
            self.store.venues.get(event.venue_id),
            self.store.clients.get(event.client_id) if event.client_id else asyncio.sleep(0, result=None),
            self._enriched_elements(event.event_id),
            self.store.tasks.list(event_id=event.event_id),
            self.store.guests.list(event_id=event.event_id),
            self.store.messages.list(event_id=event.event_id, order_by="created_at"),
            venue_catalogue(self.store, event.venue_id),
            self.store.spaces.list(venue_id=event.venue_id),
            self._recent_actions([event.event_id], VENUE_EVENT_RECENT_ACTIONS),
        )
        if venue is None:
            raise self._missing("Venue", event.venue_id)
        if client is None:
            logger.info("[CONTEXT] event %s has no client record", event_id)

        return VenueEventScope(
            venue=venue,
            event=event,
            client=client,
            event_elements=event_elements,
            tasks=tasks,
            guests=guests,
            messages=messages,
            offerings=offerings,
            vendors=vendors,
            spaces=spaces,
            recent_actions=recent_actions,
            as_of=self.clock(),
        )

    # ------------------------------------------------------------------ vendor

    @instrument_io(name="context.vendor",
                   input_fn=_identity_input, output_fn=_scope_summary)
    async def build_vendor_scope(self, identity: Identity) -> VendorScope:
        return await self._bounded(self._vendor_scope(identity))

    async def _vendor_scope(self, identity: Identity) -> VendorScope:
        self._require_role(identity, Role.VENDOR)
        vendor_id = identity.actor_id
        vendor = await self.store.vendors.get(vendor_id)
        if vendor is None:
            raise self._missing("Vendor", vendor_id)

        event_ids, links = await asyncio.gather(
            vendor_event_ids(self.store, vendor_id),
            vendor_links(self.store, vendor_id),
        )

        events, tasks, messages, elements, recent_actions = await asyncio.gather(
            self.store.events.list(event_id=event_ids, order_by="date") if event_ids else asyncio.sleep(0, result=[]),
            self.store.tasks.list(assigned_to_id=vendor_id, assigned_to_type=Role.VENDOR.value),
            messages_involving(self.store, vendor_id),
            self.store.elements.list(venue_vendor_id=[l.venue_vendor_id for l in links]) if links else asyncio.sleep(0, result=[]),
            self._recent_actions(event_ids, VENDOR_RECENT_ACTIONS),
        )

        return VendorScope(
            vendor=vendor,
            events=events,
            tasks=tasks,
            messages=messages,
            offerings=[to_offering(e, vendor_id, vendor.name) for e in elements],
            recent_actions=recent_actions,
            as_of=self.clock(),
        )
