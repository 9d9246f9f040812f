import os

# No tracing backend in tests; must be set before langfuse is imported
os.environ.setdefault("LANGFUSE_TRACING_ENABLED", "false")
os.environ.setdefault("AGENT_TOOL_TIMEOUT_S", "5")
os.environ.setdefault("AGENT_CONTEXT_TIMEOUT_S", "5")

from datetime import datetime, timedelta, timezone

import pytest

from agent.context import ContextBuilder
from agent.dispatcher import ToolDispatcher
from models.identity import Identity, Role
from shared import time
from memory_store import make_memory_data_store

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

CLIENT = Identity(actor_id="C1", actor_role=Role.CLIENT)
OTHER_CLIENT = Identity(actor_id="C2", actor_role=Role.CLIENT)
VENUE = Identity(actor_id="V1", actor_role=Role.VENUE)
OTHER_VENUE = Identity(actor_id="V2", actor_role=Role.VENUE)
VENDOR = Identity(actor_id="VD1", actor_role=Role.VENDOR)
OTHER_VENDOR = Identity(actor_id="VD3", actor_role=Role.VENDOR)


def seed_world(store, now: datetime = NOW) -> None:
    """
    Two venues. V1 hosts E1 (C1, 40 days out), E_SOON (C1, 10 days out)
    and E2 (C2). V2 hosts E3 (C2). VD1 is approved at V1 and booked on
    E1; VD2 is rejected at V1; VD3 only works with V2.
    """
    day = timedelta(days=1)

    store.venues.seed(venue_id="V1", name="Grand Hall", description="Riverside ballroom")
    store.venues.seed(venue_id="V2", name="Other Venue")
    store.clients.seed(client_id="C1", name="Alice Cohen", email="alice@example.com")
    store.clients.seed(client_id="C2", name="Bob Levi", email="bob@example.com")
    store.vendors.seed(vendor_id="VD1", name="Bloom Florals")
    store.vendors.seed(vendor_id="VD2", name="DJ Max")
    store.vendors.seed(vendor_id="VD3", name="Rival Catering")

    store.venue_vendors.seed(venue_vendor_id="VV1", venue_id="V1", vendor_id="VD1", approval_status="approved")
    store.venue_vendors.seed(venue_vendor_id="VV2", venue_id="V1", vendor_id="VD2", approval_status="rejected")
    store.venue_vendors.seed(venue_vendor_id="VV3", venue_id="V2", vendor_id="VD3", approval_status="approved")

    store.elements.seed(
        element_id="X", venue_vendor_id="VV1", name="Rose centerpiece", category="Flowers",
        price=250.0, availability_rules={"lead_time_days": 30, "blackout_dates": []},
    )
    store.elements.seed(
        element_id="Y", venue_vendor_id="VV1", name="Table garland", category="Flowers",
        price=120.0, availability_rules={"lead_time_days": 0, "blackout_dates": ["2025-07-11"]},
    )
    store.elements.seed(
        element_id="Z", venue_vendor_id="VV2", name="DJ set", category="Music", price=900.0,
    )
    store.elements.seed(
        element_id="W", venue_vendor_id="VV3", name="Buffet", category="Catering", price=40.0,
    )

    store.events.seed(event_id="E1", name="Alice & Dan wedding", date=now + 40 * day,
                      client_id="C1", venue_id="V1", status="in_planning")
    store.events.seed(event_id="E_SOON", name="Alice birthday", date=now + 10 * day,
                      client_id="C1", venue_id="V1", status="confirmed")
    store.events.seed(event_id="E2", name="Bob gala", date=now + 60 * day,
                      client_id="C2", venue_id="V1", status="inquiry")
    store.events.seed(event_id="E3", name="Bob offsite", date=now + 20 * day,
                      client_id="C2", venue_id="V2", status="confirmed")

    store.event_elements.seed(event_element_id="EE1", event_id="E1", element_id="X", amount=250.0)

    store.tasks.seed(
        task_id="T1", event_id="E1", assigned_to_id="C1", assigned_to_type="client",
        name="Confirm menu", priority="high", created_by="V1",
        form_schema={"fields": [{"name": "menu", "type": "text"}]},
    )
    store.tasks.seed(
        task_id="T2", event_id="E1", assigned_to_id="VD1", assigned_to_type="vendor",
        name="Send flower samples", due_date=now - 2 * day, created_by="V1",
    )
    store.tasks.seed(
        task_id="T3", event_id="E1", assigned_to_id="V1", assigned_to_type="venue",
        name="Book tasting", status="completed", created_by="V1",
    )
    store.tasks.seed(
        task_id="T4", event_id="E2", assigned_to_id="C2", assigned_to_type="client",
        name="Sign contract", due_date=now - 5 * day, created_by="V1",
    )
    store.tasks.seed(
        task_id="T5", event_id="E3", assigned_to_id="C2", assigned_to_type="client",
        name="Pick room", created_by="V2",
    )

    store.guests.seed(guest_id="G1", event_id="E1", name="Dana", rsvp_status="yes", plus_one=True)
    store.guests.seed(guest_id="G2", event_id="E1", name="Eli", rsvp_status="no")
    store.guests.seed(guest_id="G3", event_id="E1", name="Noa")
    store.guests.seed(guest_id="G4", event_id="E2", name="Omer", rsvp_status="yes")

    store.messages.seed(
        message_id="M1", thread_id="event-E1", event_id="E1",
        sender_id="C1", sender_type="client", recipient_id="V1", recipient_type="venue",
        content="Can we move the ceremony to 5pm?", read=False, created_at=now - 2 * day,
    )
    store.messages.seed(
        message_id="M2", thread_id="direct-V1-VD1",
        sender_id="V1", sender_type="venue", recipient_id="VD1", recipient_type="vendor",
        content="Please confirm the roses", read=False, created_at=now - day,
    )
    store.messages.seed(
        message_id="M3", thread_id="event-E2", event_id="E2",
        sender_id="C2", sender_type="client", recipient_id="V1", recipient_type="venue",
        content="Is parking included?", read=True, created_at=now - 3 * day,
    )
    store.messages.seed(
        message_id="M4", thread_id="direct-V2-VD3",
        sender_id="V2", sender_type="venue", recipient_id="VD3", recipient_type="vendor",
        content="Menu for the offsite", read=False, created_at=now - day,
    )

    store.spaces.seed(space_id="S1", venue_id="V1", name="Ballroom", capacity=200)
    store.spaces.seed(space_id="S2", venue_id="V2", name="Loft", capacity=40)

    store.action_history.seed(
        action_id="A1", event_id="E1", actor_id="V1", actor_role="venue",
        action_type="event_created", description="Created event", created_at=now - 20 * day,
    )
    store.action_history.seed(
        action_id="A2", event_id="E3", actor_id="V2", actor_role="venue",
        action_type="event_created", description="Created event", created_at=now - 10 * day,
    )


@pytest.fixture
def store():
    s = make_memory_data_store()
    seed_world(s)
    return s


@pytest.fixture
def fixed_now():
    time.set_fake_utcnow(NOW)
    yield NOW
    time.clear_fake_utcnow()


@pytest.fixture
def dispatcher(store, fixed_now):
    return ToolDispatcher(store, timeout_s=5, clock=lambda: NOW)


@pytest.fixture
def builder(store, fixed_now):
    return ContextBuilder(store, clock=lambda: NOW, timeout_s=5)
