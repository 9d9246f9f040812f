# store/data_store.py
from __future__ import annotations

from dataclasses import dataclass

from models.action_history import ActionHistoryRecord
from models.element import Element, EventElement
from models.event import Event
from models.guest import Guest
from models.message import Message, Notification
from models.parties import Client, Space, Venue, VenueVendor, Vendor
from models.task import Task
from shared.config import Settings, get_settings
from store.base import EntityStore
from store.firestore_store import FirestoreEntityStore


@dataclass(frozen=True)
class DataStore:
    """
    One accessor per entity type. Built once by the host and passed to the
    context builder and the dispatcher; nothing here is module-global.
    """
    events: EntityStore[Event]
    clients: EntityStore[Client]
    venues: EntityStore[Venue]
    vendors: EntityStore[Vendor]
    venue_vendors: EntityStore[VenueVendor]
    spaces: EntityStore[Space]
    elements: EntityStore[Element]
    event_elements: EntityStore[EventElement]
    tasks: EntityStore[Task]
    guests: EntityStore[Guest]
    messages: EntityStore[Message]
    notifications: EntityStore[Notification]
    action_history: EntityStore[ActionHistoryRecord]


# collection, model, id field, soft delete
_COLLECTIONS = {
    "events": ("events", Event, "event_id", True),
    "clients": ("clients", Client, "client_id", True),
    "venues": ("venues", Venue, "venue_id", True),
    "vendors": ("vendors", Vendor, "vendor_id", True),
    "venue_vendors": ("venue_vendors", VenueVendor, "venue_vendor_id", False),
    "spaces": ("spaces", Space, "space_id", True),
    "elements": ("elements", Element, "element_id", True),
    "event_elements": ("event_elements", EventElement, "event_element_id", False),
    "tasks": ("tasks", Task, "task_id", False),
    "guests": ("guests", Guest, "guest_id", False),
    "messages": ("messages", Message, "message_id", False),
    "notifications": ("notifications", Notification, "notification_id", False),
    "action_history": ("action_history", ActionHistoryRecord, "action_id", False),
}


def create_firestore_data_store(db, settings: Settings | None = None) -> DataStore:
    settings = settings or get_settings()
    prefix = settings.collection_prefix
    stores = {
        attr: FirestoreEntityStore(db, prefix + collection, model, id_field, soft_delete=soft)
        for attr, (collection, model, id_field, soft) in _COLLECTIONS.items()
    }
    return DataStore(**stores)
