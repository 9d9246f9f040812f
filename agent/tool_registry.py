# agent/tool_registry.py
"""
The four tool catalogues. Each is a closed enum of tool names bound to an
exhaustive table of ToolSpecs; ToolRegistry refuses to build when the two
disagree, so a missing handler fails at import rather than at call time.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from agent.tools import NoArgs, ToolRegistry, ToolSpec
from models.identity import AgentKind
from tools import element, event, guest, messaging, task, vendor


class ClientTool(str, Enum):
    GET_ELEMENT_DETAILS = "get_element_details"
    ADD_ELEMENT_TO_EVENT = "add_element_to_event"
    REQUEST_ELEMENT_CHANGE = "request_element_change"
    ADD_GUEST = "add_guest"
    UPDATE_GUEST = "update_guest"
    REMOVE_GUEST = "remove_guest"
    GET_TASK_DETAILS = "get_task_details"
    COMPLETE_TASK = "complete_task"
    SEND_MESSAGE_TO_VENUE = "send_message_to_venue"
    SEARCH_AVAILABLE_ELEMENTS = "search_available_elements"


class VenueTool(str, Enum):
    LIST_EVENTS = "list_events"
    GET_EVENT_SUMMARY = "get_event_summary"
    CREATE_EVENT = "create_event"
    LIST_VENDORS = "list_vendors"
    UPDATE_VENDOR_APPROVAL = "update_vendor_approval"
    CREATE_ELEMENT = "create_element"
    UPDATE_ELEMENT = "update_element"
    SEND_MESSAGE = "send_message"
    GET_VENUE_DASHBOARD = "get_venue_dashboard"
    GET_OVERDUE_TASKS = "get_overdue_tasks"


class VenueEventTool(str, Enum):
    UPDATE_EVENT_STATUS = "update_event_status"
    UPDATE_EVENT = "update_event"
    ADD_ELEMENT_TO_EVENT = "add_element_to_event"
    UPDATE_EVENT_ELEMENT_STATUS = "update_event_element_status"
    UPDATE_EVENT_ELEMENT = "update_event_element"
    REMOVE_ELEMENT_FROM_EVENT = "remove_element_from_event"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    COMPLETE_TASK = "complete_task"
    ADD_GUEST = "add_guest"
    UPDATE_GUEST = "update_guest"
    GET_GUEST_STATISTICS = "get_guest_statistics"
    SEND_MESSAGE = "send_message"
    MARK_MESSAGE_AS_READ = "mark_message_as_read"


class VendorTool(str, Enum):
    GET_TASK_DETAILS = "get_task_details"
    COMPLETE_TASK = "complete_task"
    SEND_MESSAGE_TO_VENUE = "send_message_to_venue"
    MARK_MESSAGE_AS_READ = "mark_message_as_read"
    ADD_GUEST = "add_guest"


CLIENT_TOOLS = ToolRegistry(AgentKind.CLIENT, ClientTool, {
    ClientTool.GET_ELEMENT_DETAILS: ToolSpec(
        element.get_element_details, element.GetElementDetailsArgs,
        "Get details about a specific offering, including its vendor.",
    ),
    ClientTool.ADD_ELEMENT_TO_EVENT: ToolSpec(
        element.client_add_element_to_event, element.ClientAddElementArgs,
        "Add an offering from the venue's catalogue to the client's event, at its listed price.",
    ),
    ClientTool.REQUEST_ELEMENT_CHANGE: ToolSpec(
        element.request_element_change, element.RequestElementChangeArgs,
        "Ask the venue to change an element already on the event. Creates a task for the venue.",
    ),
    ClientTool.ADD_GUEST: ToolSpec(
        guest.client_add_guest, guest.AddGuestArgs,
        "Add a guest to the event's guest list.",
    ),
    ClientTool.UPDATE_GUEST: ToolSpec(
        guest.client_update_guest, guest.UpdateGuestArgs,
        "Update a guest's details or RSVP.",
    ),
    ClientTool.REMOVE_GUEST: ToolSpec(
        guest.remove_guest, guest.GuestIdArgs,
        "Remove a guest from the guest list.",
    ),
    ClientTool.GET_TASK_DETAILS: ToolSpec(
        task.get_task_details, task.TaskIdArgs,
        "Get a task assigned to the client, including its form.",
    ),
    ClientTool.COMPLETE_TASK: ToolSpec(
        task.complete_assigned_task, task.CompleteTaskArgs,
        "Mark a task assigned to the client as completed, with the form answers if it has a form.",
    ),
    ClientTool.SEND_MESSAGE_TO_VENUE: ToolSpec(
        messaging.client_send_message_to_venue, messaging.ClientMessageArgs,
        "Send a message to the venue about the event.",
    ),
    ClientTool.SEARCH_AVAILABLE_ELEMENTS: ToolSpec(
        element.search_available_elements, element.SearchAvailableElementsArgs,
        "Search the venue's offerings by text, category and maximum price.",
    ),
})


VENUE_TOOLS = ToolRegistry(AgentKind.VENUE, VenueTool, {
    VenueTool.LIST_EVENTS: ToolSpec(
        event.list_events, event.ListEventsArgs,
        "List the venue's events, optionally filtered by status, date range or client.",
    ),
    VenueTool.GET_EVENT_SUMMARY: ToolSpec(
        event.get_event_summary, event.EventIdArgs,
        "Summarize one event: elements, open tasks and guest counts.",
    ),
    VenueTool.CREATE_EVENT: ToolSpec(
        event.create_event, event.CreateEventArgs,
        "Create a new event at the venue. New events start as inquiries.",
    ),
    VenueTool.LIST_VENDORS: ToolSpec(
        vendor.list_vendors, vendor.ListVendorsArgs,
        "List the vendors in the venue's directory with their approval status.",
    ),
    VenueTool.UPDATE_VENDOR_APPROVAL: ToolSpec(
        vendor.update_vendor_approval, vendor.UpdateVendorApprovalArgs,
        "Approve or reject a vendor in the venue's directory.",
    ),
    VenueTool.CREATE_ELEMENT: ToolSpec(
        element.create_element, element.CreateElementArgs,
        "Create an offering for one of the venue's vendors.",
    ),
    VenueTool.UPDATE_ELEMENT: ToolSpec(
        element.update_element, element.UpdateElementArgs,
        "Update an offering's name, category, price, description or availability rules.",
    ),
    VenueTool.SEND_MESSAGE: ToolSpec(
        messaging.venue_send_message, messaging.VenueMessageArgs,
        "Send a message to one of the venue's clients or vendors.",
    ),
    VenueTool.GET_VENUE_DASHBOARD: ToolSpec(
        event.get_venue_dashboard, NoArgs,
        "Event counts by status, task counts, overdue tasks and unread messages.",
    ),
    VenueTool.GET_OVERDUE_TASKS: ToolSpec(
        task.get_overdue_tasks, NoArgs,
        "Open tasks on the venue's events whose due date has passed, oldest first.",
    ),
})


VENUE_EVENT_TOOLS = ToolRegistry(AgentKind.VENUE_EVENT, VenueEventTool, {
    VenueEventTool.UPDATE_EVENT_STATUS: ToolSpec(
        event.update_event_status, event.UpdateEventStatusArgs,
        "Move the event to a new status.",
    ),
    VenueEventTool.UPDATE_EVENT: ToolSpec(
        event.update_event, event.UpdateEventArgs,
        "Update the event's name, description, date or RSVP deadline.",
    ),
    VenueEventTool.ADD_ELEMENT_TO_EVENT: ToolSpec(
        element.venue_add_element_to_event, element.VenueAddElementArgs,
        "Add one of the venue's offerings to the event at an agreed amount.",
    ),
    VenueEventTool.UPDATE_EVENT_ELEMENT_STATUS: ToolSpec(
        element.update_event_element_status, element.UpdateEventElementStatusArgs,
        "Change the status of an element on the event.",
    ),
    VenueEventTool.UPDATE_EVENT_ELEMENT: ToolSpec(
        element.update_event_element, element.UpdateEventElementArgs,
        "Update an element's customization, amount, notes or contract state.",
    ),
    VenueEventTool.REMOVE_ELEMENT_FROM_EVENT: ToolSpec(
        element.remove_element_from_event, element.RemoveElementArgs,
        "Remove an element from the event.",
    ),
    VenueEventTool.CREATE_TASK: ToolSpec(
        task.create_task, task.CreateTaskArgs,
        "Create a task for the client, the venue or one of its vendors.",
    ),
    VenueEventTool.UPDATE_TASK: ToolSpec(
        task.update_task, task.UpdateTaskArgs,
        "Update a task's name, description, status, priority or due date.",
    ),
    VenueEventTool.COMPLETE_TASK: ToolSpec(
        task.venue_complete_task, task.CompleteTaskArgs,
        "Mark a task on the event as completed.",
    ),
    VenueEventTool.ADD_GUEST: ToolSpec(
        guest.venue_add_guest, guest.AddGuestArgs,
        "Add a guest to the event.",
    ),
    VenueEventTool.UPDATE_GUEST: ToolSpec(
        guest.venue_update_guest, guest.UpdateGuestArgs,
        "Update a guest's details or RSVP.",
    ),
    VenueEventTool.GET_GUEST_STATISTICS: ToolSpec(
        guest.get_guest_statistics, guest.EventIdArgs,
        "RSVP counts and expected attendance for the event.",
    ),
    VenueEventTool.SEND_MESSAGE: ToolSpec(
        messaging.venue_send_message, messaging.VenueMessageArgs,
        "Send a message to the event's client or one of the venue's vendors.",
    ),
    VenueEventTool.MARK_MESSAGE_AS_READ: ToolSpec(
        messaging.mark_message_as_read, messaging.MessageIdArgs,
        "Mark a message addressed to the venue as read.",
    ),
})


VENDOR_TOOLS = ToolRegistry(AgentKind.VENDOR, VendorTool, {
    VendorTool.GET_TASK_DETAILS: ToolSpec(
        task.get_task_details, task.TaskIdArgs,
        "Get a task assigned to the vendor.",
    ),
    VendorTool.COMPLETE_TASK: ToolSpec(
        task.complete_assigned_task, task.CompleteTaskArgs,
        "Mark a task assigned to the vendor as completed.",
    ),
    VendorTool.SEND_MESSAGE_TO_VENUE: ToolSpec(
        messaging.vendor_send_message_to_venue, messaging.VendorReplyArgs,
        "Reply to the venue in an existing conversation thread.",
    ),
    VendorTool.MARK_MESSAGE_AS_READ: ToolSpec(
        messaging.mark_message_as_read, messaging.MessageIdArgs,
        "Mark a message addressed to the vendor as read.",
    ),
    VendorTool.ADD_GUEST: ToolSpec(
        guest.vendor_add_guest, guest.AddGuestArgs,
        "Add a guest (e.g. crew) to an event the vendor is booked on.",
    ),
})


REGISTRIES: Dict[AgentKind, ToolRegistry] = {
    AgentKind.CLIENT: CLIENT_TOOLS,
    AgentKind.VENUE: VENUE_TOOLS,
    AgentKind.VENUE_EVENT: VENUE_EVENT_TOOLS,
    AgentKind.VENDOR: VENDOR_TOOLS,
}


def get_registry(kind: AgentKind | str) -> Optional[ToolRegistry]:
    try:
        return REGISTRIES[AgentKind(kind)]
    except ValueError:
        return None
