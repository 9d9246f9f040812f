# agent/prompts.py
"""
Text rendering of a snapshot for the assistant's instructions. Reads the
snapshot only; ids are always printed so the model can pass them back to
tools.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Iterable, List, Optional, Union

from agent.tool_registry import get_registry
from agent.tools import build_tools_reference
from models.action_history import ActionHistoryRecord
from models.event import Event
from models.guest import Guest
from models.identity import AgentKind
from models.message import Message
from models.scope import (
    ClientScope,
    EnrichedEventElement,
    Offering,
    VendorDirectoryEntry,
    VendorScope,
    VenueEventScope,
    VenueTenantScope,
)
from models.task import Task
from tools.aggregates import guest_stats

Scope = Union[ClientScope, VenueTenantScope, VenueEventScope, VendorScope]

MAX_MESSAGES = 20


def _fmt_dt(dt: Optional[datetime]) -> str:
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M UTC")


def _section(title: str, lines: List[str], empty: str = "(none)") -> str:
    body = "\n".join(lines) if lines else empty
    return f"=== {title} ===\n{body}"


def _event_line(e: Event) -> str:
    return f"- {e.name} [{e.status}] on {_fmt_dt(e.date)} (event_id={e.event_id})"


def _offerings_lines(offerings: Iterable[Offering]) -> List[str]:
    by_category = defaultdict(list)
    for o in offerings:
        by_category[o.category or "Other"].append(o)
    lines = []
    for category in sorted(by_category):
        lines.append(f"{category}:")
        for o in by_category[category]:
            lines.append(f"  - {o.name}: ${o.price:,.2f} by {o.vendor_name} (element_id={o.element_id})")
    return lines


def _vendor_lines(vendors: Iterable[VendorDirectoryEntry]) -> List[str]:
    return [
        f"- {v.name} [{v.approval_status}], {v.offering_count} offerings "
        f"(vendor_id={v.vendor_id}, venue_vendor_id={v.venue_vendor_id})"
        for v in vendors
    ]


def _element_lines(event_elements: Iterable[EnrichedEventElement]) -> List[str]:
    lines = []
    for ee in event_elements:
        name = ee.element.name if ee.element else "(removed offering)"
        line = f"- {name} by {ee.vendor_name}: ${ee.amount:,.2f} [{ee.status}] (event_element_id={ee.event_element_id})"
        if ee.customization:
            line += f"\n    customization: {ee.customization}"
        lines.append(line)
    return lines


def _task_lines(tasks: Iterable[Task]) -> List[str]:
    by_assignee = defaultdict(list)
    for t in tasks:
        by_assignee[t.assigned_to_type.value].append(t)
    lines = []
    for assignee in sorted(by_assignee):
        lines.append(f"Assigned to {assignee}:")
        for t in by_assignee[assignee]:
            due = f", due {_fmt_dt(t.due_date)}" if t.due_date else ""
            form = ", has form" if t.form_schema else ""
            lines.append(f"  - {t.name} [{t.status}, {t.priority}{due}{form}] (task_id={t.task_id})")
    return lines


def _guest_lines(guests: List[Guest]) -> List[str]:
    if not guests:
        return []
    stats = guest_stats(guests)
    lines = [
        f"Total {stats.total}: {stats.yes} yes, {stats.no} no, {stats.undecided} undecided; "
        f"expected attendance {stats.expected_attendance}"
    ]
    by_rsvp = defaultdict(list)
    for g in guests:
        by_rsvp[g.rsvp_status].append(g)
    for rsvp in ("yes", "undecided", "no"):
        for g in by_rsvp.get(rsvp, []):
            extra = f", {g.dietary_restrictions}" if g.dietary_restrictions else ""
            plus = " +1" if g.plus_one else ""
            lines.append(f"  - {g.name}{plus} [{rsvp}{extra}] (guest_id={g.guest_id})")
    return lines


def _message_lines(messages: List[Message]) -> List[str]:
    recent = sorted(messages, key=lambda m: m.created_at.timestamp() if m.created_at else 0)[-MAX_MESSAGES:]
    lines = []
    for m in recent:
        flag = " [action required]" if m.action_required else ""
        unread = " [unread]" if not m.read else ""
        lines.append(
            f"- {_fmt_dt(m.created_at)} {m.sender_type.value} -> {m.recipient_type.value}{flag}{unread}: "
            f"{m.content} (message_id={m.message_id}, thread_id={m.thread_id})"
        )
    return lines


def _action_lines(actions: Iterable[ActionHistoryRecord]) -> List[str]:
    return [f"- {_fmt_dt(a.created_at)} {a.action_type}: {a.description}" for a in actions]


def _space_lines(scope) -> List[str]:
    return [
        f"- {s.name}" + (f" (capacity {s.capacity})" if s.capacity else "")
        for s in scope.spaces
    ]


def _event_header(event: Event) -> List[str]:
    lines = [
        f"Name: {event.name} (event_id={event.event_id})",
        f"Date: {_fmt_dt(event.date)}",
        f"Status: {event.status}",
    ]
    if event.rsvp_deadline:
        lines.append(f"RSVP deadline: {event.rsvp_deadline.isoformat()}")
    if event.description:
        lines.append(f"Description: {event.description}")
    return lines


def _client_brief(scope: ClientScope) -> List[str]:
    return [
        _section("CLIENT", [f"{scope.client.name} <{scope.client.email}> (client_id={scope.client.client_id})"]),
        _section("VENUE", [f"{scope.venue.name} (venue_id={scope.venue.venue_id})"]),
        _section("EVENT", _event_header(scope.event)),
        _section("EVENT ELEMENTS", _element_lines(scope.event_elements)),
        _section("AVAILABLE OFFERINGS", _offerings_lines(scope.offerings)),
        _section("TASKS", _task_lines(scope.tasks)),
        _section("GUESTS", _guest_lines(scope.guests)),
        _section("SPACES", _space_lines(scope)),
        _section("MESSAGES", _message_lines(scope.messages)),
        _section("RECENT ACTIVITY", _action_lines(scope.recent_actions)),
    ]


def _venue_tenant_brief(scope: VenueTenantScope) -> List[str]:
    s = scope.summary
    summary = [
        "Events by status: " + (", ".join(f"{k} {v}" for k, v in sorted(s.event_counts.items())) or "none"),
        "Tasks by status: " + (", ".join(f"{k} {v}" for k, v in sorted(s.task_counts.items())) or "none"),
        f"Overdue tasks: {s.overdue_tasks}",
        f"Unread messages: {s.unread_messages}",
    ]
    return [
        _section("VENUE", [f"{scope.venue.name} (venue_id={scope.venue.venue_id})"]),
        _section("SUMMARY", summary),
        _section("EVENTS", [_event_line(e) for e in scope.events]),
        _section("VENDORS", _vendor_lines(scope.vendors)),
        _section("OFFERINGS", _offerings_lines(scope.offerings)),
        _section("SPACES", _space_lines(scope)),
        _section("TASKS", _task_lines(scope.tasks)),
        _section("MESSAGES", _message_lines(scope.messages)),
        _section("RECENT ACTIVITY", _action_lines(scope.recent_actions)),
    ]


def _venue_event_brief(scope: VenueEventScope) -> List[str]:
    client = (
        [f"{scope.client.name} <{scope.client.email}> (client_id={scope.client.client_id})"]
        if scope.client else []
    )
    return [
        _section("VENUE", [f"{scope.venue.name} (venue_id={scope.venue.venue_id})"]),
        _section("EVENT", _event_header(scope.event)),
        _section("CLIENT", client, empty="(no client yet)"),
        _section("EVENT ELEMENTS", _element_lines(scope.event_elements)),
        _section("VENDORS", _vendor_lines(scope.vendors)),
        _section("OFFERINGS", _offerings_lines(scope.offerings)),
        _section("TASKS", _task_lines(scope.tasks)),
        _section("GUESTS", _guest_lines(scope.guests)),
        _section("SPACES", _space_lines(scope)),
        _section("MESSAGES", _message_lines(scope.messages)),
        _section("RECENT ACTIVITY", _action_lines(scope.recent_actions)),
    ]


def _vendor_brief(scope: VendorScope) -> List[str]:
    return [
        _section("VENDOR", [f"{scope.vendor.name} (vendor_id={scope.vendor.vendor_id})"]),
        _section("EVENTS", [_event_line(e) for e in scope.events]),
        _section("YOUR OFFERINGS", _offerings_lines(scope.offerings)),
        _section("TASKS", _task_lines(scope.tasks)),
        _section("MESSAGES", _message_lines(scope.messages)),
        _section("RECENT ACTIVITY", _action_lines(scope.recent_actions)),
    ]


def render_brief(scope: Scope) -> str:
    if isinstance(scope, ClientScope):
        sections = _client_brief(scope)
    elif isinstance(scope, VenueTenantScope):
        sections = _venue_tenant_brief(scope)
    elif isinstance(scope, VenueEventScope):
        sections = _venue_event_brief(scope)
    elif isinstance(scope, VendorScope):
        sections = _vendor_brief(scope)
    else:
        raise TypeError(f"Unsupported scope type: {type(scope).__name__}")
    sections.append(_section("CURRENT TIME", [_fmt_dt(scope.as_of)]))
    return "\n\n".join(sections)


def render_tools_reference(kind: Union[AgentKind, str]) -> str:
    registry = get_registry(kind)
    if registry is None:
        raise ValueError(f"Unknown agent kind: {kind}")
    return build_tools_reference(registry)
