from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from agent.errors import InvalidArguments, NotFound, PreconditionFailed
from agent.tools import Id, IsoDateTime, NoArgs, ToolArgs
from models.task import Task, TaskPriority, TaskStatus
from shared import time
from store.base import drop_nones
from tools.aggregates import is_overdue
from tools.base import ToolContext, decode_structured, deny, log_action, require_venue_event


async def _get_task(ctx: ToolContext, task_id: str) -> Task:
    task = await ctx.store.tasks.get(task_id)
    if task is None:
        raise NotFound("Task", task_id)
    return task


async def require_assigned_task(ctx: ToolContext, task_id: str) -> Task:
    """Client and vendor assistants only touch tasks assigned to their actor."""
    task = await _get_task(ctx, task_id)
    if task.assigned_to_id != ctx.actor_id or task.assigned_to_type != ctx.role:
        raise deny(ctx, "task", task_id)
    return task


async def require_venue_task(ctx: ToolContext, task_id: str) -> Task:
    task = await _get_task(ctx, task_id)
    if task.event_id is None:
        if task.assigned_to_id != ctx.actor_id:
            raise deny(ctx, "task", task_id)
        return task
    await require_venue_event(ctx, task.event_id)
    return task


async def _complete(ctx: ToolContext, task: Task, form_response: Optional[str]) -> Task:
    if task.is_closed:
        raise PreconditionFailed(f"Task '{task.name}' is already {task.status}")

    changes: Dict[str, Any] = {"status": "completed", "completed_at": ctx.now}
    if form_response is not None:
        changes["form_response"] = decode_structured(form_response)

    # history first, so the status flip is the last write
    await log_action(
        ctx, task.event_id, "task_completed", f"Completed task: {task.name}",
        {"task_id": task.task_id},
    )
    return await ctx.store.tasks.update(
        task.task_id, changes, expect={"assigned_to_id": task.assigned_to_id}
    )


# ---------------------------------------------------------------------------
# client / vendor
# ---------------------------------------------------------------------------

class TaskIdArgs(ToolArgs):
    task_id: Id


async def get_task_details(args: TaskIdArgs, ctx: ToolContext) -> Task:
    return await require_assigned_task(ctx, args.task_id)


class CompleteTaskArgs(ToolArgs):
    task_id: Id
    form_response: Optional[str] = Field(
        None, description="JSON object with the answers to the task's form, when it has one"
    )


async def complete_assigned_task(args: CompleteTaskArgs, ctx: ToolContext) -> Task:
    task = await require_assigned_task(ctx, args.task_id)
    return await _complete(ctx, task, args.form_response)


# ---------------------------------------------------------------------------
# venue
# ---------------------------------------------------------------------------

class CreateTaskArgs(ToolArgs):
    event_id: Id
    assigned_to_id: Id
    assigned_to_type: Literal["client", "venue", "vendor"]
    name: str = Field(..., min_length=1)
    description: str = ""
    priority: TaskPriority = "medium"
    due_date: Optional[IsoDateTime] = None
    form_schema: Optional[str] = Field(None, description="JSON object describing the form to fill in")


async def create_task(args: CreateTaskArgs, ctx: ToolContext) -> Task:
    event = await require_venue_event(ctx, args.event_id)

    if args.assigned_to_type == "client":
        allowed = args.assigned_to_id == event.client_id
    elif args.assigned_to_type == "venue":
        allowed = args.assigned_to_id == ctx.actor_id
    else:
        links = await ctx.store.venue_vendors.list(venue_id=ctx.actor_id, vendor_id=args.assigned_to_id)
        allowed = bool(links)
    if not allowed:
        raise deny(ctx, f"{args.assigned_to_type} assignee", args.assigned_to_id)

    task = await ctx.store.tasks.create({
        "event_id": event.event_id,
        "assigned_to_id": args.assigned_to_id,
        "assigned_to_type": args.assigned_to_type,
        "status": "pending",
        "name": args.name,
        "description": args.description,
        "priority": args.priority,
        "due_date": time.to_utc(args.due_date) if args.due_date else None,
        "form_schema": decode_structured(args.form_schema),
        "created_by": ctx.actor_id,
    })
    await log_action(
        ctx, event.event_id, "task_created", f"Created task: {task.name}",
        {"task_id": task.task_id, "assigned_to_id": task.assigned_to_id},
    )
    return task


class UpdateTaskArgs(ToolArgs):
    task_id: Id
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[IsoDateTime] = None


async def update_task(args: UpdateTaskArgs, ctx: ToolContext) -> Task:
    changes = drop_nones(args.model_dump(exclude={"task_id"}))
    if not changes:
        raise InvalidArguments("Nothing to update")
    if "due_date" in changes:
        changes["due_date"] = time.to_utc(changes["due_date"])
    if changes.get("status") == "completed":
        changes["completed_at"] = ctx.now

    task = await require_venue_task(ctx, args.task_id)
    return await ctx.store.tasks.update(task.task_id, changes, expect={"event_id": task.event_id})


async def venue_complete_task(args: CompleteTaskArgs, ctx: ToolContext) -> Task:
    task = await require_venue_task(ctx, args.task_id)
    return await _complete(ctx, task, args.form_response)


async def get_overdue_tasks(args: NoArgs, ctx: ToolContext) -> List[Task]:
    events = await ctx.store.events.list(venue_id=ctx.actor_id)
    if not events:
        return []
    tasks = await ctx.store.tasks.list(event_id=[e.event_id for e in events])
    overdue = [t for t in tasks if is_overdue(t, ctx.now)]
    overdue.sort(key=lambda t: t.due_date)
    return overdue
