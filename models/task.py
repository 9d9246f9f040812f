from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel

from models.identity import Role

TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


class Task(BaseModel):
    task_id: str
    event_id: Optional[str] = None
    assigned_to_id: str
    assigned_to_type: Role
    status: TaskStatus = "pending"
    name: str
    description: str = ""

    # Structured when decodable, the raw text otherwise
    form_schema: Optional[Any] = None
    form_response: Optional[Any] = None

    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None
    created_by: str                     # actor id or "orchestrator"

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}

    @property
    def is_closed(self) -> bool:
        return self.status in ("completed", "cancelled")
