from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from models.identity import Role


class Message(BaseModel):
    message_id: str
    thread_id: str
    event_id: Optional[str] = None
    sender_id: str
    sender_type: Role
    recipient_id: str
    recipient_type: Role
    content: str
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    action_required: bool = False
    read: bool = False

    created_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}

    def involves(self, actor_id: str) -> bool:
        return actor_id in (self.sender_id, self.recipient_id)


class Notification(BaseModel):
    notification_id: str
    user_id: str
    user_type: Role
    notification_type: str        # "message_received", "task_created", ...
    title: str
    content: str
    action_url: Optional[str] = None
    read: bool = False

    created_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
