from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel

from models.identity import Role


class ActionHistoryRecord(BaseModel):
    """Audit entry: who did what to which event."""
    action_id: str
    event_id: Optional[str] = None
    actor_id: Optional[str] = None                       # None for system actions
    actor_role: Optional[Union[Role, Literal["system"]]] = None
    action_type: str                                     # "element_added", "event_status_changed", ...
    description: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
