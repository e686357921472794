import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .automation import TriggerKind


class CardSnapshot(BaseModel):
    """
    Point-in-time view of a card as seen by the producer. The engine reads the
    label and assignee ids from here and never re-fetches them.
    """

    id: str
    board_id: str
    list_id: str
    priority: str | None = None
    due_at: datetime | None = None
    label_ids: List[str] = Field(default_factory=list)
    assignee_ids: List[str] = Field(default_factory=list)


class AutomationEvent(BaseModel):
    trigger: TriggerKind
    workspace_id: str
    board_id: str
    actor_id: str
    card: CardSnapshot


class RunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class AutomationRun(BaseModel):
    """Audit record for one attempted rule against one event. Never updated."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    rule_id: str
    trigger_source: TriggerKind
    status: RunStatus
    details: Dict[str, Any] = Field(default_factory=dict)
    started_at: datetime
    finished_at: datetime


class CardRecord(BaseModel):
    """Stored card row as producers read it."""

    id: str
    board_id: str
    list_id: str
    priority: str | None = None
    due_at: datetime | None = None
    position: float = 0
    archived: bool = False
    created_by: str | None = None


class NotificationRecord(BaseModel):
    user_id: str
    workspace_id: str
    board_id: str
    card_id: str
    type: str = "automation"
    message: str
    payload: Dict[str, Any] = Field(default_factory=dict)
