from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TriggerKind(str, Enum):
    CARD_MOVED = "card_moved"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    LABEL_ADDED = "label_added"
    CHECKLIST_COMPLETED = "checklist_completed"


class ConditionType(str, Enum):
    CARD_PRIORITY_IS = "card_priority_is"
    LABEL_IS = "label_is"
    ASSIGNEE_IS = "assignee_is"
    DUE_WITHIN_HOURS = "due_within_hours"
    LIST_IS = "list_is"


class ActionKind(str, Enum):
    MOVE_CARD = "move_card"
    ADD_LABEL = "add_label"
    ASSIGN_MEMBER = "assign_member"
    SET_DUE_DATE = "set_due_date"
    POST_COMMENT = "post_comment"
    NOTIFY = "notify"


class AutomationRule(BaseModel):
    id: str
    workspace_id: str
    board_id: str | None = Field(default=None, description="None means the rule applies workspace-wide")
    trigger: TriggerKind
    is_active: bool = True
    name: str
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def applies_to_board(self, board_id: str) -> bool:
        return self.board_id is None or self.board_id == board_id


class RuleCondition(BaseModel):
    id: str
    rule_id: str
    # Kept as a plain string: stored rows may carry types this build does not know.
    condition_type: str = Field(..., description="Key into the condition evaluator")
    payload: Dict[str, Any] = Field(default_factory=dict)
    position: int = 0


class RuleAction(BaseModel):
    id: str
    rule_id: str
    action: str = Field(..., description="Key into the action executor")
    payload: Dict[str, Any] = Field(default_factory=dict)
    position: int = 0


class RuleDefinition(BaseModel):
    """A rule together with its conditions and actions, each in position order."""

    rule: AutomationRule
    conditions: List[RuleCondition] = Field(default_factory=list)
    actions: List[RuleAction] = Field(default_factory=list)

    @model_validator(mode="after")
    def sort_by_position(self) -> "RuleDefinition":
        self.conditions.sort(key=lambda condition: condition.position)
        self.actions.sort(key=lambda action: action.position)
        return self


class ConditionInput(BaseModel):
    type: str = Field(..., min_length=1, max_length=80)
    payload: Dict[str, Any] = Field(default_factory=dict)
    position: int | None = Field(default=None, ge=0)


class ActionInput(BaseModel):
    action: str = Field(..., min_length=1, max_length=80)
    payload: Dict[str, Any] = Field(default_factory=dict)
    position: int | None = Field(default=None, ge=0)


class RuleDefinitionInput(BaseModel):
    """Administrator-authored rule as submitted for creation."""

    model_config = ConfigDict(populate_by_name=True)

    workspace_id: str = Field(..., alias="workspaceId")
    board_id: str | None = Field(default=None, alias="boardId")
    name: str = Field(..., min_length=2, max_length=120)
    trigger: str
    is_active: bool = Field(default=True, alias="isActive")
    conditions: List[ConditionInput] = Field(default_factory=list)
    actions: List[ActionInput] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def ensure_actions_present(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        # Conditions may be empty (always matches) but a rule must do something
        if isinstance(values, dict) and not values.get("actions"):
            raise ValueError("Automation rule must define at least one action")
        return values


class RulePatchInput(BaseModel):
    """Partial redefinition of an existing rule. Omitted fields stay unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    board_id: str | None = Field(default=None, alias="boardId")
    name: str | None = Field(default=None, min_length=2, max_length=120)
    trigger: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")
    conditions: List[ConditionInput] | None = None
    actions: List[ActionInput] | None = None

    @field_validator("name", "trigger", "is_active")
    @classmethod
    def reject_explicit_null(cls, value: Any) -> Any:
        # Omitting these keeps the stored value; only boardId may be cleared
        if value is None:
            raise ValueError("Field may be omitted but not set to null")
        return value
