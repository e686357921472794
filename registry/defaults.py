from models import ActionKind, ConditionType, TriggerKind

from .registry import Registry

TRIGGER_DESCRIPTIONS = {
    TriggerKind.CARD_MOVED: "Fires when a card is moved to another list",
    TriggerKind.DUE_SOON: "Fires when a card's due date falls inside the due-soon window",
    TriggerKind.OVERDUE: "Fires when a card's due date has passed",
    TriggerKind.LABEL_ADDED: "Fires when a label is attached to a card",
    TriggerKind.CHECKLIST_COMPLETED: "Fires when every item of a checklist is checked",
}

CONDITION_DESCRIPTIONS = {
    ConditionType.CARD_PRIORITY_IS: "Checks the card priority equals payload.priority",
    ConditionType.LABEL_IS: "Checks the card carries payload.labelId",
    ConditionType.ASSIGNEE_IS: "Checks payload.userId is assigned to the card",
    ConditionType.DUE_WITHIN_HOURS: "Checks the card is due within payload.hours (overdue included)",
    ConditionType.LIST_IS: "Checks the card sits in payload.listId",
}

ACTION_DESCRIPTIONS = {
    ActionKind.MOVE_CARD: "Move the card to payload.listId at optional payload.position",
    ActionKind.ADD_LABEL: "Attach payload.labelId to the card",
    ActionKind.ASSIGN_MEMBER: "Assign payload.userId to the card",
    ActionKind.SET_DUE_DATE: "Set the due date to now plus payload.offsetHours",
    ActionKind.POST_COMMENT: "Post payload.content as a comment by the acting user",
    ActionKind.NOTIFY: "Send an automation notification to payload.userId",
}


def create_default_registries() -> dict[str, Registry]:
    """Create the trigger, condition and action registries rules are validated against."""
    return {
        "trigger": Registry.from_enum("trigger", TriggerKind, TRIGGER_DESCRIPTIONS),
        "condition": Registry.from_enum("condition", ConditionType, CONDITION_DESCRIPTIONS),
        "action": Registry.from_enum("action", ActionKind, ACTION_DESCRIPTIONS),
    }
