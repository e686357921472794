"""
Action execution.

Each action performs at most one store write. An action whose required
payload field is missing does nothing rather than guess; only the store
call itself can raise.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Tuple

from config import settings
from db import AutomationStore
from models import ActionKind, AutomationEvent, NotificationRecord, RuleAction

from .conditions import payload_number, payload_string

logger = logging.getLogger("automation.actions")

# Fields without which an action is skipped
ACTION_REQUIRED_FIELDS: Dict[ActionKind, Tuple[str, ...]] = {
    ActionKind.MOVE_CARD: ("listId",),
    ActionKind.ADD_LABEL: ("labelId",),
    ActionKind.ASSIGN_MEMBER: ("userId",),
    ActionKind.SET_DUE_DATE: (),
    ActionKind.POST_COMMENT: ("content",),
    ActionKind.NOTIFY: ("userId",),
}

ActionHandler = Callable[[AutomationStore, AutomationEvent, Mapping[str, Any], datetime], None]


def _move_card(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    position = payload_number(payload, "position")
    if position is None:
        # Epoch milliseconds sort after every earlier automated move
        position = now.timestamp() * 1000
    store.move_card(event.card.id, payload_string(payload, "listId"), position)


def _add_label(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    store.upsert_card_label(event.card.id, payload_string(payload, "labelId"))


def _assign_member(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    store.upsert_card_assignee(event.card.id, payload_string(payload, "userId"), assigned_by=event.actor_id)


def _set_due_date(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    offset_hours = payload_number(payload, "offsetHours")
    if offset_hours is None:
        offset_hours = settings.default_due_offset_hours
    store.set_card_due_at(event.card.id, now + timedelta(hours=offset_hours))


def _post_comment(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    store.insert_comment(event.card.id, event.actor_id, payload_string(payload, "content"))


def _notify(store: AutomationStore, event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> None:
    store.insert_notification(
        NotificationRecord(
            user_id=payload_string(payload, "userId"),
            workspace_id=event.workspace_id,
            board_id=event.board_id,
            card_id=event.card.id,
            message=settings.notification_message.format(card_id=event.card.id),
            payload=dict(payload),
        )
    )


ACTION_HANDLERS: Dict[ActionKind, ActionHandler] = {
    ActionKind.MOVE_CARD: _move_card,
    ActionKind.ADD_LABEL: _add_label,
    ActionKind.ASSIGN_MEMBER: _assign_member,
    ActionKind.SET_DUE_DATE: _set_due_date,
    ActionKind.POST_COMMENT: _post_comment,
    ActionKind.NOTIFY: _notify,
}

if set(ACTION_HANDLERS) != set(ActionKind) or set(ACTION_REQUIRED_FIELDS) != set(ActionKind):
    raise RuntimeError("Every ActionKind needs exactly one handler and a required-field entry")


def parse_action_kind(value: str) -> ActionKind | None:
    try:
        return ActionKind(value)
    except ValueError:
        return None


def execute_action(
    store: AutomationStore,
    event: AutomationEvent,
    action: RuleAction,
    now: datetime | None = None,
) -> bool:
    """
    Run one action against the store.

    Returns True when a write was issued and False when the action was skipped
    (unknown kind or missing required field). Store errors propagate.
    """
    kind = parse_action_kind(action.action)
    if kind is None:
        logger.debug("Skipping action %s: unknown kind %r", action.id, action.action)
        return False

    payload = action.payload or {}
    missing = [name for name in ACTION_REQUIRED_FIELDS[kind] if payload_string(payload, name) is None]
    if missing:
        logger.debug("Skipping %s action %s: missing %s", kind.value, action.id, ", ".join(missing))
        return False

    ACTION_HANDLERS[kind](store, event, payload, now or datetime.now(timezone.utc))
    return True
