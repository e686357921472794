"""
Condition evaluation.

Every condition type maps to exactly one handler. Payload fields that are
absent or malformed are resolved through CONDITION_MISSING_FIELD_POLICY:
string comparisons fail open, the due-date threshold fails closed. Stored
condition types this build does not recognise resolve through
UNKNOWN_CONDITION_POLICY.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping

from models import AutomationEvent, ConditionType, RuleCondition


class MissingFieldPolicy(str, Enum):
    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"

    @property
    def matches(self) -> bool:
        return self is MissingFieldPolicy.FAIL_OPEN


CONDITION_MISSING_FIELD_POLICY: Dict[ConditionType, MissingFieldPolicy] = {
    ConditionType.CARD_PRIORITY_IS: MissingFieldPolicy.FAIL_OPEN,
    ConditionType.LABEL_IS: MissingFieldPolicy.FAIL_OPEN,
    ConditionType.ASSIGNEE_IS: MissingFieldPolicy.FAIL_OPEN,
    # Numeric threshold: "always true" is never a sensible default
    ConditionType.DUE_WITHIN_HOURS: MissingFieldPolicy.FAIL_CLOSED,
    ConditionType.LIST_IS: MissingFieldPolicy.FAIL_OPEN,
}

UNKNOWN_CONDITION_POLICY = MissingFieldPolicy.FAIL_OPEN


def payload_string(payload: Mapping[str, Any], key: str) -> str | None:
    """Return payload[key] if it is a non-empty string, else None."""
    value = payload.get(key)
    return value if isinstance(value, str) and value else None


def payload_number(payload: Mapping[str, Any], key: str) -> float | None:
    """Return payload[key] if it is a finite number (booleans excluded), else None."""
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


ConditionHandler = Callable[[AutomationEvent, Mapping[str, Any], datetime], bool]


def _card_priority_is(event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> bool:
    expected = payload_string(payload, "priority")
    if expected is None:
        return CONDITION_MISSING_FIELD_POLICY[ConditionType.CARD_PRIORITY_IS].matches
    return event.card.priority == expected


def _label_is(event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> bool:
    expected = payload_string(payload, "labelId")
    if expected is None:
        return CONDITION_MISSING_FIELD_POLICY[ConditionType.LABEL_IS].matches
    return expected in event.card.label_ids


def _assignee_is(event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> bool:
    expected = payload_string(payload, "userId")
    if expected is None:
        return CONDITION_MISSING_FIELD_POLICY[ConditionType.ASSIGNEE_IS].matches
    return expected in event.card.assignee_ids


def _due_within_hours(event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> bool:
    hours = payload_number(payload, "hours")
    # A zero threshold counts as missing
    if not hours or event.card.due_at is None:
        return CONDITION_MISSING_FIELD_POLICY[ConditionType.DUE_WITHIN_HOURS].matches
    due_at = event.card.due_at
    if due_at.tzinfo is None:
        due_at = due_at.replace(tzinfo=timezone.utc)
    # Negative remaining time (already overdue) still matches
    return (due_at - now).total_seconds() <= hours * 3600


def _list_is(event: AutomationEvent, payload: Mapping[str, Any], now: datetime) -> bool:
    expected = payload_string(payload, "listId")
    if expected is None:
        return CONDITION_MISSING_FIELD_POLICY[ConditionType.LIST_IS].matches
    return event.card.list_id == expected


CONDITION_HANDLERS: Dict[ConditionType, ConditionHandler] = {
    ConditionType.CARD_PRIORITY_IS: _card_priority_is,
    ConditionType.LABEL_IS: _label_is,
    ConditionType.ASSIGNEE_IS: _assignee_is,
    ConditionType.DUE_WITHIN_HOURS: _due_within_hours,
    ConditionType.LIST_IS: _list_is,
}

if set(CONDITION_HANDLERS) != set(ConditionType) or set(CONDITION_MISSING_FIELD_POLICY) != set(ConditionType):
    raise RuntimeError("Every ConditionType needs exactly one handler and one missing-field policy")


def parse_condition_type(value: str) -> ConditionType | None:
    try:
        return ConditionType(value)
    except ValueError:
        return None


def evaluate_condition(event: AutomationEvent, condition: RuleCondition, now: datetime | None = None) -> bool:
    """Evaluate one condition against the event snapshot. Pure: no I/O."""
    condition_type = parse_condition_type(condition.condition_type)
    if condition_type is None:
        return UNKNOWN_CONDITION_POLICY.matches
    handler = CONDITION_HANDLERS[condition_type]
    return handler(event, condition.payload or {}, now or datetime.now(timezone.utc))


def conditions_match(event: AutomationEvent, conditions: list[RuleCondition], now: datetime | None = None) -> bool:
    """Logical AND over all conditions; an empty list matches."""
    now = now or datetime.now(timezone.utc)
    return all(evaluate_condition(event, condition, now) for condition in conditions)
