import uuid
from typing import Dict, List

from models import (
    ActionInput,
    AutomationRule,
    ConditionInput,
    RuleAction,
    RuleCondition,
    RuleDefinition,
    RuleDefinitionInput,
    RulePatchInput,
    TriggerKind,
)
from registry import Registry


class UnknownRegistryTypeError(ValueError):
    """Raised when a rule references an unknown trigger, condition, or action type."""


def _check_registries(
    registries: Dict[str, Registry],
    trigger: str | None,
    conditions: List[ConditionInput] | None,
    actions: List[ActionInput] | None,
) -> None:
    if trigger is not None and trigger not in registries["trigger"]:
        raise UnknownRegistryTypeError(f"Unknown trigger type: {trigger}")

    for condition in conditions or []:
        if condition.type not in registries["condition"]:
            raise UnknownRegistryTypeError(f"Unknown condition type: {condition.type}")

    for action in actions or []:
        if action.action not in registries["action"]:
            raise UnknownRegistryTypeError(f"Unknown action type: {action.action}")


def build_conditions(rule_id: str, conditions: List[ConditionInput]) -> List[RuleCondition]:
    # Entries without an explicit position take their list index
    return [
        RuleCondition(
            id=str(uuid.uuid4()),
            rule_id=rule_id,
            condition_type=condition.type,
            payload=condition.payload,
            position=condition.position if condition.position is not None else index,
        )
        for index, condition in enumerate(conditions)
    ]


def build_actions(rule_id: str, actions: List[ActionInput]) -> List[RuleAction]:
    return [
        RuleAction(
            id=str(uuid.uuid4()),
            rule_id=rule_id,
            action=action.action,
            payload=action.payload,
            position=action.position if action.position is not None else index,
        )
        for index, action in enumerate(actions)
    ]


def parse_and_validate_rule(
    payload: dict,
    registries: Dict[str, Registry],
    created_by: str | None = None,
) -> RuleDefinition:
    """
    Convert a parsed JSON rule (dict) into a RuleDefinition with fresh ids.
    Raises ValidationError or UnknownRegistryTypeError on failure.
    """
    data = RuleDefinitionInput.model_validate(payload)
    _check_registries(registries, data.trigger, data.conditions, data.actions)

    rule_id = str(uuid.uuid4())
    rule = AutomationRule(
        id=rule_id,
        workspace_id=data.workspace_id,
        board_id=data.board_id,
        trigger=TriggerKind(data.trigger),
        is_active=data.is_active,
        name=data.name,
        created_by=created_by,
    )
    return RuleDefinition(
        rule=rule,
        conditions=build_conditions(rule_id, data.conditions),
        actions=build_actions(rule_id, data.actions),
    )


def parse_and_validate_patch(payload: dict, registries: Dict[str, Registry]) -> RulePatchInput:
    """Validate a partial rule redefinition. Only fields present in ``payload`` are applied."""
    patch = RulePatchInput.model_validate(payload)
    _check_registries(registries, patch.trigger, patch.conditions, patch.actions)
    if patch.actions is not None and not patch.actions:
        raise ValueError("Automation rule must keep at least one action")
    return patch
