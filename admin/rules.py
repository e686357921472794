"""
Rule administration: create, redefine, enable/disable and inspect rules.

Authorization of the administrator is the caller's job; these functions only
validate definitions and persist them.
"""

import logging
from typing import Any, Dict, List

from db import AutomationStore
from engine.errors import RuleNotFoundError
from models import AutomationRule, AutomationRun, RuleDefinition, TriggerKind
from registry import Registry, create_default_registries
from validations import build_actions, build_conditions, parse_and_validate_patch, parse_and_validate_rule

logger = logging.getLogger("automation.admin")


def create_rule(
    store: AutomationStore,
    payload: Dict[str, Any],
    created_by: str | None = None,
    registries: Dict[str, Registry] | None = None,
) -> RuleDefinition:
    definition = parse_and_validate_rule(payload, registries or create_default_registries(), created_by=created_by)
    store.save_rule(definition)
    logger.info(
        "Created rule %s (%s) for %s with %d condition(s) and %d action(s)",
        definition.rule.id,
        definition.rule.name,
        definition.rule.trigger.value,
        len(definition.conditions),
        len(definition.actions),
    )
    return definition


def update_rule(
    store: AutomationStore,
    rule_id: str,
    payload: Dict[str, Any],
    registries: Dict[str, Registry] | None = None,
) -> RuleDefinition:
    """
    Apply a partial redefinition. A ``conditions`` or ``actions`` list replaces
    the stored list wholesale; omitting it keeps the stored one.
    """
    patch = parse_and_validate_patch(payload, registries or create_default_registries())
    if store.get_rule_definition(rule_id) is None:
        raise RuleNotFoundError(rule_id)

    changes: Dict[str, Any] = {}
    for field in ("board_id", "name", "is_active"):
        if field in patch.model_fields_set:
            changes[field] = getattr(patch, field)
    if patch.trigger is not None:
        changes["trigger"] = TriggerKind(patch.trigger)
    if changes:
        store.update_rule(rule_id, changes)

    if patch.conditions is not None:
        store.replace_conditions(rule_id, build_conditions(rule_id, patch.conditions))
    if patch.actions is not None:
        store.replace_actions(rule_id, build_actions(rule_id, patch.actions))

    logger.info("Updated rule %s: %s", rule_id, ", ".join(sorted(patch.model_fields_set)) or "no changes")
    return store.get_rule_definition(rule_id)


def toggle_rule(store: AutomationStore, rule_id: str, is_active: bool) -> AutomationRule:
    rule = store.set_rule_active(rule_id, is_active)
    if rule is None:
        raise RuleNotFoundError(rule_id)
    logger.info("Rule %s %s", rule_id, "enabled" if is_active else "disabled")
    return rule


def list_rule_runs(store: AutomationStore, rule_id: str) -> List[AutomationRun]:
    if store.get_rule_definition(rule_id) is None:
        raise RuleNotFoundError(rule_id)
    return store.list_runs(rule_id)
