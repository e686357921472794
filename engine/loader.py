import logging
from collections import defaultdict
from typing import Dict, List

from db import AutomationStore
from models import RuleAction, RuleCondition, RuleDefinition, TriggerKind

from .errors import RuleLoadError

logger = logging.getLogger("automation.loader")


def load_candidate_rules(
    store: AutomationStore,
    workspace_id: str,
    trigger: TriggerKind,
    board_id: str,
) -> List[RuleDefinition]:
    """
    Load the active rules that may fire for an event.

    Rules are kept when they are workspace-wide or scoped to ``board_id``.
    Conditions and actions for the surviving rules are fetched in one batch
    each and grouped by rule, preserving the store's position ordering.
    """
    try:
        rules = [rule for rule in store.list_active_rules(workspace_id, trigger) if rule.applies_to_board(board_id)]
        if not rules:
            return []
        rule_ids = [rule.id for rule in rules]
        conditions = store.list_conditions(rule_ids)
        actions = store.list_actions(rule_ids)
    except Exception as exc:
        raise RuleLoadError(f"Failed to load {trigger.value} rules for workspace {workspace_id}: {exc}") from exc

    conditions_by_rule: Dict[str, List[RuleCondition]] = defaultdict(list)
    for condition in conditions:
        conditions_by_rule[condition.rule_id].append(condition)
    actions_by_rule: Dict[str, List[RuleAction]] = defaultdict(list)
    for action in actions:
        actions_by_rule[action.rule_id].append(action)

    logger.debug("Loaded %d candidate rule(s) for %s on board %s", len(rules), trigger.value, board_id)
    return [
        RuleDefinition(rule=rule, conditions=conditions_by_rule[rule.id], actions=actions_by_rule[rule.id])
        for rule in rules
    ]
