from .actions import ACTION_REQUIRED_FIELDS, execute_action
from .conditions import (
    CONDITION_MISSING_FIELD_POLICY,
    UNKNOWN_CONDITION_POLICY,
    MissingFieldPolicy,
    conditions_match,
    evaluate_condition,
)
from .errors import AuditWriteError, AutomationError, RuleLoadError, RuleNotFoundError
from .loader import load_candidate_rules
from .orchestrator import run_automation_for_event, run_rule

__all__ = [
    "ACTION_REQUIRED_FIELDS",
    "CONDITION_MISSING_FIELD_POLICY",
    "UNKNOWN_CONDITION_POLICY",
    "AuditWriteError",
    "AutomationError",
    "MissingFieldPolicy",
    "RuleLoadError",
    "RuleNotFoundError",
    "conditions_match",
    "evaluate_condition",
    "execute_action",
    "load_candidate_rules",
    "run_automation_for_event",
    "run_rule",
]
