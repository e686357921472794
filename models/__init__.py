from .automation import (
    ActionInput,
    ActionKind,
    AutomationRule,
    ConditionInput,
    ConditionType,
    RuleAction,
    RuleCondition,
    RuleDefinition,
    RuleDefinitionInput,
    RulePatchInput,
    TriggerKind,
)
from .events import AutomationEvent, AutomationRun, CardRecord, CardSnapshot, NotificationRecord, RunStatus

__all__ = [
    "ActionInput",
    "ActionKind",
    "AutomationEvent",
    "AutomationRule",
    "AutomationRun",
    "CardRecord",
    "CardSnapshot",
    "ConditionInput",
    "ConditionType",
    "NotificationRecord",
    "RuleAction",
    "RuleCondition",
    "RuleDefinition",
    "RuleDefinitionInput",
    "RulePatchInput",
    "RunStatus",
    "TriggerKind",
]
