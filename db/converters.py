"""
Conversion utilities between SQLAlchemy DB models and Pydantic models.
"""

from datetime import datetime, timezone

from models import (
    AutomationRule,
    AutomationRun,
    CardRecord,
    RuleAction,
    RuleCondition,
    RunStatus,
    TriggerKind,
)

from .models import (
    AutomationRuleActionModel,
    AutomationRuleConditionModel,
    AutomationRuleModel,
    AutomationRunModel,
    CardModel,
)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Attach UTC to naive datetimes. SQLite hands back DateTime columns without
    tzinfo even when they were written timezone-aware.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def db_to_pydantic_rule(db_rule: AutomationRuleModel) -> AutomationRule:
    return AutomationRule(
        id=db_rule.id,
        workspace_id=db_rule.workspace_id,
        board_id=db_rule.board_id,
        trigger=TriggerKind(db_rule.trigger),
        is_active=db_rule.is_active,
        name=db_rule.name,
        created_by=db_rule.created_by,
        created_at=as_utc(db_rule.created_at),
        updated_at=as_utc(db_rule.updated_at),
    )


def db_to_pydantic_condition(db_condition: AutomationRuleConditionModel) -> RuleCondition:
    return RuleCondition(
        id=db_condition.id,
        rule_id=db_condition.rule_id,
        condition_type=db_condition.condition_type,
        payload=db_condition.condition_payload or {},
        position=db_condition.position,
    )


def db_to_pydantic_action(db_action: AutomationRuleActionModel) -> RuleAction:
    return RuleAction(
        id=db_action.id,
        rule_id=db_action.rule_id,
        action=db_action.action,
        payload=db_action.action_payload or {},
        position=db_action.position,
    )


def pydantic_to_db_rule(rule: AutomationRule) -> AutomationRuleModel:
    return AutomationRuleModel(
        id=rule.id,
        workspace_id=rule.workspace_id,
        board_id=rule.board_id,
        name=rule.name,
        trigger=rule.trigger.value,
        is_active=rule.is_active,
        created_by=rule.created_by,
    )


def pydantic_to_db_condition(condition: RuleCondition) -> AutomationRuleConditionModel:
    return AutomationRuleConditionModel(
        id=condition.id,
        rule_id=condition.rule_id,
        condition_type=condition.condition_type,
        condition_payload=condition.payload,
        position=condition.position,
    )


def pydantic_to_db_action(action: RuleAction) -> AutomationRuleActionModel:
    return AutomationRuleActionModel(
        id=action.id,
        rule_id=action.rule_id,
        action=action.action,
        action_payload=action.payload,
        position=action.position,
    )


def pydantic_to_db_run(run: AutomationRun) -> AutomationRunModel:
    return AutomationRunModel(
        id=run.id,
        rule_id=run.rule_id,
        trigger_source=run.trigger_source.value,
        status=run.status.value,
        details=run.details,
        started_at=run.started_at,
        finished_at=run.finished_at,
    )


def db_to_pydantic_run(db_run: AutomationRunModel) -> AutomationRun:
    return AutomationRun(
        id=db_run.id,
        rule_id=db_run.rule_id,
        trigger_source=TriggerKind(db_run.trigger_source),
        status=RunStatus(db_run.status),
        details=db_run.details or {},
        started_at=as_utc(db_run.started_at),
        finished_at=as_utc(db_run.finished_at),
    )


def db_to_pydantic_card(db_card: CardModel) -> CardRecord:
    return CardRecord(
        id=db_card.id,
        board_id=db_card.board_id,
        list_id=db_card.list_id,
        priority=db_card.priority,
        due_at=as_utc(db_card.due_at),
        position=db_card.position,
        archived=db_card.archived,
        created_by=db_card.created_by,
    )
