"""
SQLAlchemy implementation of the automation store.

Every write commits on its own. A failed write is rolled back before the
error propagates so the same session stays usable for the next rule.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models import (
    AutomationRule,
    AutomationRun,
    CardRecord,
    NotificationRecord,
    RuleAction,
    RuleCondition,
    RuleDefinition,
    TriggerKind,
)

from .converters import (
    db_to_pydantic_action,
    db_to_pydantic_card,
    db_to_pydantic_condition,
    db_to_pydantic_rule,
    db_to_pydantic_run,
    pydantic_to_db_action,
    pydantic_to_db_condition,
    pydantic_to_db_rule,
    pydantic_to_db_run,
)
from .models import (
    AutomationRuleActionModel,
    AutomationRuleConditionModel,
    AutomationRuleModel,
    AutomationRunModel,
    BoardModel,
    CardAssigneeModel,
    CardLabelModel,
    CardModel,
    CommentModel,
    NotificationModel,
)
from .repository import AutomationStore

_RULE_COLUMNS = {"board_id", "name", "trigger", "is_active"}


class SqlAlchemyAutomationStore(AutomationStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _write(self) -> Iterator[None]:
        """Run statements and commit them as one unit; roll back if any step raises."""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Engine reads

    def list_active_rules(self, workspace_id: str, trigger: TriggerKind) -> List[AutomationRule]:
        stmt = select(AutomationRuleModel).where(
            AutomationRuleModel.workspace_id == workspace_id,
            AutomationRuleModel.trigger == trigger.value,
            AutomationRuleModel.is_active.is_(True),
        )
        return [db_to_pydantic_rule(row) for row in self.db.execute(stmt).scalars()]

    def list_conditions(self, rule_ids: Sequence[str]) -> List[RuleCondition]:
        if not rule_ids:
            return []
        stmt = (
            select(AutomationRuleConditionModel)
            .where(AutomationRuleConditionModel.rule_id.in_(list(rule_ids)))
            .order_by(AutomationRuleConditionModel.position.asc())
        )
        return [db_to_pydantic_condition(row) for row in self.db.execute(stmt).scalars()]

    def list_actions(self, rule_ids: Sequence[str]) -> List[RuleAction]:
        if not rule_ids:
            return []
        stmt = (
            select(AutomationRuleActionModel)
            .where(AutomationRuleActionModel.rule_id.in_(list(rule_ids)))
            .order_by(AutomationRuleActionModel.position.asc())
        )
        return [db_to_pydantic_action(row) for row in self.db.execute(stmt).scalars()]

    # Action side effects

    def move_card(self, card_id: str, list_id: str, position: float) -> None:
        with self._write():
            self.db.execute(update(CardModel).where(CardModel.id == card_id).values(list_id=list_id, position=position))

    def set_card_due_at(self, card_id: str, due_at: datetime) -> None:
        with self._write():
            self.db.execute(update(CardModel).where(CardModel.id == card_id).values(due_at=due_at))

    def upsert_card_label(self, card_id: str, label_id: str) -> None:
        with self._write():
            existing = self.db.execute(
                select(CardLabelModel).where(CardLabelModel.card_id == card_id, CardLabelModel.label_id == label_id)
            ).scalar_one_or_none()
            if existing is None:
                self.db.add(CardLabelModel(card_id=card_id, label_id=label_id))

    def upsert_card_assignee(self, card_id: str, user_id: str, assigned_by: str) -> None:
        with self._write():
            existing = self.db.execute(
                select(CardAssigneeModel).where(CardAssigneeModel.card_id == card_id, CardAssigneeModel.user_id == user_id)
            ).scalar_one_or_none()
            if existing is None:
                self.db.add(CardAssigneeModel(card_id=card_id, user_id=user_id, assigned_by=assigned_by))
            else:
                existing.assigned_by = assigned_by

    def insert_comment(self, card_id: str, user_id: str, content: str) -> str:
        comment_id = str(uuid.uuid4())
        with self._write():
            self.db.add(CommentModel(id=comment_id, card_id=card_id, user_id=user_id, content=content))
        return comment_id

    def insert_notification(self, notification: NotificationRecord) -> str:
        notification_id = str(uuid.uuid4())
        with self._write():
            self.db.add(NotificationModel(id=notification_id, **notification.model_dump()))
        return notification_id

    # Audit

    def append_run(self, run: AutomationRun) -> None:
        with self._write():
            self.db.add(pydantic_to_db_run(run))

    def list_runs(self, rule_id: str) -> List[AutomationRun]:
        stmt = (
            select(AutomationRunModel)
            .where(AutomationRunModel.rule_id == rule_id)
            .order_by(AutomationRunModel.started_at.asc())
        )
        return [db_to_pydantic_run(row) for row in self.db.execute(stmt).scalars()]

    # Rule administration

    def save_rule(self, definition: RuleDefinition) -> str:
        with self._write():
            self.db.add(pydantic_to_db_rule(definition.rule))
            self.db.flush()
            self.db.add_all(pydantic_to_db_condition(c) for c in definition.conditions)
            self.db.add_all(pydantic_to_db_action(a) for a in definition.actions)
        return definition.rule.id

    def get_rule_definition(self, rule_id: str) -> RuleDefinition | None:
        row = self.db.get(AutomationRuleModel, rule_id)
        if row is None:
            return None
        return RuleDefinition(
            rule=db_to_pydantic_rule(row),
            conditions=self.list_conditions([rule_id]),
            actions=self.list_actions([rule_id]),
        )

    def update_rule(self, rule_id: str, changes: Dict[str, Any]) -> AutomationRule | None:
        row = self.db.get(AutomationRuleModel, rule_id)
        if row is None:
            return None
        unknown = set(changes) - _RULE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown rule column: {', '.join(sorted(unknown))}")
        with self._write():
            for key, value in changes.items():
                setattr(row, key, value.value if isinstance(value, TriggerKind) else value)
        self.db.refresh(row)
        return db_to_pydantic_rule(row)

    def replace_conditions(self, rule_id: str, conditions: Sequence[RuleCondition]) -> None:
        with self._write():
            self.db.query(AutomationRuleConditionModel).filter(AutomationRuleConditionModel.rule_id == rule_id).delete()
            self.db.add_all(pydantic_to_db_condition(c) for c in conditions)

    def replace_actions(self, rule_id: str, actions: Sequence[RuleAction]) -> None:
        with self._write():
            self.db.query(AutomationRuleActionModel).filter(AutomationRuleActionModel.rule_id == rule_id).delete()
            self.db.add_all(pydantic_to_db_action(a) for a in actions)

    # Producer reads

    def get_card(self, card_id: str) -> CardRecord | None:
        row = self.db.get(CardModel, card_id)
        return db_to_pydantic_card(row) if row is not None else None

    def get_board_workspace_id(self, board_id: str) -> str | None:
        return self.db.execute(select(BoardModel.workspace_id).where(BoardModel.id == board_id)).scalar_one_or_none()

    def list_card_label_ids(self, card_id: str) -> List[str]:
        stmt = select(CardLabelModel.label_id).where(CardLabelModel.card_id == card_id)
        return list(self.db.execute(stmt).scalars())

    def list_card_assignee_ids(self, card_id: str) -> List[str]:
        stmt = select(CardAssigneeModel.user_id).where(CardAssigneeModel.card_id == card_id)
        return list(self.db.execute(stmt).scalars())

    def list_cards_due_between(self, start: datetime, end: datetime) -> List[CardRecord]:
        stmt = select(CardModel).where(
            CardModel.archived.is_(False),
            CardModel.due_at >= start,
            CardModel.due_at <= end,
        )
        return [db_to_pydantic_card(row) for row in self.db.execute(stmt).scalars()]

    def list_cards_overdue(self, now: datetime) -> List[CardRecord]:
        stmt = select(CardModel).where(CardModel.archived.is_(False), CardModel.due_at < now)
        return [db_to_pydantic_card(row) for row in self.db.execute(stmt).scalars()]
