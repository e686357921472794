import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Sequence, Tuple

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


class AutomationStore(ABC):
    """
    Persistence boundary consumed by the automation engine. Implementations
    own durability and connectivity; the engine treats every call as an
    independent read or write and never wraps them in a transaction.
    """

    # Engine reads

    @abstractmethod
    def list_active_rules(self, workspace_id: str, trigger: TriggerKind) -> List[AutomationRule]:
        """Active rules of the workspace for the trigger, in store default order."""
        raise NotImplementedError

    @abstractmethod
    def list_conditions(self, rule_ids: Sequence[str]) -> List[RuleCondition]:
        """Conditions of all given rules, ordered by ascending position."""
        raise NotImplementedError

    @abstractmethod
    def list_actions(self, rule_ids: Sequence[str]) -> List[RuleAction]:
        """Actions of all given rules, ordered by ascending position."""
        raise NotImplementedError

    # Action side effects

    @abstractmethod
    def move_card(self, card_id: str, list_id: str, position: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_card_due_at(self, card_id: str, due_at: datetime) -> None:
        raise NotImplementedError

    @abstractmethod
    def upsert_card_label(self, card_id: str, label_id: str) -> None:
        """Attach a label; attaching it twice leaves a single association."""
        raise NotImplementedError

    @abstractmethod
    def upsert_card_assignee(self, card_id: str, user_id: str, assigned_by: str) -> None:
        """Assign a member; assigning twice leaves a single association."""
        raise NotImplementedError

    @abstractmethod
    def insert_comment(self, card_id: str, user_id: str, content: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def insert_notification(self, notification: NotificationRecord) -> str:
        raise NotImplementedError

    # Audit

    @abstractmethod
    def append_run(self, run: AutomationRun) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_runs(self, rule_id: str) -> List[AutomationRun]:
        raise NotImplementedError

    # Rule administration

    @abstractmethod
    def save_rule(self, definition: RuleDefinition) -> str:
        """Persist a rule with its conditions and actions and return the rule id."""
        raise NotImplementedError

    @abstractmethod
    def get_rule_definition(self, rule_id: str) -> RuleDefinition | None:
        raise NotImplementedError

    @abstractmethod
    def update_rule(self, rule_id: str, changes: Dict[str, Any]) -> AutomationRule | None:
        """Apply column changes to a rule, or return None if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def replace_conditions(self, rule_id: str, conditions: Sequence[RuleCondition]) -> None:
        raise NotImplementedError

    @abstractmethod
    def replace_actions(self, rule_id: str, actions: Sequence[RuleAction]) -> None:
        raise NotImplementedError

    def set_rule_active(self, rule_id: str, is_active: bool) -> AutomationRule | None:
        return self.update_rule(rule_id, {"is_active": is_active})

    # Producer reads

    @abstractmethod
    def get_card(self, card_id: str) -> CardRecord | None:
        raise NotImplementedError

    @abstractmethod
    def get_board_workspace_id(self, board_id: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def list_card_label_ids(self, card_id: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def list_card_assignee_ids(self, card_id: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def list_cards_due_between(self, start: datetime, end: datetime) -> List[CardRecord]:
        """Unarchived cards with start <= due_at <= end."""
        raise NotImplementedError

    @abstractmethod
    def list_cards_overdue(self, now: datetime) -> List[CardRecord]:
        """Unarchived cards with due_at < now."""
        raise NotImplementedError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAutomationStore(AutomationStore):
    """
    Dictionary-backed store for tests and local runs. Card updates against an
    unknown card id touch nothing, the same as an UPDATE matching no rows.
    """

    def __init__(self) -> None:
        self.rules: Dict[str, AutomationRule] = {}
        self.conditions: List[RuleCondition] = []
        self.actions: List[RuleAction] = []
        self.runs: List[AutomationRun] = []
        self.boards: Dict[str, str] = {}
        self.cards: Dict[str, CardRecord] = {}
        self.card_labels: List[Tuple[str, str]] = []
        self.card_assignees: Dict[Tuple[str, str], str] = {}
        self.comments: List[Dict[str, Any]] = []
        self.notifications: List[NotificationRecord] = []

    # Seeding helpers

    def add_board(self, board_id: str, workspace_id: str) -> None:
        self.boards[board_id] = workspace_id

    def add_card(self, card: CardRecord) -> None:
        self.cards[card.id] = card

    # Engine reads

    def list_active_rules(self, workspace_id: str, trigger: TriggerKind) -> List[AutomationRule]:
        return [
            rule
            for rule in self.rules.values()
            if rule.workspace_id == workspace_id and rule.trigger == trigger and rule.is_active
        ]

    def list_conditions(self, rule_ids: Sequence[str]) -> List[RuleCondition]:
        wanted = set(rule_ids)
        return sorted((c for c in self.conditions if c.rule_id in wanted), key=lambda c: c.position)

    def list_actions(self, rule_ids: Sequence[str]) -> List[RuleAction]:
        wanted = set(rule_ids)
        return sorted((a for a in self.actions if a.rule_id in wanted), key=lambda a: a.position)

    # Action side effects

    def move_card(self, card_id: str, list_id: str, position: float) -> None:
        card = self.cards.get(card_id)
        if card is not None:
            self.cards[card_id] = card.model_copy(update={"list_id": list_id, "position": position})

    def set_card_due_at(self, card_id: str, due_at: datetime) -> None:
        card = self.cards.get(card_id)
        if card is not None:
            self.cards[card_id] = card.model_copy(update={"due_at": due_at})

    def upsert_card_label(self, card_id: str, label_id: str) -> None:
        if (card_id, label_id) not in self.card_labels:
            self.card_labels.append((card_id, label_id))

    def upsert_card_assignee(self, card_id: str, user_id: str, assigned_by: str) -> None:
        self.card_assignees[(card_id, user_id)] = assigned_by

    def insert_comment(self, card_id: str, user_id: str, content: str) -> str:
        comment_id = str(uuid.uuid4())
        self.comments.append({"id": comment_id, "card_id": card_id, "user_id": user_id, "content": content})
        return comment_id

    def insert_notification(self, notification: NotificationRecord) -> str:
        self.notifications.append(notification)
        return str(uuid.uuid4())

    # Audit

    def append_run(self, run: AutomationRun) -> None:
        self.runs.append(run)

    def list_runs(self, rule_id: str) -> List[AutomationRun]:
        return [run for run in self.runs if run.rule_id == rule_id]

    # Rule administration

    def save_rule(self, definition: RuleDefinition) -> str:
        rule = definition.rule
        self.rules[rule.id] = rule
        self.replace_conditions(rule.id, definition.conditions)
        self.replace_actions(rule.id, definition.actions)
        return rule.id

    def get_rule_definition(self, rule_id: str) -> RuleDefinition | None:
        rule = self.rules.get(rule_id)
        if rule is None:
            return None
        return RuleDefinition(
            rule=rule,
            conditions=self.list_conditions([rule_id]),
            actions=self.list_actions([rule_id]),
        )

    def update_rule(self, rule_id: str, changes: Dict[str, Any]) -> AutomationRule | None:
        rule = self.rules.get(rule_id)
        if rule is None:
            return None
        updated = rule.model_copy(update={**changes, "updated_at": _utcnow()})
        self.rules[rule_id] = updated
        return updated

    def replace_conditions(self, rule_id: str, conditions: Sequence[RuleCondition]) -> None:
        self.conditions = [c for c in self.conditions if c.rule_id != rule_id] + list(conditions)

    def replace_actions(self, rule_id: str, actions: Sequence[RuleAction]) -> None:
        self.actions = [a for a in self.actions if a.rule_id != rule_id] + list(actions)

    # Producer reads

    def get_card(self, card_id: str) -> CardRecord | None:
        return self.cards.get(card_id)

    def get_board_workspace_id(self, board_id: str) -> str | None:
        return self.boards.get(board_id)

    def list_card_label_ids(self, card_id: str) -> List[str]:
        return [label_id for cid, label_id in self.card_labels if cid == card_id]

    def list_card_assignee_ids(self, card_id: str) -> List[str]:
        return [user_id for (cid, user_id) in self.card_assignees if cid == card_id]

    def _live_cards(self) -> Iterable[CardRecord]:
        return (card for card in self.cards.values() if not card.archived and card.due_at is not None)

    def list_cards_due_between(self, start: datetime, end: datetime) -> List[CardRecord]:
        return [card for card in self._live_cards() if start <= card.due_at <= end]

    def list_cards_overdue(self, now: datetime) -> List[CardRecord]:
        return [card for card in self._live_cards() if card.due_at < now]
