"""
SQLAlchemy ORM models for the persistence layer.

Rules own their conditions and actions; condition and action payloads are
stored as JSON since their shape depends on the registered type. Board-side
tables hold only the columns automation actions read or write.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AutomationRuleModel(Base):
    __tablename__ = "automation_rules"

    id = Column(String(36), primary_key=True, default=_uuid)
    workspace_id = Column(String(36), nullable=False, index=True)
    # NULL board_id means the rule applies to every board of the workspace
    board_id = Column(String(36), nullable=True, index=True)
    name = Column(String(120), nullable=False)
    trigger = Column(String(32), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<AutomationRuleModel(id={self.id}, name={self.name}, trigger={self.trigger})>"


class AutomationRuleConditionModel(Base):
    __tablename__ = "automation_rule_conditions"

    id = Column(String(36), primary_key=True, default=_uuid)
    rule_id = Column(String(36), ForeignKey("automation_rules.id", ondelete="CASCADE"), nullable=False, index=True)
    condition_type = Column(String(80), nullable=False)
    # {"priority": "high"}, {"hours": 24}, ...
    condition_payload = Column(JSON, default=dict, nullable=False)
    position = Column(Integer, default=0, nullable=False)


class AutomationRuleActionModel(Base):
    __tablename__ = "automation_rule_actions"

    id = Column(String(36), primary_key=True, default=_uuid)
    rule_id = Column(String(36), ForeignKey("automation_rules.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String(80), nullable=False)
    action_payload = Column(JSON, default=dict, nullable=False)
    position = Column(Integer, default=0, nullable=False)


class AutomationRunModel(Base):
    """Append-only audit row, one per attempted rule per event."""

    __tablename__ = "automation_runs"

    id = Column(String(36), primary_key=True, default=_uuid)
    rule_id = Column(String(36), ForeignKey("automation_rules.id", ondelete="CASCADE"), nullable=False, index=True)
    trigger_source = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False)  # success | failed
    details = Column(JSON, default=dict, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=False)


class BoardModel(Base):
    __tablename__ = "boards"

    id = Column(String(36), primary_key=True, default=_uuid)
    workspace_id = Column(String(36), nullable=False, index=True)
    name = Column(String(120), nullable=False, default="")


class CardModel(Base):
    __tablename__ = "cards"

    id = Column(String(36), primary_key=True, default=_uuid)
    board_id = Column(String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    list_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False, default="")
    priority = Column(String(16), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True, index=True)
    position = Column(Float, default=0, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    created_by = Column(String(36), nullable=True)


class CardLabelModel(Base):
    __tablename__ = "card_labels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(String(36), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    label_id = Column(String(36), nullable=False)

    __table_args__ = (UniqueConstraint("card_id", "label_id", name="uq_card_labels_card_label"),)


class CardAssigneeModel(Base):
    __tablename__ = "card_assignees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(String(36), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    assigned_by = Column(String(36), nullable=True)

    __table_args__ = (UniqueConstraint("card_id", "user_id", name="uq_card_assignees_card_user"),)


class CommentModel(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=_uuid)
    card_id = Column(String(36), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    workspace_id = Column(String(36), nullable=False)
    board_id = Column(String(36), nullable=True)
    card_id = Column(String(36), nullable=True)
    type = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    payload = Column(JSON, default=dict, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
