from datetime import timedelta

import pytest
from sqlalchemy import Update

from db.models import AutomationRunModel, BoardModel, CardModel, NotificationModel
from engine import run_automation_for_event
from factories import NOW, make_definition, make_event
from models import RunStatus, TriggerKind


def _seed_board_and_card(db, **card_fields):
    db.add(BoardModel(id="board-1", workspace_id="ws-1", name="Sprint"))
    card = {"id": "card-1", "board_id": "board-1", "list_id": "list-1", "title": "Ship it", "position": 1.0}
    card.update(card_fields)
    db.add(CardModel(**card))
    db.commit()


def test_rule_round_trip(sql_store):
    definition = make_definition(
        "rule-1",
        board_id="board-1",
        conditions=[("list_is", {"listId": "list-1"}), ("card_priority_is", {"priority": "high"})],
        actions=[("add_label", {"labelId": "L1"}), ("notify", {"userId": "u1"})],
    )
    sql_store.save_rule(definition)

    loaded = sql_store.get_rule_definition("rule-1")

    assert loaded.rule.board_id == "board-1"
    assert loaded.rule.trigger is TriggerKind.CARD_MOVED
    assert [c.condition_type for c in loaded.conditions] == ["list_is", "card_priority_is"]
    assert [a.payload for a in loaded.actions] == [{"labelId": "L1"}, {"userId": "u1"}]
    assert sql_store.get_rule_definition("missing") is None


def test_list_active_rules_filters_trigger_and_flag(sql_store):
    sql_store.save_rule(make_definition("active", actions=[("notify", {"userId": "u1"})]))
    sql_store.save_rule(make_definition("inactive", is_active=False, actions=[("notify", {"userId": "u1"})]))
    sql_store.save_rule(
        make_definition("overdue", trigger=TriggerKind.OVERDUE, actions=[("notify", {"userId": "u1"})])
    )

    rules = sql_store.list_active_rules("ws-1", TriggerKind.CARD_MOVED)

    assert [rule.id for rule in rules] == ["active"]


def test_actions_come_back_in_position_order(sql_store):
    definition = make_definition(actions=[("add_label", {"labelId": "L1"}), ("notify", {"userId": "u1"})])
    definition.actions[0].position = 5
    sql_store.save_rule(definition)

    assert [a.action for a in sql_store.list_actions(["rule-1"])] == ["notify", "add_label"]
    assert sql_store.list_actions([]) == []


def test_label_and_assignee_upserts_are_idempotent(sql_store, db_session):
    _seed_board_and_card(db_session)

    for _ in range(2):
        sql_store.upsert_card_label("card-1", "L1")
        sql_store.upsert_card_assignee("card-1", "user-7", assigned_by="user-1")

    assert sql_store.list_card_label_ids("card-1") == ["L1"]
    assert sql_store.list_card_assignee_ids("card-1") == ["user-7"]


def test_engine_against_sql_store(sql_store, db_session, fixed_clock):
    _seed_board_and_card(db_session)
    sql_store.save_rule(
        make_definition(
            actions=[
                ("move_card", {"listId": "list-done"}),
                ("set_due_date", {"offsetHours": 2}),
                ("post_comment", {"content": "Done"}),
                ("notify", {"userId": "u1"}),
            ]
        )
    )

    runs = run_automation_for_event(sql_store, make_event(), clock=fixed_clock)

    assert [run.status for run in runs] == [RunStatus.SUCCESS]
    card = sql_store.get_card("card-1")
    assert card.list_id == "list-done"
    assert card.position == NOW.timestamp() * 1000
    assert card.due_at == NOW + timedelta(hours=2)
    notification = db_session.query(NotificationModel).one()
    assert notification.user_id == "u1"
    assert notification.workspace_id == "ws-1"
    stored_runs = sql_store.list_runs("rule-1")
    assert len(stored_runs) == 1
    assert stored_runs[0].details == {"cardId": "card-1"}
    assert stored_runs[0].started_at == NOW


def test_failed_write_is_rolled_back_and_session_stays_usable(sql_store, db_session, monkeypatch):
    _seed_board_and_card(db_session)
    sql_store.save_rule(make_definition("rule-a", actions=[("post_comment", {"content": "x"})]))
    sql_store.save_rule(make_definition("rule-b", actions=[("add_label", {"labelId": "L1"})]))

    def broken_comment(card_id, user_id, content):
        raise RuntimeError("comments table is read-only")

    monkeypatch.setattr(sql_store, "insert_comment", broken_comment)

    runs = run_automation_for_event(sql_store, make_event())

    assert {run.rule_id: run.status for run in runs} == {"rule-a": RunStatus.FAILED, "rule-b": RunStatus.SUCCESS}
    assert db_session.query(AutomationRunModel).count() == 2
    assert sql_store.list_card_label_ids("card-1") == ["L1"]


def test_due_queries_skip_archived_cards(sql_store, db_session):
    db_session.add(BoardModel(id="board-1", workspace_id="ws-1"))
    db_session.add_all(
        [
            CardModel(id="soon", board_id="board-1", list_id="l", due_at=NOW + timedelta(hours=3)),
            CardModel(id="late", board_id="board-1", list_id="l", due_at=NOW - timedelta(hours=3)),
            CardModel(id="archived", board_id="board-1", list_id="l", due_at=NOW + timedelta(hours=1), archived=True),
            CardModel(id="far", board_id="board-1", list_id="l", due_at=NOW + timedelta(days=3)),
            CardModel(id="undated", board_id="board-1", list_id="l"),
        ]
    )
    db_session.commit()

    assert [c.id for c in sql_store.list_cards_due_between(NOW, NOW + timedelta(hours=24))] == ["soon"]
    assert [c.id for c in sql_store.list_cards_overdue(NOW)] == ["late"]
    assert sql_store.get_board_workspace_id("board-1") == "ws-1"
    assert sql_store.get_board_workspace_id("nope") is None


def test_update_rule_rejects_unknown_columns(sql_store):
    sql_store.save_rule(make_definition(actions=[("notify", {"userId": "u1"})]))
    with pytest.raises(ValueError):
        sql_store.update_rule("rule-1", {"workspace_id": "ws-2"})


def test_statement_failure_rolls_back_before_audit(sql_store, db_session, monkeypatch):
    # Mimic PostgreSQL: a failed statement leaves the transaction unusable until rollback
    _seed_board_and_card(db_session)
    sql_store.save_rule(make_definition("rule-a", actions=[("move_card", {"listId": "list-" + "x" * 40})]))
    sql_store.save_rule(make_definition("rule-b", actions=[("add_label", {"labelId": "L1"})]))
    state = {"aborted": False}
    real_execute, real_add, real_rollback = db_session.execute, db_session.add, db_session.rollback

    def execute(statement, *args, **kwargs):
        if state["aborted"]:
            raise RuntimeError("current transaction is aborted")
        if isinstance(statement, Update):
            state["aborted"] = True
            raise RuntimeError("value too long for type character varying(36)")
        return real_execute(statement, *args, **kwargs)

    def add(instance, *args, **kwargs):
        if state["aborted"]:
            raise RuntimeError("current transaction is aborted")
        return real_add(instance, *args, **kwargs)

    def rollback():
        state["aborted"] = False
        real_rollback()

    monkeypatch.setattr(db_session, "execute", execute)
    monkeypatch.setattr(db_session, "add", add)
    monkeypatch.setattr(db_session, "rollback", rollback)

    runs = run_automation_for_event(sql_store, make_event())

    assert {run.rule_id: run.status for run in runs} == {"rule-a": RunStatus.FAILED, "rule-b": RunStatus.SUCCESS}
    failed = next(run for run in runs if run.rule_id == "rule-a")
    assert "too long" in failed.details["message"]
    assert sql_store.get_card("card-1").list_id == "list-1"
    assert sql_store.list_card_label_ids("card-1") == ["L1"]
