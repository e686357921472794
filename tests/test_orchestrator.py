from datetime import timedelta

import pytest

from engine import AuditWriteError, RuleLoadError, run_automation_for_event
from factories import NOW, FailingStore, make_definition, make_event
from models import CardRecord, RunStatus, TriggerKind


def _seed_card(store, **fields):
    store.add_board("board-1", "ws-1")
    card = {"id": "card-1", "board_id": "board-1", "list_id": "list-1"}
    card.update(fields)
    store.add_card(CardRecord(**card))


def test_no_candidate_rules_is_a_noop(store, fixed_clock):
    assert run_automation_for_event(store, make_event(), clock=fixed_clock) == []
    assert store.runs == []


def test_rule_without_conditions_always_runs(store, fixed_clock):
    _seed_card(store)
    store.save_rule(make_definition(actions=[("add_label", {"labelId": "L1"})]))

    runs = run_automation_for_event(store, make_event(), clock=fixed_clock)

    assert [run.status for run in runs] == [RunStatus.SUCCESS]
    assert store.list_card_label_ids("card-1") == ["L1"]


def test_due_soon_notification_scenario(store, fixed_clock):
    store.save_rule(
        make_definition(
            trigger=TriggerKind.DUE_SOON,
            conditions=[("due_within_hours", {"hours": 24})],
            actions=[("notify", {"userId": "u1"})],
        )
    )
    event = make_event(TriggerKind.DUE_SOON, due_at=NOW + timedelta(hours=10))

    runs = run_automation_for_event(store, event, clock=fixed_clock)

    assert len(runs) == 1
    assert store.runs == runs
    run = runs[0]
    assert run.status is RunStatus.SUCCESS
    assert run.rule_id == "rule-1"
    assert run.trigger_source is TriggerKind.DUE_SOON
    assert run.details == {"cardId": "card-1"}
    assert run.started_at == NOW
    assert run.finished_at == NOW
    assert [n.user_id for n in store.notifications] == ["u1"]


def test_non_matching_rule_leaves_no_trace(store, fixed_clock):
    _seed_card(store)
    store.save_rule(
        make_definition(
            trigger=TriggerKind.LABEL_ADDED,
            conditions=[("label_is", {"labelId": "L1"})],
            actions=[("add_label", {"labelId": "L3"}), ("notify", {"userId": "u1"})],
        )
    )
    event = make_event(TriggerKind.LABEL_ADDED, label_ids=["L2"])

    assert run_automation_for_event(store, event, clock=fixed_clock) == []
    assert store.runs == []
    assert store.card_labels == []
    assert store.notifications == []


def test_move_without_list_still_records_success(store, fixed_clock):
    _seed_card(store)
    store.save_rule(make_definition(actions=[("move_card", {})]))

    runs = run_automation_for_event(store, make_event(), clock=fixed_clock)

    assert [run.status for run in runs] == [RunStatus.SUCCESS]
    assert store.get_card("card-1").list_id == "list-1"


def test_failing_action_stops_rest_of_rule():
    store = FailingStore(fail_on={"insert_comment"})
    store.save_rule(
        make_definition(
            actions=[
                ("add_label", {"labelId": "L1"}),
                ("post_comment", {"content": "boom"}),
                ("notify", {"userId": "u1"}),
            ]
        )
    )

    runs = run_automation_for_event(store, make_event())

    assert store.calls == ["list_active_rules", "list_actions", "upsert_card_label", "insert_comment", "append_run"]
    assert store.notifications == []
    # Earlier actions are not rolled back
    assert store.card_labels == [("card-1", "L1")]
    assert len(store.runs) == 1
    run = store.runs[0]
    assert runs == [run]
    assert run.rule_id == "rule-1"
    assert run.status is RunStatus.FAILED
    assert run.details == {"cardId": "card-1", "message": "insert_comment write failed"}


def test_failed_rule_does_not_block_other_rules():
    store = FailingStore(fail_on={"insert_comment"})
    store.save_rule(make_definition("rule-a", actions=[("post_comment", {"content": "fails"})]))
    store.save_rule(make_definition("rule-b", actions=[("notify", {"userId": "u1"})]))

    runs = run_automation_for_event(store, make_event())

    assert {run.rule_id: run.status for run in runs} == {
        "rule-a": RunStatus.FAILED,
        "rule-b": RunStatus.SUCCESS,
    }
    assert [n.user_id for n in store.notifications] == ["u1"]


def test_actions_run_in_position_order(store, fixed_clock):
    _seed_card(store)
    store.save_rule(
        make_definition(
            actions=[
                ("move_card", {"listId": "list-done", "position": 1}),
                ("post_comment", {"content": "first"}),
                ("post_comment", {"content": "second"}),
            ]
        )
    )

    run_automation_for_event(store, make_event(), clock=fixed_clock)

    assert [c["content"] for c in store.comments] == ["first", "second"]
    assert store.get_card("card-1").list_id == "list-done"


def test_rerunning_event_does_not_duplicate_associations(store, fixed_clock):
    _seed_card(store)
    store.save_rule(
        make_definition(actions=[("add_label", {"labelId": "L1"}), ("assign_member", {"userId": "user-7"})])
    )
    event = make_event()

    run_automation_for_event(store, event, clock=fixed_clock)
    run_automation_for_event(store, event, clock=fixed_clock)

    assert store.list_card_label_ids("card-1") == ["L1"]
    assert store.list_card_assignee_ids("card-1") == ["user-7"]
    assert len(store.runs) == 2


def test_board_scoped_rule_ignores_other_boards(store, fixed_clock):
    store.save_rule(make_definition(board_id="board-x", actions=[("notify", {"userId": "u1"})]))

    assert run_automation_for_event(store, make_event(board_id="board-y"), clock=fixed_clock) == []
    assert len(run_automation_for_event(store, make_event(board_id="board-x"), clock=fixed_clock)) == 1


def test_disabled_rule_does_not_run(store, fixed_clock):
    store.save_rule(make_definition(is_active=False, actions=[("notify", {"userId": "u1"})]))

    assert run_automation_for_event(store, make_event(), clock=fixed_clock) == []


def test_load_errors_propagate():
    store = FailingStore(fail_on={"list_active_rules"})
    with pytest.raises(RuleLoadError):
        run_automation_for_event(store, make_event())


def test_audit_write_failure_propagates_after_actions_applied():
    store = FailingStore(fail_on={"append_run"})
    store.save_rule(make_definition("rule-a", actions=[("notify", {"userId": "u1"})]))
    store.save_rule(make_definition("rule-b", actions=[("notify", {"userId": "u2"})]))

    with pytest.raises(AuditWriteError) as excinfo:
        run_automation_for_event(store, make_event())

    assert excinfo.value.rule_id == "rule-a"
    assert [n.user_id for n in store.notifications] == ["u1"]


def test_extreme_due_threshold_does_not_abort_event(store, fixed_clock):
    store.save_rule(
        make_definition(
            "rule-a",
            conditions=[("due_within_hours", {"hours": 1e12})],
            actions=[("notify", {"userId": "u1"})],
        )
    )
    store.save_rule(
        make_definition(
            "rule-b",
            conditions=[("due_within_hours", {"hours": float("nan")})],
            actions=[("notify", {"userId": "u2"})],
        )
    )
    store.save_rule(make_definition("rule-c", actions=[("notify", {"userId": "u3"})]))
    event = make_event(due_at=NOW + timedelta(hours=1))

    runs = run_automation_for_event(store, event, clock=fixed_clock)

    assert [run.rule_id for run in runs] == ["rule-a", "rule-c"]
    assert [n.user_id for n in store.notifications] == ["u1", "u3"]
