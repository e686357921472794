"""
Entry point for automation: run every candidate rule for one event.

Rules run one after another, and so do the actions inside a rule. There is
no transaction: a rule whose third action fails keeps the effects of its
first two. A failing rule is recorded as ``failed`` and the next rule still
runs. Rules whose conditions do not match leave no audit row.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List

from db import AutomationStore
from models import AutomationEvent, AutomationRun, RuleDefinition, RunStatus

from .actions import execute_action
from .conditions import conditions_match
from .errors import AuditWriteError
from .loader import load_candidate_rules

logger = logging.getLogger("automation.engine")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _record_run(store: AutomationStore, run: AutomationRun) -> AutomationRun:
    try:
        store.append_run(run)
    except Exception as exc:
        logger.error("Could not record %s run for rule %s: %s", run.status.value, run.rule_id, exc)
        raise AuditWriteError(run.rule_id, str(exc)) from exc
    return run


def run_rule(
    store: AutomationStore,
    event: AutomationEvent,
    definition: RuleDefinition,
    clock: Clock = _utcnow,
) -> AutomationRun | None:
    """Attempt one rule. Returns the recorded run, or None if it did not match."""
    rule = definition.rule
    started_at = clock()

    if not conditions_match(event, definition.conditions, started_at):
        logger.debug("Rule %s (%s) skipped: conditions not met for card %s", rule.id, rule.name, event.card.id)
        return None

    try:
        for action in definition.actions:
            execute_action(store, event, action, clock())
    except Exception as exc:
        logger.warning("Rule %s (%s) failed on card %s: %s", rule.id, rule.name, event.card.id, exc)
        run = AutomationRun(
            rule_id=rule.id,
            trigger_source=event.trigger,
            status=RunStatus.FAILED,
            details={"cardId": event.card.id, "message": str(exc) or type(exc).__name__},
            started_at=started_at,
            finished_at=clock(),
        )
        return _record_run(store, run)

    logger.info("Rule %s (%s) ran %d action(s) on card %s", rule.id, rule.name, len(definition.actions), event.card.id)
    run = AutomationRun(
        rule_id=rule.id,
        trigger_source=event.trigger,
        status=RunStatus.SUCCESS,
        details={"cardId": event.card.id},
        started_at=started_at,
        finished_at=clock(),
    )
    return _record_run(store, run)


def run_automation_for_event(
    store: AutomationStore,
    event: AutomationEvent,
    clock: Clock = _utcnow,
) -> List[AutomationRun]:
    """
    Process one event against every candidate rule and return the runs recorded.

    Raises RuleLoadError if candidates cannot be loaded and AuditWriteError if
    a run cannot be recorded; action failures never escape.
    """
    candidates = load_candidate_rules(store, event.workspace_id, event.trigger, event.board_id)
    if not candidates:
        return []

    runs: List[AutomationRun] = []
    for definition in candidates:
        run = run_rule(store, event, definition, clock)
        if run is not None:
            runs.append(run)
    return runs
