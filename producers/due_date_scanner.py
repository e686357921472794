"""
Periodic due-date scan.

Finds unarchived cards due within the due-soon window and cards already past
due, and runs automation for each with a ``due_soon`` or ``overdue`` event.
The card creator is the acting user; cards without one act as the
configured system actor.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from config import settings
from db import AutomationStore
from engine import run_automation_for_event
from models import TriggerKind

from .card_events import build_card_event

logger = logging.getLogger("automation.scanner")


@dataclass
class ScanSummary:
    processed: int = 0
    due_soon: int = 0
    overdue: int = 0
    skipped: int = 0
    runs: int = 0


def scan_due_cards(
    store: AutomationStore,
    now: datetime | None = None,
    window_hours: float | None = None,
) -> ScanSummary:
    now = now or datetime.now(timezone.utc)
    window = timedelta(hours=window_hours if window_hours is not None else settings.due_soon_window_hours)

    due_soon_cards = store.list_cards_due_between(now, now + window)
    overdue_cards = store.list_cards_overdue(now)
    summary = ScanSummary(due_soon=len(due_soon_cards), overdue=len(overdue_cards))

    for trigger, cards in ((TriggerKind.DUE_SOON, due_soon_cards), (TriggerKind.OVERDUE, overdue_cards)):
        for card in cards:
            event = build_card_event(store, trigger, card, actor_id=card.created_by or settings.system_actor_id)
            if event is None:
                logger.warning("Skipping card %s: board %s not found", card.id, card.board_id)
                summary.skipped += 1
                continue
            summary.runs += len(run_automation_for_event(store, event))
            summary.processed += 1

    logger.info(
        "Due-date scan: %d due soon, %d overdue, %d processed, %d skipped, %d run(s)",
        summary.due_soon,
        summary.overdue,
        summary.processed,
        summary.skipped,
        summary.runs,
    )
    return summary
