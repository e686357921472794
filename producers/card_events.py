from typing import List

from db import AutomationStore
from models import AutomationEvent, CardRecord, CardSnapshot, TriggerKind


def snapshot_card(card: CardRecord, label_ids: List[str], assignee_ids: List[str]) -> CardSnapshot:
    return CardSnapshot(
        id=card.id,
        board_id=card.board_id,
        list_id=card.list_id,
        priority=card.priority,
        due_at=card.due_at,
        label_ids=label_ids,
        assignee_ids=assignee_ids,
    )


def build_card_event(
    store: AutomationStore,
    trigger: TriggerKind,
    card: CardRecord,
    actor_id: str,
) -> AutomationEvent | None:
    """
    Build the event a producer hands to the engine, capturing the card's
    current labels and assignees. Returns None when the card's board is
    unknown, since the rule scope cannot be resolved without a workspace.
    """
    workspace_id = store.get_board_workspace_id(card.board_id)
    if workspace_id is None:
        return None
    return AutomationEvent(
        trigger=trigger,
        workspace_id=workspace_id,
        board_id=card.board_id,
        actor_id=actor_id,
        card=snapshot_card(
            card,
            label_ids=store.list_card_label_ids(card.id),
            assignee_ids=store.list_card_assignee_ids(card.id),
        ),
    )


def build_card_event_by_id(
    store: AutomationStore,
    trigger: TriggerKind,
    card_id: str,
    actor_id: str,
) -> AutomationEvent | None:
    card = store.get_card(card_id)
    if card is None:
        return None
    return build_card_event(store, trigger, card, actor_id)
