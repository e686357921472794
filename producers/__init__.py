from .card_events import build_card_event, build_card_event_by_id, snapshot_card
from .due_date_scanner import ScanSummary, scan_due_cards

__all__ = ["ScanSummary", "build_card_event", "build_card_event_by_id", "scan_due_cards", "snapshot_card"]
