import argparse
import sys
from typing import List

from admin import create_rule, list_rule_runs, toggle_rule
from config import settings
from db import AutomationStore, SessionContext, SqlAlchemyAutomationStore, create_schema
from logging_config import setup_logging
from producers import scan_due_cards
from validations import RuleDefinitionParser


def orchestrate_rule_definition(rule_json: str, store: AutomationStore, created_by: str | None = None) -> str:
    """
    Ingest an administrator-authored rule:
    1. Parse the JSON document.
    2. Validate against the rule schema and registries.
    3. Save the rule with its conditions and actions.

    Returns the saved rule id.
    """
    payload = RuleDefinitionParser().parse(rule_json)
    return create_rule(store, payload, created_by=created_by).rule.id


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="board-automation", description="Board automation rule engine")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-rule", help="Create a rule from a JSON file ('-' reads stdin)")
    create.add_argument("path")
    create.add_argument("--created-by", default=None)

    toggle = sub.add_parser("toggle", help="Enable or disable a rule")
    toggle.add_argument("rule_id")
    toggle.add_argument("state", choices=["on", "off"])

    sub.add_parser("scan-due", help="Run due_soon/overdue automation for cards near or past their due date")

    runs = sub.add_parser("runs", help="Show the audit trail of a rule")
    runs.add_argument("rule_id")
    return parser


def main(argv: List[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    setup_logging(settings.log_level, settings.log_file)
    create_schema()

    with SessionContext() as db:
        store = SqlAlchemyAutomationStore(db)

        if args.command == "create-rule":
            if args.path == "-":
                rule_json = sys.stdin.read()
            else:
                with open(args.path, encoding="utf-8") as handle:
                    rule_json = handle.read()
            rule_id = orchestrate_rule_definition(rule_json, store, created_by=args.created_by)
            print(f"Automation rule saved with id: {rule_id}")
        elif args.command == "toggle":
            rule = toggle_rule(store, args.rule_id, args.state == "on")
            print(f"Rule {rule.id} is now {'active' if rule.is_active else 'inactive'}")
        elif args.command == "scan-due":
            summary = scan_due_cards(store)
            print(f"processed={summary.processed} due_soon={summary.due_soon} overdue={summary.overdue}")
        elif args.command == "runs":
            for run in list_rule_runs(store, args.rule_id):
                print(f"{run.started_at.isoformat()} {run.status.value} {run.trigger_source.value} {run.details}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
