from .rules import create_rule, list_rule_runs, toggle_rule, update_rule

__all__ = ["create_rule", "list_rule_runs", "toggle_rule", "update_rule"]
