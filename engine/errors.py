class AutomationError(Exception):
    """Base class for automation engine errors."""


class RuleLoadError(AutomationError):
    """Candidate rules, conditions or actions could not be read. Fatal to the event."""


class AuditWriteError(AutomationError):
    """An automation run could not be recorded."""

    def __init__(self, rule_id: str, message: str) -> None:
        super().__init__(f"Failed to record automation run for rule {rule_id}: {message}")
        self.rule_id = rule_id


class RuleNotFoundError(AutomationError, LookupError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Automation rule not found: {rule_id}")
        self.rule_id = rule_id
