from .automation_validator import (
    UnknownRegistryTypeError,
    build_actions,
    build_conditions,
    parse_and_validate_patch,
    parse_and_validate_rule,
)
from .parser import RuleDefinitionParser

__all__ = [
    "RuleDefinitionParser",
    "UnknownRegistryTypeError",
    "build_actions",
    "build_conditions",
    "parse_and_validate_patch",
    "parse_and_validate_rule",
]
