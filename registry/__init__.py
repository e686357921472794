from .defaults import ACTION_DESCRIPTIONS, CONDITION_DESCRIPTIONS, TRIGGER_DESCRIPTIONS, create_default_registries
from .registry import Registry, RegistryItem

__all__ = [
    "ACTION_DESCRIPTIONS",
    "CONDITION_DESCRIPTIONS",
    "TRIGGER_DESCRIPTIONS",
    "Registry",
    "RegistryItem",
    "create_default_registries",
]
