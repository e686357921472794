from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Type


@dataclass(frozen=True)
class RegistryItem:
    type: str
    description: str


@dataclass
class Registry:
    """Named set of the type keys rule authors may reference."""

    name: str
    items: Dict[str, RegistryItem] = field(default_factory=dict)

    def register(self, type_name: str, description: str) -> None:
        if type_name in self.items:
            raise ValueError(f"{self.name} type already registered: {type_name}")
        self.items[type_name] = RegistryItem(type=type_name, description=description)

    @classmethod
    def from_enum(cls, name: str, kinds: Type[Enum], descriptions: Dict[Enum, str]) -> "Registry":
        missing = [kind.value for kind in kinds if kind not in descriptions]
        if missing:
            raise ValueError(f"{name} registry has no description for: {', '.join(missing)}")
        registry = cls(name=name)
        for kind in kinds:
            registry.register(kind.value, descriptions[kind])
        return registry

    def get(self, type_name: str) -> RegistryItem | None:
        return self.items.get(type_name)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self.items

    def all(self) -> Iterable[RegistryItem]:
        return self.items.values()
