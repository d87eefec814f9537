"""Card registry: lookup of card modules by name."""

from __future__ import annotations

from typing import Iterator

from kings_engine.abilities.base import CardModule, Keyword
from kings_engine.cards import CardName


class CardRegistry:
    """Read-only (after construction) mapping of card names to modules.

    Iteration follows registration order, which is also the order reaction
    prompts are issued in.
    """

    def __init__(self, modules: list[CardModule] | None = None):
        self._modules: dict[CardName, CardModule] = {}
        for module in modules or []:
            self.register(module)

    def register(self, module: CardModule) -> None:
        if module.name in self._modules:
            raise ValueError(f"Card already registered: {module.name!r}")
        self._modules[module.name] = module

    def get(self, name: CardName) -> CardModule:
        try:
            return self._modules[name]
        except KeyError:
            raise KeyError(f"No card module for {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[CardModule]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def base_value(self, name: CardName) -> int:
        return self.get(name).base_value

    def has_keyword(self, name: CardName, keyword: Keyword) -> bool:
        return self.get(name).has(keyword)

    def reaction_modules(self) -> list[CardModule]:
        """Modules with a reaction, in registry order."""
        return [m for m in self._modules.values() if m.reaction is not None]


def create_default_registry() -> CardRegistry:
    """Build the registry with every base and signature card."""
    from kings_engine.abilities.base_set import BASE_MODULES
    from kings_engine.abilities.signature_set import SIGNATURE_MODULES

    modules = sorted(BASE_MODULES + SIGNATURE_MODULES, key=lambda m: m.name)
    return CardRegistry(modules)
