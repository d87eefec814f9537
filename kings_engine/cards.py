"""Card names and Card value objects for Imposter Kings."""

from __future__ import annotations

from enum import IntEnum, auto
from functools import total_ordering
from typing import ClassVar

# Flavors at or above this mark army cards; the hundreds digit is the owner + 1.
ARMY_FLAVOR_BASE = 100


class CardName(IntEnum):
    """Every card the engine knows, in registry order."""

    FOOL = auto()
    FLAG_BEARER = auto()
    ASSASSIN = auto()
    STRANGER = auto()
    ELDER = auto()
    ZEALOT = auto()
    AEGIS = auto()
    INQUISITOR = auto()
    ANCESTOR = auto()
    INFORMANT = auto()
    NAKTURN = auto()
    EXECUTIONER = auto()
    SOLDIER = auto()
    JUDGE = auto()
    LOCKSHIFT = auto()
    IMMORTAL = auto()
    OATHBOUND = auto()
    CONSPIRACIST = auto()
    MYSTIC = auto()
    WARLORD = auto()
    WARDEN = auto()
    SENTRY = auto()
    KINGS_HAND = auto()
    EXILE = auto()
    PRINCESS = auto()
    QUEEN = auto()

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        special = {
            CardName.FLAG_BEARER: "Flag Bearer",
            CardName.KINGS_HAND: "King's Hand",
        }
        return special.get(self, self.name.title())

    @property
    def key(self) -> str:
        """Wire identifier, e.g. ``KingsHand``."""
        return "".join(part.title() for part in self.name.split("_"))

    @classmethod
    def from_key(cls, key: str) -> CardName:
        for name in cls:
            if name.key == key:
                return name
        raise KeyError(key)


@total_ordering
class Card:
    """A physical card: a name plus a flavor.

    Flavors make every card in a game distinct. Deck copies use small
    flavors (0, 1, ...); player ``p``'s army cards use ``100 * (p + 1) + n``.
    """

    __slots__ = ("_name", "_flavor")

    _instances: ClassVar[dict[tuple[CardName, int], Card]] = {}

    def __new__(cls, name: CardName, flavor: int = 0) -> Card:
        key = (name, flavor)
        if key not in cls._instances:
            instance = object.__new__(cls)
            instance._name = name
            instance._flavor = flavor
            cls._instances[key] = instance
        return cls._instances[key]

    @classmethod
    def existing(cls, name: CardName, flavor: int = 0) -> Card | None:
        """The interned card for (name, flavor), or None if none was ever built."""
        return cls._instances.get((name, flavor))

    @property
    def name(self) -> CardName:
        return self._name

    @property
    def flavor(self) -> int:
        return self._flavor

    @property
    def army_owner(self) -> int | None:
        """Index of the player whose army this card belongs to, if any."""
        if self._flavor < ARMY_FLAVOR_BASE:
            return None
        return self._flavor // ARMY_FLAVOR_BASE - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self._name == other._name and self._flavor == other._flavor

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return (self._name, self._flavor) < (other._name, other._flavor)

    def __hash__(self) -> int:
        return hash((self._name, self._flavor))

    def __reduce__(self) -> tuple:
        return (Card, (self._name, self._flavor))

    def __repr__(self) -> str:
        return f"Card({self._name.name}, {self._flavor})"

    def __str__(self) -> str:
        return self._name.display_name


def build_cards(names: tuple[CardName, ...], flavor_base: int = 0) -> tuple[Card, ...]:
    """Give each name a distinct flavor, numbering copies of a name from ``flavor_base``."""
    seen: dict[CardName, int] = {}
    cards = []
    for name in names:
        copy = seen.get(name, 0)
        seen[name] = copy + 1
        cards.append(Card(name, flavor_base + copy))
    return tuple(cards)


def army_flavor_base(player: int) -> int:
    return ARMY_FLAVOR_BASE * (player + 1)
