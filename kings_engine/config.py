"""Game configuration and card variants."""

from __future__ import annotations

from dataclasses import dataclass

from kings_engine.cards import CardName

C = CardName

# Fragments of Nersetti: the base deck with Immortal and Warden.
NERSETTI_DECK: tuple[CardName, ...] = (
    C.QUEEN, C.PRINCESS, C.FOOL,
    C.SENTRY, C.WARLORD, C.MYSTIC,
    C.OATHBOUND, C.OATHBOUND,
    C.SOLDIER, C.SOLDIER,
    C.INQUISITOR, C.INQUISITOR,
    C.ELDER, C.ELDER,
    C.IMMORTAL, C.WARDEN,
)

# Adds the reaction cards and the remaining base characters.
FULL_COURT_DECK: tuple[CardName, ...] = NERSETTI_DECK + (
    C.KINGS_HAND, C.ASSASSIN, C.ZEALOT, C.EXECUTIONER,
)

BASE_ARMY: tuple[CardName, ...] = (C.ELDER, C.INQUISITOR, C.SOLDIER, C.JUDGE, C.OATHBOUND)

SIGNATURE_POOL: tuple[CardName, ...] = (
    C.FLAG_BEARER, C.STRANGER, C.AEGIS, C.NAKTURN,
    C.ANCESTOR, C.INFORMANT, C.LOCKSHIFT, C.CONSPIRACIST, C.EXILE,
)


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Tunable rules for a match.

    Attributes:
        variant: Name of the deck variant.
        base_deck: Cards shuffled into the deck each round.
        base_army: Army every player starts with.
        signature_pool: Cards players pick their signature cards from.
        hand_size: Cards dealt to each player per round.
        signature_card_count: How many signature cards each player picks.
        points_to_win: Game ends when a player reaches this many points.
        round_points_min: Lower clamp for points awarded per round.
        round_points_max: Upper clamp for points awarded per round.
        check_invariants: Verify card conservation after every action.
    """

    variant: str = "fragments_of_nersetti"
    base_deck: tuple[CardName, ...] = NERSETTI_DECK
    base_army: tuple[CardName, ...] = BASE_ARMY
    signature_pool: tuple[CardName, ...] = SIGNATURE_POOL
    hand_size: int = 9
    signature_card_count: int = 3
    points_to_win: int = 7
    round_points_min: int = 1
    round_points_max: int = 3
    check_invariants: bool = True


FRAGMENTS_OF_NERSETTI = GameConfig()
FULL_COURT = GameConfig(variant="full_court", base_deck=FULL_COURT_DECK)

VARIANTS: dict[str, GameConfig] = {
    FRAGMENTS_OF_NERSETTI.variant: FRAGMENTS_OF_NERSETTI,
    FULL_COURT.variant: FULL_COURT,
}


def get_variant(name: str) -> GameConfig:
    """Look up a named variant."""
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown variant: {name}") from None
