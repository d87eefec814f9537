"""Tests for effective values and play legality."""

import pytest

from kings_engine.abilities.registry import create_default_registry
from kings_engine.cards import Card, CardName
from kings_engine.config import GameConfig
from kings_engine.rules import (
    Location,
    ValueContext,
    can_play_from_hand,
    court_value,
    effective_value,
    held_value,
    is_muted,
    is_royalty,
    is_steadfast,
    names_in_game,
    throne_value,
)
from kings_engine.state import CourtEntry, GamePhase, GameState, PlayerState

C = CardName


@pytest.fixture
def registry():
    return create_default_registry()


def _state(hand=(), court=(), king_flipped=False, **changes) -> GameState:
    return GameState(
        players=(
            PlayerState(name="A", hand=tuple(hand), king_flipped=king_flipped),
            PlayerState(name="B"),
        ),
        config=GameConfig(check_invariants=False),
        phase=GamePhase.PLAY,
        court=tuple(court),
        **changes,
    )


class TestEffectiveValue:
    def test_base_value(self, registry):
        assert effective_value(registry, Card(C.SOLDIER), ValueContext(Location.HAND)) == 5

    def test_disgrace_overrides_everything(self, registry):
        context = ValueContext(Location.COURT, disgraced=True, bonus=2)
        assert effective_value(registry, Card(C.QUEEN), context) == 1

    def test_muted_value(self, registry):
        context = ValueContext(Location.HAND, muted_values=frozenset({9}))
        assert effective_value(registry, Card(C.QUEEN), context) == 3

    def test_steadfast_ignores_mute(self, registry):
        context = ValueContext(Location.COURT, muted_values=frozenset({6}), steadfast=True)
        assert effective_value(registry, Card(C.CONSPIRACIST), context) == 6

    def test_warlord_is_eight_in_hand(self, registry):
        assert effective_value(registry, Card(C.WARLORD), ValueContext(Location.HAND)) == 8
        assert effective_value(registry, Card(C.WARLORD), ValueContext(Location.COURT)) == 7

    def test_immortal_is_five_in_court(self, registry):
        assert effective_value(registry, Card(C.IMMORTAL), ValueContext(Location.COURT)) == 5
        assert effective_value(registry, Card(C.IMMORTAL), ValueContext(Location.HAND)) == 6

    def test_immortal_modifiers(self, registry):
        context = ValueContext(Location.COURT, immortal_active=True)
        assert effective_value(registry, Card(C.WARLORD), context) == 8
        assert effective_value(registry, Card(C.QUEEN), context) == 8
        assert effective_value(registry, Card(C.ELDER), context) == 2

    def test_ancestor_raises_elder(self, registry):
        context = ValueContext(Location.COURT, ancestor_in_court=True)
        assert effective_value(registry, Card(C.ELDER), context) == 6

    def test_soldier_bonus(self, registry):
        context = ValueContext(Location.COURT, bonus=2)
        assert effective_value(registry, Card(C.SOLDIER), context) == 7

    def test_conspiracy_only_off_court(self, registry):
        assert effective_value(registry, Card(C.SOLDIER), ValueContext(Location.HAND, conspiracy=True)) == 6
        assert effective_value(registry, Card(C.SOLDIER), ValueContext(Location.COURT, conspiracy=True)) == 5

    def test_nakturn_is_two_in_court(self, registry):
        assert effective_value(registry, Card(C.NAKTURN, 100), ValueContext(Location.COURT)) == 2
        assert effective_value(registry, Card(C.NAKTURN, 100), ValueContext(Location.HAND)) == 4

    def test_conspiracist_weaker_on_throne(self, registry):
        card = Card(C.CONSPIRACIST, 100)
        assert effective_value(registry, card, ValueContext(Location.COURT, on_throne=True)) == 5
        assert effective_value(registry, card, ValueContext(Location.COURT)) == 6

    def test_exile_weakened_by_high_court_cards(self, registry):
        card = Card(C.EXILE, 100)
        context = ValueContext(Location.COURT, on_throne=True, high_court_cards=2)
        assert effective_value(registry, card, context) == 6

    def test_value_never_below_one(self, registry):
        card = Card(C.EXILE, 100)
        context = ValueContext(Location.COURT, on_throne=True, high_court_cards=9)
        assert effective_value(registry, card, context) == 1


class TestCourtValues:
    def test_empty_court_throne_is_zero(self, registry):
        assert throne_value(_state(), registry) == 0

    def test_disgraced_throne_is_one(self, registry):
        state = _state(court=[
            CourtEntry(Card(C.SOLDIER), owner=1),
            CourtEntry(Card(C.JUDGE), owner=0, disgraced=True),
        ])
        assert throne_value(state, registry) == 1
        assert court_value(state, registry, 0) == 5

    def test_immortal_in_court_affects_hand(self, registry):
        state = _state(hand=[Card(C.WARLORD)], court=[CourtEntry(Card(C.IMMORTAL), owner=1)])
        assert held_value(state, registry, 0, Card(C.WARLORD)) == 9
        assert is_royalty(state, registry, C.WARLORD)

    def test_disgraced_immortal_is_inactive(self, registry):
        state = _state(court=[CourtEntry(Card(C.IMMORTAL), owner=1, disgraced=True)])
        assert not is_royalty(state, registry, C.WARLORD)

    def test_ancestor_makes_elder_steadfast(self, registry):
        elder = CourtEntry(Card(C.ELDER), owner=1)
        state = _state(court=[elder, CourtEntry(Card(C.ANCESTOR, 100), owner=0)])
        assert is_steadfast(state, registry, elder)
        assert court_value(state, registry, 0) == 6

    def test_exile_mutes_all_but_steadfast(self, registry):
        state = _state(exile_owner=1)
        assert is_muted(state, registry, Card(C.SOLDIER))
        assert not is_muted(state, registry, Card(C.CONSPIRACIST, 100))

    def test_names_in_game(self, registry):
        names = names_in_game(_state())
        assert C.QUEEN in names
        assert C.JUDGE in names
        assert C.KINGS_HAND not in names
        assert names == sorted(names)


class TestCanPlayFromHand:
    def test_fool_on_disgraced_throne(self, registry):
        state = _state(
            hand=[Card(C.FOOL)],
            court=[
                CourtEntry(Card(C.SOLDIER), owner=1),
                CourtEntry(Card(C.JUDGE), owner=0, disgraced=True),
            ],
        )
        assert can_play_from_hand(state, registry, 0, Card(C.FOOL))

    def test_value_check(self, registry):
        state = _state(hand=[Card(C.SOLDIER), Card(C.JUDGE)], court=[CourtEntry(Card(C.SENTRY), owner=1)])
        assert not can_play_from_hand(state, registry, 0, Card(C.SOLDIER))
        assert can_play_from_hand(state, registry, 0, Card(C.SOLDIER), any_value=True)

    def test_equal_value_is_enough(self, registry):
        state = _state(hand=[Card(C.JUDGE)], court=[CourtEntry(Card(C.SOLDIER), owner=1)])
        assert can_play_from_hand(state, registry, 0, Card(C.JUDGE))

    def test_elder_on_royalty(self, registry):
        state = _state(hand=[Card(C.ELDER)], court=[CourtEntry(Card(C.QUEEN), owner=1)])
        assert can_play_from_hand(state, registry, 0, Card(C.ELDER))

    def test_warlord_never_on_royalty(self, registry):
        state = _state(
            hand=[Card(C.WARLORD), Card(C.SOLDIER)],
            court=[CourtEntry(Card(C.QUEEN), owner=1, disgraced=True)],
        )
        assert not can_play_from_hand(state, registry, 0, Card(C.WARLORD))
        assert can_play_from_hand(state, registry, 0, Card(C.SOLDIER))

    def test_zealot_needs_flipped_king(self, registry):
        court = [CourtEntry(Card(C.SENTRY), owner=1)]
        unflipped = _state(hand=[Card(C.ZEALOT)], court=court)
        flipped = _state(hand=[Card(C.ZEALOT)], court=court, king_flipped=True)
        assert not can_play_from_hand(unflipped, registry, 0, Card(C.ZEALOT))
        assert can_play_from_hand(flipped, registry, 0, Card(C.ZEALOT))

    def test_oathbound_always_playable(self, registry):
        state = _state(hand=[Card(C.OATHBOUND)], court=[CourtEntry(Card(C.QUEEN), owner=1)])
        assert can_play_from_hand(state, registry, 0, Card(C.OATHBOUND))
