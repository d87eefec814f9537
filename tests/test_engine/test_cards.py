"""Tests for card names, card identity and variants."""

import pickle

import pytest

from kings_engine.cards import Card, CardName, army_flavor_base, build_cards
from kings_engine.config import (
    FRAGMENTS_OF_NERSETTI,
    FULL_COURT,
    GameConfig,
    get_variant,
)


class TestCardName:
    def test_registry_order(self):
        names = list(CardName)
        assert names[0] == CardName.FOOL
        assert names[-1] == CardName.QUEEN
        assert len(names) == 26
        assert CardName.KINGS_HAND < CardName.EXILE

    def test_display_names(self):
        assert str(CardName.QUEEN) == "Queen"
        assert str(CardName.KINGS_HAND) == "King's Hand"
        assert CardName.FLAG_BEARER.display_name == "Flag Bearer"

    def test_keys(self):
        assert CardName.KINGS_HAND.key == "KingsHand"
        assert CardName.FLAG_BEARER.key == "FlagBearer"
        assert CardName.from_key("Conspiracist") == CardName.CONSPIRACIST

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            CardName.from_key("Jester")


class TestCard:
    def test_cards_are_interned(self):
        assert Card(CardName.SOLDIER, 1) is Card(CardName.SOLDIER, 1)

    def test_flavor_distinguishes_copies(self):
        first = Card(CardName.SOLDIER, 0)
        second = Card(CardName.SOLDIER, 1)
        assert first != second
        assert len({first, second}) == 2

    def test_ordering_by_name_then_flavor(self):
        cards = [Card(CardName.QUEEN), Card(CardName.FOOL, 1), Card(CardName.FOOL, 0)]
        assert sorted(cards) == [Card(CardName.FOOL, 0), Card(CardName.FOOL, 1), Card(CardName.QUEEN)]

    def test_army_owner(self):
        assert Card(CardName.ELDER, 0).army_owner is None
        assert Card(CardName.ELDER, 100).army_owner == 0
        assert Card(CardName.ELDER, 200).army_owner == 1

    def test_str_uses_display_name(self):
        assert str(Card(CardName.KINGS_HAND)) == "King's Hand"
        assert repr(Card(CardName.ELDER, 101)) == "Card(ELDER, 101)"

    def test_pickle_keeps_identity(self):
        card = Card(CardName.MYSTIC, 0)
        assert pickle.loads(pickle.dumps(card)) is card


class TestBuildCards:
    def test_copies_get_distinct_flavors(self):
        cards = build_cards((CardName.OATHBOUND, CardName.OATHBOUND, CardName.SOLDIER))
        assert cards == (
            Card(CardName.OATHBOUND, 0),
            Card(CardName.OATHBOUND, 1),
            Card(CardName.SOLDIER, 0),
        )

    def test_army_flavors(self):
        assert army_flavor_base(0) == 100
        assert army_flavor_base(1) == 200
        cards = build_cards((CardName.JUDGE,), army_flavor_base(1))
        assert cards[0].army_owner == 1


class TestVariants:
    def test_nersetti_deck(self):
        deck = FRAGMENTS_OF_NERSETTI.base_deck
        assert len(deck) == 16
        assert deck.count(CardName.OATHBOUND) == 2
        assert CardName.KINGS_HAND not in deck

    def test_full_court_adds_reaction_cards(self):
        deck = FULL_COURT.base_deck
        assert len(deck) == 20
        assert CardName.KINGS_HAND in deck
        assert CardName.ASSASSIN in deck

    def test_get_variant(self):
        assert get_variant("full_court") is FULL_COURT
        assert get_variant("fragments_of_nersetti") == GameConfig()

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            get_variant("grand_court")

    def test_signature_pool(self):
        assert len(FRAGMENTS_OF_NERSETTI.signature_pool) == 9
        assert FRAGMENTS_OF_NERSETTI.signature_card_count == 3
