"""Tests for the wire format."""

import pytest

from kings_engine.abilities.registry import create_default_registry
from kings_engine.actions import (
    AbilityChoice,
    ChangeKingFacet,
    ChooseSignatureCards,
    CondemnOpponentCard,
    EndMuster,
    PlayCard,
    React,
)
from kings_engine.cards import Card, CardName
from kings_engine.codec import (
    action_from_dict,
    action_to_dict,
    board_to_dict,
    card_from_dict,
    card_to_dict,
    status_to_dict,
)
from kings_engine.errors import ValidationError
from kings_engine.state import CardSource, KingFacet, ReactionOption, create_initial_state
from kings_engine.views import build_board, build_status

C = CardName


class TestCards:
    def test_card_to_dict(self):
        assert card_to_dict(Card(C.KINGS_HAND, 0)) == {"name": "KingsHand", "display": "King's Hand", "flavor": 0}
        assert card_to_dict(None) is None

    def test_card_from_dict(self):
        elder = Card(C.ELDER, 101)
        assert card_from_dict({"name": "Elder", "flavor": 101}) is elder

    def test_card_never_built_is_rejected(self):
        with pytest.raises(ValidationError):
            card_from_dict({"name": "Elder", "flavor": 987654})
        assert Card.existing(C.ELDER, 987654) is None

    def test_unknown_card(self):
        with pytest.raises(ValidationError):
            card_from_dict({"name": "Jester", "flavor": 0})

    def test_bad_flavor(self):
        with pytest.raises(ValidationError):
            card_from_dict({"name": "Elder", "flavor": "one"})


class TestActions:
    def test_play_card_with_ability(self):
        action = PlayCard(
            card=Card(C.SENTRY),
            source=CardSource.ANTECHAMBER,
            ability=AbilityChoice(target=Card(C.ELDER), hand_card=Card(C.FOOL)),
        )

        data = action_to_dict(action, index=4)

        assert data["type"] == "PLAY_CARD"
        assert data["index"] == 4
        assert data["source"] == "ANTECHAMBER"
        assert data["ability"]["target"]["name"] == "Elder"
        assert action_from_dict(data) == action

    def test_reaction_with_copy(self):
        action = React(ReactionOption(C.STRANGER, copies=C.KINGS_HAND))
        data = action_to_dict(action)
        assert data["option"] == {"card": "Stranger", "copies": "KingsHand"}
        assert action_from_dict(data) == action

    def test_signature_cards_sorted_on_decode(self):
        data = {"type": "CHOOSE_SIGNATURE_CARDS", "cards": ["Exile", "FlagBearer", "Aegis"]}
        assert action_from_dict(data) == ChooseSignatureCards(cards=(C.FLAG_BEARER, C.AEGIS, C.EXILE))

    def test_facet_by_key(self):
        data = action_to_dict(ChangeKingFacet(facet=KingFacet.MASTER_TACTICIAN))
        assert data["facet"] == "MasterTactician"
        assert action_from_dict(data) == ChangeKingFacet(facet=KingFacet.MASTER_TACTICIAN)

    def test_condemn_by_index(self):
        data = action_to_dict(CondemnOpponentCard(index=2))
        assert data["card_index"] == 2
        assert action_from_dict(data) == CondemnOpponentCard(index=2)

    def test_bare_action(self):
        assert action_from_dict({"type": "END_MUSTER"}) == EndMuster()

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            action_from_dict({"type": "SHUFFLE"})

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            action_from_dict(["END_MUSTER"])

    def test_missing_card(self):
        with pytest.raises(ValidationError):
            action_from_dict({"type": "RECRUIT"})

    def test_unknown_facet(self):
        with pytest.raises(ValidationError):
            action_from_dict({"type": "CHANGE_KING_FACET", "facet": "Tyrant"})


class TestViews:
    def test_board_to_dict_hides_opponent(self):
        registry = create_default_registry()
        state = create_initial_state(seed=9)
        data = board_to_dict(build_board(state, 0, registry))

        assert data["phase"] == "SIGNATURE_SELECTION"
        assert data["players"][0]["army"] is not None
        assert data["players"][1]["army"] is None
        assert data["players"][1]["army_count"] == 5
        assert data["prompt"] is None

    def test_status_to_dict(self):
        data = status_to_dict(build_status(create_initial_state(seed=9), 1))
        assert data["acting_player"] == 0
        assert data["your_turn"] is False
