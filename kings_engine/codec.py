"""Wire format for cards, actions, views and events.

Decoding errors raise ``ValidationError`` so transports can reject bad
payloads without inspecting them first.
"""

from __future__ import annotations

from typing import Any

from kings_engine.actions import (
    AbilityChoice,
    Action,
    ActionType,
    CardInHandGuess,
    ChangeKingFacet,
    ChooseDungeon,
    ChooseSignatureCards,
    ChooseSquire,
    ChooseSuccessor,
    ChooseWhosFirst,
    Condemn,
    CondemnOpponentCard,
    Decline,
    Discard,
    Disgrace,
    EndMuster,
    Exhaust,
    FlipKing,
    MoveToAntechamber,
    PlayCard,
    Rally,
    React,
    Recall,
    Recommission,
    Recruit,
    ReturnToArmy,
    Skip,
    StartNewRound,
    SwapCard,
    TakeDungeon,
)
from kings_engine.cards import Card, CardName
from kings_engine.errors import ValidationError
from kings_engine.events import Message
from kings_engine.state import CardSource, KingFacet, ReactionOption
from kings_engine.views import BoardView, GameStatus, PlayerView

_CARD_ACTION_TYPES: dict[ActionType, type[Action]] = {
    ActionType.RECRUIT: Recruit,
    ActionType.RECOMMISSION: Recommission,
    ActionType.DISCARD: Discard,
    ActionType.EXHAUST: Exhaust,
    ActionType.CHOOSE_SUCCESSOR: ChooseSuccessor,
    ActionType.CHOOSE_DUNGEON: ChooseDungeon,
    ActionType.CHOOSE_SQUIRE: ChooseSquire,
    ActionType.MOVE_TO_ANTECHAMBER: MoveToAntechamber,
    ActionType.DISGRACE: Disgrace,
    ActionType.SWAP_CARD: SwapCard,
    ActionType.CONDEMN: Condemn,
    ActionType.RECALL: Recall,
    ActionType.RALLY: Rally,
    ActionType.RETURN_TO_ARMY: ReturnToArmy,
}

_BARE_ACTION_TYPES: dict[ActionType, type[Action]] = {
    ActionType.END_MUSTER: EndMuster,
    ActionType.FLIP_KING: FlipKing,
    ActionType.DECLINE: Decline,
    ActionType.TAKE_DUNGEON: TakeDungeon,
    ActionType.SKIP: Skip,
    ActionType.START_NEW_ROUND: StartNewRound,
}


# --- Cards -----------------------------------------------------------------


def card_to_dict(card: Card | None) -> dict | None:
    """Convert a Card to a dictionary."""
    if card is None:
        return None
    return {"name": card.name.key, "display": str(card), "flavor": card.flavor}


def name_from_key(key: Any) -> CardName:
    if not isinstance(key, str):
        raise ValidationError(f"Card name must be a string, got {key!r}")
    try:
        return CardName.from_key(key)
    except KeyError:
        raise ValidationError(f"Unknown card: {key}") from None


def card_from_dict(data: Any) -> Card:
    if not isinstance(data, dict):
        raise ValidationError(f"Card must be an object, got {data!r}")
    flavor = data.get("flavor", 0)
    if not isinstance(flavor, int) or isinstance(flavor, bool) or flavor < 0:
        raise ValidationError(f"Bad card flavor: {flavor!r}")
    name = name_from_key(data.get("name"))
    card = Card.existing(name, flavor)
    if card is None:
        raise ValidationError(f"No such card: {name} #{flavor}")
    return card


def _optional_card(data: Any) -> Card | None:
    return None if data is None else card_from_dict(data)


def _optional_name(key: Any) -> CardName | None:
    return None if key is None else name_from_key(key)


# --- Actions ---------------------------------------------------------------


def ability_to_dict(choice: AbilityChoice | None) -> dict | None:
    if choice is None:
        return None
    return {
        "named": choice.named.key if choice.named is not None else None,
        "number": choice.number,
        "target": card_to_dict(choice.target),
        "hand_card": card_to_dict(choice.hand_card),
        "copy": card_to_dict(choice.copy),
        "description": str(choice),
    }


def ability_from_dict(data: Any) -> AbilityChoice | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValidationError("Ability choice must be an object")
    number = data.get("number")
    if number is not None and (not isinstance(number, int) or isinstance(number, bool)):
        raise ValidationError(f"Bad ability number: {number!r}")
    return AbilityChoice(
        named=_optional_name(data.get("named")),
        number=number,
        target=_optional_card(data.get("target")),
        hand_card=_optional_card(data.get("hand_card")),
        copy=_optional_card(data.get("copy")),
    )


def action_to_dict(action: Action, index: int | None = None) -> dict:
    """Convert an Action to a dictionary."""
    base: dict[str, Any] = {
        "type": action.action_type.name,
        "description": str(action),
    }
    if index is not None:
        base["index"] = index

    match action:
        case ChooseSignatureCards(cards=cards):
            base["cards"] = [name.key for name in cards]
        case ChooseWhosFirst(player=player):
            base["player"] = player
        case ChangeKingFacet(facet=facet):
            base["facet"] = facet.key
        case PlayCard(card=card, source=source, ability=ability):
            base["card"] = card_to_dict(card)
            base["source"] = source.name
            base["ability"] = ability_to_dict(ability)
        case React(option=option):
            base["option"] = {
                "card": option.card.key,
                "copies": option.copies.key if option.copies is not None else None,
            }
        case CardInHandGuess(present=present):
            base["present"] = present
        case CondemnOpponentCard(index=card_index):
            base["card_index"] = card_index
        case _ if action.action_type in _CARD_ACTION_TYPES:
            base["card"] = card_to_dict(action.card)

    return base


def action_from_dict(data: Any) -> Action:
    """Build an Action from its wire form.

    Raises:
        ValidationError: On an unknown type, unknown card or malformed field.
    """
    if not isinstance(data, dict):
        raise ValidationError("Action must be an object")
    try:
        action_type = ActionType[data.get("type", "")]
    except (KeyError, TypeError):
        raise ValidationError(f"Unknown action type: {data.get('type')!r}") from None

    if action_type in _BARE_ACTION_TYPES:
        return _BARE_ACTION_TYPES[action_type]()
    if action_type in _CARD_ACTION_TYPES:
        return _CARD_ACTION_TYPES[action_type](card=card_from_dict(data.get("card")))

    match action_type:
        case ActionType.CHOOSE_SIGNATURE_CARDS:
            cards = data.get("cards")
            if not isinstance(cards, list):
                raise ValidationError("cards must be a list")
            return ChooseSignatureCards(cards=tuple(sorted(name_from_key(key) for key in cards)))
        case ActionType.CHOOSE_WHOS_FIRST:
            return ChooseWhosFirst(player=data.get("player"))
        case ActionType.CHANGE_KING_FACET:
            facet = data.get("facet")
            for candidate in KingFacet:
                if candidate.key == facet:
                    return ChangeKingFacet(facet=candidate)
            raise ValidationError(f"Unknown king facet: {facet!r}")
        case ActionType.PLAY_CARD:
            try:
                source = CardSource[data.get("source", "HAND")]
            except (KeyError, TypeError):
                raise ValidationError(f"Unknown card source: {data.get('source')!r}") from None
            return PlayCard(
                card=card_from_dict(data.get("card")),
                source=source,
                ability=ability_from_dict(data.get("ability")),
            )
        case ActionType.REACT:
            option = data.get("option")
            if not isinstance(option, dict):
                raise ValidationError("option must be an object")
            return React(
                option=ReactionOption(
                    card=name_from_key(option.get("card")),
                    copies=_optional_name(option.get("copies")),
                )
            )
        case ActionType.CARD_IN_HAND_GUESS:
            return CardInHandGuess(present=data.get("present"))
        case ActionType.CONDEMN_OPPONENT_CARD:
            return CondemnOpponentCard(index=data.get("card_index"))

    raise ValidationError(f"Unknown action type: {action_type.name}")


# --- Views -----------------------------------------------------------------


def _cards(cards) -> list[dict] | None:
    if cards is None:
        return None
    return [card_to_dict(c) for c in cards]


def _player_to_dict(index: int, player: PlayerView) -> dict:
    return {
        "index": index,
        "name": player.name,
        "hand": _cards(player.hand),
        "hand_count": player.hand_count,
        "antechamber": _cards(player.antechamber),
        "army": _cards(player.army),
        "army_count": player.army_count,
        "exhausted": _cards(player.exhausted),
        "condemned": _cards(player.condemned),
        "successor": card_to_dict(player.successor),
        "has_successor": player.has_successor,
        "squire": card_to_dict(player.squire),
        "has_squire": player.has_squire,
        "dungeon": card_to_dict(player.dungeon),
        "has_dungeon": player.has_dungeon,
        "king_facet": player.king_facet.key,
        "king_flipped": player.king_flipped,
        "points": player.points,
        "signature_cards": [name.key for name in player.signature_cards],
    }


def board_to_dict(board: BoardView) -> dict:
    prompt = board.prompt
    return {
        "viewer": board.viewer,
        "phase": board.phase.name,
        "round": board.round,
        "turn_number": board.turn_number,
        "current_player": board.current_player,
        "first_player": board.first_player,
        "true_king": board.true_king,
        "players": [_player_to_dict(i, p) for i, p in enumerate(board.players)],
        "court": [
            {
                "card": card_to_dict(entry.card),
                "owner": entry.owner,
                "disgraced": entry.disgraced,
                "value": entry.value,
            }
            for entry in board.court
        ],
        "throne_value": board.throne_value,
        "accused": card_to_dict(board.accused),
        "condemned": _cards(board.condemned),
        "deck_count": board.deck_count,
        "muted_values": sorted(board.muted_values),
        "exile_owner": board.exile_owner,
        "prompt": (
            {
                "kind": prompt.kind.name,
                "player": prompt.player,
                "source": prompt.source.key if prompt.source is not None else None,
                "remaining": prompt.remaining,
                "optional": prompt.optional,
                "named": prompt.named.key if prompt.named is not None else None,
                "number": prompt.number,
                "card": card_to_dict(prompt.card),
                "cards": _cards(prompt.cards),
            }
            if prompt is not None
            else None
        ),
        "reaction": str(board.reaction) if board.reaction is not None else None,
        "round_winner": board.round_winner,
        "winner": board.winner,
    }


def status_to_dict(status: GameStatus) -> dict:
    return {
        "phase": status.phase.name,
        "acting_player": status.acting_player,
        "your_turn": status.your_turn,
        "text": status.text,
        "winner": status.winner,
    }


def message_to_dict(message: Message) -> dict:
    return {"type": "message", "text": message.text}
