"""Per-viewer projections of the game state.

A view never carries the identity of a card in the opponent's hand, army,
dungeon or squire. The opponent's successor is shown only when their king
is a Charismatic Leader.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kings_engine.rules import court_value, throne_value
from kings_engine.state import GamePhase, KingFacet, PromptKind

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import Card, CardName
    from kings_engine.state import GameState, Prompt, ReactionOption


@dataclass(frozen=True, slots=True)
class PlayerView:
    """One player's zones as seen by the viewer.

    Hidden zones are None; their sizes are always given.
    """

    name: str
    hand: tuple[Card, ...] | None
    hand_count: int
    antechamber: tuple[Card, ...]
    army: tuple[Card, ...] | None
    army_count: int
    exhausted: tuple[Card, ...]
    condemned: tuple[Card, ...]
    successor: Card | None
    has_successor: bool
    squire: Card | None
    has_squire: bool
    dungeon: Card | None
    has_dungeon: bool
    king_facet: KingFacet
    king_flipped: bool
    points: int
    signature_cards: tuple[CardName, ...]


@dataclass(frozen=True, slots=True)
class CourtView:
    card: Card
    owner: int
    disgraced: bool
    value: int


@dataclass(frozen=True, slots=True)
class PromptView:
    kind: PromptKind
    player: int
    source: CardName | None
    remaining: int
    optional: bool
    named: CardName | None
    number: int | None
    card: Card | None
    cards: tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class BoardView:
    """Everything a viewer may know about the game."""

    viewer: int
    phase: GamePhase
    round: int
    turn_number: int
    current_player: int
    first_player: int | None
    true_king: int
    players: tuple[PlayerView, PlayerView]
    court: tuple[CourtView, ...]
    throne_value: int
    accused: Card | None
    condemned: tuple[Card, ...]
    deck_count: int
    muted_values: frozenset[int]
    exile_owner: int | None
    prompt: PromptView | None
    reaction: ReactionOption | None
    round_winner: int | None
    winner: int | None


@dataclass(frozen=True, slots=True)
class GameStatus:
    """Who the game is waiting on, and for what."""

    phase: GamePhase
    acting_player: int | None
    your_turn: bool
    text: str
    winner: int | None


def _player_view(state: GameState, idx: int, viewer: int) -> PlayerView:
    player = state.players[idx]
    own = idx == viewer
    successor_public = own or player.king_facet == KingFacet.CHARISMATIC_LEADER
    return PlayerView(
        name=player.name,
        hand=player.hand if own else None,
        hand_count=len(player.hand),
        antechamber=player.antechamber,
        army=player.army if own else None,
        army_count=len(player.army),
        exhausted=player.exhausted,
        condemned=player.condemned,
        successor=player.successor if successor_public else None,
        has_successor=player.successor is not None,
        squire=player.squire if own else None,
        has_squire=player.squire is not None,
        dungeon=player.dungeon if own else None,
        has_dungeon=player.dungeon is not None,
        king_facet=player.king_facet,
        king_flipped=player.king_flipped,
        points=player.points,
        signature_cards=player.signature_cards,
    )


def _prompt_view(prompt: Prompt, viewer: int) -> PromptView:
    own = prompt.player == viewer
    return PromptView(
        kind=prompt.kind,
        player=prompt.player,
        source=prompt.source,
        remaining=prompt.remaining,
        optional=prompt.optional,
        named=prompt.named,
        number=prompt.number,
        card=prompt.card if own else None,
        cards=prompt.cards if own else (),
    )


def build_board(state: GameState, viewer: int, registry: CardRegistry) -> BoardView:
    """Project ``state`` for ``viewer``."""
    return BoardView(
        viewer=viewer,
        phase=state.phase,
        round=state.round,
        turn_number=state.turn_number,
        current_player=state.current_player,
        first_player=state.first_player,
        true_king=state.true_king,
        players=(_player_view(state, 0, viewer), _player_view(state, 1, viewer)),
        court=tuple(
            CourtView(entry.card, entry.owner, entry.disgraced, court_value(state, registry, idx))
            for idx, entry in enumerate(state.court)
        ),
        throne_value=throne_value(state, registry),
        accused=state.accused,
        condemned=state.condemned,
        deck_count=len(state.deck),
        muted_values=state.muted_values,
        exile_owner=state.exile_owner,
        prompt=_prompt_view(state.prompt, viewer) if state.prompt is not None else None,
        reaction=state.reaction.current_option if state.reaction is not None else None,
        round_winner=state.round_winner,
        winner=state.winner,
    )


_PROMPT_TEXT = {
    PromptKind.CHOOSE_FIRST_PLAYER: "choose who plays first",
    PromptKind.RECRUIT_DISCARD: "discard a card to recruit",
    PromptKind.RECRUIT_EXHAUST: "exhaust an army card to recruit",
    PromptKind.RECOMMISSION_EXHAUST: "exhaust army cards to recommission",
    PromptKind.PICK_SUCCESSOR: "choose a successor",
    PromptKind.PICK_DUNGEON: "choose a dungeon card",
    PromptKind.PICK_SQUIRE: "choose a squire",
    PromptKind.PLAY_ANY_VALUE: "play another card of any value",
    PromptKind.PICK_FOR_ANTECHAMBER: "move a card to the antechamber",
    PromptKind.DISGRACE: "disgrace cards in the court",
    PromptKind.SWAP_GIVE: "give a card back",
    PromptKind.GUESS_PRESENCE: "guess whether the named card is held",
    PromptKind.CONDEMN_OPPONENT_CARD: "condemn a card from the opponent's hand",
    PromptKind.CONDEMN_BY_VALUE: "condemn a card of the named value",
    PromptKind.RECALL: "recall an exhausted card",
    PromptKind.SACRIFICE_FOR_RALLY: "condemn a card to rally",
    PromptKind.RALLY: "rally an army card",
    PromptKind.RETURN_TO_ARMY: "return a rallied card to the army",
    PromptKind.INFORMANT_REWARD: "take the dungeon card or rally",
}


def build_status(state: GameState, viewer: int) -> GameStatus:
    """Describe what the game is waiting on.

    Reaction text names only the option being asked, so it reads the same
    whether or not the responder holds the card.
    """
    acting = state.acting_player
    if state.is_game_over:
        text = f"{state.players[state.winner].name} wins the game"
    else:
        who = "You" if acting == viewer else state.players[acting].name
        if state.reaction is not None:
            text = f"{who}: react with {state.reaction.current_option}, or decline"
        elif state.prompt is not None:
            text = f"{who}: {_PROMPT_TEXT[state.prompt.kind]}"
        else:
            match state.phase:
                case GamePhase.SIGNATURE_SELECTION:
                    text = f"{who}: choose signature cards"
                case GamePhase.MUSTERING:
                    text = f"{who}: muster"
                case GamePhase.ROUND_END:
                    text = f"{who}: start the next round"
                case _:
                    text = f"{who}: play a card or flip the king"
    return GameStatus(
        phase=state.phase,
        acting_player=acting,
        your_turn=acting == viewer,
        text=text,
        winner=state.winner,
    )
