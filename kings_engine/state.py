"""Immutable game state models for Imposter Kings."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, replace
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Iterator

from kings_engine.cards import Card, CardName, army_flavor_base, build_cards
from kings_engine.config import GameConfig

if TYPE_CHECKING:
    from kings_engine.actions import AbilityChoice


class GamePhase(IntEnum):
    """Current phase of the game."""

    SIGNATURE_SELECTION = auto()  # Each player picks signature cards
    MUSTERING = auto()  # Recruit / recommission / change facet
    PLAY = auto()  # Alternating card plays (with prompts and reactions)
    ROUND_END = auto()  # Round scored, winner starts the next one
    GAME_OVER = auto()  # Game has ended


class KingFacet(IntEnum):
    """King variants altering successor/squire mechanics."""

    REGULAR = auto()
    CHARISMATIC_LEADER = auto()  # Successor is revealed
    MASTER_TACTICIAN = auto()  # Also sets aside a squire, taken on flip

    @property
    def key(self) -> str:
        return "".join(part.title() for part in self.name.split("_"))


class CardSource(IntEnum):
    """Zone a card is played from."""

    HAND = auto()
    ANTECHAMBER = auto()


class PromptKind(IntEnum):
    """One-off choices the engine waits on."""

    CHOOSE_FIRST_PLAYER = auto()
    RECRUIT_DISCARD = auto()
    RECRUIT_EXHAUST = auto()
    RECOMMISSION_EXHAUST = auto()
    PICK_SUCCESSOR = auto()
    PICK_DUNGEON = auto()
    PICK_SQUIRE = auto()
    PLAY_ANY_VALUE = auto()
    PICK_FOR_ANTECHAMBER = auto()
    DISGRACE = auto()
    SWAP_GIVE = auto()
    GUESS_PRESENCE = auto()
    CONDEMN_OPPONENT_CARD = auto()
    CONDEMN_BY_VALUE = auto()
    RECALL = auto()
    SACRIFICE_FOR_RALLY = auto()
    RALLY = auto()
    RETURN_TO_ARMY = auto()
    INFORMANT_REWARD = auto()


class ReactionTrigger(IntEnum):
    """What a reaction card can interrupt."""

    ABILITY = auto()  # A MAY ability about to resolve
    KING_FLIP = auto()  # A king flip about to resolve


@dataclass(frozen=True, slots=True)
class Prompt:
    """A pending one-off choice.

    Attributes:
        kind: What is being asked.
        player: Who must answer.
        source: Card whose ability raised the prompt, if any.
        remaining: How many more answers this prompt takes.
        optional: Whether the player may Skip.
        card: Card the prompt is about (recruit target, card given in a swap).
        named: Card name carried by the prompt (Nakturn's named card).
        number: Base value carried by the prompt (Executioner).
        cards: Cards eligible for the answer, when restricted.
    """

    kind: PromptKind
    player: int
    source: CardName | None = None
    remaining: int = 1
    optional: bool = False
    card: Card | None = None
    named: CardName | None = None
    number: int | None = None
    cards: tuple[Card, ...] = ()


@dataclass(frozen=True, slots=True)
class CourtEntry:
    """A card in the court.

    Attributes:
        card: The card.
        owner: Player who played it.
        disgraced: Disgraced cards are worth 1 and have no abilities.
        bonus: Stored value bonus (Soldier hit, Conspiracist).
        steadfast: Cannot be disgraced by other cards' abilities.
    """

    card: Card
    owner: int
    disgraced: bool = False
    bonus: int = 0
    steadfast: bool = False

    def with_disgraced(self, disgraced: bool = True) -> CourtEntry:
        return replace(self, disgraced=disgraced)


@dataclass(frozen=True, slots=True)
class ReactionOption:
    """A reaction the responder may claim: a card, optionally copying another."""

    card: CardName
    copies: CardName | None = None

    def __str__(self) -> str:
        if self.copies is not None:
            return f"{self.card} (as {self.copies})"
        return str(self.card)


@dataclass(frozen=True, slots=True)
class PendingTrigger:
    """The ability or king flip waiting on the reaction protocol.

    Attributes:
        trigger: Kind of event.
        actor: Player whose effect is pending.
        card: Card whose ability is pending (None for a king flip).
        choice: Ability payload chosen by the actor.
    """

    trigger: ReactionTrigger
    actor: int
    card: Card | None = None
    choice: AbilityChoice | None = None


@dataclass(frozen=True, slots=True)
class ReactionState:
    """Reaction sub-state of PLAY.

    Attributes:
        pending: What the reaction would prevent.
        options: Every possible reaction, in registry order.
        position: Index of the option currently being asked.
    """

    pending: PendingTrigger
    options: tuple[ReactionOption, ...]
    position: int = 0

    @property
    def responder(self) -> int:
        return 1 - self.pending.actor

    @property
    def current_option(self) -> ReactionOption:
        return self.options[self.position]


@dataclass(frozen=True, slots=True)
class PlayerState:
    """State of a single player.

    Attributes:
        name: Display name.
        hand: Cards in hand (hidden from opponent).
        antechamber: Face-up cards that must be played next.
        army: Available army cards (hidden from opponent).
        exhausted: Exhausted army cards (public).
        successor: Card taken into hand on king flip.
        squire: Master Tactician's extra card, taken on king flip.
        dungeon: Face-down card set aside during setup.
        condemned: Cards this player set aside this round.
        king_facet: Chosen king facet.
        king_flipped: Whether the king was flipped this round.
        points: Accumulated points.
        signature_cards: Chosen signature card names.
        recruited: Army cards brought into hand this round.
        conspiracy_turns: Own turns left under a Conspiracist effect.
    """

    name: str
    hand: tuple[Card, ...] = ()
    antechamber: tuple[Card, ...] = ()
    army: tuple[Card, ...] = ()
    exhausted: tuple[Card, ...] = ()
    successor: Card | None = None
    squire: Card | None = None
    dungeon: Card | None = None
    condemned: tuple[Card, ...] = ()
    king_facet: KingFacet = KingFacet.REGULAR
    king_flipped: bool = False
    points: int = 0
    signature_cards: tuple[CardName, ...] = ()
    recruited: tuple[Card, ...] = ()
    conspiracy_turns: int = 0

    @property
    def has_chosen_signatures(self) -> bool:
        return len(self.signature_cards) > 0

    @property
    def can_flip_king(self) -> bool:
        return not self.king_flipped and self.successor is not None

    def cards(self) -> Iterator[Card]:
        """Every card held in this player's zones."""
        yield from self.hand
        yield from self.antechamber
        yield from self.army
        yield from self.exhausted
        yield from self.condemned
        for card in (self.successor, self.squire, self.dungeon):
            if card is not None:
                yield card

    def with_hand(self, hand: tuple[Card, ...]) -> PlayerState:
        """Return new state with updated hand."""
        return replace(self, hand=hand)

    def with_antechamber(self, antechamber: tuple[Card, ...]) -> PlayerState:
        """Return new state with updated antechamber."""
        return replace(self, antechamber=antechamber)

    def with_army(self, army: tuple[Card, ...], exhausted: tuple[Card, ...] | None = None) -> PlayerState:
        """Return new state with updated army (and optionally exhausted army)."""
        if exhausted is None:
            exhausted = self.exhausted
        return replace(self, army=army, exhausted=exhausted)

    def with_condemned(self, condemned: tuple[Card, ...]) -> PlayerState:
        """Return new state with updated condemned zone."""
        return replace(self, condemned=condemned)

    def with_points(self, points: int) -> PlayerState:
        """Return new state with updated points."""
        return replace(self, points=points)

    def evolve(self, **changes) -> PlayerState:
        """Return new state with arbitrary fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class GameState:
    """Complete immutable game state.

    Attributes:
        players: Tuple of two PlayerStates (index 0 and 1).
        config: Rules in force for this match.
        current_player: Whose turn it is.
        true_king: Player who picks the first player in round one.
        first_player: Who plays first this round (None until chosen).
        court: Played cards; the last entry is the throne.
        accused: Face-up card set aside at deal time.
        deck: Undealt cards.
        condemned: Shared pile of cards removed from the round face up.
        phase: Current game phase.
        round: Round counter (starts at 1).
        turn_number: Plays made this round.
        seed: Seed from which every shuffle is derived.
        prompts: Pending one-off choices; the head is active.
        reaction: Pending reaction sub-state.
        muted_values: Base values muted by Mystic for this round.
        exile_owner: Player whose Exile mutes all cards until their next turn.
        round_winner: Winner of the round just scored.
        winner: Winner of the game.
    """

    players: tuple[PlayerState, PlayerState]
    config: GameConfig = GameConfig()
    current_player: int = 0
    true_king: int = 0
    first_player: int | None = None
    court: tuple[CourtEntry, ...] = ()
    accused: Card | None = None
    deck: tuple[Card, ...] = ()
    condemned: tuple[Card, ...] = ()
    phase: GamePhase = GamePhase.SIGNATURE_SELECTION
    round: int = 1
    turn_number: int = 0
    seed: int = 0
    prompts: tuple[Prompt, ...] = ()
    reaction: ReactionState | None = None
    muted_values: frozenset[int] = frozenset()
    exile_owner: int | None = None
    round_winner: int | None = None
    winner: int | None = None

    @property
    def opponent(self) -> int:
        """The other player (not current_player)."""
        return 1 - self.current_player

    @property
    def current_player_state(self) -> PlayerState:
        """State of the current player."""
        return self.players[self.current_player]

    @property
    def opponent_state(self) -> PlayerState:
        """State of the opponent."""
        return self.players[self.opponent]

    @property
    def is_game_over(self) -> bool:
        """Whether the game has ended."""
        return self.phase == GamePhase.GAME_OVER

    @property
    def prompt(self) -> Prompt | None:
        """The active prompt, if any."""
        return self.prompts[0] if self.prompts else None

    @property
    def throne(self) -> CourtEntry | None:
        """Topmost court entry."""
        return self.court[-1] if self.court else None

    @property
    def acting_player(self) -> int | None:
        """Player the engine is waiting on, or None when the game is over."""
        if self.is_game_over:
            return None
        if self.reaction is not None:
            return self.reaction.responder
        if self.prompts:
            return self.prompts[0].player
        if self.phase == GamePhase.ROUND_END:
            return self.round_winner
        return self.current_player

    def all_cards(self) -> Iterator[Card]:
        """Every card in every zone."""
        for player in self.players:
            yield from player.cards()
        for entry in self.court:
            yield entry.card
        yield from self.deck
        yield from self.condemned
        if self.accused is not None:
            yield self.accused

    def expected_cards(self) -> Counter:
        """The fixed card multiset for this variant and these signature picks."""
        expected = Counter(build_cards(self.config.base_deck))
        for idx, player in enumerate(self.players):
            army = self.config.base_army + player.signature_cards
            expected.update(build_cards(army, army_flavor_base(idx)))
        return expected

    def with_player(self, idx: int, player: PlayerState) -> GameState:
        """Return new state with one player replaced."""
        players = list(self.players)
        players[idx] = player
        return replace(self, players=(players[0], players[1]))

    def with_players(self, players: tuple[PlayerState, PlayerState]) -> GameState:
        """Return new state with updated players."""
        return replace(self, players=players)

    def with_court(self, court: tuple[CourtEntry, ...]) -> GameState:
        """Return new state with updated court."""
        return replace(self, court=court)

    def with_condemned(self, condemned: tuple[Card, ...]) -> GameState:
        """Return new state with updated shared condemned pile."""
        return replace(self, condemned=condemned)

    def with_current_player(self, current_player: int) -> GameState:
        """Return new state with updated current player."""
        return replace(self, current_player=current_player)

    def with_phase(self, phase: GamePhase) -> GameState:
        """Return new state with updated phase."""
        return replace(self, phase=phase)

    def with_prompts(self, prompts: tuple[Prompt, ...]) -> GameState:
        """Return new state with updated prompt queue."""
        return replace(self, prompts=prompts)

    def with_reaction(self, reaction: ReactionState | None) -> GameState:
        """Return new state with updated reaction sub-state."""
        return replace(self, reaction=reaction)

    def evolve(self, **changes) -> GameState:
        """Return new state with arbitrary fields replaced."""
        return replace(self, **changes)


def without(cards: tuple[Card, ...], card: Card) -> tuple[Card, ...]:
    """Remove one card from a zone."""
    idx = cards.index(card)
    return cards[:idx] + cards[idx + 1:]


def round_rng(seed: int, round_number: int) -> random.Random:
    """Deterministic RNG for one round's shuffle."""
    return random.Random(f"{seed}:{round_number}")


def create_initial_state(
    names: tuple[str, str] = ("Player 1", "Player 2"),
    config: GameConfig | None = None,
    seed: int | None = None,
) -> GameState:
    """Create the initial game state.

    Args:
        names: Display names of the two players.
        config: Rules for this match. Defaults to Fragments of Nersetti.
        seed: Seed for every random decision. If None, one is drawn.

    Returns:
        State in SIGNATURE_SELECTION with player 0 to choose.
    """
    if config is None:
        config = GameConfig()
    if seed is None:
        seed = random.randrange(2**32)

    rng = random.Random(seed)
    players = tuple(
        PlayerState(name=name, army=build_cards(config.base_army, army_flavor_base(idx)))
        for idx, name in enumerate(names)
    )

    return GameState(
        players=(players[0], players[1]),
        config=config,
        current_player=0,
        true_king=rng.randrange(2),
        deck=build_cards(config.base_deck),
        seed=seed,
    )
