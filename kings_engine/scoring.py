"""End-of-round scoring and the game-over check."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kings_engine.state import GamePhase

if TYPE_CHECKING:
    from kings_engine.events import MessageLog
    from kings_engine.state import GameState


def round_points(state: GameState, winner: int) -> int:
    """Points the winner earns for the round.

    One point for winning, one more if the winner's king is still unflipped,
    one more if the loser still held cards or an unflipped successor. The sum
    is clamped to the configured range.
    """
    won = state.players[winner]
    lost = state.players[1 - winner]
    points = 1
    if not won.king_flipped:
        points += 1
    if lost.hand or (lost.successor is not None and not lost.king_flipped):
        points += 1
    config = state.config
    return max(config.round_points_min, min(config.round_points_max, points))


def end_round(state: GameState, winner: int, log: MessageLog) -> GameState:
    """Score the round and move to ROUND_END or GAME_OVER."""
    points = round_points(state, winner)
    player = state.players[winner]
    total = player.points + points
    state = state.with_player(winner, player.with_points(total))
    state = state.evolve(prompts=(), reaction=None, round_winner=winner)
    log.public(f"{player.name} wins round {state.round} and scores {points} (total {total})")

    if total >= state.config.points_to_win:
        log.public(f"{player.name} wins the game")
        return state.evolve(phase=GamePhase.GAME_OVER, winner=winner)
    return state.with_phase(GamePhase.ROUND_END)
