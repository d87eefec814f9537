"""Command-line interface for Imposter Kings."""

from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kings_engine.config import VARIANTS, get_variant
from kings_engine.game import Game
from strategies import STRATEGIES, create_strategy

if TYPE_CHECKING:
    from kings_engine.views import BoardView
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """Result of a bot-vs-bot game."""

    winner: int | None
    rounds: int
    final_scores: tuple[int, int]
    player_strategies: tuple[str, str]
    seed: int | None
    action_count: int
    duration_ms: float


def format_board(board: BoardView) -> str:
    """Format a viewer's board for display."""
    lines = []

    lines.append("=" * 60)
    lines.append(f"Round {board.round} | Turn {board.turn_number} | Phase: {board.phase.name}")
    lines.append("=" * 60)

    for i, player in enumerate(board.players):
        prefix = "→ " if i == board.current_player else "  "
        king = f"{player.king_facet.key}{' (flipped)' if player.king_flipped else ''}"
        lines.append(f"\n{prefix}{player.name} - {player.points} points - king: {king}")
        lines.append("-" * 40)

        if player.hand is not None:
            hand_str = ", ".join(str(c) for c in player.hand) or "(empty)"
            lines.append(f"  Hand: {hand_str}")
        else:
            lines.append(f"  Hand: [{player.hand_count} cards]")

        if player.antechamber:
            lines.append(f"  Antechamber: {', '.join(str(c) for c in player.antechamber)}")
        if player.successor is not None:
            lines.append(f"  Successor: {player.successor}")
        elif player.has_successor:
            lines.append("  Successor: [hidden]")

    court = ", ".join(
        f"{entry.card}{'*' if entry.disgraced else ''}({entry.value})" for entry in board.court
    )
    lines.append(f"\nCourt: {court or '(empty)'}")
    lines.append(f"Deck: {board.deck_count} cards | Accused: {board.accused}")

    if board.winner is not None:
        lines.append("\n" + "=" * 60)
        lines.append(f"GAME OVER - {board.players[board.winner].name} wins!")
        lines.append("=" * 60)

    return "\n".join(lines)


def run_game(
    strategy0: Strategy,
    strategy1: Strategy,
    seed: int | None = None,
    variant: str = "fragments_of_nersetti",
    max_actions: int = 5000,
    verbose: bool = False,
) -> GameResult:
    """Play one full game between two strategies.

    Args:
        strategy0: Strategy for player 0.
        strategy1: Strategy for player 1.
        seed: Seed for the game's shuffles.
        variant: Name of the deck variant.
        max_actions: Stop after this many actions without a winner.
        verbose: Print every action as it is taken.
    """
    start_time = time.perf_counter()
    strategies = (strategy0, strategy1)
    game = Game(
        names=(strategy0.name, strategy1.name),
        config=get_variant(variant),
        seed=seed,
    )

    for i, strategy in enumerate(strategies):
        strategy.on_game_start(game.board(i), i)

    action_count = 0
    while not game.is_game_over and action_count < max_actions:
        actor = game.state.acting_player
        legal_actions = game.legal_actions(actor)
        action = strategies[actor].select_action(game.board(actor), game.status(actor), legal_actions)
        if action is None:
            logger.warning("%s returned no action, stopping", strategies[actor].name)
            break

        game.apply(actor, game.event_count, action)
        action_count += 1
        if verbose:
            print(f"{strategies[actor].name} (player {actor}): {action}")

    if verbose:
        print(format_board(game.board(0)))
    if not game.is_game_over:
        logger.warning("Game stopped after %d actions without a winner", action_count)

    for i, strategy in enumerate(strategies):
        strategy.on_game_end(game.board(i), game.state.winner)

    return GameResult(
        winner=game.state.winner,
        rounds=game.state.round,
        final_scores=(game.state.players[0].points, game.state.players[1].points),
        player_strategies=(strategy0.name, strategy1.name),
        seed=seed,
        action_count=action_count,
        duration_ms=(time.perf_counter() - start_time) * 1000,
    )


def simulate(num_games: int, seed: int, p0: str, p1: str, variant: str) -> list[GameResult]:
    """Run a batch of games and print a summary."""
    print(f"\nRunning {num_games} games: {p0} vs {p1} ({variant})")

    results = [
        run_game(
            create_strategy(p0, seed=seed + i),
            create_strategy(p1, seed=seed + i + 1000),
            seed=seed + i,
            variant=variant,
        )
        for i in range(num_games)
    ]

    p0_wins = sum(1 for r in results if r.winner == 0)
    p1_wins = sum(1 for r in results if r.winner == 1)
    unfinished = sum(1 for r in results if r.winner is None)
    avg_rounds = sum(r.rounds for r in results) / len(results)
    avg_duration = sum(r.duration_ms for r in results) / len(results)

    print("\nResults:")
    print(f"  Player 0 ({p0}) wins: {p0_wins} ({100*p0_wins/num_games:.1f}%)")
    print(f"  Player 1 ({p1}) wins: {p1_wins} ({100*p1_wins/num_games:.1f}%)")
    print(f"  Unfinished: {unfinished}")
    print(f"  Average rounds: {avg_rounds:.1f}")
    print(f"  Average duration: {avg_duration:.2f}ms")
    return results


def watch_game(seed: int | None, p0: str, p1: str, variant: str) -> None:
    """Play one game, printing each action and the final board."""
    strategy0 = create_strategy(p0, seed=seed)
    strategy1 = create_strategy(p1, seed=None if seed is None else seed + 1000)
    result = run_game(strategy0, strategy1, seed=seed, variant=variant, verbose=True)
    print(f"\nFinal score: {result.final_scores[0]} - {result.final_scores[1]}")


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Imposter Kings simulator")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    strategy_names = sorted(STRATEGIES)

    simulate_parser = subparsers.add_parser("simulate", help="Run bot-vs-bot games")
    simulate_parser.add_argument("--games", type=int, default=100, help="Number of games")
    simulate_parser.add_argument("--seed", type=int, default=42, help="Random seed")
    simulate_parser.add_argument("--p0", choices=strategy_names, default="heuristic")
    simulate_parser.add_argument("--p1", choices=strategy_names, default="random")
    simulate_parser.add_argument("--variant", choices=sorted(VARIANTS), default="fragments_of_nersetti")

    watch_parser = subparsers.add_parser("watch", help="Print one bot-vs-bot game")
    watch_parser.add_argument("--seed", type=int, help="Random seed")
    watch_parser.add_argument("--p0", choices=strategy_names, default="heuristic")
    watch_parser.add_argument("--p1", choices=strategy_names, default="random")
    watch_parser.add_argument("--variant", choices=sorted(VARIANTS), default="fragments_of_nersetti")

    args = parser.parse_args()

    if args.command == "simulate":
        simulate(args.games, args.seed, args.p0, args.p1, args.variant)
    elif args.command == "watch":
        watch_game(args.seed, args.p0, args.p1, args.variant)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
