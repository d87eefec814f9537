"""Bot strategies for Imposter Kings."""

from strategies.base import Strategy
from strategies.heuristic import HeuristicStrategy
from strategies.random_strategy import RandomStrategy

STRATEGIES: dict[str, tuple[type[Strategy], str]] = {
    "random": (RandomStrategy, "Random player (baseline)"),
    "heuristic": (HeuristicStrategy, "Rule-based heuristic player"),
}


def create_strategy(name: str, seed: int | None = None) -> Strategy:
    """Build a strategy by name.

    Raises:
        ValueError: If no strategy has that name.
    """
    try:
        cls, _ = STRATEGIES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown strategy: {name}") from None
    return cls(seed=seed)


__all__ = [
    "Strategy",
    "RandomStrategy",
    "HeuristicStrategy",
    "STRATEGIES",
    "create_strategy",
]
