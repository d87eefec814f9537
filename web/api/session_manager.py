"""Game session management for the web API."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from kings_engine.abilities.registry import create_default_registry
from kings_engine.config import get_variant
from kings_engine.game import Game
from strategies import create_strategy

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from kings_engine.actions import Action
    from strategies.base import Strategy


class PlayerType(str, Enum):
    """Type of player."""
    HUMAN = "human"
    AI = "ai"


@dataclass
class PlayerConfig:
    """Configuration for a player in a game session."""
    player_type: PlayerType
    name: str | None = None
    strategy_name: str | None = None  # None for human players
    strategy_params: dict[str, Any] = field(default_factory=dict)


@dataclass
class GameSession:
    """An active game session.

    ``lock`` serializes submissions and bot turns so only one writer
    touches ``game`` at a time.
    """

    id: str
    player_configs: tuple[PlayerConfig, PlayerConfig]
    game: Game
    strategies: tuple[Strategy | None, Strategy | None]
    created_at: datetime
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def acting_player(self) -> int | None:
        return self.game.state.acting_player

    @property
    def is_human_turn(self) -> bool:
        """Whether the game is waiting on a human (or on nobody)."""
        acting = self.acting_player
        if acting is None:
            return True
        return self.player_configs[acting].player_type == PlayerType.HUMAN


class GameSessionManager:
    """Manages all active game sessions."""

    def __init__(self):
        self._sessions: dict[str, GameSession] = {}
        self._registry = create_default_registry()

    def create_session(
        self,
        player0_config: PlayerConfig,
        player1_config: PlayerConfig,
        seed: int | None = None,
        variant: str = "fragments_of_nersetti",
    ) -> GameSession:
        """Create a new game session.

        Raises:
            ValueError: On an unknown strategy or variant.
        """
        session_id = str(uuid.uuid4())
        configs = (player0_config, player1_config)

        strategies = tuple(
            create_strategy(config.strategy_name or "", seed=config.strategy_params.get("seed"))
            if config.player_type == PlayerType.AI
            else None
            for config in configs
        )

        names = tuple(
            config.name or (config.strategy_name if config.player_type == PlayerType.AI else None)
            or f"Player {i + 1}"
            for i, config in enumerate(configs)
        )
        game = Game(names=names, config=get_variant(variant), seed=seed, registry=self._registry)

        session = GameSession(
            id=session_id,
            player_configs=configs,
            game=game,
            strategies=strategies,
            created_at=datetime.now(),
        )

        for i, strategy in enumerate(strategies):
            if strategy:
                strategy.on_game_start(game.board(i), i)

        self._sessions[session_id] = session
        logger.info("Created session %s (variant=%s, seed=%s)", session_id, variant, seed)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session."""
        if session_id in self._sessions:
            del self._sessions[session_id]
            logger.info("Deleted session %s", session_id)
            return True
        return False

    def list_sessions(self) -> list[dict]:
        """List all active sessions."""
        return [
            {
                "id": s.id,
                "created_at": s.created_at.isoformat(),
                "round": s.game.state.round,
                "phase": s.game.state.phase.name,
                "event_count": s.game.event_count,
                "is_game_over": s.game.is_game_over,
                "winner": s.game.state.winner,
                "players": [
                    {
                        "type": s.player_configs[i].player_type.value,
                        "name": s.game.state.players[i].name,
                        "strategy": s.player_configs[i].strategy_name,
                    }
                    for i in range(2)
                ],
            }
            for s in self._sessions.values()
        ]

    async def run_ai_turn(self, session: GameSession) -> Action | None:
        """Run one bot action if a bot is acting.

        The caller must hold ``session.lock``.

        Returns:
            The action applied, or None if no bot was due to act.
        """
        game = session.game
        if game.is_game_over or session.is_human_turn:
            return None

        acting_player = session.acting_player
        strategy = session.strategies[acting_player]
        if strategy is None:
            return None

        legal_actions = game.legal_actions(acting_player)
        if not legal_actions:
            return None

        logger.info(
            "AI turn: player=%d, strategy=%s, actions=%d",
            acting_player, strategy.name, len(legal_actions),
        )
        start_time = time.time()

        loop = asyncio.get_running_loop()
        action = await loop.run_in_executor(
            None,
            strategy.select_action,
            game.board(acting_player),
            game.status(acting_player),
            legal_actions,
        )
        logger.info("AI selected action in %.2fs: %s", time.time() - start_time, action)

        if action is None:
            return None
        game.apply(acting_player, game.event_count, action)

        if game.is_game_over:
            for i, s in enumerate(session.strategies):
                if s:
                    s.on_game_end(game.board(i), game.state.winner)
        return action

    async def run_ai_turns_until_human(self, session: GameSession) -> list[Action]:
        """Run bot actions until a human must act or the game ends.

        The caller must hold ``session.lock``.
        """
        actions = []
        while not session.game.is_game_over and not session.is_human_turn:
            action = await self.run_ai_turn(session)
            if action is None:
                break
            actions.append(action)
        return actions


session_manager = GameSessionManager()
