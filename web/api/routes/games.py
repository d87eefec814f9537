"""Game API routes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from kings_engine.codec import (
    action_from_dict,
    action_to_dict,
    board_to_dict,
    message_to_dict,
    status_to_dict,
)
from kings_engine.errors import (
    GameError,
    IllegalMoveError,
    SequenceMismatchError,
    ValidationError,
)
from kings_engine.events import Message
from strategies import STRATEGIES
from web.api.session_manager import (
    GameSession,
    PlayerConfig,
    PlayerType,
    session_manager,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


# Request/Response models
class PlayerConfigRequest(BaseModel):
    """Player configuration for game creation."""

    player_type: PlayerType = Field(..., description="'human' or 'ai'")
    name: str | None = Field(None, description="Display name")
    strategy: str | None = Field(None, description="Strategy name for AI players")
    strategy_params: dict[str, Any] = Field(
        default_factory=dict, description="Strategy parameters"
    )


class CreateGameRequest(BaseModel):
    """Request to create a new game."""

    player0: PlayerConfigRequest
    player1: PlayerConfigRequest
    seed: int | None = Field(None, description="Random seed for reproducibility")
    variant: str = Field("fragments_of_nersetti", description="Deck variant")
    watch_mode: bool = Field(False, description="If True, don't auto-run AI turns (use /step)")


class ActionRequest(BaseModel):
    """Request to submit an action.

    Exactly one of ``action_index`` (into the viewer's legal actions) or
    ``action`` (the wire form of the action) must be given.
    """

    viewer: int = Field(..., ge=0, le=1, description="Submitting player")
    event_count: int = Field(..., ge=0, description="Event count the client last saw")
    action_index: int | None = Field(None, description="Index into the legal actions")
    action: dict[str, Any] | None = Field(None, description="Action in wire form")


class StrategyInfo(BaseModel):
    """Information about an available strategy."""

    name: str
    description: str


def _get_session(game_id: str) -> GameSession:
    session = session_manager.get_session(game_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def _check_viewer(viewer: int) -> None:
    if viewer not in (0, 1):
        raise HTTPException(status_code=422, detail={"reason": "invalid_viewer", "message": f"Bad viewer: {viewer}"})


def _error_response(error: GameError) -> HTTPException:
    """Map an engine rejection to an HTTP error."""
    match error:
        case ValidationError():
            status_code = 422
        case SequenceMismatchError():
            status_code = 409
        case IllegalMoveError():
            status_code = 400
        case _:
            status_code = 400
    return HTTPException(status_code=status_code, detail={"reason": error.reason, "message": str(error)})


def _actions_to_client(session: GameSession, viewer: int) -> list[dict]:
    return [action_to_dict(a, i) for i, a in enumerate(session.game.legal_actions(viewer))]


def _snapshot(session: GameSession, viewer: int) -> dict:
    game = session.game
    return {
        "game_id": session.id,
        "event_count": game.event_count,
        "board": board_to_dict(game.board(viewer)),
        "status": status_to_dict(game.status(viewer)),
        "actions": _actions_to_client(session, viewer),
        "is_human_turn": session.is_human_turn,
    }


def _resolve_action(session: GameSession, request: ActionRequest):
    if (request.action_index is None) == (request.action is None):
        raise ValidationError("Give exactly one of action_index or action")
    if request.action is not None:
        return action_from_dict(request.action)

    legal_actions = session.game.legal_actions(request.viewer)
    if not 0 <= request.action_index < len(legal_actions):
        raise ValidationError(f"Invalid action index: {request.action_index}", reason="invalid_index")
    return legal_actions[request.action_index]


# REST Endpoints


@router.get("/strategies", response_model=list[StrategyInfo])
async def list_strategies():
    """List available AI strategies."""
    return [StrategyInfo(name=name, description=desc) for name, (_, desc) in STRATEGIES.items()]


@router.post("/games", response_model=dict)
async def create_game(request: CreateGameRequest):
    """Create a new game session."""
    def to_config(req: PlayerConfigRequest) -> PlayerConfig:
        return PlayerConfig(
            player_type=req.player_type,
            name=req.name,
            strategy_name=req.strategy,
            strategy_params=req.strategy_params,
        )

    try:
        session = session_manager.create_session(
            player0_config=to_config(request.player0),
            player1_config=to_config(request.player1),
            seed=request.seed,
            variant=request.variant,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not request.watch_mode:
        async with session.lock:
            await session_manager.run_ai_turns_until_human(session)

    viewer = 1 if session.player_configs[0].player_type == PlayerType.AI else 0
    return _snapshot(session, viewer)


@router.get("/games", response_model=list[dict])
async def list_games():
    """List all active game sessions."""
    return session_manager.list_sessions()


@router.get("/games/{game_id}")
async def get_game(game_id: str, viewer: int = 0):
    """Board, status and legal actions as seen by ``viewer``."""
    _check_viewer(viewer)
    session = _get_session(game_id)
    return _snapshot(session, viewer)


@router.get("/games/{game_id}/actions")
async def get_legal_actions(game_id: str, viewer: int = 0):
    """Legal actions for ``viewer``; empty when they are not acting."""
    _check_viewer(viewer)
    session = _get_session(game_id)
    return {
        "event_count": session.game.event_count,
        "actions": _actions_to_client(session, viewer),
    }


@router.get("/games/{game_id}/events")
async def get_events(game_id: str, viewer: int = 0, start: int = 0):
    """Events from ``start`` on, filtered for ``viewer``.

    Poll with ``start`` set to the previous response's ``event_count``.
    """
    _check_viewer(viewer)
    session = _get_session(game_id)

    events = []
    for event in session.game.events_since(viewer, start):
        if isinstance(event, Message):
            events.append(message_to_dict(event))
        else:
            events.append({
                "type": "state",
                "board": board_to_dict(event.board),
                "status": status_to_dict(event.status),
                "actions": [action_to_dict(a, i) for i, a in enumerate(event.actions)],
            })

    return {"event_count": session.game.event_count, "events": events}


@router.post("/games/{game_id}/actions")
async def submit_action(game_id: str, request: ActionRequest):
    """Submit an action for ``request.viewer``.

    Rejections carry a ``reason`` code: 422 for a malformed action, 400 for
    an illegal one and 409 when ``event_count`` is stale.
    """
    session = _get_session(game_id)

    async with session.lock:
        game = session.game
        if session.player_configs[request.viewer].player_type == PlayerType.AI:
            raise HTTPException(
                status_code=400,
                detail={"reason": "ai_controlled", "message": "That seat is played by an AI"},
            )

        try:
            if request.event_count != game.event_count:
                raise SequenceMismatchError(request.event_count, game.event_count)
            action = _resolve_action(session, request)
            game.apply(request.viewer, request.event_count, action)
        except GameError as e:
            logger.info("Rejected action in %s: %s (%s)", game_id, e, e.reason)
            raise _error_response(e)

        if not game.is_game_over:
            await session_manager.run_ai_turns_until_human(session)

    return _snapshot(session, request.viewer)


@router.post("/games/{game_id}/step")
async def step_game(game_id: str, viewer: int = 0):
    """Run a single AI action (observer mode)."""
    _check_viewer(viewer)
    session = _get_session(game_id)

    async with session.lock:
        action = await session_manager.run_ai_turn(session)

    result = _snapshot(session, viewer)
    result["applied"] = str(action) if action is not None else None
    return result


@router.delete("/games/{game_id}")
async def delete_game(game_id: str):
    """Delete a game session."""
    if session_manager.delete_session(game_id):
        return {"deleted": True}
    raise HTTPException(status_code=404, detail="Game not found")
