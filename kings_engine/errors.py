"""Error taxonomy for the engine.

Every rejection a caller can trigger derives from ``GameError`` and carries a
stable ``reason`` code. Rejections are raised before any new state is built,
so the state a caller holds is never partially updated.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for rejected actions."""

    default_reason = "rejected"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.reason = reason or self.default_reason


class ValidationError(GameError):
    """Malformed action payload (unknown card, bad index, wrong shape)."""

    default_reason = "invalid_action"


class IllegalMoveError(GameError):
    """Action is not in the acting viewer's legal-action set."""

    default_reason = "illegal_move"


class SequenceMismatchError(GameError):
    """Caller submitted against a stale event count and must refresh."""

    default_reason = "sequence_mismatch"

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Expected event count {expected}, game is at {actual}",
        )
        self.expected = expected
        self.actual = actual


class InvariantViolation(Exception):
    """Internal consistency failure. Indicates a bug, never a user error."""
