"""
Functional facade over ``GameSession`` for UI collaborators.

Each call either queries the session or performs one synchronous step; any
scheduling, animation or notification around these calls belongs to the caller.
"""
from __future__ import annotations

from typing import Optional

from .session import GameSession
from .types import Difficulty, Move, MoveOutcome, Piece, Player, Square

__all__ = [
    "new_game",
    "piece_at",
    "current_player",
    "must_continue",
    "has_mandatory_captures",
    "is_selectable",
    "is_legal_move",
    "commit_move",
    "winner",
    "request_ai_move",
]


def new_game(difficulty: Difficulty = Difficulty.EASY, ai_player: Optional[Player] = None,
             seed: Optional[int] = None) -> GameSession:
    """Fresh standard layout, White to move."""
    return GameSession(difficulty, ai_player, seed=seed)


def piece_at(session: GameSession, row: int, col: int) -> Optional[Piece]:
    return session.piece_at(row, col)


def current_player(session: GameSession) -> Player:
    return session.current_player


def must_continue(session: GameSession) -> Optional[Square]:
    return session.must_continue


def has_mandatory_captures(session: GameSession) -> bool:
    return session.has_mandatory_captures()


def is_selectable(session: GameSession, row: int, col: int) -> bool:
    return session.selectable(row, col)


def is_legal_move(session: GameSession, origin: Square, target: Square) -> bool:
    return session.is_legal_move(origin, target)


def commit_move(session: GameSession, origin: Square, target: Square) -> MoveOutcome:
    """Raises ``MoveRejected`` when the move is illegal."""
    return session.commit_move(origin, target)


def winner(session: GameSession) -> Optional[Player]:
    return session.winner()


def request_ai_move(session: GameSession) -> Optional[Move]:
    outcome = session.request_ai_move()
    return outcome.move if outcome is not None else None
