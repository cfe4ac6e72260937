"""
Type definitions for the flying-kings checkers engine.

This module provides:
- Enumerations for players, ranks, difficulty tiers and rejection reasons
- Dataclass implementations for pieces, moves and move outcomes
- The engine exception hierarchy
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple

# Basic type aliases
Square = Tuple[int, int]  # (row, col) coordinates
Cell = int  # 0 empty, +1/+2 black man/king, -1/-2 white man/king


class Player(IntEnum):
    """Side to move. The value doubles as the sign of its cells on the grid."""

    BLACK = 1
    WHITE = -1

    @property
    def opponent(self) -> "Player":
        return Player(-self.value)

    @property
    def forward(self) -> int:
        """Row step of a man: Black moves toward row 7, White toward row 0."""
        return 1 if self is Player.BLACK else -1

    @property
    def promotion_row(self) -> int:
        return 7 if self is Player.BLACK else 0


class Rank(IntEnum):
    MAN = 1
    KING = 2


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RejectReason(Enum):
    """Why a requested move was refused."""

    NOT_YOUR_TURN = "not_your_turn"
    NOT_DIAGONAL = "not_diagonal"
    OCCUPIED_DESTINATION = "occupied_destination"
    CAPTURE_MANDATORY = "capture_mandatory"
    WRONG_CONTINUATION_ORIGIN = "wrong_continuation_origin"
    OUT_OF_RANGE = "out_of_range"
    NO_PIECE = "no_piece"
    ILLEGAL_MOVE = "illegal_move"
    GAME_OVER = "game_over"


class ContinuationStatus(Enum):
    TURN_PASSED = "turn_passed"
    CONTINUE = "continue"


class SessionState(Enum):
    AWAITING_SELECTION = "awaiting_selection"
    PIECE_SELECTED = "piece_selected"
    FORCED_CONTINUATION = "forced_continuation"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class Piece:
    """An occupied square: who owns it and whether it has been crowned."""

    owner: Player
    rank: Rank

    @property
    def is_king(self) -> bool:
        return self.rank is Rank.KING

    @property
    def cell(self) -> Cell:
        return int(self.owner) * int(self.rank)

    @classmethod
    def from_cell(cls, cell: Cell) -> Optional["Piece"]:
        if cell == 0:
            return None
        owner = Player.BLACK if cell > 0 else Player.WHITE
        return cls(owner=owner, rank=Rank(abs(cell)))


@dataclass(frozen=True)
class Move:
    """
    A single step of play.

    ``captured`` lists every opposing square removed by this step; it is empty
    for a quiet move, holds the midpoint for a man's jump and the one jumped
    piece for a king's clean-ray jump.
    """

    origin: Square
    target: Square
    captured: Tuple[Square, ...] = ()

    @property
    def is_capture(self) -> bool:
        return bool(self.captured)

    def __str__(self) -> str:
        sep = "x" if self.is_capture else "-"
        return f"{_square_name(self.origin)}{sep}{_square_name(self.target)}"


def _square_name(square: Square) -> str:
    row, col = square
    return f"({row},{col})"


@dataclass(frozen=True)
class MoveOutcome:
    """What happened after a committed move."""

    move: Move
    player: Player
    status: ContinuationStatus
    promoted: bool = False
    winner: Optional[Player] = None

    @property
    def must_continue(self) -> bool:
        return self.status is ContinuationStatus.CONTINUE


class CheckersError(Exception):
    """Base class for recoverable engine errors."""


class MoveRejected(CheckersError):
    """A requested move broke a rule; the session is left untouched."""

    def __init__(self, reason: RejectReason, origin: Square, target: Square) -> None:
        super().__init__(f"move {origin} -> {target} rejected: {reason.value}")
        self.reason = reason
        self.origin = origin
        self.target = target


class UndoNotAllowed(CheckersError):
    """Undo was requested while the rules configuration forbids it."""


# Constants
BOARD_SIZE = 8
CENTER_ROWS = range(2, 6)
CENTER_COLS = range(2, 6)
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
