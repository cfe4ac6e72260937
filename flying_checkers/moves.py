from __future__ import annotations

import logging
from typing import List, Optional

from . import rules
from .board import Board
from .types import Move, Player, Square

logger = logging.getLogger(__name__)


class MoveGenerator:
    """Generates legal moves for a given board and player.

    Captures take precedence over quiet moves at the player level: if any piece
    can capture, no piece may make a quiet move that turn. Each returned move is
    a single step; multi-jump chains are played one jump at a time through the
    forced-continuation origin.
    """

    def captures_for(self, board: Board, square: Square) -> List[Move]:
        player = board.owner(square)
        if player is None:
            return []
        return [
            Move(square, target, rules.captured_squares(board, square, target))
            for target in rules.capture_targets(board, player, square)
        ]

    def simple_moves_for(self, board: Board, square: Square) -> List[Move]:
        player = board.owner(square)
        if player is None:
            return []
        return [Move(square, target) for target in rules.simple_targets(board, player, square)]

    def legal_moves(self, board: Board, player: Player,
                    forced_origin: Optional[Square] = None) -> List[Move]:
        if forced_origin is not None:
            if board.owner(forced_origin) is not player:
                raise RuntimeError(f"forced continuation square {forced_origin} does not hold a {player.name} piece")
            continuation = self.captures_for(board, forced_origin)
            if not continuation:
                logger.error("No capture available from forced continuation square %s", forced_origin)
                raise RuntimeError(f"forced continuation from {forced_origin} has no capture")
            return continuation

        captures: List[Move] = []
        for sq in board.squares_of(player):
            captures.extend(self.captures_for(board, sq))
        if captures:
            return captures

        quiets: List[Move] = []
        for sq in board.squares_of(player):
            quiets.extend(self.simple_moves_for(board, sq))
        return quiets

    def count_moves(self, board: Board, player: Player) -> int:
        """Captures plus quiet moves of every piece, ignoring the mandatory rule."""
        total = 0
        for sq in board.squares_of(player):
            total += len(rules.capture_targets(board, player, sq))
            total += len(rules.simple_targets(board, player, sq))
        return total


class MoveValidator:
    """Validates moves against generated legal moves and basic rules."""

    @staticmethod
    def is_capture(board: Board, origin: Square, target: Square) -> bool:
        player = board.owner(origin)
        return player is not None and rules.is_legal_capture(board, player, origin, target)

    @staticmethod
    def validate(board: Board, player: Player, origin: Square, target: Square,
                 forced_origin: Optional[Square] = None) -> bool:
        legal = _default_generator.legal_moves(board, player, forced_origin)
        return any(m.origin == origin and m.target == target for m in legal)


_default_generator = MoveGenerator()


# Convenience functional API

def legal_moves(board: Board, player: Player, forced_origin: Optional[Square] = None) -> List[Move]:
    return _default_generator.legal_moves(board, player, forced_origin)


def is_terminal(board: Board, player: Player) -> bool:
    """The side to move has lost when it has no legal move (including no pieces)."""
    return len(legal_moves(board, player)) == 0
