"""
Evaluation interfaces and the heuristic evaluator used at search leaves.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from . import rules
from .board import Board
from .config import EvaluatorSettings, get_evaluator_settings
from .moves import MoveGenerator
from .types import CENTER_COLS, CENTER_ROWS, Player, Rank

# Strictly larger in magnitude than any heuristic score a legal position can reach.
TERMINAL_SCORE: float = 1_000_000.0


class Evaluator(ABC):
    """Abstract evaluator interface for position scoring."""

    @abstractmethod
    def evaluate_position(self, board: Board, player: Player) -> float:  # pragma: no cover
        """Evaluate a single board position for the given player."""
        raise NotImplementedError

    def batch_predict(self, boards: List[Board], players: List[Player]) -> np.ndarray:
        """Score several positions; the default loops over single calls."""
        out = np.zeros(len(boards), dtype=np.float64)
        for i, (board, player) in enumerate(zip(boards, players)):
            out[i] = float(self.evaluate_position(board, player))
        return out


class HeuristicEvaluator(Evaluator):
    """Material, advancement, centre control, capture threats and mobility.

    ``(own - opponent positional terms) * positional_scale + mobility difference``,
    always from ``player``'s point of view.
    """

    def __init__(self, settings: Optional[EvaluatorSettings] = None) -> None:
        self.settings: EvaluatorSettings = settings or get_evaluator_settings()
        self._generator = MoveGenerator()

    def positional_score(self, board: Board, player: Player) -> float:
        s = self.settings
        grid = board.grid
        own_men = int(np.count_nonzero(grid == player * Rank.MAN))
        own_kings = int(np.count_nonzero(grid == player * Rank.KING))
        opp_men = int(np.count_nonzero(grid == -player * Rank.MAN))
        opp_kings = int(np.count_nonzero(grid == -player * Rank.KING))
        score = (own_men - opp_men) * s.man_value + (own_kings - opp_kings) * s.king_value

        for square in _occupied(board):
            piece = board.piece_at(square)
            sign = 1.0 if piece.owner is player else -1.0
            row, col = square
            if not piece.is_king:
                start_row = 0 if piece.owner is Player.BLACK else 7
                score += sign * s.advancement_bonus * abs(row - start_row)
            if row in CENTER_ROWS and col in CENTER_COLS:
                score += sign * s.center_bonus
            threats = rules.threat_count(board, square)
            if threats:
                penalty = s.king_threat_penalty if piece.is_king else s.man_threat_penalty
                score -= sign * penalty * threats
        return score

    def mobility(self, board: Board, player: Player) -> int:
        return (self._generator.count_moves(board, player)
                - self._generator.count_moves(board, player.opponent))

    def evaluate_position(self, board: Board, player: Player) -> float:
        return (self.positional_score(board, player) * self.settings.positional_scale
                + self.mobility(board, player))


def _occupied(board: Board):
    rows, cols = np.nonzero(board.grid)
    return zip(rows.tolist(), cols.tolist())


def get_evaluator(settings: Optional[EvaluatorSettings] = None) -> Evaluator:
    return HeuristicEvaluator(settings)


def evaluate(board: Board, player: Player) -> float:
    """Heuristic score of ``board`` for ``player`` with the configured weights."""
    return HeuristicEvaluator().evaluate_position(board, player)
