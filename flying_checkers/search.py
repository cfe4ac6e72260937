"""
Search interfaces and strategies: random play for the easy tier and
minimax with alpha-beta pruning for the others.
"""
from __future__ import annotations

import logging
import math
import random
import time
from abc import ABC, abstractmethod
from multiprocessing import Pool
from typing import List, Optional, Tuple

from . import rules
from .board import Board
from .config import EngineSettings, get_engine_settings
from .eval import TERMINAL_SCORE, Evaluator, get_evaluator
from .moves import MoveGenerator
from .types import Difficulty, Move, Player, Square

logger = logging.getLogger(__name__)

GameResult = Tuple[float, Move]  # (score, chosen move)


class SearchStrategy(ABC):
    """Abstract interface for move selection strategies."""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)
        self.generator = MoveGenerator()

    def candidates(self, board: Board, player: Player,
                   forced_origin: Optional[Square] = None) -> List[Move]:
        moves = self.generator.legal_moves(board, player, forced_origin)
        if not moves:
            raise ValueError(f"{player.name} has no legal moves; check winner() before searching")
        return moves

    @abstractmethod
    def select_move(self, board: Board, player: Player,
                    forced_origin: Optional[Square] = None) -> Move:  # pragma: no cover
        raise NotImplementedError


class RandomStrategy(SearchStrategy):
    """Uniform choice among the legal moves; no lookahead."""

    def select_move(self, board: Board, player: Player,
                    forced_origin: Optional[Square] = None) -> Move:
        return self.rng.choice(self.candidates(board, player, forced_origin))


class SearchEngine(SearchStrategy):
    """Depth-limited minimax with alpha-beta pruning over private board copies.

    ``depth`` counts plies searched after the root move. Every simulated move hands
    the turn to the other side; the live session board is never touched.
    Among equally scored root moves the choice is random.
    """

    def __init__(self, depth: int, evaluator: Optional[Evaluator] = None,
                 rng: Optional[random.Random] = None, seed: Optional[int] = None,
                 parallel: bool = False, workers: Optional[int] = None) -> None:
        super().__init__(rng=rng, seed=seed)
        if depth < 0:
            raise ValueError("search depth must not be negative")
        self.depth = depth
        self.evaluator: Evaluator = evaluator or get_evaluator()
        self.parallel = parallel
        self.workers = workers
        self.nodes = 0

    def _alphabeta(self, board: Board, to_move: Player, ai_player: Player,
                   depth: int, alpha: float, beta: float) -> float:
        self.nodes += 1
        moves = self.generator.legal_moves(board, to_move)
        if not moves:
            return -TERMINAL_SCORE if to_move is ai_player else TERMINAL_SCORE
        if depth == 0:
            return self.evaluator.evaluate_position(board, ai_player)

        nxt = to_move.opponent
        if to_move is ai_player:
            value = -math.inf
            for m in moves:
                child = rules.apply_move(board, m)
                value = max(value, self._alphabeta(child, nxt, ai_player, depth - 1, alpha, beta))
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return value

        value = math.inf
        for m in moves:
            child = rules.apply_move(board, m)
            value = min(value, self._alphabeta(child, nxt, ai_player, depth - 1, alpha, beta))
            beta = min(beta, value)
            if beta <= alpha:
                break
        return value

    def score_moves(self, board: Board, player: Player, moves: List[Move]) -> List[float]:
        """Minimax value of each root move, alpha carried across siblings.

        Siblings are searched just below the best score so far: a move tying
        the best comes back with its exact value, a worse one fails low.
        """
        if self.parallel and len(moves) > 1:
            return self._score_moves_parallel(board, player, moves)
        alpha = -math.inf
        scores: List[float] = []
        for m in moves:
            child = rules.apply_move(board, m)
            window = math.nextafter(alpha, -math.inf)
            sc = self._alphabeta(child, player.opponent, player, self.depth, window, math.inf)
            scores.append(sc)
            if sc > alpha:
                alpha = sc
        return scores

    def _score_moves_parallel(self, board: Board, player: Player, moves: List[Move]) -> List[float]:
        args = [(board, m, player, self.depth, self.evaluator) for m in moves]
        with Pool(self.workers) as pool:
            return pool.starmap(_score_root_move, args)

    def search(self, board: Board, player: Player,
               forced_origin: Optional[Square] = None) -> GameResult:
        """Perform alpha-beta search and return (best score, chosen move)."""
        moves = self.candidates(board, player, forced_origin)
        self.nodes = 0
        start_time = time.time()
        scores = self.score_moves(board, player, moves)

        finite = [(sc, m) for sc, m in zip(scores, moves) if math.isfinite(sc)]
        if not finite:
            logger.warning("No comparable score among %d candidates; choosing at random", len(moves))
            return (-math.inf, self.rng.choice(moves))

        best_score = max(sc for sc, _ in finite)
        best_moves = [m for sc, m in finite if sc == best_score]
        choice = self.rng.choice(best_moves)
        logger.debug(
            "depth=%d nodes=%d candidates=%d tied=%d score=%.2f move=%s (%.3fs)",
            self.depth, self.nodes, len(moves), len(best_moves), best_score, choice,
            time.time() - start_time,
        )
        return (best_score, choice)

    def select_move(self, board: Board, player: Player,
                    forced_origin: Optional[Square] = None) -> Move:
        return self.search(board, player, forced_origin)[1]


# Alias kept alongside the abstract interface name.
AlphaBetaSearchStrategy = SearchEngine


def _score_root_move(board: Board, move: Move, player: Player, depth: int,
                     evaluator: Evaluator) -> float:
    """Pool worker: full-window alpha-beta value of one root move."""
    engine = SearchEngine(depth, evaluator)
    child = rules.apply_move(board, move)
    return engine._alphabeta(child, player.opponent, player, depth, -math.inf, math.inf)


def minimax(board: Board, to_move: Player, ai_player: Player, depth: int,
            evaluator: Optional[Evaluator] = None) -> float:
    """Exhaustive minimax without pruning, scored from ``ai_player``'s side."""
    evaluator = evaluator or get_evaluator()
    generator = MoveGenerator()

    def mm(pos: Board, side: Player, d: int) -> float:
        moves = generator.legal_moves(pos, side)
        if not moves:
            return -TERMINAL_SCORE if side is ai_player else TERMINAL_SCORE
        if d == 0:
            return evaluator.evaluate_position(pos, ai_player)
        values = [mm(rules.apply_move(pos, m), side.opponent, d - 1) for m in moves]
        return max(values) if side is ai_player else min(values)

    return mm(board, to_move, depth)


def depth_for(difficulty: Difficulty, settings: Optional[EngineSettings] = None) -> int:
    settings = settings or get_engine_settings()
    if difficulty is Difficulty.HARD:
        return settings.hard_depth
    return settings.medium_depth


def get_search_strategy(difficulty: Difficulty, seed: Optional[int] = None,
                        settings: Optional[EngineSettings] = None,
                        evaluator: Optional[Evaluator] = None) -> SearchStrategy:
    """Factory: random play for EASY, alpha-beta at the configured depth otherwise."""
    settings = settings or get_engine_settings()
    if seed is None:
        seed = settings.seed
    if difficulty is Difficulty.EASY:
        return RandomStrategy(seed=seed)
    return SearchEngine(
        depth_for(difficulty, settings),
        evaluator=evaluator,
        seed=seed,
        parallel=settings.parallel_search,
        workers=settings.workers,
    )


__all__ = [
    "SearchStrategy",
    "RandomStrategy",
    "SearchEngine",
    "AlphaBetaSearchStrategy",
    "minimax",
    "depth_for",
    "get_search_strategy",
]
