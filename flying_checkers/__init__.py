"""Flying-kings checkers package: rules, move generation, session and search.

Usage examples:
    from flying_checkers import new_game, commit_move, request_ai_move
    from flying_checkers import Board, legal_moves, SearchEngine
"""
from __future__ import annotations

from .board import Board
from .types import (
    CheckersError,
    ContinuationStatus,
    Difficulty,
    Move,
    MoveOutcome,
    MoveRejected,
    Piece,
    Player,
    Rank,
    RejectReason,
    SessionState,
    UndoNotAllowed,
)
from .rules import (
    apply_move,
    captured_squares,
    has_any_capture,
    is_diagonal,
    is_legal_capture,
    is_legal_simple_move,
)
from .moves import MoveGenerator, MoveValidator, legal_moves, is_terminal
from .eval import Evaluator, HeuristicEvaluator, TERMINAL_SCORE, evaluate, get_evaluator
from .search import (
    AlphaBetaSearchStrategy,
    RandomStrategy,
    SearchEngine,
    SearchStrategy,
    get_search_strategy,
    minimax,
)
from .session import GameSession

# Collaborator API
from .engine import (
    new_game,
    piece_at,
    current_player,
    must_continue,
    has_mandatory_captures,
    is_selectable,
    is_legal_move,
    commit_move,
    winner,
    request_ai_move,
)
