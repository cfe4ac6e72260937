"""
Game session: the one owner of a live board and its turn/continuation state.
"""
from __future__ import annotations

import logging
import operator
from typing import List, NamedTuple, Optional

from . import rules
from .board import Board, in_bounds
from .config import GameRulesSettings, get_game_rules
from .moves import MoveGenerator
from .search import SearchStrategy, get_search_strategy
from .types import (
    ContinuationStatus,
    Difficulty,
    Move,
    MoveOutcome,
    MoveRejected,
    Piece,
    Player,
    RejectReason,
    SessionState,
    Square,
    UndoNotAllowed,
)

logger = logging.getLogger(__name__)


class _Snapshot(NamedTuple):
    board: Board
    current_player: Player
    forced_continuation: Optional[Square]
    resigned: Optional[Player]
    move_count: int
    last_move: Optional[Move]


def _as_square(value) -> Optional[Square]:
    try:
        row, col = value
        square = (operator.index(row), operator.index(col))
    except (TypeError, ValueError):
        return None
    return square if in_bounds(square) else None


class GameSession:
    """Manages the board, the player to move and any forced continuation.

    All mutation goes through ``commit_move``: the move is validated first and
    the board is only touched once it is known to be legal, so a rejected move
    leaves no trace. White moves first.
    """

    def __init__(self, difficulty: Difficulty = Difficulty.EASY,
                 ai_player: Optional[Player] = None, *,
                 board: Optional[Board] = None,
                 current_player: Player = Player.WHITE,
                 strategy: Optional[SearchStrategy] = None,
                 seed: Optional[int] = None,
                 rules_settings: Optional[GameRulesSettings] = None) -> None:
        self.difficulty = difficulty
        self.ai_player = ai_player
        self.board = board.copy() if board is not None else Board.initial()
        self.current_player = current_player
        self.forced_continuation: Optional[Square] = None
        self.strategy: SearchStrategy = strategy or get_search_strategy(difficulty, seed=seed)
        self.rules_settings = rules_settings or get_game_rules()
        self.selected: Optional[Square] = None
        self.resigned: Optional[Player] = None
        self.move_count = 0
        self.last_move: Optional[Move] = None
        self.history: List[_Snapshot] = []
        self._generator = MoveGenerator()
        logger.debug("New game: difficulty=%s ai_player=%s", difficulty.value,
                     ai_player.name if ai_player is not None else None)

    # ----------------------------
    # Queries
    # ----------------------------
    def piece_at(self, row: int, col: int) -> Optional[Piece]:
        """Piece on a square, or None for an empty, off-board or malformed square."""
        square = _as_square((row, col))
        return self.board.piece_at(square) if square is not None else None

    @property
    def must_continue(self) -> Optional[Square]:
        return self.forced_continuation

    def has_mandatory_captures(self) -> bool:
        return rules.has_mandatory_captures(self.board, self.current_player)

    def is_ai_turn(self) -> bool:
        return self.ai_player is not None and self.current_player is self.ai_player

    def winner(self) -> Optional[Player]:
        """The winning side, or None while the game goes on."""
        if self.resigned is not None:
            return self.resigned.opponent
        for player in (Player.BLACK, Player.WHITE):
            if self.board.piece_count(player) == 0:
                return player.opponent
        if not self.legal_moves():
            return self.current_player.opponent
        return None

    @property
    def is_game_over(self) -> bool:
        return self.winner() is not None

    @property
    def state(self) -> SessionState:
        if self.is_game_over:
            return SessionState.TERMINAL
        if self.forced_continuation is not None:
            return SessionState.FORCED_CONTINUATION
        if self.selected is not None:
            return SessionState.PIECE_SELECTED
        return SessionState.AWAITING_SELECTION

    def legal_moves(self) -> List[Move]:
        if self.resigned is not None:
            return []
        return self._generator.legal_moves(self.board, self.current_player, self.forced_continuation)

    def destinations(self, row: int, col: int) -> List[Square]:
        """Landing squares of the legal moves starting at (row, col)."""
        origin = (row, col)
        if self.is_game_over:
            return []
        return [m.target for m in self.legal_moves() if m.origin == origin]

    # ----------------------------
    # Selection
    # ----------------------------
    def selectable(self, row: int, col: int) -> bool:
        square = _as_square((row, col))
        if square is None or self.is_game_over or self.is_ai_turn():
            return False
        if self.board.owner(square) is not self.current_player:
            return False
        if self.forced_continuation is not None:
            return square == self.forced_continuation
        if self.has_mandatory_captures():
            return rules.has_any_capture(self.board, self.current_player, square)
        return rules.has_any_move(self.board, self.current_player, square)

    def select(self, row: int, col: int) -> bool:
        if not self.selectable(row, col):
            return False
        self.selected = (row, col)
        return True

    def clear_selection(self) -> None:
        self.selected = None

    # ----------------------------
    # Move protocol
    # ----------------------------
    def validate_move(self, origin, target) -> Optional[RejectReason]:
        """Reason the move would be refused, or None if it is legal."""
        origin = _as_square(origin)
        target = _as_square(target)
        if origin is None or target is None:
            return RejectReason.OUT_OF_RANGE
        if self.is_game_over:
            return RejectReason.GAME_OVER
        if self.forced_continuation is not None and origin != self.forced_continuation:
            return RejectReason.WRONG_CONTINUATION_ORIGIN

        player = self.current_player
        owner = self.board.owner(origin)
        if owner is None:
            return RejectReason.NO_PIECE
        if owner is not player:
            return RejectReason.NOT_YOUR_TURN
        if not rules.is_diagonal(origin, target):
            return RejectReason.NOT_DIAGONAL
        if not self.board.is_empty(target):
            return RejectReason.OCCUPIED_DESTINATION

        if rules.is_legal_capture(self.board, player, origin, target):
            return None
        if self.forced_continuation is not None or self.has_mandatory_captures():
            return RejectReason.CAPTURE_MANDATORY
        if rules.is_legal_simple_move(self.board, player, origin, target):
            return None
        return RejectReason.ILLEGAL_MOVE

    def is_legal_move(self, origin, target) -> bool:
        return self.validate_move(origin, target) is None

    def commit_move(self, origin, target) -> MoveOutcome:
        """Validate then apply a move.

        Raises:
            MoveRejected: the move is illegal; nothing was changed.
        """
        reason = self.validate_move(origin, target)
        if reason is not None:
            logger.debug("Rejected %s -> %s: %s", origin, target, reason.value)
            raise MoveRejected(reason, origin, target)
        origin = _as_square(origin)
        target = _as_square(target)

        player = self.current_player
        captured = ()
        if rules.is_legal_capture(self.board, player, origin, target):
            captured = rules.captured_squares(self.board, origin, target)
        move = Move(origin, target, captured)

        self.history.append(self._snapshot())
        promoted = rules.apply_move_inplace(self.board, move)
        self.move_count += 1
        self.last_move = move
        self.selected = None

        if move.is_capture and rules.has_any_capture(self.board, player, target):
            self.forced_continuation = target
            status = ContinuationStatus.CONTINUE
        else:
            self.forced_continuation = None
            self.current_player = player.opponent
            status = ContinuationStatus.TURN_PASSED
        logger.debug("%s played %s%s (%s)", player.name, move,
                     " and was crowned" if promoted else "", status.value)

        winner = self.winner()
        if winner is not None:
            logger.info("Game over after %d moves: %s wins", self.move_count, winner.name)
        return MoveOutcome(move=move, player=player, status=status,
                           promoted=promoted, winner=winner)

    def request_ai_move(self) -> Optional[MoveOutcome]:
        """Let the configured AI play one step if it is its turn."""
        if not self.is_ai_turn() or self.is_game_over:
            return None
        move = self.strategy.select_move(self.board.copy(), self.current_player,
                                         self.forced_continuation)
        return self.commit_move(move.origin, move.target)

    def hint(self) -> Optional[Move]:
        """A suggested move for the side to move; nothing is committed."""
        if self.is_game_over:
            return None
        strategy = self.strategy
        if self.difficulty is Difficulty.EASY:
            strategy = get_search_strategy(Difficulty.MEDIUM)
        return strategy.select_move(self.board.copy(), self.current_player,
                                    self.forced_continuation)

    def resign(self, player: Optional[Player] = None) -> Player:
        """End the game in the opponent's favour. Returns the winner."""
        if self.is_game_over:
            return self.winner()  # type: ignore[return-value]
        loser = player if player is not None else self.current_player
        self.history.append(self._snapshot())
        self.resigned = loser
        self.selected = None
        logger.info("%s resigned", loser.name)
        return loser.opponent

    # ----------------------------
    # History
    # ----------------------------
    def _snapshot(self) -> _Snapshot:
        return _Snapshot(self.board.copy(), self.current_player, self.forced_continuation,
                         self.resigned, self.move_count, self.last_move)

    def _restore(self, snap: _Snapshot) -> None:
        self.board = snap.board
        self.current_player = snap.current_player
        self.forced_continuation = snap.forced_continuation
        self.resigned = snap.resigned
        self.move_count = snap.move_count
        self.last_move = snap.last_move
        self.selected = None

    def undo(self) -> bool:
        """Step back to before the last committed move (and the AI's reply).

        Raises:
            UndoNotAllowed: undo is disabled in the rules configuration.
        """
        if not self.rules_settings.allow_undo:
            raise UndoNotAllowed("undo is disabled by configuration")
        if not self.history:
            return False
        self._restore(self.history.pop())
        while self.history and self.is_ai_turn():
            self._restore(self.history.pop())
        return True

    def reset(self) -> None:
        self.board = Board.initial()
        self.current_player = Player.WHITE
        self.forced_continuation = None
        self.resigned = None
        self.selected = None
        self.move_count = 0
        self.last_move = None
        self.history.clear()
