import random

import numpy as np
import pytest

from flying_checkers.board import Board
from flying_checkers.config import GameRulesSettings
from flying_checkers.search import RandomStrategy
from flying_checkers.session import GameSession
from flying_checkers.types import (
    ContinuationStatus,
    Difficulty,
    Move,
    MoveRejected,
    Piece,
    Player,
    Rank,
    RejectReason,
    SessionState,
    UndoNotAllowed,
)

B = Piece(Player.BLACK, Rank.MAN)
BK = Piece(Player.BLACK, Rank.KING)
W = Piece(Player.WHITE, Rank.MAN)
WK = Piece(Player.WHITE, Rank.KING)


def session_with(pieces, to_move, **kwargs):
    return GameSession(board=Board.from_pieces(pieces), current_player=to_move, **kwargs)


def multi_jump_session(**kwargs):
    # Black (2,1) jumps (3,2) to (4,3), then must jump (5,4) to (6,5).
    return session_with({(2, 1): B, (3, 2): W, (5, 4): W, (0, 7): B, (7, 0): W},
                        Player.BLACK, **kwargs)


def test_new_game_defaults():
    s = GameSession()
    assert s.current_player is Player.WHITE
    assert s.must_continue is None
    assert s.winner() is None
    assert s.state is SessionState.AWAITING_SELECTION
    assert s.piece_at(0, 1) == B
    assert s.piece_at(7, 0) == W
    assert s.piece_at(3, 0) is None
    assert s.piece_at(-1, 4) is None
    assert s.piece_at(2, 9) is None


def test_simple_move_passes_the_turn():
    s = GameSession()
    outcome = s.commit_move((5, 0), (4, 1))
    assert outcome.status is ContinuationStatus.TURN_PASSED
    assert not outcome.must_continue
    assert outcome.player is Player.WHITE
    assert s.current_player is Player.BLACK
    assert s.piece_at(4, 1) == W
    assert s.piece_at(5, 0) is None
    assert s.move_count == 1


@pytest.mark.parametrize("origin,target,reason", [
    ((2, 1), (3, 2), RejectReason.NOT_YOUR_TURN),
    ((5, 0), (4, 0), RejectReason.NOT_DIAGONAL),
    ((6, 1), (5, 0), RejectReason.OCCUPIED_DESTINATION),
    ((5, 0), (4, -1), RejectReason.OUT_OF_RANGE),
    ((8, 1), (7, 0), RejectReason.OUT_OF_RANGE),
    ((4, 1), (3, 2), RejectReason.NO_PIECE),
    ((5, 0), (3, 2), RejectReason.ILLEGAL_MOVE),
])
def test_rejections_leave_state_unchanged(origin, target, reason):
    s = GameSession()
    before = s.board.copy()
    assert s.validate_move(origin, target) is reason
    assert not s.is_legal_move(origin, target)
    with pytest.raises(MoveRejected) as excinfo:
        s.commit_move(origin, target)
    assert excinfo.value.reason is reason
    assert s.board == before
    assert s.current_player is Player.WHITE
    assert s.move_count == 0


def test_man_cannot_step_backwards():
    s = session_with({(3, 2): W, (0, 7): B}, Player.WHITE)
    assert s.validate_move((3, 2), (4, 3)) is RejectReason.ILLEGAL_MOVE


def test_forced_capture_scenario():
    s = session_with({(3, 2): B, (4, 3): W, (1, 0): B, (7, 6): W}, Player.BLACK)
    assert s.has_mandatory_captures()
    assert s.is_legal_move((3, 2), (5, 4))
    assert s.validate_move((1, 0), (2, 1)) is RejectReason.CAPTURE_MANDATORY
    assert s.validate_move((3, 2), (4, 1)) is RejectReason.CAPTURE_MANDATORY
    assert s.selectable(3, 2)
    assert not s.selectable(1, 0)
    assert [(m.origin, m.target) for m in s.legal_moves()] == [((3, 2), (5, 4))]

    outcome = s.commit_move((3, 2), (5, 4))
    assert outcome.move.captured == ((4, 3),)
    assert s.piece_at(4, 3) is None
    assert s.current_player is Player.WHITE


def test_multi_jump_keeps_the_turn():
    s = multi_jump_session()
    first = s.commit_move((2, 1), (4, 3))
    assert first.status is ContinuationStatus.CONTINUE
    assert s.must_continue == (4, 3)
    assert s.current_player is Player.BLACK
    assert s.state is SessionState.FORCED_CONTINUATION

    with pytest.raises(MoveRejected) as excinfo:
        s.commit_move((0, 7), (1, 6))
    assert excinfo.value.reason is RejectReason.WRONG_CONTINUATION_ORIGIN
    assert s.selectable(4, 3)
    assert not s.selectable(0, 7)
    assert s.destinations(4, 3) == [(6, 5)]

    second = s.commit_move((4, 3), (6, 5))
    assert second.status is ContinuationStatus.TURN_PASSED
    assert s.must_continue is None
    assert s.current_player is Player.WHITE
    assert s.piece_at(3, 2) is None and s.piece_at(5, 4) is None


def test_continuation_must_be_a_capture():
    s = multi_jump_session()
    s.commit_move((2, 1), (4, 3))
    assert s.validate_move((4, 3), (5, 2)) is RejectReason.CAPTURE_MANDATORY


def test_king_double_piece_ray_is_rejected():
    s = session_with({(0, 1): BK, (2, 3): W, (3, 4): W}, Player.BLACK)
    for landing in [(4, 5), (5, 6), (6, 7)]:
        assert not s.is_legal_move((0, 1), landing)
    assert s.is_legal_move((0, 1), (1, 2))


def test_promotion_on_landing():
    s = session_with({(1, 2): W, (5, 6): B}, Player.WHITE)
    outcome = s.commit_move((1, 2), (0, 1))
    assert outcome.promoted
    assert s.piece_at(0, 1) == WK


def test_promoted_piece_continues_as_king():
    # White jumps (1,2) onto row 0; as a king it then reaches (3,4) along the long ray.
    s = session_with({(2, 3): W, (1, 2): B, (3, 4): B, (6, 7): B}, Player.WHITE)
    outcome = s.commit_move((2, 3), (0, 1))
    assert outcome.promoted
    assert s.piece_at(0, 1) == WK
    assert outcome.status is ContinuationStatus.CONTINUE
    assert s.must_continue == (0, 1)
    assert (4, 5) in s.destinations(0, 1)


def test_king_rank_never_changes():
    s = session_with({(3, 4): WK, (0, 7): B}, Player.WHITE)
    s.commit_move((3, 4), (0, 1))
    assert s.piece_at(0, 1) == WK


def test_winner_when_a_side_has_no_pieces():
    s = session_with({(3, 2): B}, Player.WHITE)
    assert s.winner() is Player.BLACK
    assert s.state is SessionState.TERMINAL
    assert not s.selectable(3, 2)


def test_winner_when_side_to_move_is_blocked():
    s = session_with({(6, 1): B, (5, 2): B, (7, 0): W}, Player.WHITE)
    assert s.winner() is Player.BLACK
    assert s.validate_move((7, 0), (6, 1)) is RejectReason.GAME_OVER


def test_capturing_the_last_piece_ends_the_game():
    s = session_with({(3, 2): B, (4, 3): W}, Player.BLACK)
    outcome = s.commit_move((3, 2), (5, 4))
    assert outcome.winner is Player.BLACK
    with pytest.raises(MoveRejected) as excinfo:
        s.commit_move((5, 4), (6, 5))
    assert excinfo.value.reason is RejectReason.GAME_OVER


def test_selection_state_machine():
    s = GameSession()
    assert not s.select(2, 1)  # Black piece, White to move
    assert not s.select(6, 1)  # boxed in
    assert s.select(5, 0)
    assert s.state is SessionState.PIECE_SELECTED
    s.commit_move((5, 0), (4, 1))
    assert s.state is SessionState.AWAITING_SELECTION


def test_ai_plays_only_on_its_turn():
    s = GameSession(Difficulty.EASY, Player.BLACK, seed=1)
    assert s.request_ai_move() is None
    assert s.selectable(5, 0)

    s.commit_move((5, 0), (4, 1))
    assert not s.selectable(2, 1)
    outcome = s.request_ai_move()
    assert outcome is not None
    assert outcome.player is Player.BLACK
    assert s.current_player is Player.WHITE


def test_ai_finishes_its_multi_jump():
    s = multi_jump_session(difficulty=Difficulty.MEDIUM, ai_player=Player.BLACK, seed=0)
    first = s.request_ai_move()
    assert first.must_continue
    second = s.request_ai_move()
    assert not second.must_continue
    assert s.current_player is Player.WHITE


def test_ai_without_configuration_does_nothing():
    s = GameSession()
    assert s.request_ai_move() is None


def test_hint_does_not_commit():
    s = GameSession()
    before = s.board.copy()
    hint = s.hint()
    assert s.is_legal_move(hint.origin, hint.target)
    assert s.board == before
    assert s.move_count == 0


def test_undo_restores_previous_position():
    s = multi_jump_session()
    before = s.board.copy()
    s.commit_move((2, 1), (4, 3))
    assert s.undo()
    assert s.board == before
    assert s.must_continue is None
    assert s.current_player is Player.BLACK
    assert not s.undo()


def test_undo_rewinds_past_the_ai_reply():
    s = GameSession(Difficulty.EASY, Player.BLACK, seed=3)
    s.commit_move((5, 0), (4, 1))
    s.request_ai_move()
    assert s.undo()
    assert s.board == Board.initial()
    assert s.current_player is Player.WHITE


def test_undo_can_be_disabled():
    s = GameSession(rules_settings=GameRulesSettings(allow_undo=False))
    s.commit_move((5, 0), (4, 1))
    with pytest.raises(UndoNotAllowed):
        s.undo()


def test_resign():
    s = GameSession()
    assert s.resign() is Player.BLACK
    assert s.winner() is Player.BLACK
    assert s.legal_moves() == []
    assert s.undo()
    assert s.winner() is None


def test_reset():
    s = GameSession()
    s.commit_move((5, 0), (4, 1))
    s.reset()
    assert s.board == Board.initial()
    assert s.current_player is Player.WHITE
    assert s.history == []


@pytest.mark.parametrize("seed", range(6))
def test_random_playout_invariants(seed):
    rng = random.Random(seed)
    s = GameSession(strategy=RandomStrategy(seed=seed))
    for _ in range(400):
        if s.winner() is not None:
            break
        moves = s.legal_moves()
        if s.has_mandatory_captures() or s.must_continue is not None:
            assert moves and all(m.is_capture for m in moves)
        if s.must_continue is not None:
            assert {m.origin for m in moves} == {s.must_continue}

        move = rng.choice(moves)
        mover = s.current_player
        was_king = s.board.is_king(move.origin)
        pieces_before = s.board.piece_count(mover.opponent)

        outcome = s.commit_move(move.origin, move.target)

        assert s.board.piece_count(mover.opponent) == pieces_before - len(move.captured)
        if was_king:
            assert s.board.is_king(move.target) and not outcome.promoted
        if outcome.must_continue:
            assert s.current_player is mover
            assert s.must_continue == move.target
        else:
            assert s.current_player is mover.opponent
            assert s.must_continue is None


@pytest.mark.parametrize("origin,target", [
    ((5, 0), (4, 1.0)),
    ((5, 0.4), (4, 1)),
    ((5, 0), ("4", 1)),
    ((5, 0), (4,)),
    (None, (4, 1)),
])
def test_malformed_coordinates_are_out_of_range(origin, target):
    s = GameSession()
    assert s.validate_move(origin, target) is RejectReason.OUT_OF_RANGE
    with pytest.raises(MoveRejected):
        s.commit_move(origin, target)
    assert s.board == Board.initial()


def test_integer_like_coordinates_are_accepted():
    s = GameSession()
    assert s.piece_at(3, 2.7) is None
    assert s.piece_at(np.int64(5), np.int64(0)) == W
    outcome = s.commit_move((np.int64(5), np.int64(0)), (4, 1))
    assert outcome.move == Move((5, 0), (4, 1))
