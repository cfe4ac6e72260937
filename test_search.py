import math

import pytest

from flying_checkers import rules
from flying_checkers.board import Board
from flying_checkers.config import EngineSettings
from flying_checkers.eval import TERMINAL_SCORE
from flying_checkers.moves import legal_moves
from flying_checkers.search import RandomStrategy, SearchEngine, get_search_strategy, minimax
from flying_checkers.types import Difficulty, Move, Piece, Player, Rank

B = Piece(Player.BLACK, Rank.MAN)
BK = Piece(Player.BLACK, Rank.KING)
W = Piece(Player.WHITE, Rank.MAN)
WK = Piece(Player.WHITE, Rank.KING)


def midgame_board():
    return Board.from_pieces({
        (1, 2): B, (2, 1): B, (2, 5): B, (3, 4): BK,
        (5, 0): W, (5, 4): W, (6, 3): W, (6, 7): W, (4, 1): WK,
    })


def test_random_strategy_is_reproducible_with_seed():
    board = Board.initial()
    a = RandomStrategy(seed=7).select_move(board, Player.WHITE)
    b = RandomStrategy(seed=7).select_move(board, Player.WHITE)
    assert a == b
    assert a in legal_moves(board, Player.WHITE)


def test_search_without_moves_raises():
    board = Board.from_pieces({(3, 2): B})
    with pytest.raises(ValueError):
        SearchEngine(2, seed=0).select_move(board, Player.WHITE)


def test_search_takes_the_only_capture():
    board = Board.from_pieces({(3, 2): B, (4, 3): W, (1, 0): B, (7, 6): W})
    move = SearchEngine(2, seed=0).select_move(board, Player.BLACK)
    assert move == Move((3, 2), (5, 4), ((4, 3),))


def test_search_finds_the_blocking_win():
    # (5,0)->(6,1) leaves the White man on (7,0) with no move at all.
    board = Board.from_pieces({(5, 0): B, (5, 2): B, (7, 0): W})
    score, move = SearchEngine(1, seed=0).search(board, Player.BLACK)
    assert move == Move((5, 0), (6, 1))
    assert score == TERMINAL_SCORE


def test_search_respects_forced_origin():
    board = Board.from_pieces({(3, 2): B, (4, 3): W, (3, 6): B, (4, 5): W})
    move = SearchEngine(2, seed=1).select_move(board, Player.BLACK, forced_origin=(3, 6))
    assert move.origin == (3, 6) and move.is_capture


def test_search_does_not_touch_the_board():
    board = midgame_board()
    before = board.copy()
    SearchEngine(2, seed=0).search(board, Player.WHITE)
    assert board == before


@pytest.mark.parametrize("depth", [0, 1, 2])
@pytest.mark.parametrize("make_board,player", [
    (Board.initial, Player.WHITE),
    (midgame_board, Player.BLACK),
    (midgame_board, Player.WHITE),
])
def test_alpha_beta_matches_exhaustive_minimax(depth, make_board, player):
    board = make_board()
    score, move = SearchEngine(depth, seed=42).search(board, player)

    exact = {m: minimax(rules.apply_move(board, m), player.opponent, player, depth)
             for m in legal_moves(board, player)}
    assert score == pytest.approx(max(exact.values()))
    assert exact[move] == pytest.approx(score)


def test_ties_are_broken_randomly():
    board = Board.initial()
    engine = SearchEngine(0, seed=0)
    moves = legal_moves(board, Player.WHITE)
    scores = engine.score_moves(board, Player.WHITE, moves)
    best = max(scores)
    tied = {m for m, s in zip(moves, scores) if s == best}

    picks = {SearchEngine(0, seed=s).select_move(board, Player.WHITE) for s in range(40)}
    assert picks <= tied
    if len(tied) > 1:
        assert len(picks) > 1


def test_falls_back_to_random_when_scores_are_not_finite():
    class NanEngine(SearchEngine):
        def score_moves(self, board, player, moves):
            return [math.nan] * len(moves)

    board = Board.initial()
    score, move = NanEngine(2, seed=0).search(board, Player.WHITE)
    assert move in legal_moves(board, Player.WHITE)
    assert score == -math.inf


def test_parallel_root_search_agrees_with_sequential():
    board = midgame_board()
    seq_score, _ = SearchEngine(1, seed=0).search(board, Player.BLACK)
    par = SearchEngine(1, seed=0, parallel=True, workers=2)
    par_score, par_move = par.search(board, Player.BLACK)
    assert par_score == pytest.approx(seq_score)
    assert par_move in legal_moves(board, Player.BLACK)


def test_depth_must_not_be_negative():
    with pytest.raises(ValueError):
        SearchEngine(-1)


def test_medium_tier_searches_two_plies_after_the_root_move():
    board = midgame_board()
    strategy = get_search_strategy(Difficulty.MEDIUM, seed=0, settings=EngineSettings())
    score, move = strategy.search(board, Player.BLACK)

    exact = {m: minimax(rules.apply_move(board, m), Player.WHITE, Player.BLACK, 2)
             for m in legal_moves(board, Player.BLACK)}
    assert score == pytest.approx(max(exact.values()))
    assert exact[move] == pytest.approx(score)
