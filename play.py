from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from flying_checkers import Difficulty, GameSession, Player, get_search_strategy
from flying_checkers.config import setup_logging

logger = logging.getLogger("play")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    choices = [d.value for d in Difficulty]
    ap = argparse.ArgumentParser(description="Play engine-vs-engine games")
    ap.add_argument("--white", choices=choices, default="medium", help="White's difficulty")
    ap.add_argument("--black", choices=choices, default="easy", help="Black's difficulty")
    ap.add_argument("--games", type=int, default=1, help="Number of games to play")
    ap.add_argument("--max-moves", type=int, default=300, help="Declare a draw after this many moves")
    ap.add_argument("--seed", type=int, default=None, help="Seed for reproducible games")
    ap.add_argument("--show", action="store_true", help="Print the final board of each game")
    return ap.parse_args(argv)


def play_game(white: Difficulty, black: Difficulty, max_moves: int = 300,
              seed: Optional[int] = None) -> GameSession:
    """Play one game to completion (or to ``max_moves``) and return the session."""
    strategies = {
        Player.WHITE: get_search_strategy(white, seed=seed),
        Player.BLACK: get_search_strategy(black, seed=None if seed is None else seed + 1),
    }
    session = GameSession(white)
    while session.winner() is None and session.move_count < max_moves:
        player = session.current_player
        move = strategies[player].select_move(session.board.copy(), player,
                                              session.must_continue)
        session.commit_move(move.origin, move.target)
    return session


def main(argv: Optional[List[str]] = None) -> dict:
    setup_logging()
    args = parse_args(argv)
    white, black = Difficulty(args.white), Difficulty(args.black)
    results = {"WHITE": 0, "BLACK": 0, "DRAW": 0}

    for n in range(args.games):
        seed = None if args.seed is None else args.seed + 2 * n
        session = play_game(white, black, args.max_moves, seed)
        winner = session.winner()
        key = winner.name if winner is not None else "DRAW"
        results[key] += 1
        logger.info("Game %d: %s after %d moves", n + 1, key, session.move_count)
        if args.show:
            print(session.board)

    print(f"white={white.value} black={black.value} "
          f"W:{results['WHITE']} B:{results['BLACK']} D:{results['DRAW']}")
    return results


if __name__ == "__main__":
    main()
