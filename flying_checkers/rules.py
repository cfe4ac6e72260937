"""
Rule engine: pure predicates over a board.

Nothing in here keeps state. Every function takes the board (and the player it
is asked about) explicitly, so the session and the search can share the same
rules while owning different boards.
"""
from __future__ import annotations

from typing import Iterator, List, Tuple

from .board import Board, in_bounds
from .types import BOARD_SIZE, DIRECTIONS, Move, Player, Rank, Square


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def _between(origin: Square, target: Square) -> Iterator[Square]:
    """Squares strictly between two squares on the same diagonal."""
    dr = _sign(target[0] - origin[0])
    dc = _sign(target[1] - origin[1])
    r, c = origin[0] + dr, origin[1] + dc
    while (r, c) != target:
        yield (r, c)
        r += dr
        c += dc


def _walk(square: Square, dr: int, dc: int) -> Iterator[Square]:
    """Squares along a ray from ``square`` (exclusive) to the edge of the board."""
    r, c = square[0] + dr, square[1] + dc
    while 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
        yield (r, c)
        r += dr
        c += dc


def is_diagonal(origin: Square, target: Square) -> bool:
    return abs(target[0] - origin[0]) == abs(target[1] - origin[1])


def _shape_ok(board: Board, player: Player, origin: Square, target: Square) -> bool:
    """Common preconditions: both on the board, own piece moving, distinct diagonal, empty landing."""
    if not (in_bounds(origin) and in_bounds(target)):
        return False
    if origin == target or not is_diagonal(origin, target):
        return False
    if board.owner(origin) is not player:
        return False
    return board.is_empty(target)


def is_legal_simple_move(board: Board, player: Player, origin: Square, target: Square) -> bool:
    """Non-capturing move: one step forward for a man, an empty slide for a king."""
    if not _shape_ok(board, player, origin, target):
        return False
    if board.is_king(origin):
        return all(board.is_empty(sq) for sq in _between(origin, target))
    return target[0] - origin[0] == player.forward and abs(target[1] - origin[1]) == 1


def is_legal_capture(board: Board, player: Player, origin: Square, target: Square) -> bool:
    """Jump over exactly one opposing piece.

    A man jumps two squares in any diagonal direction over an adjacent enemy.
    A king needs a clean ray: only empties up to a single enemy piece, then only
    empties up to and including ``target``.
    """
    if not _shape_ok(board, player, origin, target):
        return False
    if not board.is_king(origin):
        if abs(target[0] - origin[0]) != 2:
            return False
        mid = ((origin[0] + target[0]) // 2, (origin[1] + target[1]) // 2)
        return board.owner(mid) is player.opponent

    found_enemy = False
    for sq in _between(origin, target):
        owner = board.owner(sq)
        if owner is None:
            continue
        if found_enemy or owner is player:
            return False
        found_enemy = True
    return found_enemy


def captured_squares(board: Board, origin: Square, target: Square) -> Tuple[Square, ...]:
    """Opposing squares removed by the jump ``origin -> target``.

    Assumes the jump was validated; for a man this is the midpoint, for a king
    every enemy on the ray before a friendly piece (one, for a clean ray).
    """
    player = board.owner(origin)
    if player is None or not is_diagonal(origin, target):
        return ()
    if not board.is_king(origin):
        if abs(target[0] - origin[0]) != 2:
            return ()
        mid = ((origin[0] + target[0]) // 2, (origin[1] + target[1]) // 2)
        return (mid,) if board.owner(mid) is player.opponent else ()

    captured: List[Square] = []
    for sq in _between(origin, target):
        owner = board.owner(sq)
        if owner is player:
            break
        if owner is not None:
            captured.append(sq)
    return tuple(captured)


def capture_targets(board: Board, player: Player, square: Square) -> List[Square]:
    """Every landing square of a legal capture by the piece on ``square``."""
    if board.owner(square) is not player:
        return []
    targets: List[Square] = []
    if board.is_king(square):
        for dr, dc in DIRECTIONS:
            jumped = False
            for sq in _walk(square, dr, dc):
                owner = board.owner(sq)
                if owner is None:
                    if jumped:
                        targets.append(sq)
                    continue
                if jumped or owner is player:
                    break
                jumped = True
        return targets

    r, c = square
    for dr, dc in DIRECTIONS:
        mid = (r + dr, c + dc)
        land = (r + 2 * dr, c + 2 * dc)
        if board.is_empty(land) and board.owner(mid) is player.opponent:
            targets.append(land)
    return targets


def simple_targets(board: Board, player: Player, square: Square) -> List[Square]:
    """Every landing square of a legal non-capturing move from ``square``."""
    if board.owner(square) is not player:
        return []
    targets: List[Square] = []
    if board.is_king(square):
        for dr, dc in DIRECTIONS:
            for sq in _walk(square, dr, dc):
                if not board.is_empty(sq):
                    break
                targets.append(sq)
        return targets

    r, c = square
    for dc in (-1, 1):
        sq = (r + player.forward, c + dc)
        if board.is_empty(sq):
            targets.append(sq)
    return targets


def has_any_capture(board: Board, player: Player, square: Square) -> bool:
    return bool(capture_targets(board, player, square))


def has_mandatory_captures(board: Board, player: Player) -> bool:
    """True if any piece of ``player`` can capture anywhere on the board."""
    return any(has_any_capture(board, player, sq) for sq in board.squares_of(player))


def has_any_move(board: Board, player: Player, square: Square) -> bool:
    return bool(capture_targets(board, player, square) or simple_targets(board, player, square))


def promote(board: Board, square: Square) -> bool:
    """Crown a man standing on its farthest row. Returns True if it was crowned."""
    piece = board.piece_at(square)
    if piece is None or piece.is_king:
        return False
    if square[0] != piece.owner.promotion_row:
        return False
    board.set_cell(square, int(piece.owner) * Rank.KING)
    return True


def apply_move_inplace(board: Board, move: Move) -> bool:
    """Clear captured squares, relocate the piece and crown it if due.

    Returns whether the piece was promoted on landing.
    """
    value = board.cell(move.origin)
    for sq in move.captured:
        board.set_cell(sq, 0)
    board.set_cell(move.origin, 0)
    board.set_cell(move.target, value)
    return promote(board, move.target)


def apply_move(board: Board, move: Move) -> Board:
    """Return a new board with ``move`` played; ``board`` is left untouched."""
    nb = board.copy()
    apply_move_inplace(nb, move)
    return nb


def threat_count(board: Board, square: Square) -> int:
    """Number of opposing pieces that could capture the piece on ``square`` right now."""
    victim = board.owner(square)
    if victim is None:
        return 0
    attacker = victim.opponent
    count = 0
    r, c = square
    for dr, dc in DIRECTIONS:
        # Landing square sits on the far side of the victim.
        if not board.is_empty((r + dr, c + dc)):
            continue
        for distance, sq in enumerate(_walk(square, -dr, -dc), start=1):
            owner = board.owner(sq)
            if owner is None:
                continue
            if owner is attacker and (distance == 1 or board.is_king(sq)):
                count += 1
            break
    return count
