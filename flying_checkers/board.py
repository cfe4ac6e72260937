from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

import numpy as np

from .types import BOARD_SIZE, Cell, Piece, Player, Rank, Square

# ============================
# Board indexing and constants
# ============================
DARK_SQUARES: List[Square] = [
    (r, c) for r in range(BOARD_SIZE) for c in range(BOARD_SIZE) if (r + c) % 2 == 1
]


def in_bounds(square: Square) -> bool:
    r, c = square
    return 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE


def is_dark(square: Square) -> bool:
    r, c = square
    return (r + c) % 2 == 1


class Board:
    """8x8 grid of cells with value semantics.

    Cells hold ``owner * rank``: 0 empty, +1/+2 Black man/king,
    -1/-2 White man/king. Every copy owns its own numpy buffer, so a board
    handed to the search can be mutated freely without touching the live game.
    """

    __slots__ = ("grid",)

    def __init__(self, grid: Optional[np.ndarray] = None) -> None:
        if grid is None:
            grid = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
        elif grid.shape != (BOARD_SIZE, BOARD_SIZE):
            raise ValueError(f"Board grid must be {BOARD_SIZE}x{BOARD_SIZE}, got {grid.shape}")
        self.grid = grid

    @classmethod
    def initial(cls) -> "Board":
        """Black men on the dark squares of rows 0..2, White men on rows 5..7."""
        board = cls()
        for r, c in DARK_SQUARES:
            if r <= 2:
                board.grid[r, c] = Player.BLACK * Rank.MAN
            elif r >= 5:
                board.grid[r, c] = Player.WHITE * Rank.MAN
        return board

    @classmethod
    def from_pieces(cls, pieces: dict) -> "Board":
        """Build a board from ``{(row, col): Piece}``; pieces must sit on dark squares."""
        board = cls()
        for square, piece in pieces.items():
            if not in_bounds(square) or not is_dark(square):
                raise ValueError(f"Pieces may only occupy dark squares, got {square}")
            board.grid[square] = piece.cell
        return board

    def copy(self) -> "Board":
        return Board(self.grid.copy())

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> "Board":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    def __hash__(self) -> int:
        return hash(self.grid.tobytes())

    # ----------------------------
    # Cell access
    # ----------------------------
    def cell(self, square: Square) -> Cell:
        """Raw cell value; out-of-range squares read as empty."""
        if not in_bounds(square):
            return 0
        return int(self.grid[square])

    def set_cell(self, square: Square, value: Cell) -> None:
        self.grid[square] = value

    def piece_at(self, square: Square) -> Optional[Piece]:
        return Piece.from_cell(self.cell(square))

    def is_empty(self, square: Square) -> bool:
        return in_bounds(square) and self.grid[square] == 0

    def owner(self, square: Square) -> Optional[Player]:
        v = self.cell(square)
        if v == 0:
            return None
        return Player.BLACK if v > 0 else Player.WHITE

    def is_king(self, square: Square) -> bool:
        return abs(self.cell(square)) == Rank.KING

    def squares_of(self, player: Player) -> Iterator[Square]:
        """Occupied squares belonging to ``player`` in row-major order."""
        rows, cols = np.nonzero(self.grid * int(player) > 0)
        for r, c in zip(rows.tolist(), cols.tolist()):
            yield (r, c)

    # ----------------------------
    # Summary helpers
    # ----------------------------
    def count_pieces(self) -> Tuple[int, int, int, int]:
        """Count pieces of each type on the board.

        Returns:
            Tuple of (black_men, white_men, black_kings, white_kings)
        """
        g = self.grid
        return (
            int(np.count_nonzero(g == Player.BLACK * Rank.MAN)),
            int(np.count_nonzero(g == Player.WHITE * Rank.MAN)),
            int(np.count_nonzero(g == Player.BLACK * Rank.KING)),
            int(np.count_nonzero(g == Player.WHITE * Rank.KING)),
        )

    def piece_count(self, player: Player) -> int:
        return int(np.count_nonzero(self.grid * int(player) > 0))

    def __str__(self) -> str:
        symbols = {0: ".", 1: "b", 2: "B", -1: "w", -2: "W"}
        lines = ["  " + " ".join(str(c) for c in range(BOARD_SIZE))]
        for r in range(BOARD_SIZE):
            lines.append(f"{r} " + " ".join(symbols[int(v)] for v in self.grid[r]))
        return "\n".join(lines)

    def __repr__(self) -> str:
        bm, wm, bk, wk = self.count_pieces()
        return f"Board(black={bm}+{bk}K, white={wm}+{wk}K)"
