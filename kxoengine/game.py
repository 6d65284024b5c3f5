"""Board geometry, win detection and heuristic evaluation for 4x4 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableSequence, Sequence

BOARD_SIZE = 4
GOAL = 3
N_GRIDS = BOARD_SIZE * BOARD_SIZE

EMPTY = " "
DRAW = "D"

FIXED_SCALE_BITS = 8
FIXED_ONE = 1 << FIXED_SCALE_BITS
FIXED_HALF = 1 << (FIXED_SCALE_BITS - 1)


@dataclass(frozen=True)
class Line:
    """A direction with the range of starting cells whose segments fit the board."""

    i_shift: int
    j_shift: int
    i_lower_bound: int
    j_lower_bound: int
    i_upper_bound: int
    j_upper_bound: int

    def starts(self):
        """Yield every (row, column) where a segment of this direction begins."""
        for i in range(self.i_lower_bound, self.i_upper_bound):
            for j in range(self.j_lower_bound, self.j_upper_bound):
                yield i, j

    def cells(self, i: int, j: int):
        """Yield the board indices of the segment that starts at (i, j)."""
        for k in range(GOAL):
            yield index(i + k * self.i_shift, j + k * self.j_shift)


LINES = (
    Line(0, 1, 0, 0, BOARD_SIZE, BOARD_SIZE - GOAL + 1),  # row
    Line(1, 0, 0, 0, BOARD_SIZE - GOAL + 1, BOARD_SIZE),  # column
    Line(1, 1, 0, 0, BOARD_SIZE - GOAL + 1, BOARD_SIZE - GOAL + 1),  # primary
    Line(1, -1, 0, GOAL - 1, BOARD_SIZE - GOAL + 1, BOARD_SIZE),  # secondary
)

Table = Sequence[str]


def index(i: int, j: int) -> int:
    return i * BOARD_SIZE + j


def opponent(player: str) -> str:
    """Swap 'O' and 'X'."""
    return chr(ord(player) ^ ord("O") ^ ord("X"))


def new_table() -> MutableSequence[str]:
    """Return an empty board."""
    return [EMPTY] * N_GRIDS


def _segment_winner(table: Table, i: int, j: int, line: Line) -> str:
    first, *rest = (table[cell] for cell in line.cells(i, j))
    if first == EMPTY or any(cell != first for cell in rest):
        return EMPTY
    return first


def check_win(table: Table) -> str:
    """Return the winner, 'D' for a full board without one, or ' ' if play goes on."""
    for line in LINES:
        for i, j in line.starts():
            winner = _segment_winner(table, i, j, line)
            if winner != EMPTY:
                return winner
    if any(cell == EMPTY for cell in table):
        return EMPTY
    return DRAW


def calculate_win_value(win: str, player: str) -> int:
    """Fixed-point value of an outcome from the point of view of ``player``."""
    if win == player:
        return FIXED_ONE
    if win == opponent(player):
        return 0
    return FIXED_HALF


def available_moves(table: Table) -> list[int]:
    """Indices of the empty cells, in board order."""
    return [i for i, cell in enumerate(table) if cell == EMPTY]


def eval_line_segment_score(table: Table, player: str, i: int, j: int, line: Line) -> int:
    """Score one segment: powers of ten for one side's pieces, zero if both appear."""
    score = 0
    for cell in line.cells(i, j):
        current = table[cell]
        if current == player:
            if score < 0:
                return 0
            score = score * 10 if score else 1
        elif current != EMPTY:
            if score > 0:
                return 0
            score = score * 10 if score else -1
    return score


def get_score(table: Table, player: str) -> int:
    """Heuristic value of the board for ``player``."""
    return sum(
        eval_line_segment_score(table, player, i, j, line)
        for line in LINES
        for i, j in line.starts()
    )