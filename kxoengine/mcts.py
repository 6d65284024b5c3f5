"""Monte Carlo tree search using 32-bit fixed-point UCT scores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .game import (
    EMPTY,
    FIXED_HALF,
    FIXED_ONE,
    FIXED_SCALE_BITS,
    available_moves,
    calculate_win_value,
    check_win,
    opponent,
)
from .xoroshiro import Xoroshiro128

ITERATIONS = 100000

FIXED_MAX = 0xFFFFFFFF
FIXED_MIN = 0

_MASK32 = 0xFFFFFFFF
_SIGN = 1 << 31


def fixed_sqrt(x: int) -> int:
    """Square root of a fixed-point value, computed bit by bit in 32-bit arithmetic."""
    x &= _MASK32
    if x == 0 or x == FIXED_ONE:
        return x
    s = 0
    for bit in range((x | 1).bit_length() - 1, -1, -1):
        t = 1 << bit
        candidate = (s + t) & _MASK32
        if ((candidate * candidate) & _MASK32) >> FIXED_SCALE_BITS <= x:
            s = candidate
    return s


def fixed_log(v: int) -> int:
    """Natural logarithm of a fixed-point value; negative results carry bit 31."""
    v &= _MASK32
    if v == 0 or v == FIXED_ONE:
        return 0

    numerator = (v - FIXED_ONE) & _MASK32
    negative = bool(numerator & _SIGN)
    if negative:
        numerator = _SIGN - (numerator & (_SIGN - 1))

    y = ((numerator << FIXED_SCALE_BITS) & _MASK32) // ((v + FIXED_ONE) & _MASK32)

    total = 0
    for power in range(1, 20, 2):
        z = FIXED_ONE
        for _ in range(power):
            z = ((z * y) & _MASK32) >> FIXED_SCALE_BITS
        z = (z << FIXED_SCALE_BITS) & _MASK32
        z //= power << FIXED_SCALE_BITS
        total = (total + z) & _MASK32
    total = (total << 1) & _MASK32
    return total | _SIGN if negative else total


EXPLORATION_FACTOR = fixed_sqrt(1 << (FIXED_SCALE_BITS + 1))


def uct_score(n_total: int, n_visits: int, score: int) -> int:
    """Upper confidence bound of a child; unvisited children rank highest."""
    if n_visits == 0:
        return FIXED_MAX
    # The exploitation term shifts by 8 / (n_visits << 8), which is zero
    # for every positive visit count, leaving the accumulated score as is.
    shift = FIXED_SCALE_BITS // ((n_visits << FIXED_SCALE_BITS) & _MASK32)
    result = (score << shift) & _MASK32
    log_total = fixed_log((n_total << FIXED_SCALE_BITS) & _MASK32)
    exploration = (EXPLORATION_FACTOR * fixed_sqrt(log_total // (n_visits & _MASK32))) & _MASK32
    exploration >>= FIXED_SCALE_BITS
    return (result + exploration) & _MASK32


@dataclass(eq=False)
class _Node:
    move: int
    player: str
    parent: Optional["_Node"] = None
    n_visits: int = 0
    score: int = 0
    children: list["_Node"] = field(default_factory=list)


def _select_move(node: _Node) -> Optional[_Node]:
    best_node = None
    best_score = 0
    for child in node.children:
        score = uct_score(node.n_visits, child.n_visits, child.score)
        if score > best_score:
            best_score = score
            best_node = child
    return best_node


def _backpropagate(node: Optional[_Node], score: int) -> None:
    while node is not None:
        node.n_visits += 1
        node.score = (node.score + score) & _MASK32
        node = node.parent
        score = (1 - score) & _MASK32


def _expand(node: _Node, table: Sequence[str]) -> int:
    child_player = opponent(node.player)
    node.children = [_Node(move, child_player, node) for move in available_moves(table)]
    return len(node.children)


class MonteCarloSearch:
    """Chooses moves by random playouts guided by UCT selection."""

    def __init__(self, iterations: int = ITERATIONS, rng: Optional[Xoroshiro128] = None) -> None:
        self.iterations = iterations
        self.rng = rng if rng is not None else Xoroshiro128()
        self.active_nodes = 0

    def _simulate(self, table: Sequence[str], player: str) -> int:
        board = list(table)
        current = player
        self.rng.jump()
        while True:
            moves = available_moves(board)
            if not moves:
                break
            move = moves[self.rng.next() % len(moves)]
            board[move] = current
            win = check_win(board)
            if win != EMPTY:
                return calculate_win_value(win, player)
            current = opponent(current)
        return FIXED_HALF

    def search(self, table: Sequence[str], player: str) -> int:
        """Return the best cell for ``player`` to take, or -1 if there is none."""
        root = _Node(-1, player)
        self.active_nodes = 1
        for _ in range(self.iterations):
            node = root
            board = list(table)
            while True:
                win = check_win(board)
                if win != EMPTY:
                    _backpropagate(node, calculate_win_value(win, opponent(node.player)))
                    break
                if node.n_visits == 0:
                    _backpropagate(node, self._simulate(board, node.player))
                    break
                if not node.children:
                    self.active_nodes += _expand(node, board)
                selected = _select_move(node)
                if selected is None:
                    return -1
                node = selected
                board[node.move] = opponent(node.player)

        best_node = root
        most_visits = -1
        for child in root.children:
            if child.n_visits > most_visits:
                most_visits = child.n_visits
                best_node = child
        return best_node.move