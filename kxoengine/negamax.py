"""Iterative-deepening negamax search with principal variation windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableSequence, Optional, Sequence

from .game import EMPTY, N_GRIDS, available_moves, check_win, get_score, opponent
from .zobrist import ZobristTable

MAX_SEARCH_DEPTH = 6

_WORST_SCORE = -10000
_WINDOW = 100000


@dataclass(frozen=True)
class Move:
    score: int
    move: int


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class Negamax:
    """Alpha-beta negamax player backed by a Zobrist transposition table."""

    def __init__(self, zobrist: Optional[ZobristTable] = None, max_depth: int = MAX_SEARCH_DEPTH) -> None:
        if max_depth < 2:
            raise ValueError(f"max_depth must be at least 2, got {max_depth}")
        self.zobrist = zobrist if zobrist is not None else ZobristTable()
        self.max_depth = max_depth
        self._hash = 0
        self._history_sum = [0] * N_GRIDS
        self._history_count = [0] * N_GRIDS

    def _history_score(self, move: int) -> int:
        count = self._history_count[move]
        return _trunc_div(self._history_sum[move], count) if count else 0

    def _search(self, table: MutableSequence[str], depth: int, player: str, alpha: int, beta: int) -> Move:
        if depth == 0 or check_win(table) != EMPTY:
            return Move(get_score(table, player), -1)
        entry = self.zobrist.get(self._hash)
        if entry is not None:
            return Move(entry.score, entry.move)

        best = Move(_WORST_SCORE, -1)
        other = opponent(player)
        moves = sorted(available_moves(table), key=self._history_score, reverse=True)

        for position, move in enumerate(moves):
            key = self.zobrist.key(move, player)
            table[move] = player
            self._hash ^= key
            if position == 0:
                score = -self._search(table, depth - 1, other, -beta, -alpha).score
            else:
                score = -self._search(table, depth - 1, other, -alpha - 1, -alpha).score
                if alpha < score < beta:
                    score = -self._search(table, depth - 1, other, -beta, -score).score
            self._history_count[move] += 1
            self._history_sum[move] += score
            if score > best.score:
                best = Move(score, move)
            table[move] = EMPTY
            self._hash ^= key
            alpha = max(alpha, score)
            if alpha >= beta:
                break

        self.zobrist.put(self._hash, best.score, best.move)
        return best

    def predict(self, table: Sequence[str], player: str) -> Move:
        """Search the position for ``player`` and return the chosen move and its score."""
        board = list(table)
        self._history_sum = [0] * N_GRIDS
        self._history_count = [0] * N_GRIDS
        result = Move(_WORST_SCORE, -1)
        for depth in range(2, self.max_depth + 1, 2):
            result = self._search(board, depth, player, -_WINDOW, _WINDOW)
            self.zobrist.clear()
        return result