"""Zobrist hashing keys and a transposition table for the negamax search."""

from __future__ import annotations

import time
from dataclasses import dataclass

from .game import N_GRIDS

_MASK64 = (1 << 64) - 1
_MASK128 = (1 << 128) - 1

_INCREMENT = 0x60BEE2BEE120FC15
_MUL1 = 0xA3B195354A39B70D
_MUL2 = 0x1B03738712FAD5C9


def wyhash64(seed: int) -> int:
    """Mix a 64-bit seed into a 64-bit hash value."""
    state = (seed + _INCREMENT) & _MASK64
    tmp = (state * _MUL1) & _MASK128
    m1 = ((tmp >> 64) ^ tmp) & _MASK64
    tmp = (m1 * _MUL2) & _MASK128
    return ((tmp >> 64) ^ tmp) & _MASK64


@dataclass(frozen=True)
class ZobristEntry:
    key: int
    score: int
    move: int


class ZobristTable:
    """Random keys per (cell, player) plus a cache of search results by hash."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = time.time_ns()
        self._keys = tuple(
            (
                wyhash64(seed + (2 * cell) * _INCREMENT),
                wyhash64(seed + (2 * cell + 1) * _INCREMENT),
            )
            for cell in range(N_GRIDS)
        )
        self._entries: dict[int, ZobristEntry] = {}

    def key(self, index: int, player: str) -> int:
        """The random key for ``player`` occupying cell ``index``."""
        if not 0 <= index < N_GRIDS:
            raise IndexError(f"cell index out of range: {index}")
        return self._keys[index][player == "X"]

    def get(self, key: int) -> ZobristEntry | None:
        """The most recently stored entry for ``key``, if any."""
        return self._entries.get(key)

    def put(self, key: int, score: int, move: int) -> None:
        self._entries[key] = ZobristEntry(key, score, move)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)