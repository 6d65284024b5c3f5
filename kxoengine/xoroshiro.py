"""Xoroshiro128+ style pseudo-random generator used by the Monte Carlo search."""

from __future__ import annotations

_MASK64 = (1 << 64) - 1

DEFAULT_SEED = (314159265, 1618033989)

_JUMP = (0xDF900294D8F554A5, 0x170865DF4B3201FC)


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (64 - k))) & _MASK64


class Xoroshiro128:
    """A 128-bit state generator producing 64-bit unsigned integers."""

    def __init__(self, s0: int = DEFAULT_SEED[0], s1: int = DEFAULT_SEED[1]) -> None:
        self.state = (s0 & _MASK64, s1 & _MASK64)

    def next(self) -> int:
        """Advance the generator and return the next 64-bit value."""
        s0, s1 = self.state
        result = (_rotl((s0 + s1) & _MASK64, 24) + s0) & _MASK64
        s1 ^= s0
        self.state = (
            _rotl(s0, 24) ^ s1 ^ ((s1 << 16) & _MASK64),
            _rotl(s1, 37),
        )
        return result

    def jump(self) -> None:
        """Advance the state by a large fixed number of steps."""
        s0 = 0
        s1 = 0
        for word in _JUMP:
            for bit in range(64):
                if word & (1 << bit):
                    s0 ^= self.state[0]
                    s1 ^= self.state[1]
                self.next()
        self.state = (s0, s1)

    def __iter__(self) -> "Xoroshiro128":
        return self

    def __next__(self) -> int:
        return self.next()