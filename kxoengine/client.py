"""Terminal viewer that runs the engine and draws every board frame it publishes."""

from __future__ import annotations

import argparse
import os
import select
import sys
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, TextIO

from .engine import DEFAULT_DELAY_MS, HEADER_SIZE, Engine
from .game import BOARD_SIZE, EMPTY, N_GRIDS
from .mcts import ITERATIONS

try:
    import termios
except ImportError:  # pragma: no cover - platforms without termios
    termios = None

CTRL_P = 16
CTRL_Q = 17

_BOARD_BYTES = N_GRIDS // 4
_POLL_SECONDS = 0.05
_CLEAR_SCREEN = "\033[H\033[J"
_SEPARATOR = "-" * (2 * BOARD_SIZE - 1)


def decode_frame(data: bytes) -> tuple[list[str], list[int]]:
    """Split a frame into the board cells and the list of moves played so far.

    A frame holds two occupancy bytes, two 'X' bytes, one length byte that
    counts the whole frame, and one byte per move.
    """
    if len(data) < HEADER_SIZE:
        raise ValueError(f"frame too short: {len(data)} bytes")
    size = data[_BOARD_BYTES]
    if size < HEADER_SIZE:
        raise ValueError(f"invalid frame length byte: {size}")
    if len(data) != size:
        raise ValueError(f"frame length byte says {size}, got {len(data)} bytes")

    half = _BOARD_BYTES // 2
    board: list[str] = []
    for cell in range(N_GRIDS):
        byte, bit = divmod(cell, 8)
        mask = 1 << bit
        if data[byte] & mask:
            board.append("X" if data[byte + half] & mask else "O")
        else:
            board.append(EMPTY)
    return board, list(data[HEADER_SIZE:])


def format_move(move: int) -> str:
    """Name a cell by row letter and column digit, e.g. cell 5 is 'B1'."""
    if not 0 <= move < N_GRIDS:
        raise ValueError(f"move out of range: {move}")
    row, col = divmod(move, BOARD_SIZE)
    return f"{chr(ord('A') + row)}{col}"


def render_board(board: Sequence[str], moves: Sequence[int]) -> str:
    """Draw the board as a text grid followed by the move history."""
    if len(board) != N_GRIDS:
        raise ValueError(f"board must have {N_GRIDS} cells, got {len(board)}")
    rows = [
        "|".join(board[start:start + BOARD_SIZE])
        for start in range(0, N_GRIDS, BOARD_SIZE)
    ]
    grid = f"\n{_SEPARATOR}\n".join(rows) + "\n"
    history = " -> ".join(format_move(move) for move in moves)
    return f"{grid}\n\nmovement: {len(moves)}\n{history}\n"


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kxo",
        description="Watch MCTS (O) play negamax (X). Ctrl-P toggles the display, Ctrl-Q quits.",
    )
    parser.add_argument("--delay", type=int, default=DEFAULT_DELAY_MS,
                        help="milliseconds between engine ticks")
    parser.add_argument("--iterations", type=int, default=ITERATIONS,
                        help="Monte Carlo iterations per move")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the Zobrist keys")
    return parser.parse_args(argv)


@contextmanager
def _raw_mode(stream: TextIO) -> Iterator[None]:
    """Turn off echo, line buffering and flow control while the block runs."""
    if termios is None or not stream.isatty():
        yield
        return
    fd = stream.fileno()
    original = termios.tcgetattr(fd)
    raw = termios.tcgetattr(fd)
    raw[0] &= ~termios.IXON
    raw[3] &= ~(termios.ECHO | termios.ICANON)
    termios.tcsetattr(fd, termios.TCSAFLUSH, raw)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSAFLUSH, original)


def _show_frame(engine: Engine, frame: bytes, out: TextIO) -> None:
    board, moves = decode_frame(frame)
    out.write(_CLEAR_SCREEN)
    out.write(render_board(board, moves))
    win = engine.state.win
    if win != EMPTY:
        out.write(f"{win}: win!!\n\n")
    out.flush()


def _watch(engine: Engine, stdin: TextIO, out: TextIO) -> None:
    fd = stdin.fileno()
    listening = True
    display = True
    while True:
        if listening:
            ready, _, _ = select.select([fd], [], [], _POLL_SECONDS)
            if ready:
                data = os.read(fd, 1)
                if not data:
                    listening = False
                    continue
                key = data[0]
                if key == CTRL_P:
                    display = not display
                    engine.set_state("0" if engine.state.display != "0" else "1")
                    if not display:
                        out.write("\n\nStopping to display the chess board...\n")
                        out.flush()
                elif key == CTRL_Q:
                    state = engine.state
                    engine.set_state(f"{state.display} {state.resume} 1")
                    out.write("\n\nStopping the kernel space tic-tac-toe game...\n")
                    out.flush()
                    return
                continue
        if not display:
            if not listening:
                time.sleep(_POLL_SECONDS)
            continue
        try:
            frame = engine.read_frame(block=not listening, timeout=_POLL_SECONDS)
        except (BlockingIOError, TimeoutError):
            continue
        _show_frame(engine, frame, out)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the engine in the background and draw its frames until Ctrl-Q."""
    args = _parse_args(argv)
    engine = Engine(delay=args.delay, mcts_iterations=args.iterations, seed=args.seed)
    worker = threading.Thread(target=engine.run, name="kxo-engine", daemon=True)
    worker.start()
    try:
        with _raw_mode(sys.stdin):
            _watch(engine, sys.stdin, sys.stdout)
    finally:
        engine.stop()
        worker.join(timeout=max(1.0, 2 * args.delay / 1000))
    return 0


if __name__ == "__main__":
    sys.exit(main())