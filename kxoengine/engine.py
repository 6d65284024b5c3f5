"""Self-playing game engine: two AIs alternate moves on a timer and publish board frames."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, fields, replace
from typing import Optional, Sequence

from .game import EMPTY, N_GRIDS, check_win, new_table
from .mcts import ITERATIONS, MonteCarloSearch
from .negamax import Negamax
from .zobrist import ZobristTable

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 100
HEADER_SIZE = 5
FIFO_SIZE = 4096

MCTS_PLAYER = "O"
NEGAMAX_PLAYER = "X"

_STATE_FIELDS = ("display", "resume", "end", "win")


def encode_board(table: Sequence[str]) -> bytes:
    """Pack a board into four bytes: two occupancy bytes, then two 'X' bytes.

    Bit ``j`` of byte ``i`` describes cell ``i * 8 + j``.
    """
    if len(table) != N_GRIDS:
        raise ValueError(f"board must have {N_GRIDS} cells, got {len(table)}")
    half = N_GRIDS // 8
    occupied = [0] * half
    crosses = [0] * half
    for cell, mark in enumerate(table):
        if mark == EMPTY:
            continue
        byte, bit = divmod(cell, 8)
        occupied[byte] |= 1 << bit
        if mark == "X":
            crosses[byte] |= 1 << bit
    return bytes(occupied + crosses)


def _scan(text: str) -> list[str]:
    """Read up to four single characters, skipping whitespace between them."""
    found: list[str] = []
    pos = 0
    for n in range(len(_STATE_FIELDS)):
        if n:
            while pos < len(text) and text[pos].isspace():
                pos += 1
        if pos >= len(text):
            break
        found.append(text[pos])
        pos += 1
    return found


@dataclass(frozen=True)
class GameState:
    """Control flags shared with clients: display, resume, end and the last winner."""

    display: str = "1"
    resume: str = "1"
    end: str = "0"
    win: str = EMPTY

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or len(value) != 1:
                raise ValueError(f"{f.name} must be a single character, got {value!r}")

    def to_text(self) -> str:
        return f"{self.display} {self.resume} {self.end} {self.win}\n"

    @classmethod
    def parse(cls, text: str) -> "GameState":
        """Parse the text form; a blank winner may be left out."""
        found = _scan(text)
        if len(found) < 3:
            raise ValueError(f"malformed state: {text!r}")
        if len(found) == 3:
            found.append(EMPTY)
        return cls(*found)


class Engine:
    """Runs MCTS ('O') against negamax ('X') and queues a frame after every tick."""

    def __init__(
        self,
        delay: int = DEFAULT_DELAY_MS,
        mcts_iterations: int = ITERATIONS,
        seed: Optional[int] = None,
    ) -> None:
        self.delay = delay
        self.mcts = MonteCarloSearch(mcts_iterations)
        self.negamax = Negamax(ZobristTable(seed))
        self.table = new_table()
        self.turn = MCTS_PLAYER
        self.moves: list[int] = []
        self.dropped = 0
        self._state = GameState()
        self._state_lock = threading.Lock()
        self._board_lock = threading.Lock()
        self._frames: deque[bytes] = deque()
        self._fifo_bytes = 0
        self._frames_ready = threading.Condition()
        self._stopped = threading.Event()

    @property
    def state(self) -> GameState:
        with self._state_lock:
            return self._state

    def state_text(self) -> str:
        return self.state.to_text()

    def set_state(self, text: str) -> None:
        """Update the flags present in ``text``; absent trailing flags stay as they are."""
        found = _scan(text)
        with self._state_lock:
            self._state = replace(self._state, **dict(zip(_STATE_FIELDS, found)))

    def _set_win(self, win: str) -> None:
        with self._state_lock:
            self._state = replace(self._state, win=win)

    def _play_turn(self) -> None:
        started = time.perf_counter()
        with self._board_lock:
            player = self.turn
            if player == MCTS_PLAYER:
                move = self.mcts.search(self.table, player)
            else:
                move = self.negamax.predict(self.table, player).move
            if move != -1:
                self.table[move] = player
                self.moves.append(move)
            self.turn = NEGAMAX_PLAYER if player == MCTS_PLAYER else MCTS_PLAYER
        logger.debug("%s moved in %.0f usec", player, (time.perf_counter() - started) * 1e6)

    def _push_frame(self) -> None:
        with self._board_lock:
            frame = (
                encode_board(self.table)
                + bytes([HEADER_SIZE + len(self.moves)])
                + bytes(self.moves)
            )
        with self._frames_ready:
            if self._fifo_bytes + len(frame) > FIFO_SIZE:
                self.dropped += len(frame)
                logger.warning("%d bytes dropped", len(frame))
                return
            self._frames.append(frame)
            self._fifo_bytes += len(frame)
            self._frames_ready.notify_all()

    def step(self) -> bool:
        """Run one tick; return whether the game goes on (or restarts) afterwards."""
        win = check_win(self.table)
        if win == EMPTY:
            self._play_turn()
            if self.state.display != "0":
                self._push_frame()
            self._set_win(EMPTY)
            return True

        state = self.state
        if state.display == "1":
            self._push_frame()
            self.moves.clear()
        running = state.end == "0"
        if running:
            with self._board_lock:
                self.table = new_table()
                self.moves.clear()
        self._set_win(win)
        logger.info("%s win!!!", win)
        return running

    def read_frame(self, block: bool = True, timeout: Optional[float] = None) -> bytes:
        """Take the oldest frame from the queue.

        Raises BlockingIOError when not blocking and nothing is queued, and
        TimeoutError when a blocking wait runs out.
        """
        with self._frames_ready:
            if not self._frames:
                if not block:
                    raise BlockingIOError("no frame available")
                if not self._frames_ready.wait_for(lambda: bool(self._frames), timeout):
                    raise TimeoutError("no frame arrived in time")
            frame = self._frames.popleft()
            self._fifo_bytes -= len(frame)
            return frame

    def run(self) -> None:
        """Tick every ``delay`` milliseconds until stopped or a finished game is not restarted."""
        self._stopped.clear()
        while not self._stopped.wait(self.delay / 1000):
            if not self.step():
                break

    def stop(self) -> None:
        """Stop the tick loop and clear the end flag."""
        self._stopped.set()
        with self._state_lock:
            self._state = replace(self._state, end="0")