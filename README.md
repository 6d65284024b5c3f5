# kxoengine

A tic-tac-toe engine on a 4x4 board where three in a row wins. Two computer
players take turns: `O` moves by Monte Carlo tree search, `X` by negamax with
iterative deepening and a Zobrist transposition table. The engine plays game
after game on a timer and publishes each position as a compact binary frame,
which a terminal client decodes and draws.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Watching a game

```
kxo
```

The board is redrawn after each tick, followed by the moves played so far
(for example `A0 -> B2 -> C1`, a row letter and a column digit) and, once a
game is over, the winner (`D` for a draw). A new game starts after each one
ends.

Options:

- `--delay MS` milliseconds between engine ticks (default 100).
- `--iterations N` Monte Carlo iterations per move (default 100000). The
  search runs in pure Python, so a smaller value makes moves come faster.
- `--seed N` seed for the Zobrist keys; without it the current time is used.

Keys while it runs:

- `Ctrl-P` turns the board display off and on.
- `Ctrl-Q` stops the game and quits.

## Using the library

The pieces can be used on their own.

```python
from kxoengine.game import new_table, check_win, available_moves
from kxoengine.negamax import Negamax
from kxoengine.zobrist import ZobristTable

table = new_table()
table[5] = "O"
player = Negamax(ZobristTable(seed=1), max_depth=6)
move = player.predict(table, "X")
print(move.move, move.score)
print(check_win(table), available_moves(table))
```

- `kxoengine.game` holds the board rules: `check_win`, `available_moves`,
  `opponent`, `calculate_win_value` and the heuristic `get_score`.
- `kxoengine.mcts.MonteCarloSearch(iterations, rng)` gives the other player;
  its `search(table, player)` returns the chosen cell index, or `-1` when
  there is nothing to play. It works in 32-bit fixed point (`fixed_sqrt`,
  `fixed_log`, `uct_score`) and draws its random numbers from
  `kxoengine.xoroshiro.Xoroshiro128`.
- `kxoengine.zobrist.ZobristTable` holds the hashing keys and the
  transposition cache; `wyhash64` is the mixing function behind the keys.
- `kxoengine.engine.Engine(delay, mcts_iterations, seed)` runs the whole
  match: `step()` advances it by one tick, `run()` and `stop()` drive it on a
  timer, `read_frame(block, timeout)` returns the next published frame
  (raising `BlockingIOError` or `TimeoutError` when there is none), and
  `state_text()` / `set_state()` read and change the display, resume, end
  and winner flags in their `"1 1 0  \n"` text form (`GameState`).
  `encode_board` packs a board into the frame's first four bytes.
- `kxoengine.client.decode_frame` and `render_board` turn a frame back into
  the text board; `format_move` names a cell.

A board is a list of 16 cells holding `" "`, `"O"` or `"X"`, indexed row by
row. `check_win` returns the winner, `"D"` for a draw, or `" "` while the
game is still open.

## Limits

The engine runs inside the same Python process as the `kxo` viewer, in a
background thread. There is no device, socket or service through which
another process could read frames or change the flags; use the `Engine`
object directly for that. The viewer reads keys with `select` on standard
input and switches the terminal to raw mode with `termios`, so it is meant
for POSIX terminals.