import threading

import pytest

from kxoengine.engine import Engine, GameState, encode_board
from kxoengine.game import EMPTY, N_GRIDS, check_win, new_table


def _winning_table():
    table = new_table()
    table[0] = table[1] = table[2] = "X"
    table[4] = table[5] = "O"
    return table


def _late_table():
    rows = ["XXOO", "OOXX", "XXOO", "    "]
    return [c for row in rows for c in row]


def _count(table, mark):
    return sum(1 for cell in table if cell == mark)


def test_encode_board_empty_and_full():
    assert encode_board(new_table()) == bytes(4)
    assert encode_board(["X"] * N_GRIDS) == b"\xff\xff\xff\xff"
    assert encode_board(["O"] * N_GRIDS) == b"\xff\xff\x00\x00"


def test_encode_board_rejects_wrong_size():
    with pytest.raises(ValueError):
        encode_board([EMPTY] * 3)


def test_encode_board_bits_follow_cells():
    table = new_table()
    table[9] = "X"
    encoded = encode_board(table)
    assert encoded[1] == 1 << 1
    assert encoded[3] == 1 << 1
    assert encoded[0] == 0 and encoded[2] == 0


def test_state_text_default():
    assert GameState().to_text() == "1 1 0  \n"


def test_state_round_trip():
    state = GameState("0", "1", "1", "O")
    assert GameState.parse(state.to_text()) == state
    assert GameState.parse(GameState().to_text()) == GameState()


def test_state_parse_errors():
    with pytest.raises(ValueError):
        GameState.parse("1 1")
    with pytest.raises(ValueError):
        GameState(display="10")


def test_engine_set_state_partial_keeps_win():
    engine = Engine(mcts_iterations=10, seed=1)
    engine.set_state("0 1 1 X")
    assert engine.state == GameState("0", "1", "1", "X")
    engine.set_state("1 1 0 ")
    assert engine.state == GameState("1", "1", "0", "X")
    engine.set_state("")
    assert engine.state == GameState("1", "1", "0", "X")


def test_read_frame_empty_raises():
    engine = Engine(mcts_iterations=10, seed=1)
    with pytest.raises(BlockingIOError):
        engine.read_frame(block=False)
    with pytest.raises(TimeoutError):
        engine.read_frame(timeout=0.01)


def test_first_step_mcts_moves_and_frames():
    engine = Engine(mcts_iterations=200, seed=1)
    assert engine.step() is True
    assert _count(engine.table, "O") == 1
    assert engine.turn == "X"
    frame = engine.read_frame(block=False)
    assert frame[:4] == encode_board(engine.table)
    assert frame[4] == 6
    assert engine.table[frame[5]] == "O"
    assert engine.state.win == EMPTY


def test_negamax_step_on_late_board():
    engine = Engine(mcts_iterations=10, seed=3)
    engine.table = _late_table()
    engine.turn = "X"
    before = _count(engine.table, "X")
    assert engine.step() is True
    assert _count(engine.table, "X") == before + 1
    assert engine.turn == "O"
    frame = engine.read_frame(block=False)
    assert len(frame) == frame[4]
    assert engine.table[frame[-1]] == "X"


def test_display_off_produces_no_frame():
    engine = Engine(mcts_iterations=50, seed=1)
    engine.set_state("0 1 0 ")
    engine.step()
    assert _count(engine.table, "O") == 1
    with pytest.raises(BlockingIOError):
        engine.read_frame(block=False)


def test_finished_game_restarts_when_end_is_clear():
    engine = Engine(mcts_iterations=10, seed=1)
    table = _winning_table()
    engine.table = list(table)
    assert engine.step() is True
    assert engine.table == new_table()
    assert engine.state.win == "X"
    assert engine.state_text() == GameState(win="X").to_text()
    frame = engine.read_frame(block=False)
    assert frame == encode_board(table) + bytes([5])


def test_finished_game_stops_when_end_is_set():
    engine = Engine(mcts_iterations=10, seed=1)
    table = _winning_table()
    engine.table = list(table)
    engine.set_state("1 1 1 ")
    assert engine.step() is False
    assert engine.table == table
    assert check_win(engine.table) == engine.state.win


def test_run_returns_after_final_board_and_stop_clears_end():
    engine = Engine(delay=1, mcts_iterations=10, seed=1)
    engine.table = _winning_table()
    engine.set_state("1 1 1 ")
    worker = threading.Thread(target=engine.run)
    worker.start()
    frame = engine.read_frame(timeout=5)
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert frame[:4] == encode_board(_winning_table())
    engine.stop()
    assert engine.state.end == "0"