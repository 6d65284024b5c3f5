import random

import pytest

from kxoengine.client import decode_frame, format_move, main, render_board
from kxoengine.engine import Engine, encode_board
from kxoengine.game import EMPTY, N_GRIDS, new_table


def _frame(table, moves):
    return encode_board(table) + bytes([5 + len(moves)]) + bytes(moves)


def _random_table(rng):
    return [rng.choice([EMPTY, "O", "X"]) for _ in range(N_GRIDS)]


@pytest.mark.parametrize("seed", range(8))
def test_decode_round_trips_encoded_board(seed):
    rng = random.Random(seed)
    table = _random_table(rng)
    moves = rng.sample(range(N_GRIDS), rng.randint(0, N_GRIDS))
    board, decoded_moves = decode_frame(_frame(table, moves))
    assert board == table
    assert decoded_moves == moves


def test_decode_empty_board_without_moves():
    board, moves = decode_frame(_frame(new_table(), []))
    assert board == [EMPTY] * N_GRIDS
    assert moves == []


def test_decode_rejects_short_frame():
    with pytest.raises(ValueError):
        decode_frame(b"\x00\x00\x00")


def test_decode_rejects_length_mismatch():
    frame = _frame(new_table(), [1, 2])
    with pytest.raises(ValueError):
        decode_frame(frame[:-1])


def test_decode_rejects_length_byte_below_header():
    with pytest.raises(ValueError):
        decode_frame(bytes([0, 0, 0, 0, 2]))


def test_format_move_corners():
    assert format_move(0) == "A0"
    assert format_move(15) == "D3"


def test_format_move_names_are_unique():
    names = {format_move(move) for move in range(N_GRIDS)}
    assert len(names) == N_GRIDS


@pytest.mark.parametrize("move", [-1, N_GRIDS])
def test_format_move_rejects_out_of_range(move):
    with pytest.raises(ValueError):
        format_move(move)


def test_render_empty_board_layout():
    text = render_board(new_table(), [])
    assert text == (
        " | | | \n-------\n | | | \n-------\n | | | \n-------\n | | | \n"
        "\n\nmovement: 0\n\n"
    )


def test_render_rows_follow_board_cells():
    table = _random_table(random.Random(42))
    grid = render_board(table, []).split("\n\n\n")[0]
    rows = grid.split("\n-------\n")
    assert len(rows) == 4
    cells = [cell for row in rows for cell in row.split("|")]
    assert cells == table


def test_render_lists_moves_in_order():
    table = new_table()
    moves = [0, 5, 15]
    text = render_board(table, moves)
    assert "movement: 3\n" in text
    expected_history = " -> ".join(format_move(m) for m in moves)
    assert text.endswith(expected_history + "\n")


def test_render_rejects_wrong_board_size():
    with pytest.raises(ValueError):
        render_board([EMPTY] * 9, [])


def test_engine_frame_decodes_to_first_move():
    engine = Engine(mcts_iterations=50, seed=1)
    engine.step()
    board, moves = decode_frame(engine.read_frame(block=False))
    assert len(moves) == 1
    assert board[moves[0]] == "O"
    assert sum(cell != EMPTY for cell in board) == 1


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0


def test_main_rejects_bad_delay():
    with pytest.raises(SystemExit) as excinfo:
        main(["--delay", "soon"])
    assert excinfo.value.code == 2