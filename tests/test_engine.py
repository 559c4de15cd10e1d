import random

from minesweeper import engine
from minesweeper.grid import create_empty_board, iter_cells
from minesweeper.types import GameConfig, GameState, GameStatus, MoveRequest

from conftest import lay_mines, make_state


def revealed(state):
    return {(cell.row, cell.col) for cell in iter_cells(state.board) if cell.is_revealed}


def test_new_standard_game_is_idle_without_mines():
    state = engine.new_game_state("g1", difficulty="beginner")

    assert state.status == GameStatus.IDLE
    assert state.mines_placed is False
    assert state.remaining_flags == 10
    assert not any(cell.is_mine for cell in iter_cells(state.board))


def test_first_reveal_places_mines_and_starts_playing():
    state = engine.new_game_state("g1", difficulty="beginner")

    engine.reveal_cell(state, 4, 4, random.Random(5))

    assert state.mines_placed is True
    assert state.status in (GameStatus.PLAYING, GameStatus.WON)
    assert sum(cell.is_mine for cell in iter_cells(state.board)) == 10
    assert state.board.cells[4][4].is_revealed
    assert not state.board.cells[4][4].is_mine


def test_flood_fill_opens_zero_region_and_its_border(corner_mine):
    """Everything but the mine opens from a far corner."""
    engine.reveal_cell(corner_mine, 0, 0)

    assert revealed(corner_mine) == {(r, c) for r in range(4) for c in range(4)} - {(3, 3)}
    assert corner_mine.cells_revealed == 15
    assert corner_mine.status == GameStatus.WON


def test_flood_fill_stops_at_numbered_cells():
    """A wall of mines keeps the cascade on its own side."""
    state = make_state(5, 5, [(0, 2), (1, 2), (2, 2), (3, 2), (4, 2)])

    engine.reveal_cell(state, 0, 0)

    assert revealed(state) == {(r, c) for r in range(5) for c in range(2)}
    assert state.status == GameStatus.PLAYING


def test_flood_fill_never_opens_a_flagged_cell(corner_mine):
    engine.toggle_flag(corner_mine, 1, 1)
    engine.reveal_cell(corner_mine, 0, 0)

    assert not corner_mine.board.cells[1][1].is_revealed
    assert corner_mine.board.cells[1][1].is_flagged
    assert corner_mine.status == GameStatus.PLAYING

    engine.toggle_flag(corner_mine, 1, 1)
    engine.reveal_cell(corner_mine, 1, 1)
    assert corner_mine.status == GameStatus.WON


def test_large_empty_region_does_not_recurse():
    """A 200x200 open field is cleared without hitting the recursion limit."""
    state = make_state(200, 200, [(199, 199)])

    engine.reveal_cell(state, 0, 0)

    assert state.status == GameStatus.WON
    assert state.cells_revealed == 200 * 200 - 1


def test_win_only_after_last_safe_cell(center_mine):
    """3x3 with one mine is won on the eighth safe reveal, not before."""
    safe = [(r, c) for r in range(3) for c in range(3) if (r, c) != (1, 1)]

    for row, col in safe[:-1]:
        engine.reveal_cell(center_mine, row, col)
        assert center_mine.status == GameStatus.PLAYING

    engine.reveal_cell(center_mine, *safe[-1])
    assert center_mine.status == GameStatus.WON


def test_revealing_a_mine_loses_and_shows_all_mines():
    state = make_state(3, 3, [(0, 0), (2, 2)])
    engine.reveal_cell(state, 1, 1)

    engine.reveal_cell(state, 0, 0)

    assert state.status == GameStatus.LOST
    assert state.board.cells[0][0].is_revealed
    assert state.board.cells[2][2].is_revealed
    assert not state.board.cells[2][0].is_revealed


def test_terminal_game_ignores_every_action(center_mine):
    engine.reveal_cell(center_mine, 1, 1)
    before = revealed(center_mine)

    engine.reveal_cell(center_mine, 0, 0)
    engine.toggle_flag(center_mine, 0, 1)
    engine.chord_reveal(center_mine, 0, 0)

    assert center_mine.status == GameStatus.LOST
    assert revealed(center_mine) == before
    assert center_mine.flags_used == 0


def test_reveal_ignores_revealed_and_flagged_cells(center_mine):
    engine.toggle_flag(center_mine, 0, 0)
    engine.reveal_cell(center_mine, 0, 0)
    assert not center_mine.board.cells[0][0].is_revealed
    assert center_mine.status == GameStatus.IDLE

    engine.reveal_cell(center_mine, 0, 1)
    engine.reveal_cell(center_mine, 0, 1)
    assert center_mine.cells_revealed == 1


def test_out_of_bounds_moves_are_ignored(center_mine):
    engine.reveal_cell(center_mine, 5, 5)
    engine.toggle_flag(center_mine, -1, 0)

    assert center_mine.status == GameStatus.IDLE
    assert center_mine.flags_used == 0


def test_flag_budget_equals_mine_count():
    """With two mines the third flag is refused until one is removed."""
    state = make_state(3, 3, [(0, 0), (2, 2)])

    engine.toggle_flag(state, 0, 0)
    engine.toggle_flag(state, 0, 1)
    engine.toggle_flag(state, 0, 2)

    assert state.flags_used == 2
    assert state.remaining_flags == 0
    assert not state.board.cells[0][2].is_flagged

    engine.toggle_flag(state, 0, 1)
    assert state.remaining_flags == 1
    engine.toggle_flag(state, 0, 2)
    assert state.board.cells[0][2].is_flagged
    assert state.remaining_flags == 0


def test_flagging_a_revealed_cell_is_ignored(center_mine):
    engine.reveal_cell(center_mine, 0, 0)
    engine.toggle_flag(center_mine, 0, 0)

    assert not center_mine.board.cells[0][0].is_flagged
    assert center_mine.flags_used == 0


def test_flags_do_not_win_a_standard_game(center_mine):
    engine.reveal_cell(center_mine, 0, 0)
    engine.toggle_flag(center_mine, 1, 1)

    assert center_mine.status == GameStatus.PLAYING


def test_chord_with_correct_flags_opens_neighbors(center_mine):
    engine.reveal_cell(center_mine, 0, 0)
    engine.toggle_flag(center_mine, 1, 1)

    engine.chord_reveal(center_mine, 0, 0)

    assert center_mine.board.cells[0][1].is_revealed
    assert center_mine.board.cells[1][0].is_revealed
    assert not center_mine.board.cells[1][1].is_revealed
    assert center_mine.status == GameStatus.PLAYING


def test_chord_cascades_through_zero_cells():
    state = make_state(4, 4, [(0, 0)])
    engine.reveal_cell(state, 0, 1)
    engine.toggle_flag(state, 0, 0)

    engine.chord_reveal(state, 0, 1)

    assert state.status == GameStatus.WON
    assert state.cells_revealed == 15


def test_chord_with_wrong_flag_loses(center_mine):
    engine.reveal_cell(center_mine, 0, 0)
    engine.toggle_flag(center_mine, 0, 1)

    engine.chord_reveal(center_mine, 0, 0)

    assert center_mine.status == GameStatus.LOST
    assert center_mine.board.cells[1][1].is_revealed


def test_chord_without_matching_flags_is_ignored(center_mine):
    engine.reveal_cell(center_mine, 0, 0)

    engine.chord_reveal(center_mine, 0, 0)

    assert center_mine.status == GameStatus.PLAYING
    assert revealed(center_mine) == {(0, 0)}


def test_chord_on_unrevealed_cell_is_ignored(corner_mine):
    engine.chord_reveal(corner_mine, 0, 0)
    assert corner_mine.status == GameStatus.IDLE

    engine.reveal_cell(corner_mine, 2, 2)
    engine.toggle_flag(corner_mine, 3, 3)
    engine.chord_reveal(corner_mine, 0, 0)
    assert not corner_mine.board.cells[0][0].is_revealed


def test_apply_move_dispatches_actions(center_mine):
    engine.apply_move(center_mine, MoveRequest(row=0, col=0, action='reveal'))
    engine.apply_move(center_mine, MoveRequest(row=1, col=1, action='flag'))
    engine.apply_move(center_mine, MoveRequest(row=0, col=0, action='chord'))
    engine.apply_move(center_mine, MoveRequest(row=2, col=2, action='explode'))

    assert center_mine.board.cells[1][1].is_flagged
    assert center_mine.board.cells[0][1].is_revealed
    assert not center_mine.board.cells[2][2].is_revealed


def test_mines_placed_flag_prevents_second_placement():
    board = create_empty_board(GameConfig(width=3, height=3, mine_count=1))
    state = lay_mines(GameState(id="g", board=board, status=GameStatus.IDLE), [(2, 2)])

    engine.reveal_cell(state, 0, 0, random.Random(1))

    assert [(c.row, c.col) for c in iter_cells(state.board) if c.is_mine] == [(2, 2)]
