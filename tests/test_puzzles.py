import pytest

from minesweeper import engine
from minesweeper.puzzles import (
    PRACTICE_PUZZLES,
    build_puzzle_board,
    get_practice_puzzle,
    parse_puzzle,
    puzzle_to_dict,
    validate_puzzle,
)
from minesweeper.types import GameStatus, InvalidPuzzleError, PuzzleGoal


RULE_ONE = {
    'rows': 3,
    'cols': 3,
    'mines': [[2, 1], [2, 2]],
    'revealCells': [[0, 0], [0, 1], [0, 2], [1, 0], [1, 1], [1, 2], [2, 0]],
    'goal': 'flag',
    'target': [2, 2],
}

EDGE_EXCLUSION = {
    'rows': 2,
    'cols': 3,
    'mines': [[0, 0]],
    'revealCells': [[1, 0], [1, 1], [1, 2]],
    'goal': 'open',
    'target': [0, 2],
}


def test_parse_puzzle():
    puzzle = parse_puzzle(RULE_ONE)

    assert puzzle.rows == 3 and puzzle.cols == 3
    assert puzzle.goal == PuzzleGoal.FLAG
    assert puzzle.target == [2, 2]
    assert puzzle.hint == ''


def test_parse_accepts_snake_case_reveal_cells():
    data = dict(EDGE_EXCLUSION)
    data['reveal_cells'] = data.pop('revealCells')

    assert parse_puzzle(data).reveal_cells == [[1, 0], [1, 1], [1, 2]]


def test_board_derives_neighbor_counts():
    board = build_puzzle_board(parse_puzzle(RULE_ONE))

    assert board.mine_count == 2
    assert board.cells[1][1].neighbor_mines == 2
    assert board.cells[1][0].neighbor_mines == 1
    assert board.cells[0][0].neighbor_mines == 0
    assert board.cells[2][0].is_revealed
    assert not board.cells[2][1].is_revealed


def test_practice_game_starts_playing():
    state = engine.new_game_state("p", puzzle=parse_puzzle(RULE_ONE))

    assert state.status == GameStatus.PLAYING
    assert state.is_practice
    assert state.cells_revealed == 7
    assert state.remaining_flags == 2


def test_flag_goal_needs_the_target_flagged():
    state = engine.new_game_state("p", puzzle=parse_puzzle(RULE_ONE))

    engine.toggle_flag(state, 2, 1)
    assert state.status == GameStatus.PLAYING

    engine.toggle_flag(state, 2, 2)
    assert state.status == GameStatus.WON


def test_flag_goal_is_not_met_by_revealing_safe_cells():
    state = engine.new_game_state("p", puzzle=get_practice_puzzle(2))

    engine.reveal_cell(state, 0, 2)
    engine.reveal_cell(state, 0, 1)

    assert state.status == GameStatus.PLAYING


def test_open_goal_needs_the_target_revealed():
    state = engine.new_game_state("p", puzzle=parse_puzzle(EDGE_EXCLUSION))

    engine.toggle_flag(state, 0, 2)
    assert state.status == GameStatus.PLAYING

    engine.toggle_flag(state, 0, 2)
    engine.reveal_cell(state, 0, 2)
    assert state.status == GameStatus.WON


def test_open_goal_lost_on_mine():
    state = engine.new_game_state("p", puzzle=parse_puzzle(EDGE_EXCLUSION))

    engine.reveal_cell(state, 0, 0)

    assert state.status == GameStatus.LOST
    engine.reveal_cell(state, 0, 2)
    assert state.status == GameStatus.LOST


def test_builtin_puzzles_are_valid():
    puzzles = [p for p in PRACTICE_PUZZLES if p is not None]

    assert len(puzzles) == 8
    for puzzle in puzzles:
        validate_puzzle(puzzle)
        assert puzzle.hint


def test_builtin_puzzles_can_be_won():
    for index, puzzle in enumerate(PRACTICE_PUZZLES):
        if puzzle is None:
            continue
        state = engine.new_game_state(f"lesson-{index}", puzzle=puzzle)
        row, col = puzzle.target
        if puzzle.goal == PuzzleGoal.FLAG:
            engine.toggle_flag(state, row, col)
        else:
            engine.reveal_cell(state, row, col)
        assert state.status == GameStatus.WON, index


def test_get_practice_puzzle_rejects_missing_lessons():
    with pytest.raises(InvalidPuzzleError):
        get_practice_puzzle(0)
    with pytest.raises(InvalidPuzzleError):
        get_practice_puzzle(99)


def test_puzzle_to_dict_uses_authored_keys():
    data = puzzle_to_dict(parse_puzzle(RULE_ONE))

    assert data['revealCells'] == RULE_ONE['revealCells']
    assert data['goal'] == 'flag'


@pytest.mark.parametrize("changes", [
    {'goal': 'flag', 'target': [0, 2]},
    {'goal': 'open', 'target': [0, 0]},
    {'goal': 'sweep'},
    {'target': [5, 5]},
    {'target': [1]},
    {'mines': []},
    {'mines': [[0, 0], [0, 0]]},
    {'revealCells': [[0, 0]]},
    {'rows': 'two'},
])
def test_invalid_puzzles_are_rejected(changes):
    data = dict(EDGE_EXCLUSION)
    data.update(changes)

    with pytest.raises(InvalidPuzzleError):
        parse_puzzle(data)


def test_missing_fields_are_rejected():
    data = dict(EDGE_EXCLUSION)
    del data['target']

    with pytest.raises(InvalidPuzzleError):
        parse_puzzle(data)
