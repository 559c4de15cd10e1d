import pytest

from minesweeper.grid import compute_neighbor_counts, create_empty_board
from minesweeper.types import GameConfig, GameState, GameStatus


class FakeClock:
    """Time source that only moves when told to."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def lay_mines(state: GameState, mines) -> GameState:
    """Put mines at fixed positions and mark placement as done."""
    for row, col in mines:
        state.board.cells[row][col].is_mine = True
    compute_neighbor_counts(state.board)
    state.mines_placed = True
    return state


def make_state(height, width, mines, status=GameStatus.IDLE) -> GameState:
    board = create_empty_board(GameConfig(width=width, height=height, mine_count=len(mines)))
    state = GameState(id="test", board=board, status=status)
    return lay_mines(state, mines)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def center_mine():
    """3x3 board, single mine in the middle: every other cell shows 1."""
    return make_state(3, 3, [(1, 1)])


@pytest.fixture
def corner_mine():
    """4x4 board, single mine at the bottom right corner."""
    return make_state(4, 4, [(3, 3)])
