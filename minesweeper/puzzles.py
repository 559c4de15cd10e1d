"""Practice puzzles: fixed boards with a single goal cell."""
from typing import Any, Dict, List, Optional

from minesweeper.grid import compute_neighbor_counts, create_empty_board, validate_config
from minesweeper.types import (
    GameBoard,
    GameConfig,
    InvalidConfigError,
    InvalidPuzzleError,
    PracticePuzzle,
    PuzzleGoal,
)


def _coordinate(value: Any, rows: int, cols: int, what: str) -> List[int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2 \
            or not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise InvalidPuzzleError(f"{what} must be a [row, col] pair, got {value!r}")
    row, col = value
    if not (0 <= row < rows and 0 <= col < cols):
        raise InvalidPuzzleError(f"{what} {[row, col]} is outside the {rows}x{cols} board")
    return [row, col]


def validate_puzzle(puzzle: PracticePuzzle) -> None:
    """Raise InvalidPuzzleError unless the puzzle can produce a playable board."""
    try:
        validate_config(GameConfig(width=puzzle.cols, height=puzzle.rows, mine_count=len(puzzle.mines)))
    except InvalidConfigError as error:
        raise InvalidPuzzleError(str(error)) from error

    mines = {tuple(_coordinate(m, puzzle.rows, puzzle.cols, "mine")) for m in puzzle.mines}
    if len(mines) != len(puzzle.mines):
        raise InvalidPuzzleError("Duplicate mine coordinates")

    for cell in puzzle.reveal_cells:
        if tuple(_coordinate(cell, puzzle.rows, puzzle.cols, "revealed cell")) in mines:
            raise InvalidPuzzleError(f"Initially revealed cell {list(cell)} is a mine")

    target = tuple(_coordinate(puzzle.target, puzzle.rows, puzzle.cols, "target"))
    if puzzle.goal == PuzzleGoal.FLAG and target not in mines:
        raise InvalidPuzzleError(f"Flag target {list(target)} is not a mine")
    if puzzle.goal == PuzzleGoal.OPEN and target in mines:
        raise InvalidPuzzleError(f"Open target {list(target)} is a mine")


def parse_puzzle(data: Dict[str, Any]) -> PracticePuzzle:
    """Build a PracticePuzzle from its JSON form.

    Accepts ``revealCells`` (the authored format) or ``reveal_cells``.
    """
    if not isinstance(data, dict):
        raise InvalidPuzzleError("Puzzle definition must be an object")

    try:
        rows, cols = data['rows'], data['cols']
        mines = data['mines']
        reveal_cells = data.get('revealCells', data.get('reveal_cells', []))
        goal = PuzzleGoal(data['goal'])
        target = data['target']
    except KeyError as error:
        raise InvalidPuzzleError(f"Puzzle definition is missing {error}") from error
    except ValueError as error:
        raise InvalidPuzzleError(f"Unknown puzzle goal {data.get('goal')!r}") from error

    if not isinstance(rows, int) or not isinstance(cols, int):
        raise InvalidPuzzleError("rows and cols must be integers")
    if not isinstance(mines, list) or not isinstance(reveal_cells, list):
        raise InvalidPuzzleError("mines and revealCells must be lists")

    puzzle = PracticePuzzle(
        rows=rows,
        cols=cols,
        mines=[list(m) if isinstance(m, (list, tuple)) else m for m in mines],
        reveal_cells=[list(c) if isinstance(c, (list, tuple)) else c for c in reveal_cells],
        goal=goal,
        target=list(target) if isinstance(target, (list, tuple)) else target,
        hint=str(data.get('hint', '')),
    )
    validate_puzzle(puzzle)
    return puzzle


def puzzle_to_dict(puzzle: PracticePuzzle) -> Dict[str, Any]:
    return {
        'rows': puzzle.rows,
        'cols': puzzle.cols,
        'mines': [list(m) for m in puzzle.mines],
        'revealCells': [list(c) for c in puzzle.reveal_cells],
        'goal': puzzle.goal.value,
        'target': list(puzzle.target),
        'hint': puzzle.hint,
    }


def build_puzzle_board(puzzle: PracticePuzzle) -> GameBoard:
    """Lay out the puzzle's mines and initial reveals; no random placement."""
    validate_puzzle(puzzle)
    board = create_empty_board(GameConfig(width=puzzle.cols, height=puzzle.rows, mine_count=len(puzzle.mines)))
    for row, col in puzzle.mines:
        board.cells[row][col].is_mine = True
    compute_neighbor_counts(board)
    for row, col in puzzle.reveal_cells:
        board.cells[row][col].is_revealed = True
    return board


PRACTICE_PUZZLES: List[Optional[PracticePuzzle]] = [
    None,
    # Rules one and two
    PracticePuzzle(
        rows=3, cols=3,
        mines=[[2, 1], [2, 2]],
        reveal_cells=[[0, 0], [0, 1], [0, 2], [1, 0], [1, 1], [1, 2], [2, 0]],
        goal=PuzzleGoal.FLAG, target=[2, 2],
        hint="Look at the 2 in the middle: only two unknown cells remain around it, "
             "so by rule one both of them are mines. Flag them.",
    ),
    # Set inclusion
    PracticePuzzle(
        rows=2, cols=3,
        mines=[[0, 0]],
        reveal_cells=[[1, 0], [1, 1], [1, 2]],
        goal=PuzzleGoal.FLAG, target=[0, 0],
        hint="The left 1 covers two cells and holds one mine. The middle 1 covers those two "
             "plus the top right cell, also with one mine. The smaller circle sits inside the "
             "larger one with the same count, so the mine is in the small circle. Flag the mine on the left.",
    ),
    # Exclusion along an edge
    PracticePuzzle(
        rows=2, cols=3,
        mines=[[0, 0]],
        reveal_cells=[[1, 0], [1, 1], [1, 2]],
        goal=PuzzleGoal.OPEN, target=[0, 2],
        hint="The right 1's area contains the left 1's area and both need one mine, "
             "so the extra top right cell cannot be a mine. Open it.",
    ),
    # Flat edge 1-1-1
    PracticePuzzle(
        rows=2, cols=3,
        mines=[[0, 1]],
        reveal_cells=[[1, 0], [1, 1], [1, 2]],
        goal=PuzzleGoal.OPEN, target=[0, 0],
        hint="Flat 1-1-1: the outer 1s are each contained in the middle 1 with the same count, "
             "so both top corners are safe. Open the top left cell.",
    ),
    # Confirmation 1-2
    PracticePuzzle(
        rows=2, cols=3,
        mines=[[0, 0], [0, 2]],
        reveal_cells=[[1, 0], [1, 1], [1, 2]],
        goal=PuzzleGoal.FLAG, target=[0, 2],
        hint="Confirmation: the right 2 covers exactly one more cell than the left 1 "
             "and needs exactly one more mine. That extra cell is a mine.",
    ),
    # Confirmation variant, flat 1-3
    PracticePuzzle(
        rows=3, cols=4,
        mines=[[0, 2], [0, 3], [1, 3]],
        reveal_cells=[[0, 0], [1, 0], [1, 1], [1, 2], [2, 0], [2, 1], [2, 2], [2, 3]],
        goal=PuzzleGoal.FLAG, target=[0, 3],
        hint="The 3 covers four unknown cells and the 1 covers the left two of them. "
             "The 3 has two extra cells and two extra mines (3 - 1 = 2), so both extra cells are mines.",
    ),
    # The 1-2-1 pattern
    PracticePuzzle(
        rows=2, cols=3,
        mines=[[0, 0], [0, 2]],
        reveal_cells=[[1, 0], [1, 1], [1, 2]],
        goal=PuzzleGoal.OPEN, target=[0, 1],
        hint="1-2-1: the left 1 says A+B=1, the right 1 says B+C=1, the 2 says A+B+C=2. "
             "So A and C are mines and B is safe. Open the middle cell.",
    ),
    # A stretched 1
    PracticePuzzle(
        rows=2, cols=5,
        mines=[[0, 1], [0, 3]],
        reveal_cells=[[1, 0], [1, 1], [1, 2], [1, 3], [1, 4]],
        goal=PuzzleGoal.FLAG, target=[0, 3],
        hint="Even stretched out, the 1 and its neighboring 2 still form a 1-2-1 pattern. "
             "The cell only the 2 can see must be a mine. Flag it.",
    ),
]


def get_practice_puzzle(index: int) -> PracticePuzzle:
    """Return the built-in puzzle for a lesson index."""
    if not 0 <= index < len(PRACTICE_PUZZLES) or PRACTICE_PUZZLES[index] is None:
        raise InvalidPuzzleError(f"No practice puzzle for lesson {index}")
    return PRACTICE_PUZZLES[index]
