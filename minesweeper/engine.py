"""Game logic: reveal, flood fill, chord, flags and win/loss detection.

Every function here mutates the given ``GameState`` in place and returns it.
Invalid moves (terminal game, revealed or flagged cell, exhausted flag budget,
unsatisfied chord) leave the state untouched; nothing in this module raises
for player input.
"""
import logging
import random
from datetime import datetime
from typing import List, Optional, Tuple

from minesweeper.grid import create_empty_board, iter_cells, neighbors
from minesweeper.placement import place_mines
from minesweeper.puzzles import build_puzzle_board
from minesweeper.types import (
    DIFFICULTIES,
    GameConfig,
    GameState,
    GameStatus,
    InvalidConfigError,
    MoveRequest,
    PracticePuzzle,
    PuzzleGoal,
)

logger = logging.getLogger(__name__)

MOVE_ACTIONS = ('reveal', 'flag', 'chord')


def get_difficulty(key: str) -> GameConfig:
    try:
        return DIFFICULTIES[key]
    except KeyError:
        raise InvalidConfigError(f"Unknown difficulty {key!r}") from None


def new_game_state(game_id: str, difficulty: Optional[str] = None,
                   puzzle: Optional[PracticePuzzle] = None) -> GameState:
    """Create a fresh game for a difficulty key or a practice puzzle.

    Standard games start ``idle`` with no mines; practice games start
    ``playing`` because their mines are fixed up front.
    """
    if puzzle is not None:
        board = build_puzzle_board(puzzle)
        return GameState(
            id=game_id,
            board=board,
            status=GameStatus.PLAYING,
            puzzle=puzzle,
            mines_placed=True,
            cells_revealed=_count_revealed(board.cells),
        )

    if difficulty is None:
        raise InvalidConfigError("Either a difficulty or a puzzle is required")

    return GameState(
        id=game_id,
        board=create_empty_board(get_difficulty(difficulty)),
        status=GameStatus.IDLE,
        difficulty=difficulty,
    )


def elapsed_seconds(game_state: GameState, now: datetime) -> int:
    """Whole seconds on the game clock: from start until end (or ``now``)."""
    if game_state.start_time is None:
        return 0
    end = game_state.end_time or now
    return max(0, int((end - game_state.start_time).total_seconds()))


def _count_revealed(cells) -> int:
    return sum(1 for row in cells for cell in row if cell.is_revealed)


def _in_bounds(game_state: GameState, row: int, col: int) -> bool:
    return 0 <= row < game_state.board.height and 0 <= col < game_state.board.width


def flood_reveal(game_state: GameState, row: int, col: int) -> int:
    """Open (row, col) and cascade through zero-count cells.

    Uses an explicit stack so large empty regions cannot exhaust the call
    stack. Flagged cells stop the cascade. Returns the number of cells opened.
    """
    board = game_state.board
    opened = 0
    stack: List[Tuple[int, int]] = [(row, col)]

    while stack:
        r, c = stack.pop()
        cell = board.cells[r][c]
        if cell.is_revealed or cell.is_flagged or cell.is_mine:
            continue

        cell.is_revealed = True
        opened += 1

        if cell.neighbor_mines == 0:
            for nr, nc in neighbors(r, c, board.height, board.width):
                if not board.cells[nr][nc].is_revealed:
                    stack.append((nr, nc))

    game_state.cells_revealed += opened
    return opened


def _lose(game_state: GameState) -> None:
    for cell in iter_cells(game_state.board):
        if cell.is_mine:
            cell.is_revealed = True
    game_state.cells_revealed = _count_revealed(game_state.board.cells)
    game_state.status = GameStatus.LOST
    logger.info(f"Game {game_state.id} lost")


def is_goal_reached(game_state: GameState) -> bool:
    """Evaluate the win condition for the game's mode."""
    puzzle = game_state.puzzle
    if puzzle is not None:
        target = game_state.board.cells[puzzle.target[0]][puzzle.target[1]]
        if puzzle.goal == PuzzleGoal.OPEN:
            return target.is_revealed and not target.is_mine
        return target.is_flagged and target.is_mine

    return not any(not cell.is_mine and not cell.is_revealed for cell in iter_cells(game_state.board))


def _check_win(game_state: GameState) -> None:
    if game_state.status == GameStatus.PLAYING and is_goal_reached(game_state):
        game_state.status = GameStatus.WON
        logger.info(f"Game {game_state.id} won")


def reveal_cell(game_state: GameState, row: int, col: int,
                rng: Optional[random.Random] = None) -> GameState:
    """Reveal a cell and potentially cascade to neighbors."""
    if game_state.status not in (GameStatus.IDLE, GameStatus.PLAYING) or not _in_bounds(game_state, row, col):
        return game_state

    cell = game_state.board.cells[row][col]
    if cell.is_revealed or cell.is_flagged:
        return game_state

    # First reveal: lay mines around the clicked cell exactly once
    if game_state.status == GameStatus.IDLE:
        if not game_state.mines_placed:
            place_mines(game_state.board, row, col, rng)
            game_state.mines_placed = True
        game_state.status = GameStatus.PLAYING

    if cell.is_mine:
        _lose(game_state)
        return game_state

    flood_reveal(game_state, row, col)
    _check_win(game_state)
    return game_state


def toggle_flag(game_state: GameState, row: int, col: int) -> GameState:
    """Toggle flag on a cell, refusing new flags once the budget is spent."""
    if game_state.status not in (GameStatus.IDLE, GameStatus.PLAYING) or not _in_bounds(game_state, row, col):
        return game_state

    cell = game_state.board.cells[row][col]
    if cell.is_revealed:
        return game_state

    if cell.is_flagged:
        cell.is_flagged = False
        game_state.flags_used -= 1
    else:
        if game_state.flags_used >= game_state.board.mine_count:
            return game_state  # out of flags
        cell.is_flagged = True
        game_state.flags_used += 1

    if game_state.is_practice:
        _check_win(game_state)
    return game_state


def chord_reveal(game_state: GameState, row: int, col: int) -> GameState:
    """Mass open adjacent cells when flags match the cell's number."""
    if game_state.status != GameStatus.PLAYING or not _in_bounds(game_state, row, col):
        return game_state

    board = game_state.board
    cell = board.cells[row][col]

    # Can only chord on revealed cells with numbers
    if not cell.is_revealed or cell.is_mine or cell.neighbor_mines == 0:
        return game_state

    flagged_count = 0
    neighbors_to_reveal = []
    for nr, nc in neighbors(row, col, board.height, board.width):
        neighbor = board.cells[nr][nc]
        if neighbor.is_flagged:
            flagged_count += 1
        elif not neighbor.is_revealed:
            neighbors_to_reveal.append((nr, nc))

    if flagged_count != cell.neighbor_mines:
        return game_state

    # A wrong flag means one of the unflagged neighbors is the real mine
    for nr, nc in neighbors_to_reveal:
        if board.cells[nr][nc].is_mine:
            _lose(game_state)
            return game_state

    for nr, nc in neighbors_to_reveal:
        flood_reveal(game_state, nr, nc)

    _check_win(game_state)
    return game_state


def apply_move(game_state: GameState, move: MoveRequest,
               rng: Optional[random.Random] = None) -> GameState:
    """Dispatch a move request to the matching operation."""
    if move.action == 'reveal':
        return reveal_cell(game_state, move.row, move.col, rng)
    if move.action == 'flag':
        return toggle_flag(game_state, move.row, move.col)
    if move.action == 'chord':
        return chord_reveal(game_state, move.row, move.col)
    logger.debug(f"Ignoring unknown action {move.action!r}")
    return game_state
