"""Board construction and neighbor geometry."""
from typing import Iterator, List, Tuple

from minesweeper.types import Cell, GameBoard, GameConfig, InvalidConfigError


def neighbors(row: int, col: int, height: int, width: int) -> List[Tuple[int, int]]:
    """Return the in-bounds coordinates around (row, col), excluding itself."""
    result = []
    for r in range(max(0, row - 1), min(row + 1, height - 1) + 1):
        for c in range(max(0, col - 1), min(col + 1, width - 1) + 1):
            if r != row or c != col:
                result.append((r, c))
    return result


def count_neighbor_mines(cells: List[List[Cell]], row: int, col: int, width: int, height: int) -> int:
    """Count the number of mines in neighboring cells."""
    return sum(1 for r, c in neighbors(row, col, height, width) if cells[r][c].is_mine)


def iter_cells(board: GameBoard) -> Iterator[Cell]:
    for row in board.cells:
        yield from row


def validate_config(config: GameConfig) -> None:
    if config.width <= 0 or config.height <= 0:
        raise InvalidConfigError(f"Board must have positive dimensions, got {config.height}x{config.width}")
    if not 0 < config.mine_count < config.width * config.height:
        raise InvalidConfigError(
            f"Mine count must be between 1 and {config.width * config.height - 1}, got {config.mine_count}"
        )


def create_empty_board(config: GameConfig) -> GameBoard:
    """Create a board with no mines; placement happens on the first reveal."""
    validate_config(config)

    cells: List[List[Cell]] = []
    for row in range(config.height):
        cells.append([])
        for col in range(config.width):
            cells[row].append(Cell(
                is_mine=False,
                is_revealed=False,
                is_flagged=False,
                neighbor_mines=0,
                row=row,
                col=col
            ))

    return GameBoard(
        cells=cells,
        width=config.width,
        height=config.height,
        mine_count=config.mine_count
    )


def compute_neighbor_counts(board: GameBoard) -> None:
    """Fill in ``neighbor_mines`` for every cell from the current mine layout."""
    for row in range(board.height):
        for col in range(board.width):
            board.cells[row][col].neighbor_mines = count_neighbor_mines(
                board.cells, row, col, board.width, board.height
            )
