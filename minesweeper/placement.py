"""Deferred, first-click-safe mine placement."""
import logging
import random
from typing import Optional

from minesweeper.grid import compute_neighbor_counts, neighbors
from minesweeper.types import GameBoard

logger = logging.getLogger(__name__)


def place_mines(board: GameBoard, first_row: int, first_col: int,
                rng: Optional[random.Random] = None) -> None:
    """Place ``board.mine_count`` mines, keeping the first click and its neighbors clear.

    Mines are sampled without replacement from the cells outside the safe zone.
    If there are not enough of them, every outside cell becomes a mine and the
    rest are drawn from the safe-zone neighbors. The clicked cell itself is
    never mined, which is always possible since ``mine_count < width * height``.
    """
    rng = rng or random.Random()
    width, height, mine_count = board.width, board.height, board.mine_count

    safe_neighbors = neighbors(first_row, first_col, height, width)
    safe_zone = set(safe_neighbors)
    safe_zone.add((first_row, first_col))

    outside = [(row, col) for row in range(height) for col in range(width)
               if (row, col) not in safe_zone]

    if len(outside) >= mine_count:
        positions = rng.sample(outside, mine_count)
    else:
        shortfall = mine_count - len(outside)
        logger.info(
            f"Safe zone around ({first_row}, {first_col}) shrunk: "
            f"{shortfall} mine(s) placed next to the first click"
        )
        positions = outside + rng.sample(safe_neighbors, shortfall)

    for row, col in positions:
        board.cells[row][col].is_mine = True

    compute_neighbor_counts(board)
    logger.debug(f"Placed {mine_count} mines on a {height}x{width} board")
