"""Type definitions for the Minesweeper engine."""
from dataclasses import dataclass
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum


class MinesweeperError(ValueError):
    """Base class for definition errors (never raised for player moves)."""


class InvalidConfigError(MinesweeperError):
    """Unknown difficulty or impossible board dimensions."""


class InvalidPuzzleError(MinesweeperError):
    """A practice puzzle definition that cannot produce a board."""


@dataclass
class Cell:
    """Represents a single cell on the minesweeper board."""
    is_mine: bool
    is_revealed: bool
    is_flagged: bool
    neighbor_mines: int
    row: int
    col: int


@dataclass
class GameBoard:
    """Represents the game board."""
    cells: List[List[Cell]]
    width: int
    height: int
    mine_count: int


class GameStatus(str, Enum):
    """Possible game states."""
    IDLE = 'idle'
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'
    CLOSED = 'closed'

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.WON, GameStatus.LOST, GameStatus.CLOSED)


class PuzzleGoal(str, Enum):
    """What the player has to do with a practice puzzle's target cell."""
    OPEN = 'open'
    FLAG = 'flag'


@dataclass
class GameConfig:
    """Board dimensions for a difficulty preset."""
    width: int
    height: int
    mine_count: int

    @property
    def rows(self) -> int:
        return self.height

    @property
    def cols(self) -> int:
        return self.width


DIFFICULTIES: Dict[str, GameConfig] = {
    'beginner': GameConfig(width=9, height=9, mine_count=10),
    'intermediate': GameConfig(width=16, height=16, mine_count=40),
    'expert': GameConfig(width=30, height=16, mine_count=99),
}


@dataclass
class PracticePuzzle:
    """A fixed, author-defined board with a single goal cell.

    Coordinates are ``[row, col]`` pairs. Neighbor counts are never stored,
    they are derived from ``mines`` when the board is built.
    """
    rows: int
    cols: int
    mines: List[List[int]]
    reveal_cells: List[List[int]]
    goal: PuzzleGoal
    target: List[int]
    hint: str = ''


@dataclass
class GameState:
    """Current state of the game."""
    id: str
    board: GameBoard
    status: GameStatus
    difficulty: Optional[str] = None
    puzzle: Optional[PracticePuzzle] = None
    mines_placed: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    flags_used: int = 0
    cells_revealed: int = 0
    new_record: Optional[bool] = None

    @property
    def is_practice(self) -> bool:
        return self.puzzle is not None

    @property
    def remaining_flags(self) -> int:
        return self.board.mine_count - self.flags_used


@dataclass
class MoveRequest:
    """Request to make a move."""
    row: int
    col: int
    action: str  # 'reveal', 'flag', 'chord'


@dataclass
class NewGameRequest:
    """Request to create a game from a difficulty key or a practice puzzle."""
    difficulty: Optional[str] = None
    puzzle: Optional[PracticePuzzle] = None


@dataclass
class BestTimeRequest:
    """A finished game's time, submitted for record comparison."""
    difficulty: str
    seconds: int


@dataclass
class BestTimeResult:
    """Outcome of comparing a winning time against the stored record."""
    new_record: bool
    best_seconds: Optional[int] = None
    previous_seconds: Optional[int] = None


@dataclass
class SessionSnapshot:
    """Observable view of an in-process game session."""
    board: GameBoard
    status: GameStatus
    elapsed_seconds: int
    remaining_flags: int
    difficulty: Optional[str] = None
    best_time: Optional[int] = None
    new_record: Optional[bool] = None
