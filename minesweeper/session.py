"""In-process game sessions with an elapsed-time clock and best-time tracking."""
import logging
import random
import time
import uuid
from typing import Callable, Optional, Union

from minesweeper import engine
from minesweeper.best_times import BestTimeStore
from minesweeper.types import (
    GameState,
    GameStatus,
    PracticePuzzle,
    SessionSnapshot,
)

logger = logging.getLogger(__name__)


class GameClock:
    """Whole elapsed seconds between start() and stop().

    Time is read from ``time_source`` on demand, so a stopped or discarded
    clock leaves nothing running behind it.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic):
        self.time_source = time_source
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None and self._stopped_at is None

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self.time_source()

    def stop(self) -> None:
        if self.running:
            self._stopped_at = self.time_source()

    def reset(self) -> None:
        self._started_at = None
        self._stopped_at = None

    @property
    def elapsed(self) -> int:
        if self._started_at is None:
            return 0
        end = self._stopped_at if self._stopped_at is not None else self.time_source()
        return max(0, int(end - self._started_at))


class GameSession:
    """One player's game: owns the board, the clock and the best-time handoff.

    All board mutation goes through :mod:`minesweeper.engine`. Actions on a
    finished game are ignored.
    """

    def __init__(self, difficulty: Optional[str] = None, puzzle: Optional[PracticePuzzle] = None,
                 best_times: Optional[BestTimeStore] = None,
                 time_source: Callable[[], float] = time.monotonic,
                 rng: Optional[random.Random] = None,
                 session_id: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())
        self.difficulty = difficulty
        self.puzzle = puzzle
        self.best_times = best_times
        self.rng = rng or random.Random()
        self.clock = GameClock(time_source)
        self.last_result = None
        self.best_time: Optional[int] = None
        self.state: GameState = self._new_state()
        self._load_best_time()
        self._on_status_change(GameStatus.IDLE)

    def _new_state(self) -> GameState:
        return engine.new_game_state(self.id, difficulty=self.difficulty, puzzle=self.puzzle)

    @property
    def status(self) -> GameStatus:
        return self.state.status

    def _on_status_change(self, previous: GameStatus) -> None:
        status = self.state.status
        if status == previous:
            return
        if status == GameStatus.PLAYING:
            self.clock.start()
        elif status.is_terminal:
            self.clock.stop()
            if status == GameStatus.WON:
                self._record_win()

    def _load_best_time(self) -> None:
        """Cache the stored record for snapshots; refreshed on reset and after a win."""
        self.best_time = None
        if self.best_times is not None and self.state.difficulty is not None:
            self.best_time = self.best_times.get(self.state.difficulty)

    def _record_win(self) -> None:
        if self.best_times is None or self.state.difficulty is None:
            return
        logger.info(f"Session {self.id} won {self.state.difficulty} in {self.clock.elapsed}s")
        self.last_result = self.best_times.record(self.state.difficulty, self.clock.elapsed)
        self.state.new_record = self.last_result.new_record
        self.best_time = self.last_result.best_seconds

    def _act(self, action: Callable[[], GameState]) -> SessionSnapshot:
        previous = self.state.status
        action()
        self._on_status_change(previous)
        return self.snapshot()

    def reveal(self, row: int, col: int) -> SessionSnapshot:
        return self._act(lambda: engine.reveal_cell(self.state, row, col, self.rng))

    def toggle_flag(self, row: int, col: int) -> SessionSnapshot:
        return self._act(lambda: engine.toggle_flag(self.state, row, col))

    def auto_reveal(self, row: int, col: int) -> SessionSnapshot:
        return self._act(lambda: engine.chord_reveal(self.state, row, col))

    def reset(self) -> SessionSnapshot:
        """Discard the board and clock and start over with the same configuration."""
        logger.debug(f"Resetting session {self.id}")
        self.clock.reset()
        self.last_result = None
        self.state = self._new_state()
        self._load_best_time()
        self._on_status_change(GameStatus.IDLE)
        return self.snapshot()

    def change_difficulty(self, difficulty: str) -> SessionSnapshot:
        engine.get_difficulty(difficulty)
        self.difficulty = difficulty
        self.puzzle = None
        return self.reset()

    @property
    def elapsed_seconds(self) -> int:
        return self.clock.elapsed

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            board=self.state.board,
            status=self.state.status,
            elapsed_seconds=self.clock.elapsed,
            remaining_flags=self.state.remaining_flags,
            difficulty=self.state.difficulty,
            best_time=self.best_time,
            new_record=self.state.new_record,
        )


def new_session(source: Union[str, PracticePuzzle], best_times: Optional[BestTimeStore] = None,
                **kwargs) -> GameSession:
    """Start a session from a difficulty key or a practice puzzle."""
    if isinstance(source, PracticePuzzle):
        return GameSession(puzzle=source, best_times=best_times, **kwargs)
    return GameSession(difficulty=source, best_times=best_times, **kwargs)
