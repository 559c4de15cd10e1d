"""Temporal workflows for Minesweeper game."""
import asyncio
from datetime import timedelta
from typing import Optional
from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from minesweeper.engine import elapsed_seconds
    from minesweeper.types import BestTimeRequest, GameState, GameStatus, MoveRequest, NewGameRequest
    from minesweeper.activities import apply_move, create_game, record_best_time

ACTIVITY_TIMEOUT = timedelta(seconds=60)
DEFINITION_ERRORS = ["InvalidConfigError", "InvalidPuzzleError"]


@workflow.defn
class MinesweeperWorkflow:
    """Workflow that manages a single Minesweeper game."""

    def __init__(self):
        self.game_id: str = ""
        self.request: NewGameRequest | None = None
        self.game_state: GameState | None = None
        self.last_activity_time: float = 0
        self.should_close: bool = False
        # Moves and restarts run one at a time, even across activity awaits
        self.lock = asyncio.Lock()

    @workflow.run
    async def run(self, game_id: str, request: NewGameRequest) -> None:
        """Main workflow entry point."""
        # Store game_id immediately so queries can access it during initialization
        self.game_id = game_id
        self.request = request
        self.last_activity_time = workflow.time()

        async with self.lock:
            await self._new_game(request)

        # Auto-close workflow after 24 hours of inactivity
        inactivity_timeout = timedelta(hours=24)
        check_interval = timedelta(minutes=1)

        try:
            while not self.should_close:
                await workflow.wait_condition(
                    lambda: self.should_close or
                           (workflow.time() - self.last_activity_time) >= inactivity_timeout.total_seconds(),
                    timeout=check_interval.total_seconds()
                )

                if self.should_close:
                    break

                if (workflow.time() - self.last_activity_time) >= inactivity_timeout.total_seconds():
                    workflow.logger.info(f"Game {game_id} auto-closing due to 24 hours of inactivity")
                    break

        except Exception as error:
            workflow.logger.error(f"Error in workflow loop: {error}")

        if self.game_state:
            if self.game_state.end_time is None:
                self.game_state.end_time = workflow.now()
            self.game_state.status = GameStatus.CLOSED

        workflow.logger.info(f"Minesweeper workflow {game_id} completed")

    async def _new_game(self, request: NewGameRequest) -> None:
        self.game_state = await workflow.execute_activity(
            create_game,
            args=[self.game_id, request],
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=RetryPolicy(non_retryable_error_types=DEFINITION_ERRORS),
        )
        # Practice games start out playing, so their clock starts right away
        await self._on_status_change(GameStatus.IDLE)

    async def _on_status_change(self, previous: GameStatus) -> None:
        status = self.game_state.status
        if status == previous:
            return

        # A first reveal can end the game outright, skipping playing
        if self.game_state.start_time is None:
            self.game_state.start_time = workflow.now()
        if status in (GameStatus.WON, GameStatus.LOST):
            self.game_state.end_time = workflow.now()
            workflow.logger.info(f"Game {self.game_id} finished: {status.value}")
            if status == GameStatus.WON and self.game_state.difficulty and not self.game_state.is_practice:
                result = await workflow.execute_activity(
                    record_best_time,
                    BestTimeRequest(
                        difficulty=self.game_state.difficulty,
                        seconds=elapsed_seconds(self.game_state, workflow.now()),
                    ),
                    start_to_close_timeout=ACTIVITY_TIMEOUT,
                )
                self.game_state.new_record = result.new_record

    async def _make_move(self, move_request: MoveRequest) -> None:
        async with self.lock:
            if not self.game_state or self.game_state.status.is_terminal:
                return  # Game not ready or game is over, ignore moves

            self.last_activity_time = workflow.time()
            previous = self.game_state.status

            try:
                self.game_state = await workflow.execute_activity(
                    apply_move,
                    args=[self.game_state, move_request],
                    start_to_close_timeout=ACTIVITY_TIMEOUT,
                )
                await self._on_status_change(previous)
            except Exception as error:
                workflow.logger.error(f"Error processing move: {error}")

    async def _restart(self, request: NewGameRequest) -> None:
        async with self.lock:
            if self.game_state and self.game_state.status == GameStatus.CLOSED:
                return  # Cannot restart closed games

            self.last_activity_time = workflow.time()
            if request.difficulty or request.puzzle:
                self.request = request
            await self._new_game(self.request)

    @workflow.signal
    async def make_move_signal(self, move_request: MoveRequest) -> None:
        """Signal to make a move (fire-and-forget)."""
        await self._make_move(move_request)

    @workflow.update
    async def make_move_update(self, move_request: MoveRequest) -> GameState:
        """Update to make a move and return the updated state."""
        # Moves sent right after start wait for the board to exist
        await workflow.wait_condition(lambda: self.game_state is not None)
        await self._make_move(move_request)
        return self.game_state

    @workflow.update
    async def restart_game_update(self, request: NewGameRequest) -> GameState:
        """Reset the board, optionally switching difficulty or puzzle."""
        await self._restart(request)
        return self.game_state

    @workflow.signal
    def close_game_signal(self) -> None:
        """Signal to close the game."""
        self.should_close = True

    @workflow.query
    def get_game_state_query(self) -> Optional[GameState]:
        """Query to get the current game state (None while initializing)."""
        return self.game_state
