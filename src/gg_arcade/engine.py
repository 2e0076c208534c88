"""Snake engine: state machine, fixed-period tick and scoring."""

from __future__ import annotations

import enum
import logging
import random
from typing import NamedTuple

from .config import (
    CANVAS_SIZE,
    CELL_SIZE,
    DIRECTIONS,
    INITIAL_SPEED_MS,
    MIN_SPEED_MS,
    OPPOSITE,
    SPEED_STEP_MS,
    SPEED_UP_EVERY,
)
from .scheduler import Scheduler, SchedulerScope, TimerHandle
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


class GameState(enum.Enum):
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "gameOver"


class Command(enum.Enum):
    MOVE_UP = "moveUp"
    MOVE_DOWN = "moveDown"
    MOVE_LEFT = "moveLeft"
    MOVE_RIGHT = "moveRight"
    START = "start"
    PAUSE = "pause"
    RESTART = "restart"


MOVE_COMMANDS: dict[Command, str] = {
    Command.MOVE_UP: "UP",
    Command.MOVE_DOWN: "DOWN",
    Command.MOVE_LEFT: "LEFT",
    Command.MOVE_RIGHT: "RIGHT",
}


class Position(NamedTuple):
    x: int
    y: int


class EngineListener:
    """No-op hooks the engine calls; UI collaborators override what they need."""

    def on_state_change(self, state: GameState) -> None:
        pass

    def on_score_change(self, score: int, high_score: int) -> None:
        pass

    def on_food_eaten(self, position: Position) -> None:
        pass

    def on_game_over(self, score: int, high_score: int) -> None:
        pass


class SnakeEngine:
    """Owns snake, food, direction and score for one game instance."""

    def __init__(
        self,
        scheduler: Scheduler | SchedulerScope,
        store: HighScoreStore,
        *,
        listener: EngineListener | None = None,
        canvas_size: int = CANVAS_SIZE,
        cell_size: int = CELL_SIZE,
        rng: random.Random | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.store = store
        self.listener = listener or EngineListener()
        self.cell_size = cell_size
        self.tile_count = canvas_size // cell_size
        self.rng = rng or random.Random()

        self.state = GameState.MENU
        self.snake: list[Position] = []
        self.food: Position | None = None
        # Committed vs pending direction; None until the first start.
        self.direction: str | None = None
        self.next_direction: str | None = None
        self._turn_taken = False
        self.score = 0
        self.high_score = self.store.load()
        self.game_speed = INITIAL_SPEED_MS
        self._tick_handle: TimerHandle | None = None

    # --- Timer ownership -----------------------------------------------

    def _schedule_tick(self) -> None:
        """(Re)start the tick timer; the previous one is always cancelled first."""
        self._cancel_tick()
        self._tick_handle = self.scheduler.set_interval(self.update, self.game_speed)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self.scheduler.clear_interval(self._tick_handle)
            self._tick_handle = None

    @property
    def ticking(self) -> bool:
        return self._tick_handle is not None and self._tick_handle.active

    def _set_state(self, state: GameState) -> None:
        if state is self.state:
            return
        logger.debug("Snake state %s -> %s", self.state.value, state.value)
        self.state = state
        self.listener.on_state_change(state)

    # --- Commands ------------------------------------------------------

    def dispatch(self, command: Command) -> None:
        if command in MOVE_COMMANDS:
            self.set_direction(MOVE_COMMANDS[command])
        elif command is Command.START:
            self.start()
        elif command is Command.PAUSE:
            self.toggle_pause()
        elif command is Command.RESTART:
            self.restart()

    def set_direction(self, direction: str) -> None:
        """Queue a turn for the next tick; reverses and extra turns are ignored."""
        if self.state is not GameState.PLAYING:
            return
        if direction not in DIRECTIONS:
            raise ValueError(f"unknown direction {direction!r}")
        if direction == OPPOSITE[self.direction]:
            return
        if direction == self.next_direction:
            return
        if self._turn_taken:
            logger.debug("Ignoring %s: already turned this tick", direction)
            return
        self.next_direction = direction
        self._turn_taken = True

    def start(self) -> None:
        """Begin a fresh game from the menu or after a game over."""
        if self.state in (GameState.PLAYING, GameState.PAUSED):
            return
        self._reset()

    def restart(self) -> None:
        self._reset()

    def toggle_pause(self) -> None:
        if self.state is GameState.PLAYING:
            self._cancel_tick()
            self._set_state(GameState.PAUSED)
        elif self.state is GameState.PAUSED:
            self._set_state(GameState.PLAYING)
            self._schedule_tick()

    def shutdown(self) -> None:
        self._cancel_tick()

    def _reset(self) -> None:
        self._cancel_tick()
        self.score = 0
        self.game_speed = INITIAL_SPEED_MS

        center = self.tile_count // 2
        self.snake = [
            Position(center, center),
            Position(center - 1, center),
            Position(center - 2, center),
        ]
        self.direction = "RIGHT"
        self.next_direction = "RIGHT"
        self._turn_taken = False
        self.generate_food()

        self._set_state(GameState.PLAYING)
        self.listener.on_score_change(self.score, self.high_score)
        self._schedule_tick()
        logger.info("Snake game started on a %dx%d grid", self.tile_count, self.tile_count)

    # --- Simulation ----------------------------------------------------

    def generate_food(self) -> Position | None:
        """Place food on a uniformly random cell not covered by the snake.

        Returns None, and leaves no food, when the snake covers the board.
        """
        occupied = set(self.snake)
        if len(occupied) >= self.tile_count * self.tile_count:
            self.food = None
            return None
        while True:
            pos = Position(
                self.rng.randrange(self.tile_count),
                self.rng.randrange(self.tile_count),
            )
            if pos not in occupied:
                self.food = pos
                return pos

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.tile_count and 0 <= pos.y < self.tile_count

    def update(self) -> None:
        """Advance the snake by exactly one cell."""
        if self.state is not GameState.PLAYING:
            return

        self.direction = self.next_direction
        self._turn_taken = False

        dx, dy = DIRECTIONS[self.direction]
        head = self.snake[0]
        new_head = Position(head.x + dx, head.y + dy)

        if not self.in_bounds(new_head) or new_head in self.snake:
            self.game_over()
            return

        self.snake.insert(0, new_head)

        if new_head == self.food:
            self.score += 1
            self.listener.on_food_eaten(new_head)
            if self.generate_food() is None:
                self.listener.on_score_change(self.score, self.high_score)
                logger.info("Snake filled the board at score %d", self.score)
                self.game_over()
                return
            if self.score % SPEED_UP_EVERY == 0 and self.game_speed > MIN_SPEED_MS:
                self.game_speed = max(MIN_SPEED_MS, self.game_speed - SPEED_STEP_MS)
                logger.debug("Speed up: tick every %d ms", self.game_speed)
                self._schedule_tick()
            self.listener.on_score_change(self.score, self.high_score)
        else:
            self.snake.pop()

    def game_over(self) -> None:
        """Stop ticking and record the high score."""
        if self.state is GameState.GAME_OVER:
            return
        self._cancel_tick()
        self._set_state(GameState.GAME_OVER)
        if self.score > self.high_score:
            self.high_score = self.score
            self.store.save(self.high_score)
            logger.info("New snake high score: %d", self.high_score)
        self.listener.on_game_over(self.score, self.high_score)
