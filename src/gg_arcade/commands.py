"""Translate key presses and swipes into engine commands."""

from __future__ import annotations

from .config import MIN_SWIPE
from .engine import Command, GameState

KEY_TO_COMMAND: dict[str, Command] = {
    "up": Command.MOVE_UP,
    "w": Command.MOVE_UP,
    "down": Command.MOVE_DOWN,
    "s": Command.MOVE_DOWN,
    "left": Command.MOVE_LEFT,
    "a": Command.MOVE_LEFT,
    "right": Command.MOVE_RIGHT,
    "d": Command.MOVE_RIGHT,
}
ACTION_KEYS = frozenset({"space", "return", "enter"})
RESTART_KEYS = frozenset({"r"})


def _action_command(state: GameState) -> Command:
    if state is GameState.MENU:
        return Command.START
    if state is GameState.GAME_OVER:
        return Command.RESTART
    return Command.PAUSE


def translate_key(key: str, state: GameState) -> Command | None:
    """Map a pygame key name to a command for the given state."""
    name = key.lower()
    if name in ACTION_KEYS:
        return _action_command(state)
    if name in RESTART_KEYS:
        # r never leaves a running game
        if state in (GameState.GAME_OVER, GameState.PAUSED):
            return Command.RESTART
        return None
    return KEY_TO_COMMAND.get(name)


def translate_swipe(
    start: tuple[float, float],
    end: tuple[float, float],
    state: GameState,
    *,
    min_swipe: float = MIN_SWIPE,
) -> Command | None:
    """Turn a press/release pair into a command; short drags are ignored."""
    if state is GameState.MENU:
        return Command.START
    if state is GameState.GAME_OVER:
        return Command.RESTART

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if abs(dx) > abs(dy):
        if abs(dx) > min_swipe:
            return Command.MOVE_RIGHT if dx > 0 else Command.MOVE_LEFT
    elif abs(dy) > min_swipe:
        return Command.MOVE_DOWN if dy > 0 else Command.MOVE_UP
    return None
