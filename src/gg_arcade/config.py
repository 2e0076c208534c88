"""Centralized configuration and palette definitions for GG Arcade."""

from __future__ import annotations

import os
import sys
from pathlib import Path

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402


def _default_data_dir() -> Path:
    """Return a platform-appropriate user data directory for saves."""

    if sys.platform.startswith("win"):
        base = Path(os.getenv("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return base / "gg-arcade"


DATA_DIR = Path(os.getenv("GG_ARCADE_DATA_DIR") or _default_data_dir())
SCORES_FILE = Path(os.getenv("GG_ARCADE_SCORES_FILE") or DATA_DIR / "scores.json")
LOG_LEVEL: str = os.getenv("GG_ARCADE_LOG_LEVEL", "WARNING").upper()

# Snake board
CANVAS_SIZE: int = 480  # 480 / 24 => 20 cells
CELL_SIZE: int = 24
TILE_COUNT: int = CANVAS_SIZE // CELL_SIZE
HUD_HEIGHT: int = 40
FONT_NAME: str = "consolas"
FONT_SIZE: int = 20
TITLE_FONT_SIZE: int = 36

INITIAL_SPEED_MS: int = 120
SPEED_STEP_MS: int = 5
MIN_SPEED_MS: int = 60
SPEED_UP_EVERY: int = 5

PARTICLE_COUNT: int = 6
PARTICLE_SPEED: float = 240.0  # px per second at full spread
PARTICLE_DECAY: float = 1.2  # life lost per second
MIN_SWIPE: int = 30

HIGHSCORE_KEY = "snakeHighScore"

# Host window
FPS: int = 60
HEADER_HEIGHT: int = 48
MARGIN: int = 16
WINDOW_WIDTH: int = CANVAS_SIZE + MARGIN * 2
WINDOW_HEIGHT: int = CANVAS_SIZE + HUD_HEIGHT + HEADER_HEIGHT + MARGIN * 2
HOME_TITLE = "GG - Gustave's Games"
DEFAULT_ICON = "🎮"

DIRECTIONS: dict[str, tuple[int, int]] = {
    "UP": (0, -1),
    "DOWN": (0, 1),
    "LEFT": (-1, 0),
    "RIGHT": (1, 0),
}
OPPOSITE: dict[str, str] = {
    "UP": "DOWN",
    "DOWN": "UP",
    "LEFT": "RIGHT",
    "RIGHT": "LEFT",
}

# Known games; discovery is not dynamic.
GAME_CATALOG: dict[str, dict[str, str]] = {
    "snake": {
        "name": "Snake",
        "icon": "🐍",
        "entry": "gg_arcade.game:SnakeGame",
    },
}

PALETTE = {
    "bg": pygame.Color(10, 10, 10),
    "grid": pygame.Color(26, 26, 26),
    "head": pygame.Color(0, 255, 0),
    "body": pygame.Color(0, 255, 0),
    "border": pygame.Color(0, 68, 0),
    "food": pygame.Color(255, 0, 255),
    "food_highlight": pygame.Color(255, 136, 255),
    "particle": pygame.Color(255, 0, 255),
    "text": pygame.Color(216, 239, 255),
    "text_dim": pygame.Color(90, 90, 110),
    "hud": pygame.Color(18, 12, 30),
    "overlay": pygame.Color(5, 5, 15),
    "accent": pygame.Color(138, 43, 226),
}
