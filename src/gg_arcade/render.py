"""Drawing primitives and the Snake render pass."""

from __future__ import annotations

import math
from typing import Protocol

import pygame

from .config import CANVAS_SIZE, CELL_SIZE, FONT_NAME, FONT_SIZE, HUD_HEIGHT, PALETTE, TITLE_FONT_SIZE
from .effects import draw_particles
from .engine import GameState

Rect = tuple[int, int, int, int]

BUTTON_WIDTH = 96
BUTTON_HEIGHT = HUD_HEIGHT - 12
BUTTON_ORDER = ("start", "pause", "restart")


class Canvas(Protocol):
    width: int
    height: int

    def fill_rect(self, rect: Rect, color: pygame.Color) -> None: ...

    def stroke_rect(self, rect: Rect, color: pygame.Color, width: int = 1) -> None: ...

    def text(
        self,
        value: str,
        pos: tuple[int, int],
        color: pygame.Color,
        *,
        size: int = FONT_SIZE,
        center: bool = False,
    ) -> None: ...


class PygameCanvas:
    """Canvas backed by a pygame surface."""

    def __init__(self, surface: pygame.Surface, font_name: str = FONT_NAME) -> None:
        self.surface = surface
        self.font_name = font_name
        self._fonts: dict[int, pygame.font.Font] = {}

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def _font(self, size: int) -> pygame.font.Font:
        font = self._fonts.get(size)
        if font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            font = pygame.font.SysFont(self.font_name, size)
            self._fonts[size] = font
        return font

    def fill_rect(self, rect: Rect, color: pygame.Color) -> None:
        color = pygame.Color(color)
        if color.a < 255:
            layer = pygame.Surface((rect[2], rect[3]), pygame.SRCALPHA)
            layer.fill(color)
            self.surface.blit(layer, (rect[0], rect[1]))
        else:
            pygame.draw.rect(self.surface, color, rect)

    def stroke_rect(self, rect: Rect, color: pygame.Color, width: int = 1) -> None:
        pygame.draw.rect(self.surface, color, rect, width)

    def text(
        self,
        value: str,
        pos: tuple[int, int],
        color: pygame.Color,
        *,
        size: int = FONT_SIZE,
        center: bool = False,
    ) -> None:
        surf = self._font(size).render(value, True, color)
        rect = surf.get_rect()
        if center:
            rect.center = pos
        else:
            rect.topleft = pos
        self.surface.blit(surf, rect)


def button_rects(board_size: int = CANVAS_SIZE) -> dict[str, Rect]:
    """Button bar layout under the board, right-aligned."""
    top = board_size + (HUD_HEIGHT - BUTTON_HEIGHT) // 2
    rects: dict[str, Rect] = {}
    x = board_size - len(BUTTON_ORDER) * (BUTTON_WIDTH + 6)
    for name in BUTTON_ORDER:
        rects[name] = (x, top, BUTTON_WIDTH, BUTTON_HEIGHT)
        x += BUTTON_WIDTH + 6
    return rects


def button_at(x: float, y: float, board_size: int = CANVAS_SIZE) -> str | None:
    for name, (bx, by, bw, bh) in button_rects(board_size).items():
        if bx <= x < bx + bw and by <= y < by + bh:
            return name
    return None


class SnakeRenderer:
    """Reads the game each frame and draws it; never mutates game state."""

    def __init__(self, canvas: Canvas, cell_size: int = CELL_SIZE) -> None:
        self.canvas = canvas
        self.cell_size = cell_size

    def draw(self, game) -> None:
        """Render background, entities, particles, HUD and overlay."""
        engine = game.engine
        board = engine.tile_count * self.cell_size
        self.canvas.fill_rect((0, 0, self.canvas.width, self.canvas.height), PALETTE["bg"])
        self._draw_grid(engine.tile_count)

        if engine.state in (GameState.PLAYING, GameState.PAUSED):
            self._draw_snake(engine.snake, engine.direction)
            if engine.food is not None:
                self._draw_food(engine.food, game.food_pulse)

        draw_particles(self.canvas, game.particles)
        self._draw_hud(board, engine.score, engine.high_score, game.buttons)

        if game.overlay.visible:
            self._draw_overlay(board, game.overlay.title, game.overlay.message)

    def _draw_grid(self, tile_count: int) -> None:
        size = tile_count * self.cell_size
        for i in range(tile_count + 1):
            pos = i * self.cell_size
            self.canvas.fill_rect((pos, 0, 1, size), PALETTE["grid"])
            self.canvas.fill_rect((0, pos, size, 1), PALETTE["grid"])

    def _draw_snake(self, snake, direction: str | None) -> None:
        cs = self.cell_size
        for idx, segment in enumerate(snake):
            x = segment[0] * cs
            y = segment[1] * cs
            if idx == 0:
                self.canvas.fill_rect((x + 2, y + 2, cs - 4, cs - 4), PALETTE["head"])
                self._draw_eyes(x, y, direction)
            else:
                alpha = max(1 - idx * 0.05, 0.3)
                body = pygame.Color(PALETTE["body"])
                body.a = int(255 * alpha)
                self.canvas.fill_rect((x + 3, y + 3, cs - 6, cs - 6), body)
            self.canvas.stroke_rect((x + 2, y + 2, cs - 4, cs - 4), PALETTE["border"], 2)

    def _draw_eyes(self, x: int, y: int, direction: str | None) -> None:
        cs = self.cell_size
        eye = 3
        black = pygame.Color(0, 0, 0)
        if direction == "RIGHT":
            spots = ((x + cs - 8, y + 6), (x + cs - 8, y + cs - 9))
        elif direction == "LEFT":
            spots = ((x + 5, y + 6), (x + 5, y + cs - 9))
        elif direction == "UP":
            spots = ((x + 6, y + 5), (x + cs - 9, y + 5))
        else:
            spots = ((x + 6, y + cs - 8), (x + cs - 9, y + cs - 8))
        for ex, ey in spots:
            self.canvas.fill_rect((ex, ey, eye, eye), black)

    def _draw_food(self, food, pulse_phase: float) -> None:
        cs = self.cell_size
        x = food[0] * cs
        y = food[1] * cs
        pulse = math.sin(pulse_phase) * 0.3 + 0.7

        glow = pygame.Color(PALETTE["food"])
        glow.a = int(90 * pulse)
        self.canvas.fill_rect((x, y, cs, cs), glow)

        size = cs - 6
        self.canvas.fill_rect((x + 3, y + 3, size, size), PALETTE["food"])
        self.canvas.fill_rect((x + 5, y + 5, size - 8, size - 8), PALETTE["food_highlight"])

    def _draw_hud(self, board: int, score: int, high_score: int, buttons) -> None:
        self.canvas.fill_rect((0, board, self.canvas.width, HUD_HEIGHT), PALETTE["hud"])
        self.canvas.text(f"SCORE {score:04}", (10, board + 10), PALETTE["text"])
        self.canvas.text(f"BEST {high_score:04}", (150, board + 10), PALETTE["text"])

        for name, rect in button_rects(board).items():
            state = buttons[name]
            color = PALETTE["text"] if state.enabled else PALETTE["text_dim"]
            self.canvas.stroke_rect(rect, color, 2)
            center = (rect[0] + rect[2] // 2, rect[1] + rect[3] // 2)
            self.canvas.text(state.label, center, color, size=FONT_SIZE - 4, center=True)

    def _draw_overlay(self, board: int, title: str, message: str) -> None:
        shade = pygame.Color(PALETTE["overlay"])
        shade.a = 170
        self.canvas.fill_rect((0, 0, board, board), shade)
        middle = board // 2
        self.canvas.text(title, (middle, middle - 24), PALETTE["text"], size=TITLE_FONT_SIZE, center=True)
        self.canvas.text(message, (middle, middle + 20), PALETTE["text"], center=True)
