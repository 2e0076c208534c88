"""The arcade host: a pygame window that lists games and hosts one at a time."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

import pygame

from .config import (
    CANVAS_SIZE,
    FONT_SIZE,
    FPS,
    GAME_CATALOG,
    HEADER_HEIGHT,
    HUD_HEIGHT,
    LOG_LEVEL,
    MARGIN,
    PALETTE,
    TITLE_FONT_SIZE,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from .frame import PointerEvent
from .loader import GameLoader
from .render import PygameCanvas
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

MENU_ROW_HEIGHT = FONT_SIZE + 14
MENU_TOP = HEADER_HEIGHT + MARGIN + 110


class Arcade:
    """Owns the window, the scheduler and the game loader."""

    def __init__(self, *, same_origin: bool = True) -> None:
        pygame.init()
        self.window = pygame.display.set_mode(
            (WINDOW_WIDTH, WINDOW_HEIGHT), pygame.DOUBLEBUF | pygame.SCALED
        )
        self.canvas = PygameCanvas(self.window)
        self.scheduler = Scheduler()
        self.loader = GameLoader(
            self.scheduler, self._new_frame_canvas, same_origin=same_origin
        )
        self.loader.load_games(GAME_CATALOG)
        self.menu_index = 0
        self.frame_origin = (MARGIN, HEADER_HEIGHT + MARGIN)
        self._caption = ""
        self._sync_caption()

    def _new_frame_canvas(self) -> PygameCanvas:
        return PygameCanvas(pygame.Surface((CANVAS_SIZE, CANVAS_SIZE + HUD_HEIGHT)))

    def _sync_caption(self) -> None:
        if self.loader.title != self._caption:
            self._caption = self.loader.title
            pygame.display.set_caption(self._caption)

    # --- Input ---------------------------------------------------------

    def _playable_ids(self) -> list[str]:
        return [game_id for game_id, _ in self.loader.menu_entries() if game_id]

    def play(self, game_id: str) -> bool:
        started = self.loader.play_game(game_id)
        self._sync_caption()
        return started

    def _handle_menu_key(self, key: str) -> None:
        games = self._playable_ids()
        if not games:
            return
        if key == "up":
            self.menu_index = (self.menu_index - 1) % len(games)
        elif key == "down":
            self.menu_index = (self.menu_index + 1) % len(games)
        elif key in ("return", "space"):
            self.play(games[self.menu_index % len(games)])
        elif key.isdigit() and 1 <= int(key) <= len(games):
            self.play(games[int(key) - 1])

    def _handle_menu_click(self, pos: tuple[int, int]) -> None:
        row = (pos[1] - MENU_TOP) // MENU_ROW_HEIGHT
        games = self._playable_ids()
        if pos[1] >= MENU_TOP and 0 <= row < len(games):
            self.play(games[row])

    def _frame_point(self, pos: tuple[int, int]) -> tuple[int, int] | None:
        x = pos[0] - self.frame_origin[0]
        y = pos[1] - self.frame_origin[1]
        if 0 <= x < CANVAS_SIZE and 0 <= y < CANVAS_SIZE + HUD_HEIGHT:
            return x, y
        return None

    def handle_events(self) -> bool:
        """Route window events; returns False when the arcade should exit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                key = pygame.key.name(event.key)
                if key == "escape":
                    if not self.loader.is_game_active():
                        return False
                    self.loader.show_home()
                    self._sync_caption()
                elif self.loader.is_game_active():
                    self.loader.handle_key(key, event.key)
                else:
                    self._handle_menu_key(key)
            elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
                if event.button != 1:
                    continue
                if not self.loader.is_game_active():
                    if event.type == pygame.MOUSEBUTTONUP:
                        self._handle_menu_click(event.pos)
                    continue
                point = self._frame_point(event.pos)
                if point is None:
                    continue
                kind = "pointerdown" if event.type == pygame.MOUSEBUTTONDOWN else "pointerup"
                self.loader.handle_pointer(PointerEvent(kind, point[0], point[1]))
        return True

    # --- Draw ----------------------------------------------------------

    def _draw_home(self) -> None:
        center_x = WINDOW_WIDTH // 2
        top = HEADER_HEIGHT + MARGIN
        self.canvas.text(
            "Welcome to Gustave's Arcade!",
            (center_x, top + 24),
            PALETTE["text"],
            size=TITLE_FONT_SIZE - 8,
            center=True,
        )
        self.canvas.text(
            "Choose a game to start playing. ESC returns here.",
            (center_x, top + 64),
            PALETTE["text_dim"],
            center=True,
        )
        playable = 0
        for idx, (game_id, label) in enumerate(self.loader.menu_entries()):
            y = MENU_TOP + idx * MENU_ROW_HEIGHT
            if game_id is None:
                self.canvas.text(label, (MARGIN * 3, y), PALETTE["text_dim"])
                continue
            selected = playable == self.menu_index
            if selected:
                self.canvas.fill_rect(
                    (MARGIN * 2, y - 4, WINDOW_WIDTH - MARGIN * 4, MENU_ROW_HEIGHT - 2),
                    PALETTE["accent"],
                )
            self.canvas.text(f"{playable + 1}. {label}", (MARGIN * 3, y), PALETTE["text"])
            playable += 1

    def draw(self) -> None:
        self.window.fill(PALETTE["bg"])
        self.canvas.fill_rect((0, 0, WINDOW_WIDTH, HEADER_HEIGHT), PALETTE["hud"])
        self.canvas.text(self.loader.title, (MARGIN, 12), PALETTE["text"])

        frame = self.loader.frame
        if frame is not None:
            self.window.blit(frame.canvas.surface, self.frame_origin)
            x, y = self.frame_origin
            self.canvas.stroke_rect(
                (x - 2, y - 2, CANVAS_SIZE + 4, CANVAS_SIZE + HUD_HEIGHT + 4),
                PALETTE["accent"],
                2,
            )
        else:
            self._draw_home()

    # --- Main loop -----------------------------------------------------

    def run(self) -> None:
        """Handle events, fire due ticks, deliver messages, render, repeat."""
        clock = pygame.time.Clock()
        running = True

        while running:
            dt = clock.tick(FPS) / 1000.0
            running = self.handle_events()

            self.scheduler.run_due()
            if self.loader.frame is not None:
                self.loader.frame.deliver_messages()
            self.scheduler.run_frame(dt)

            self.draw()
            pygame.display.update()

        self.loader.show_home()
        self.scheduler.clear()
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gg-arcade", description="Gustave's retro arcade")
    parser.add_argument("--game", help="start this game directly (e.g. snake)")
    parser.add_argument(
        "--isolated",
        action="store_true",
        help="host games cross-origin; input reaches them through messages only",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    arcade = Arcade(same_origin=not args.isolated)
    if args.game and not arcade.play(args.game):
        logger.warning("Could not start %s; showing the menu instead", args.game)
    arcade.run()
    return 0
