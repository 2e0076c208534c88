"""Snake as an embeddable game: engine, input wiring, UI state and rendering."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable

from .commands import translate_key, translate_swipe
from .config import CANVAS_SIZE, CELL_SIZE, HIGHSCORE_KEY, SCORES_FILE
from .effects import Particle, spawn_particles, update_particles
from .engine import EngineListener, GameState, Position, SnakeEngine
from .frame import EventTarget, FrameWindow, KeyEvent, MessageEvent, PointerEvent
from .render import SnakeRenderer, button_at
from .scheduler import FrameTask
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int | None:
    """Integers only; message payloads may carry browser-style strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass(slots=True)
class Overlay:
    title: str = ""
    message: str = ""
    visible: bool = True


@dataclass(slots=True)
class ButtonState:
    label: str
    enabled: bool = True


class SnakeGame(EngineListener):
    """Hosts one :class:`SnakeEngine` inside a frame window.

    The game listens for native key events on the frame document and for
    ``{"type": "keydown"}`` messages posted by the host, and treats both as
    the same input. It publishes itself as ``exports["game"]`` and its
    teardown as ``exports["game_cleanup"]``.
    """

    def __init__(
        self,
        window: FrameWindow,
        *,
        store: HighScoreStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.window = window
        self.scheduler = window.scheduler
        self.store = store or HighScoreStore(SCORES_FILE, HIGHSCORE_KEY)
        self.rng = rng or random.Random()

        self.overlay = Overlay()
        self.buttons: dict[str, ButtonState] = {
            "start": ButtonState("START"),
            "pause": ButtonState("PAUSE", enabled=False),
            "restart": ButtonState("RESTART"),
        }
        self.particles: list[Particle] = []
        self.food_pulse = 0.0

        self.engine = SnakeEngine(
            self.scheduler,
            self.store,
            listener=self,
            canvas_size=CANVAS_SIZE,
            cell_size=CELL_SIZE,
            rng=self.rng,
        )
        self.renderer = SnakeRenderer(window.canvas, CELL_SIZE)

        self.closed = False
        self._last_seq = 0
        self._pointer_start: tuple[float, float] | None = None
        self._installed: list[tuple[EventTarget, str, Callable[[Any], None]]] = []

        self._install_listeners()
        self.show_menu()
        self.update_ui()
        self._render_task: FrameTask | None = self.scheduler.add_frame_task(self.render)

        window.exports["game"] = self
        window.exports["game_cleanup"] = self.cleanup
        logger.info("Snake game initialized")

    # --- Listener bookkeeping ------------------------------------------

    def _listen(self, target: EventTarget, event_type: str, listener: Callable[[Any], None]) -> None:
        target.add_event_listener(event_type, listener)
        self._installed.append((target, event_type, listener))

    def _install_listeners(self) -> None:
        document = self.window.document
        self._listen(document, "keydown", self.handle_key_press)
        self._listen(self.window, "message", self._on_message)
        self._listen(document, "pointerdown", self._on_pointer_down)
        self._listen(document, "pointerup", self._on_pointer_up)

    # --- Input ---------------------------------------------------------

    def _on_message(self, event: MessageEvent) -> None:
        data = event.data
        if not isinstance(data, dict) or data.get("type") != "keydown":
            return
        key = data.get("key")
        if not isinstance(key, str):
            logger.debug("Ignoring keydown message without a key name: %r", data)
            return
        self.handle_key_press(
            KeyEvent(
                type="keydown",
                key=key,
                code=_as_int(data.get("code")) or 0,
                seq=_as_int(data.get("seq")),
            )
        )

    def handle_key_press(self, event: KeyEvent) -> None:
        """Translate one key press into an engine command.

        Relayed presses carry a sequence number; anything at or below the
        last one handled is a copy from another channel and is dropped.
        """
        if self.closed:
            return
        seq = _as_int(getattr(event, "seq", None))
        if seq is not None:
            if seq <= self._last_seq:
                logger.debug("Dropping duplicate key press #%s (%s)", seq, event.key)
                return
            self._last_seq = seq

        logger.debug("Key pressed: %s, state: %s", event.key, self.engine.state.value)
        command = translate_key(event.key, self.engine.state)
        if command is not None:
            event.prevent_default()
            self.engine.dispatch(command)

    def _on_pointer_down(self, event: PointerEvent) -> None:
        self._pointer_start = (event.x, event.y)

    def _on_pointer_up(self, event: PointerEvent) -> None:
        start = self._pointer_start or (event.x, event.y)
        self._pointer_start = None

        button = button_at(event.x, event.y, self.engine.tile_count * CELL_SIZE)
        if button is not None:
            self.click_button(button)
            return

        command = translate_swipe(start, (event.x, event.y), self.engine.state)
        if command is not None:
            self.engine.dispatch(command)

    def click_button(self, name: str) -> None:
        state = self.buttons.get(name)
        if state is None or not state.enabled:
            return
        if name == "start":
            self.engine.start()
        elif name == "pause":
            self.engine.toggle_pause()
        elif name == "restart":
            self.engine.restart()

    # --- Engine hooks --------------------------------------------------

    def on_state_change(self, state: GameState) -> None:
        if state is GameState.PLAYING:
            self.hide_overlay()
        elif state is GameState.PAUSED:
            self.show_pause_screen()
        elif state is GameState.MENU:
            self.show_menu()
        self.update_ui()

    def on_score_change(self, score: int, high_score: int) -> None:
        self.update_ui()

    def on_food_eaten(self, position: Position) -> None:
        spawn_particles(self.particles, position, CELL_SIZE, rng=self.rng)

    def on_game_over(self, score: int, high_score: int) -> None:
        self.show_game_over_screen(score)
        self.update_ui()

    # --- UI state ------------------------------------------------------

    def update_ui(self) -> None:
        state = self.engine.state
        self.buttons["start"].enabled = state is not GameState.PLAYING
        self.buttons["pause"].enabled = state in (GameState.PLAYING, GameState.PAUSED)
        self.buttons["pause"].label = "RESUME" if state is GameState.PAUSED else "PAUSE"

    def show_menu(self) -> None:
        self._show_overlay("SNAKE", "Click or press SPACE to start!")

    def show_pause_screen(self) -> None:
        self._show_overlay("PAUSED", "Press SPACE to continue")

    def show_game_over_screen(self, score: int) -> None:
        self._show_overlay("GAME OVER", f"Final Score: {score}")

    def _show_overlay(self, title: str, message: str) -> None:
        self.overlay.title = title
        self.overlay.message = message
        self.overlay.visible = True

    def hide_overlay(self) -> None:
        self.overlay.visible = False

    # --- Frame loop ----------------------------------------------------

    def render(self, dt: float) -> None:
        """Per-frame task; valid in every state."""
        self.food_pulse += dt * 6.0
        self.renderer.draw(self)
        self.particles = update_particles(self.particles, dt)

    def cleanup(self) -> None:
        """Stop timers and detach everything this game installed."""
        if self.closed:
            return
        self.closed = True
        self.engine.shutdown()
        self.scheduler.cancel_frame_task(self._render_task)
        self._render_task = None
        for target, event_type, listener in self._installed:
            target.remove_event_listener(event_type, listener)
        self._installed.clear()
        if self.window.exports.get("game") is self:
            self.window.exports.pop("game", None)
            self.window.exports.pop("game_cleanup", None)
        logger.info("Cleaned up snake game")
