"""Game metadata and hosting of the selected game inside a frame."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .config import DEFAULT_ICON, HOME_TITLE
from .frame import GameFrame
from .relay import InputRelay
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class GameConfigError(ValueError):
    """Game metadata is missing or malformed."""


@dataclass(frozen=True, slots=True)
class GameInfo:
    name: str
    directory: str
    entry: str
    icon: str | None = None

    @property
    def label(self) -> str:
        return f"{self.icon or DEFAULT_ICON} {self.name}"


def _required_text(raw: Mapping[str, Any], field: str, directory: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str) or not value.strip():
        raise GameConfigError(f"game {directory!r}: missing or invalid {field!r}")
    return value.strip()


def parse_game_info(directory: str, raw: Any) -> GameInfo:
    """Validate one catalog entry."""
    if not isinstance(raw, Mapping):
        raise GameConfigError(f"game {directory!r}: metadata must be a mapping")
    icon = raw.get("icon")
    if icon is not None and not isinstance(icon, str):
        raise GameConfigError(f"game {directory!r}: icon must be a string")
    return GameInfo(
        name=_required_text(raw, "name", directory),
        directory=directory,
        entry=_required_text(raw, "entry", directory),
        icon=icon or None,
    )


def resolve_entry(entry: str) -> Callable[..., Any]:
    """Import ``"package.module:attr"`` and return the attribute."""
    module_name, sep, attr = entry.partition(":")
    if not sep or not module_name or not attr:
        raise GameConfigError(f"entry {entry!r} must look like 'module:attr'")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class GameLoader:
    """Keeps the game list and the currently hosted frame.

    ``canvas_factory`` builds a fresh drawing surface for each frame, so a
    replaced game never draws over its successor.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        canvas_factory: Callable[[], Any],
        *,
        same_origin: bool = True,
    ) -> None:
        self.scheduler = scheduler
        self.canvas_factory = canvas_factory
        self.same_origin = same_origin
        self.games: dict[str, GameInfo] = {}
        self.current_game: str | None = None
        self.frame: GameFrame | None = None
        self.relay: InputRelay | None = None
        self.title = HOME_TITLE

    # --- Catalog -------------------------------------------------------

    def load_games(self, catalog: Mapping[str, Any]) -> list[str]:
        """Register every valid entry; broken ones are logged and skipped."""
        loaded: list[str] = []
        for directory, raw in catalog.items():
            try:
                info = parse_game_info(directory, raw)
            except GameConfigError as exc:
                logger.error("Error loading game %s: %s", directory, exc)
                continue
            self.games[directory] = info
            loaded.append(directory)
            logger.info("Loaded game: %s", info.name)
        return loaded

    def get_available_games(self) -> list[GameInfo]:
        return list(self.games.values())

    def menu_entries(self) -> list[tuple[str | None, str]]:
        """(game id, label) pairs; placeholders have no id."""
        entries: list[tuple[str | None, str]] = [
            (game_id, info.label) for game_id, info in self.games.items()
        ]
        entries.append((None, f"🚀 Game {len(self.games) + 1} (Coming Soon)"))
        return entries

    def is_game_active(self) -> bool:
        return self.current_game is not None

    # --- Hosting -------------------------------------------------------

    def play_game(self, game_id: str) -> bool:
        info = self.games.get(game_id)
        if info is None:
            logger.error("Game %s not found", game_id)
            return False

        self.cleanup_current_game()

        frame = GameFrame(
            info.entry,
            self.canvas_factory(),
            self.scheduler,
            same_origin=self.same_origin,
        )
        try:
            factory = resolve_entry(info.entry)
            factory(frame.window)
        except (GameConfigError, ImportError, AttributeError) as exc:
            logger.error("Could not start %s from %s: %s", info.name, info.entry, exc)
            self._abandon(frame)
            return False
        except Exception:
            logger.exception("Game %s failed while starting", info.name)
            self._abandon(frame)
            return False

        self.frame = frame
        self.relay = InputRelay(frame)
        self.current_game = game_id
        self.title = f"GG - {info.name}"
        logger.info("Playing game: %s", info.name)
        return True

    def _abandon(self, frame: GameFrame) -> None:
        frame.close()
        self.title = HOME_TITLE

    def handle_key(self, key: str, code: int = 0) -> set[str]:
        """Relay a host key press into the active game, if any."""
        if self.relay is None or self.current_game is None:
            return set()
        return self.relay.forward(key, code)

    def handle_pointer(self, event: Any) -> bool:
        if self.frame is None:
            return False
        return self.frame.deliver_native_event(event)

    def cleanup_current_game(self) -> None:
        if self.frame is None:
            return
        try:
            cleanup = self.frame.content_window.game_cleanup
            if cleanup is not None:
                cleanup()
        except Exception as exc:
            logger.info("Game cleanup function not available or failed: %s", exc)

        self.relay = None
        self.frame.close()
        self.frame = None
        self.current_game = None

    def show_home(self) -> None:
        self.cleanup_current_game()
        self.title = HOME_TITLE
