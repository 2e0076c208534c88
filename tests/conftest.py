from __future__ import annotations

import os
import random

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from gg_arcade.engine import EngineListener, SnakeEngine  # noqa: E402
from gg_arcade.frame import GameFrame  # noqa: E402
from gg_arcade.scheduler import Scheduler  # noqa: E402
from gg_arcade.storage import HighScoreStore  # noqa: E402


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingCanvas:
    """Canvas stand-in that records draw calls instead of drawing."""

    def __init__(self, width: int = 480, height: int = 520) -> None:
        self.width = width
        self.height = height
        self.calls: list[tuple] = []

    def fill_rect(self, rect, color) -> None:
        self.calls.append(("fill_rect", tuple(rect)))

    def stroke_rect(self, rect, color, width: int = 1) -> None:
        self.calls.append(("stroke_rect", tuple(rect)))

    def text(self, value, pos, color, *, size: int = 20, center: bool = False) -> None:
        self.calls.append(("text", value))

    def texts(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "text"]


class RecordingListener(EngineListener):
    def __init__(self) -> None:
        self.states = []
        self.scores = []
        self.eaten = []
        self.game_overs = []

    def on_state_change(self, state) -> None:
        self.states.append(state)

    def on_score_change(self, score, high_score) -> None:
        self.scores.append(score)

    def on_food_eaten(self, position) -> None:
        self.eaten.append(position)

    def on_game_over(self, score, high_score) -> None:
        self.game_overs.append((score, high_score))


@pytest.fixture(autouse=True)
def _isolated_scores(tmp_path, monkeypatch) -> None:
    """Games built without an explicit store must not touch the real data dir."""
    monkeypatch.setattr("gg_arcade.game.SCORES_FILE", tmp_path / "default-scores.json")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def scheduler(clock) -> Scheduler:
    return Scheduler(clock=clock)


@pytest.fixture()
def store(tmp_path) -> HighScoreStore:
    return HighScoreStore(tmp_path / "scores.json", "snakeHighScore")


@pytest.fixture()
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture()
def engine(scheduler, store, listener) -> SnakeEngine:
    return SnakeEngine(scheduler, store, listener=listener, rng=random.Random(7))


@pytest.fixture()
def canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture()
def frame(scheduler, canvas) -> GameFrame:
    return GameFrame("gg_arcade.game:SnakeGame", canvas, scheduler)


@pytest.fixture()
def run_ticks(clock, scheduler):
    """Advance exactly ``times`` ticks at the engine's current speed."""

    def _run(engine: SnakeEngine, times: int = 1) -> None:
        for _ in range(times):
            clock.advance(engine.game_speed)
            scheduler.run_due()

    return _run
