from __future__ import annotations

import random

import pytest

from gg_arcade.config import INITIAL_SPEED_MS, MIN_SPEED_MS, OPPOSITE
from gg_arcade.engine import Command, GameState, Position, SnakeEngine
from gg_arcade.storage import HighScoreStore


def _park_food(engine: SnakeEngine) -> None:
    """Move food out of the snake's path so plain moves never eat."""
    engine.food = Position(0, 0)


def test_engine_starts_in_menu_without_ticking(engine, scheduler):
    assert engine.state is GameState.MENU
    assert engine.tile_count == 20
    assert engine.snake == []
    assert scheduler.live_intervals == 0


def test_start_centres_three_segment_snake_heading_right(engine, scheduler, listener):
    engine.start()

    assert engine.state is GameState.PLAYING
    assert engine.snake == [Position(10, 10), Position(9, 10), Position(8, 10)]
    assert engine.direction == "RIGHT"
    assert engine.score == 0
    assert engine.game_speed == INITIAL_SPEED_MS
    assert engine.food not in engine.snake
    assert scheduler.live_intervals == 1
    assert listener.states == [GameState.PLAYING]


def test_moving_right_hits_wall_on_tenth_tick(engine, run_ticks):
    engine.start()
    _park_food(engine)

    run_ticks(engine, 9)
    assert engine.state is GameState.PLAYING
    assert engine.snake[0] == Position(19, 10)
    before = list(engine.snake)

    run_ticks(engine, 1)
    assert engine.state is GameState.GAME_OVER
    assert engine.snake == before


@pytest.mark.parametrize(
    "head, direction",
    [
        (Position(0, 5), "LEFT"),
        (Position(19, 5), "RIGHT"),
        (Position(5, 0), "UP"),
        (Position(5, 19), "DOWN"),
    ],
)
def test_wall_collision_on_every_edge_leaves_snake_unchanged(
    engine, scheduler, head, direction
):
    engine.start()
    _park_food(engine)
    dx, dy = {"LEFT": (1, 0), "RIGHT": (-1, 0), "UP": (0, 1), "DOWN": (0, -1)}[direction]
    engine.snake = [head, Position(head.x + dx, head.y + dy)]
    engine.direction = direction
    engine.next_direction = direction
    before = list(engine.snake)

    engine.update()

    assert engine.state is GameState.GAME_OVER
    assert engine.snake == before
    assert scheduler.live_intervals == 0


def test_self_collision_ends_game_without_moving(engine, scheduler):
    engine.start()
    engine.food = Position(15, 15)
    engine.snake = [
        Position(5, 5),
        Position(5, 6),
        Position(6, 6),
        Position(6, 5),
        Position(7, 5),
    ]
    engine.direction = "UP"
    engine.next_direction = "RIGHT"
    before = list(engine.snake)

    engine.update()

    assert engine.state is GameState.GAME_OVER
    assert engine.snake == before
    assert scheduler.live_intervals == 0


@pytest.mark.parametrize("direction", ["UP", "DOWN", "LEFT", "RIGHT"])
def test_reverse_of_committed_direction_is_ignored(engine, direction):
    engine.start()
    engine.direction = direction
    engine.next_direction = direction

    engine.set_direction(OPPOSITE[direction])

    assert engine.next_direction == direction


def test_reverse_after_a_committed_turn_is_ignored(engine, run_ticks):
    engine.start()
    _park_food(engine)
    engine.set_direction("UP")
    run_ticks(engine)
    assert engine.direction == "UP"

    engine.set_direction("DOWN")
    run_ticks(engine)

    assert engine.direction == "UP"
    assert engine.state is GameState.PLAYING


def test_only_one_turn_is_accepted_per_tick(engine, run_ticks):
    engine.start()
    _park_food(engine)

    engine.set_direction("UP")
    engine.set_direction("DOWN")  # would reverse into the neck after UP commits
    engine.set_direction("LEFT")
    assert engine.next_direction == "UP"

    run_ticks(engine)
    assert engine.snake[0] == Position(10, 9)
    assert engine.state is GameState.PLAYING

    engine.set_direction("LEFT")
    assert engine.next_direction == "LEFT"


def test_repeating_pending_direction_does_not_use_up_the_turn(engine):
    engine.start()
    engine.set_direction("RIGHT")
    engine.set_direction("UP")
    assert engine.next_direction == "UP"


def test_direction_changes_ignored_outside_playing(engine):
    engine.set_direction("UP")
    assert engine.next_direction is None

    engine.start()
    engine.toggle_pause()
    engine.set_direction("UP")
    assert engine.next_direction == "RIGHT"


def test_unknown_direction_is_rejected(engine):
    engine.start()
    with pytest.raises(ValueError):
        engine.set_direction("NORTH")


def test_eating_food_grows_snake_and_scores(engine, run_ticks, listener):
    engine.start()
    engine.food = Position(11, 10)
    tail = engine.snake[-1]

    run_ticks(engine)

    assert len(engine.snake) == 4
    assert engine.score == 1
    assert engine.snake[0] == Position(11, 10)
    assert engine.snake[-1] == tail
    assert engine.food not in engine.snake
    assert listener.eaten == [Position(11, 10)]


def test_food_never_lands_on_snake():
    engine = SnakeEngine(
        scheduler=None,  # generate_food never touches the scheduler
        store=HighScoreStore("/nonexistent/scores.json", "k"),
        canvas_size=5 * 24,
        rng=random.Random(3),
    )
    cells = [Position(x, y) for y in range(5) for x in range(5)]
    free = cells.pop(12)
    engine.snake = cells

    for _ in range(20):
        assert engine.generate_food() == free


def test_food_generation_avoids_random_snakes(engine):
    rng = random.Random(11)
    for _ in range(200):
        length = rng.randint(1, 120)
        engine.snake = [
            Position(rng.randrange(20), rng.randrange(20)) for _ in range(length)
        ]
        food = engine.generate_food()
        assert food not in engine.snake
        assert engine.in_bounds(food)


def test_speed_increases_every_fifth_point_and_reschedules(engine, scheduler, run_ticks):
    engine.start()
    engine.score = 4
    engine.food = Position(11, 10)

    run_ticks(engine)

    assert engine.score == 5
    assert engine.game_speed == INITIAL_SPEED_MS - 5
    assert scheduler.live_intervals == 1

    _park_food(engine)
    head = engine.snake[0]
    run_ticks(engine)
    assert engine.snake[0] == Position(head.x + 1, head.y)


def test_speed_does_not_change_between_multiples_of_five(engine, run_ticks):
    engine.start()
    engine.score = 5
    engine.food = Position(11, 10)

    run_ticks(engine)

    assert engine.score == 6
    assert engine.game_speed == INITIAL_SPEED_MS


@pytest.mark.parametrize("speed", [MIN_SPEED_MS, MIN_SPEED_MS + 2])
def test_speed_never_drops_below_floor(engine, scheduler, speed):
    engine.start()
    engine.game_speed = speed
    engine.score = 9
    engine.food = Position(11, 10)

    engine.update()

    assert engine.score == 10
    assert engine.game_speed == MIN_SPEED_MS


def test_long_game_keeps_speed_at_floor(engine):
    engine.start()
    for _ in range(100):
        head = engine.snake[0]
        engine.snake = [head, Position(head.x - 1, head.y)]
        engine.food = Position(head.x + 1, head.y)
        engine.update()
        engine.snake = [Position(10, 10), Position(9, 10)]
    assert engine.score == 100
    assert engine.game_speed == MIN_SPEED_MS


def test_score_is_monotonic_and_resets_on_restart(engine, run_ticks):
    rng = random.Random(5)
    engine.start()
    last = 0
    for _ in range(400):
        if engine.state is GameState.GAME_OVER:
            break
        if rng.random() < 0.3:
            engine.set_direction(rng.choice(["UP", "DOWN", "LEFT", "RIGHT"]))
        if rng.random() < 0.2 and engine.food is not None:
            head = engine.snake[0]
            dx, dy = {"UP": (0, -1), "DOWN": (0, 1), "LEFT": (-1, 0), "RIGHT": (1, 0)}[
                engine.next_direction
            ]
            ahead = Position(head.x + dx, head.y + dy)
            if engine.in_bounds(ahead) and ahead not in engine.snake:
                engine.food = ahead
        run_ticks(engine)
        assert engine.score >= last
        last = engine.score

    engine.restart()
    assert engine.score == 0
    assert engine.state is GameState.PLAYING


def test_pause_and_resume_freeze_the_game(engine, scheduler, clock, run_ticks):
    engine.start()
    _park_food(engine)
    run_ticks(engine, 2)

    engine.toggle_pause()
    assert engine.state is GameState.PAUSED
    snapshot = (list(engine.snake), engine.direction, engine.next_direction, engine.score)

    clock.advance(5000)
    assert scheduler.run_due() == 0
    engine.update()

    engine.toggle_pause()
    assert engine.state is GameState.PLAYING
    assert (list(engine.snake), engine.direction, engine.next_direction, engine.score) == snapshot
    assert scheduler.live_intervals == 1

    head = engine.snake[0]
    run_ticks(engine)
    assert engine.snake[0] == Position(head.x + 1, head.y)


def test_at_most_one_tick_timer_through_every_transition(engine, scheduler, run_ticks):
    engine.start()
    assert scheduler.live_intervals == 1
    engine.start()
    assert scheduler.live_intervals == 1
    engine.toggle_pause()
    assert scheduler.live_intervals == 0
    engine.toggle_pause()
    assert scheduler.live_intervals == 1
    engine.restart()
    assert scheduler.live_intervals == 1

    engine.score = 4
    engine.food = Position(11, 10)
    run_ticks(engine)
    assert scheduler.live_intervals == 1

    engine.game_over()
    assert scheduler.live_intervals == 0
    engine.start()
    assert scheduler.live_intervals == 1
    engine.shutdown()
    assert scheduler.live_intervals == 0


def test_restart_from_pause_reinitialises(engine, run_ticks):
    engine.start()
    _park_food(engine)
    run_ticks(engine, 3)
    engine.toggle_pause()

    engine.restart()

    assert engine.state is GameState.PLAYING
    assert engine.snake == [Position(10, 10), Position(9, 10), Position(8, 10)]


def test_high_score_saved_only_when_beaten(engine, store, listener):
    store.save(5)
    engine.high_score = store.load()
    engine.start()
    engine.score = 3
    engine.game_over()
    assert store.load() == 5
    assert listener.game_overs == [(3, 5)]

    engine.start()
    engine.score = 8
    engine.game_over()
    assert store.load() == 8
    assert engine.high_score == 8


def test_high_score_survives_into_next_session(scheduler, store):
    first = SnakeEngine(scheduler, store)
    first.start()
    first.score = 4
    first.game_over()
    first.shutdown()

    second = SnakeEngine(scheduler, store)
    assert second.high_score == 4


def test_update_outside_playing_is_noop(engine):
    engine.update()
    assert engine.state is GameState.MENU
    engine.start()
    engine.game_over()
    snake = list(engine.snake)
    engine.update()
    assert engine.snake == snake


def test_dispatch_maps_commands(engine):
    engine.dispatch(Command.START)
    assert engine.state is GameState.PLAYING
    engine.dispatch(Command.MOVE_UP)
    assert engine.next_direction == "UP"
    engine.dispatch(Command.PAUSE)
    assert engine.state is GameState.PAUSED
    engine.dispatch(Command.PAUSE)
    assert engine.state is GameState.PLAYING
    engine.dispatch(Command.RESTART)
    assert engine.next_direction == "RIGHT"


def test_listener_sees_each_transition(engine, listener):
    engine.start()
    engine.toggle_pause()
    engine.toggle_pause()
    engine.game_over()
    assert listener.states == [
        GameState.PLAYING,
        GameState.PAUSED,
        GameState.PLAYING,
        GameState.GAME_OVER,
    ]


def _board_filled_except(engine: SnakeEngine, head: Position, free: Position) -> list[Position]:
    rest = [
        Position(x, y)
        for y in range(engine.tile_count)
        for x in range(engine.tile_count)
        if Position(x, y) not in (head, free)
    ]
    return [head, *rest]


def test_generate_food_gives_up_on_a_full_board(scheduler, store):
    engine = SnakeEngine(scheduler, store, canvas_size=96, rng=random.Random(1))
    engine.snake = [Position(x, y) for y in range(4) for x in range(4)]

    assert engine.generate_food() is None
    assert engine.food is None


def test_eating_the_last_free_cell_ends_the_game(scheduler, store, listener, run_ticks):
    engine = SnakeEngine(scheduler, store, listener=listener, canvas_size=96, rng=random.Random(1))
    engine.start()
    engine.snake = _board_filled_except(engine, Position(2, 0), Position(3, 0))
    engine.food = Position(3, 0)

    run_ticks(engine)

    assert engine.state is GameState.GAME_OVER
    assert engine.score == 1
    assert engine.food is None
    assert len(engine.snake) == 16
    assert scheduler.live_intervals == 0
    assert listener.game_overs == [(1, 1)]
