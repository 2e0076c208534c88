"""Particle burst shown when the snake eats."""

from __future__ import annotations

import random
from typing import Iterable

import pygame

from .config import PALETTE, PARTICLE_COUNT, PARTICLE_DECAY, PARTICLE_SPEED

Particle = dict[str, float]


def spawn_particles(
    particles: list[Particle],
    cell: tuple[int, int],
    cell_size: int,
    *,
    count: int = PARTICLE_COUNT,
    rng: random.Random | None = None,
) -> None:
    """Emit a small burst from the centre of the given grid cell."""

    rng = rng or random
    cx = (cell[0] + 0.5) * cell_size
    cy = (cell[1] + 0.5) * cell_size
    for _ in range(count):
        particles.append(
            {
                "x": cx,
                "y": cy,
                "vx": (rng.random() - 0.5) * PARTICLE_SPEED,
                "vy": (rng.random() - 0.5) * PARTICLE_SPEED,
                "life": 1.0,
            }
        )


def update_particles(particles: list[Particle], dt: float) -> list[Particle]:
    """Advance particle positions and trim dead ones."""

    if dt <= 0:
        return particles

    for particle in particles:
        particle["x"] += particle["vx"] * dt
        particle["y"] += particle["vy"] * dt
        particle["life"] = max(0.0, particle["life"] - PARTICLE_DECAY * dt)
    return [p for p in particles if p["life"] > 0]


def draw_particles(canvas, particles: Iterable[Particle]) -> None:
    base = PALETTE["particle"]
    for particle in particles:
        alpha = int(255 * particle["life"])
        if alpha <= 0:
            continue
        color = pygame.Color(base.r, base.g, base.b, alpha)
        canvas.fill_rect((int(particle["x"]) - 2, int(particle["y"]) - 2, 4, 4), color)
