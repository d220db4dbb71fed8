from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Tuple, Union

import numpy as np

from .world import UNCLAIMED, World, WorldSnapshot

WorldLike = Union[World, WorldSnapshot]


class Direction(IntEnum):
    # Declaration order is the tie-break order.
    RIGHT = 0
    LEFT = 1
    DOWN = 2
    UP = 3

    @property
    def command(self) -> str:
        return _COMMANDS[self]

    @property
    def axis(self) -> int:
        """0 when moving along the width, 1 along the height."""
        return 0 if self in (Direction.RIGHT, Direction.LEFT) else 1

    @property
    def sign(self) -> int:
        return 1 if self in (Direction.RIGHT, Direction.DOWN) else -1


_COMMANDS = {
    Direction.RIGHT: "right",
    Direction.LEFT: "left",
    Direction.DOWN: "down",
    Direction.UP: "up",
}


def _line(world: WorldLike, origin: Tuple[int, int], direction: Direction) -> np.ndarray:
    """The full row or column of the grid that passes through ``origin``."""
    x, y = origin
    grid = world.grid
    if grid is None:
        raise ValueError("Cannot cast beams before the grid exists")
    if direction.axis == 0:
        return grid[y, :]
    return grid[:, x]


def beam_length(
    world: WorldLike,
    origin: Tuple[int, int],
    direction: Direction,
    stop_at_wall: bool = False,
) -> int:
    """
    Count free cells on a wrapping ray of ``extent - 1`` steps from ``origin``.

    Every free step is counted, including those behind a claimed cell.
    With ``stop_at_wall`` the count ends at the first claimed cell instead.
    """
    line = _line(world, origin, direction)
    extent = int(line.shape[0])
    start = origin[direction.axis]
    steps = np.arange(1, extent)
    if direction.sign > 0:
        coords = (start + steps) % extent
    else:
        coords = (start + extent - steps) % extent
    free = line[coords] == UNCLAIMED
    if not stop_at_wall:
        return int(np.count_nonzero(free))
    blocked = np.flatnonzero(~free)
    return int(blocked[0]) if blocked.size else int(free.size)


def beam_lengths(world: WorldLike, origin: Tuple[int, int]) -> List[int]:
    return [beam_length(world, origin, direction) for direction in Direction]


def select_direction(world: WorldLike) -> Tuple[Direction, str]:
    """Pick the direction with the longest beam; earlier directions win ties."""
    origin: Optional[Tuple[int, int]] = world.position
    if origin is None:
        first = Direction(0)
        return first, first.command

    best: Optional[Direction] = None
    best_length = -1
    for direction in Direction:
        length = beam_length(world, origin, direction)
        if length > best_length:
            best = direction
            best_length = length
    assert best is not None
    return best, best.command
