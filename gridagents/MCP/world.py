from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np


UNCLAIMED = -1
MAX_PLAYER_ID = int(np.iinfo(np.int32).max)
UNKNOWN_PLAYER = "UNKNOWN"


class WorldStateError(RuntimeError):
    """Raised when the world is used in a way the server state cannot explain."""


class OutOfBoundsError(WorldStateError, IndexError):
    """Raised for coordinates outside the current grid."""


@dataclass(frozen=True)
class WorldSnapshot:
    """Read-only view of the world handed to the move selector."""
    grid: np.ndarray  # (height, width), int32, UNCLAIMED for free cells
    position: Optional[Tuple[int, int]]
    me: Optional[int]

    @property
    def width(self) -> int:
        return int(self.grid.shape[1])

    @property
    def height(self) -> int:
        return int(self.grid.shape[0])

    def is_claimed(self, x: int, y: int) -> bool:
        return bool(self.grid[y, x] != UNCLAIMED)


class World:
    """
    Grid of claimed cells plus the roster of known players for one game.

    The grid is indexed ``[y, x]``. Players can show up by name before their
    first position or the other way round, so the roster and the grid are
    kept independent of each other.
    """

    def __init__(self, username: str) -> None:
        self.username = username
        self.grid: Optional[np.ndarray] = None
        self.me: Optional[int] = None
        self.position: Optional[Tuple[int, int]] = None
        self.players: Dict[int, str] = {}

    @property
    def started(self) -> bool:
        return self.grid is not None

    @property
    def width(self) -> int:
        return int(self._require_grid().shape[1])

    @property
    def height(self) -> int:
        return int(self._require_grid().shape[0])

    # ------------------------------------------------------------------ #
    # Epoch lifecycle
    # ------------------------------------------------------------------ #
    def start_epoch(self, width: int, height: int, own_id: int) -> None:
        """Allocate a clean grid and forget everything about the last game."""
        if width <= 0 or height <= 0:
            raise WorldStateError(f"Invalid grid size {width}x{height}")
        if not 0 <= own_id <= MAX_PLAYER_ID:
            raise WorldStateError(f"Player ID {own_id} is out of range")
        self.grid = np.full((height, width), UNCLAIMED, dtype=np.int32)
        self.me = own_id
        self.position = None
        self.players = {}

    def reset(self) -> None:
        """Drop the current epoch; nothing can be mutated until the next one."""
        self.grid = None
        self.me = None
        self.position = None
        self.players = {}

    # ------------------------------------------------------------------ #
    # Players
    # ------------------------------------------------------------------ #
    def register_player(self, player_id: int, name: str) -> bool:
        """
        Record ``name`` for ``player_id``.

        Returns True when the name is our own username, in which case the id
        becomes our identity instead of a roster entry. An id that already
        has a name keeps it.
        """
        self._require_grid()
        if name == self.username:
            self.me = player_id
            return True
        self.players.setdefault(player_id, name)
        return False

    def lookup_name(self, player_id: int) -> str:
        return self.players.get(player_id, UNKNOWN_PLAYER)

    def remove_player(self, player_id: int) -> int:
        """Forget a player and release all of its cells. Returns cells freed."""
        grid = self._require_grid()
        self.players.pop(player_id, None)
        owned = grid == player_id
        freed = int(np.count_nonzero(owned))
        if freed:
            grid[owned] = UNCLAIMED
        return freed

    # ------------------------------------------------------------------ #
    # Cells
    # ------------------------------------------------------------------ #
    def claim(self, player_id: int, x: int, y: int) -> None:
        """Give cell (x, y) to ``player_id``, replacing any previous owner."""
        grid = self._require_grid()
        self._check_bounds(x, y)
        if not 0 <= player_id <= MAX_PLAYER_ID:
            raise WorldStateError(f"Player ID {player_id} is out of range")
        grid[y, x] = player_id
        if player_id == self.me:
            self.position = (x, y)

    def owner(self, x: int, y: int) -> Optional[int]:
        grid = self._require_grid()
        self._check_bounds(x, y)
        value = int(grid[y, x])
        return None if value == UNCLAIMED else value

    def is_claimed(self, x: int, y: int) -> bool:
        return self.owner(x, y) is not None

    def claimed_count(self, player_id: Optional[int] = None) -> int:
        grid = self._require_grid()
        if player_id is None:
            return int(np.count_nonzero(grid != UNCLAIMED))
        return int(np.count_nonzero(grid == player_id))

    def snapshot(self) -> WorldSnapshot:
        grid = self._require_grid().copy()
        grid.setflags(write=False)
        return WorldSnapshot(grid=grid, position=self.position, me=self.me)

    def render(self) -> str:
        """ASCII map: '.' free, '@' ours, '#' anyone else, 'X' our head."""
        grid = self._require_grid()
        rows = []
        for y in range(grid.shape[0]):
            row = []
            for x in range(grid.shape[1]):
                value = int(grid[y, x])
                if self.position == (x, y):
                    row.append("X")
                elif value == UNCLAIMED:
                    row.append(".")
                elif value == self.me:
                    row.append("@")
                else:
                    row.append("#")
            rows.append("".join(row))
        return "\n".join(rows)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _require_grid(self) -> np.ndarray:
        if self.grid is None:
            raise WorldStateError("No game in progress (no 'game' message received yet)")
        return self.grid

    def _check_bounds(self, x: int, y: int) -> None:
        height, width = self._require_grid().shape
        if not (0 <= x < width and 0 <= y < height):
            raise OutOfBoundsError(
                f"Position ({x}, {y}) is outside the {width}x{height} grid"
            )
