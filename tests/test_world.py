import numpy as np
import pytest

from gridagents.MCP.world import (
    UNCLAIMED,
    UNKNOWN_PLAYER,
    OutOfBoundsError,
    World,
    WorldStateError,
)


@pytest.fixture
def world():
    w = World("Bot")
    w.start_epoch(5, 4, own_id=0)
    return w


def test_start_epoch_gives_clean_grid(world):
    assert world.width == 5
    assert world.height == 4
    assert world.grid.shape == (4, 5)
    assert np.all(world.grid == UNCLAIMED)
    assert world.players == {}
    assert world.me == 0
    assert world.position is None


def test_start_epoch_clears_previous_game(world):
    world.register_player(3, "alice")
    world.claim(3, 1, 1)
    world.claim(0, 2, 2)

    world.start_epoch(3, 3, own_id=7)

    assert world.grid.shape == (3, 3)
    assert world.claimed_count() == 0
    assert world.players == {}
    assert world.me == 7
    assert world.position is None


def test_register_player_first_name_wins(world):
    world.register_player(2, "alice")
    world.register_player(2, "mallory")
    assert world.lookup_name(2) == "alice"


def test_register_player_sparse_ids(world):
    world.register_player(9, "zed")
    assert world.lookup_name(9) == "zed"
    assert world.lookup_name(4) == UNKNOWN_PLAYER


def test_register_own_name_sets_identity(world):
    assert world.register_player(3, "Bot") is True
    assert world.me == 3
    assert world.lookup_name(3) == UNKNOWN_PLAYER
    # sent twice, nothing changes
    assert world.register_player(3, "Bot") is True
    assert world.me == 3
    assert world.players == {}


def test_claim_overwrites_previous_owner(world):
    world.claim(1, 2, 3)
    world.claim(4, 2, 3)
    assert world.owner(2, 3) == 4
    assert world.is_claimed(2, 3)
    assert not world.is_claimed(3, 2)


def test_claim_by_self_moves_position(world):
    world.claim(0, 1, 2)
    assert world.position == (1, 2)
    world.claim(5, 3, 3)
    assert world.position == (1, 2)
    world.claim(0, 4, 0)
    assert world.position == (4, 0)


def test_remove_player_releases_only_its_cells(world):
    world.register_player(1, "alice")
    world.claim(1, 0, 0)
    world.claim(1, 4, 3)
    world.claim(2, 1, 1)
    world.claim(0, 2, 2)

    freed = world.remove_player(1)

    assert freed == 2
    assert world.lookup_name(1) == UNKNOWN_PLAYER
    assert world.claimed_count(1) == 0
    assert world.owner(1, 1) == 2
    assert world.owner(2, 2) == 0


def test_remove_unknown_player_is_harmless(world):
    world.claim(1, 0, 0)
    before = world.grid.copy()
    assert world.remove_player(2) == 0
    assert np.array_equal(world.grid, before)


@pytest.mark.parametrize("x, y", [(5, 0), (0, 4), (-1, 0), (0, -1), (100, 100)])
def test_out_of_bounds_fails_loudly(world, x, y):
    with pytest.raises(OutOfBoundsError):
        world.claim(1, x, y)
    with pytest.raises(IndexError):
        world.is_claimed(x, y)


def test_mutating_before_start_is_an_error():
    w = World("Bot")
    with pytest.raises(WorldStateError):
        w.claim(1, 0, 0)
    with pytest.raises(WorldStateError):
        w.register_player(1, "alice")
    with pytest.raises(WorldStateError):
        w.remove_player(1)


def test_reset_drops_epoch(world):
    world.claim(0, 1, 1)
    world.reset()
    assert not world.started
    assert world.me is None
    with pytest.raises(WorldStateError):
        world.claim(0, 1, 1)


def test_start_epoch_rejects_empty_grid():
    with pytest.raises(WorldStateError):
        World("Bot").start_epoch(0, 3, own_id=0)


def test_snapshot_is_read_only_copy(world):
    world.claim(0, 1, 1)
    snap = world.snapshot()
    with pytest.raises(ValueError):
        snap.grid[0, 0] = 3
    world.claim(2, 0, 0)
    assert not snap.is_claimed(0, 0)
    assert snap.position == (1, 1)
    assert (snap.width, snap.height) == (5, 4)


def test_render(world):
    world.claim(0, 0, 0)
    world.claim(0, 1, 0)
    world.claim(3, 4, 3)
    assert world.render().splitlines() == [
        "@X...",
        ".....",
        ".....",
        "....#",
    ]


def test_large_player_ids_fit_the_grid():
    w = World("Bot")
    w.start_epoch(3, 3, own_id=40000)
    w.claim(40000, 1, 1)
    w.claim(70000, 2, 2)
    assert w.position == (1, 1)
    assert w.owner(2, 2) == 70000
    assert w.remove_player(70000) == 1


def test_player_id_beyond_grid_range_is_rejected_on_arrival():
    w = World("Bot")
    with pytest.raises(WorldStateError, match="out of range"):
        w.start_epoch(3, 3, own_id=2 ** 31)
    w.start_epoch(3, 3, own_id=0)
    with pytest.raises(WorldStateError, match="out of range"):
        w.claim(2 ** 31, 0, 0)
