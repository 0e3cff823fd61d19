import random

import pytest

from fruitmatch.components.game_state import Phase
from fruitmatch.components.tile_types import Token
from fruitmatch.errors import CascadeLimitExceeded
from fruitmatch.events.bus import EVENT_CASCADE_COMPLETE, EVENT_CASCADE_STEP
from fruitmatch.session import GameSession
from fruitmatch.systems.board_ops import find_matches, has_empty_cells, parse_grid
from tests.helpers import ScriptedRandom, build_systems, grid_of, grid_rows


@pytest.mark.parametrize("seed", range(10))
def test_random_games_always_settle(seed):
    session = GameSession(seed=seed)
    for _ in range(15):
        swaps = session.valid_swaps()
        if not swaps:
            break
        result = session.propose_swap(*swaps[0])
        assert result.accepted
        assert result.match_count >= 1
        assert session.phase is Phase.IDLE
        grid = session.snapshot()
        assert not has_empty_cells(grid)
        assert find_matches(grid) == []


@pytest.mark.parametrize("seed", range(10))
def test_progressive_ticks_reach_settled_within_bound(seed):
    session = GameSession(seed=seed, eager=False)
    swaps = session.valid_swaps()
    if not swaps:
        pytest.skip("seeded board has no valid swap")
    assert session.propose_swap(*swaps[0]).accepted
    for ticks in range(1, 500):
        if session.tick().settled:
            break
    else:
        pytest.fail("cascade did not settle within 500 ticks")
    assert session.settled
    assert session.tick().changed is False


def test_tick_on_settled_board_is_noop():
    session = GameSession(seed=3)
    before = session.snapshot()
    for _ in range(3):
        result = session.tick()
        assert result.changed is False and result.settled is True
    assert session.snapshot() == before


def test_loaded_empty_column_is_filled_by_ticks():
    session = GameSession(rows=3, cols=3, rng=random.Random(8), eager=False)
    session.load(grid_of('.BC', '.CA', '.AB'))
    assert not session.settled
    ticks = 0
    while not session.tick().settled:
        ticks += 1
        assert ticks < 100
    assert not has_empty_cells(session.snapshot())


def test_two_chained_cascades_via_ticks():
    # Clearing the A column drops the top C into row 3 between two C's; that
    # run clears on the next round and the scripted refills then settle.
    grid = grid_of(
        'BCB',
        'xAy',
        'BAB',
        'CAC',
    )
    rng = ScriptedRandom('xyzxy' 'ABCA')
    bus, world, board, match, resolution = build_systems(grid, rng=rng, eager=False)
    depths = []; complete = []
    bus.subscribe(EVENT_CASCADE_STEP, lambda s, **k: depths.append(k['depth']))
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.append(k['depth']))

    snapshots = []
    while not complete:
        assert resolution.advance() is True
        snapshots.append(grid_rows(board.board.cells))
        assert len(snapshots) < 20
    assert snapshots == [
        ['BCB', '...', 'B.B', 'C.C'],
        ['xyy', 'BzB', 'BxB', 'CCC'],
        ['xyy', 'BzB', 'B.B', '...'],
        ['ABA', 'xCy', 'ByB', 'BzB'],
    ]
    assert depths == [1, 2]
    assert complete == [2]
    assert rng.remaining == 0
    assert resolution.advance() is False


def test_eager_settle_has_step_cap():
    # Only apples ever spawn, so every refill recreates a run.
    session = GameSession(rows=3, cols=3, seed=0, max_cascade_steps=6)
    session.board_system.spawn_table.vegetables = ()
    session.board_system.spawn_table.fruits = (Token.FRUIT_1,)
    session.board_system.spawn_table.fruit_chance = 1.0
    session.load(parse_grid(['ABB', 'BAA', 'ABB']))
    with pytest.raises(CascadeLimitExceeded):
        session.propose_swap((0, 0), (1, 0))
