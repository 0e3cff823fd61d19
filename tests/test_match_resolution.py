from fruitmatch.components.tile_types import Token
from fruitmatch.events.bus import EVENT_CASCADE_COMPLETE, EVENT_MATCH_CLEARED, EVENT_MATCH_FOUND, EVENT_TICK
from fruitmatch.systems.board_ops import Match, Orientation, find_matches, get_board, resolve_matches
from tests.helpers import ScriptedRandom, build_systems, grid_of, grid_rows


def adjacency_grid():
    return grid_of(
        'BCBCBCBC',
        'CyCBCyCB',
        'AAACBCBC',
        'CBCBCBCB',
        'BCBCBCBC',
        'CBCBCBCB',
        'BCBCBCBC',
        'CBCBCBCB',
    )


def test_adjacent_vegetable_is_destroyed_and_distant_one_kept():
    grid = adjacency_grid()
    matches = find_matches(grid)
    assert matches == [Match(Orientation.HORIZONTAL, 2, 0, 3, Token.FRUIT_1)]
    removed = resolve_matches(grid, matches)
    assert removed == {(2, 0), (2, 1), (2, 2), (1, 1)}
    assert grid[1][1] is Token.EMPTY
    assert grid[1][5] is Token.VEGETABLE_2
    assert all(grid[2][c] is Token.EMPTY for c in range(3))


def test_destruction_does_not_chain_through_vegetables():
    grid = grid_of(
        'BzB',
        'CyC',
        'AAA',
        'CBC',
    )
    removed = resolve_matches(grid, find_matches(grid))
    assert removed == {(2, 0), (2, 1), (2, 2), (1, 1)}
    assert grid[0][1] is Token.VEGETABLE_3


def test_fruit_neighbours_are_not_destroyed():
    grid = grid_of(
        'xBx',
        'AAA',
        'yCz',
    )
    removed = resolve_matches(grid, find_matches(grid))
    assert removed == {(1, 0), (1, 1), (1, 2), (0, 0), (0, 2), (2, 0), (2, 2)}
    assert grid_rows(grid) == ['.B.', '...', '.C.']


def test_removal_set_deduplicates_shared_cells_and_vegetables():
    grid = grid_of(
        'yAx',
        'AAA',
        'zAB',
    )
    matches = find_matches(grid)
    assert len(matches) == 2
    removed = resolve_matches(grid, matches)
    # (1,1) sits in both runs and each vegetable touches two matched cells
    assert removed == {(1, 0), (1, 1), (1, 2), (0, 1), (2, 1), (0, 0), (0, 2), (2, 0)}
    assert grid_rows(grid) == ['...', '...', '..B']


def test_resolve_without_matches_changes_nothing():
    grid = adjacency_grid()
    grid[2][2] = Token.FRUIT_2
    before = [list(row) for row in grid]
    assert resolve_matches(grid, []) == set()
    assert grid == before


def test_idle_tick_resolves_loaded_match_and_counts_turn():
    grid = grid_of(
        'BCxC',
        'CyBA',
        'AAAB',
        'BCBC',
    )
    rng = ScriptedRandom('AxAC')
    bus, world, board, match, resolution = build_systems(grid, rng=rng, eager=False)
    found = []; cleared = []; complete = []
    bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: found.append(k))
    bus.subscribe(EVENT_MATCH_CLEARED, lambda s, **k: cleared.append(k))
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.append(k))

    bus.emit(EVENT_TICK, dt=0.02)
    assert found and found[0]['positions'] == [(2, 0), (2, 1), (2, 2)]
    assert cleared[0]['positions'] == [(1, 1), (2, 0), (2, 1), (2, 2)]
    assert grid_rows(get_board(world).cells) == ['BCxC', 'C.BA', '...B', 'BCBC']
    assert not complete

    # Column 1 drops its top fruit two rows; four scripted tiles fill the gaps.
    bus.emit(EVENT_TICK, dt=0.02)
    assert rng.remaining == 0
    assert grid_rows(get_board(world).cells) == ['AxCC', 'BAxA', 'CCBB', 'BCBC']
    assert complete == [{'depth': 1, 'match_count': 1, 'cells_cleared': 4}]
