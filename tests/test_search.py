"""Test the minimal attack power search, sequential and batched."""
from concurrent.futures import ThreadPoolExecutor
import pytest
from skirmish.engine.errors import SearchExhausted
from skirmish.engine.loader import load
from skirmish.engine.search import find_minimal_power, simulate
from skirmish.runtime.runner import SearchRunner

EXAMPLE = """\
#######
#.G...#
#...EG#
#.#.#G#
#..G#E#
#.....#
#######
"""

# (map, power, rounds, hp sum)
CALIBRATED_BATTLES = [
    (EXAMPLE, 15, 29, 172),
    ("#######\n#E..EG#\n#.#G.E#\n#E.##E#\n#G..#.#\n#..E#.#\n#######", 4, 33, 948),
    ("#######\n#E.G#.#\n#.#G..#\n#G.#.G#\n#G..#.#\n#...E.#\n#######", 15, 37, 94),
    ("#######\n#.E...#\n#.#..G#\n#.###.#\n#E#G#G#\n#...#G#\n#######", 12, 39, 166),
    ("#########\n#G......#\n#.E.#...#\n#..##..G#\n#...##..#\n"
     "#...#...#\n#.G...G.#\n#.....G.#\n#########", 34, 30, 38),
]


def test_example_minimal_power():
    power, outcome = find_minimal_power(load(EXAMPLE))
    assert power == 15
    assert outcome.calibrated_faction_losses == 0
    assert outcome.value == 4988


@pytest.mark.parametrize("grid,power,rounds,hp", CALIBRATED_BATTLES)
def test_published_calibrations(grid, power, rounds, hp):
    found, outcome = find_minimal_power(load(grid))
    assert found == power
    assert (outcome.rounds_completed, outcome.surviving_hp_sum) == (rounds, hp)


def test_one_below_minimum_loses_an_elf():
    state = load(EXAMPLE)
    assert simulate(state, 14).calibrated_faction_losses > 0
    assert simulate(state, 15).won_cleanly


def test_abort_on_loss_does_not_change_the_winning_outcome():
    state = load(EXAMPLE)
    assert simulate(state, 15, abort_on_loss=True) == simulate(state, 15)
    aborted = simulate(state, 3, abort_on_loss=True)
    assert aborted.winner is None
    assert aborted.calibrated_faction_losses == 1


def test_search_bound_is_enforced():
    with pytest.raises(SearchExhausted):
        find_minimal_power(load(EXAMPLE), max_power=10)


@pytest.mark.asyncio
@pytest.mark.parametrize("batch_size", [1, 3, 5, 16])
async def test_batched_search_finds_the_same_minimum(batch_size):
    """Batch boundaries never change the reported power."""
    with ThreadPoolExecutor(max_workers=4) as pool:
        runner = SearchRunner(load(EXAMPLE), batch_size=batch_size, executor=pool)
        await runner.start()
        power, outcome = await runner.search()
        await runner.stop()
    assert power == 15
    assert outcome.value == 4988


@pytest.mark.asyncio
async def test_batched_search_exhausted():
    runner = SearchRunner(load(EXAMPLE), batch_size=4)
    await runner.start()
    try:
        with pytest.raises(SearchExhausted):
            await runner.search(max_power=9)
    finally:
        await runner.stop()


@pytest.mark.asyncio
async def test_runner_simulation_logs_events():
    runner = SearchRunner(load(EXAMPLE))
    await runner.start()
    outcome = await runner.simulate(3)
    await runner.stop()

    assert outcome.value == 27730
    evts, next_offset = runner.events.since(0, limit=100000)
    assert next_offset == len(runner.events) > 0
    assert evts[-1].kind == "CombatOver"
    assert evts[-1].data["rounds_completed"] == 47


@pytest.mark.asyncio
async def test_process_pool_search_and_simulation():
    """Trials and recorded engines survive the trip through worker processes."""
    runner = SearchRunner(load(EXAMPLE), batch_size=4, workers=3)
    await runner.start()
    try:
        power, outcome = await runner.search()
        assert (power, outcome.value) == (15, 4988)
        baseline = await runner.simulate(3)
        assert baseline.value == 27730
        assert len(runner.events) > 0
    finally:
        await runner.stop()


@pytest.mark.asyncio
async def test_event_log_pages_within_one_power():
    runner = SearchRunner(load(EXAMPLE))
    await runner.start()
    try:
        await runner.simulate(3)
        await runner.simulate(15)
    finally:
        await runner.stop()

    runs = runner.events.runs()
    assert list(runs) == [3, 15]
    (lo3, hi3), (lo15, hi15) = runs[3], runs[15]
    assert lo3 == 0 and hi3 == lo15 and hi15 == len(runner.events)

    # Paging through one run stops at its end
    evts, next_offset = runner.events.since(0, limit=100000, power=3)
    assert next_offset == hi3
    assert evts[-1].kind == "CombatOver"
    assert evts[-1].data["winner"] == "G"

    evts, next_offset = runner.events.since(0, limit=10, power=15)
    assert next_offset == lo15 + 10
    assert evts[0].round == 1
    evts, _ = runner.events.since(hi15 - 1, power=15)
    assert evts[-1].data["winner"] == "E"

    # Past the end of a run yields nothing
    evts, next_offset = runner.events.since(hi15 + 5, power=15)
    assert evts == [] and next_offset == hi15 + 5

    with pytest.raises(KeyError):
        runner.events.since(0, power=7)
