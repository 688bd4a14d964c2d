import pytest

from simulation import ABSENT, HIT, MISS, ScanProgress, SimulationEngine, SimulationSettings
from workloads import cell_key


def scan_all(engine):
    events = []
    while not engine.done:
        events.append(engine.step())
    return events


def test_default_settings():
    settings = SimulationSettings()
    assert settings.hash_count == 2
    assert settings.item_count == 100
    assert settings.filter_size == 4096
    assert settings.grid_side == 150
    assert settings.total_cells == 22500


@pytest.mark.parametrize(
    "kwargs",
    [
        {"hash_count": 0},
        {"filter_size": 0},
        {"batch_size": 0},
        {"grid_side": 0},
        {"item_count": -1},
        {"item_count": 22501},
        {"hash_count": 2.5},
        {"item_count": "100"},
        {"filter_size": True},
        {"seed": -1},
        {"seed": 2**32},
    ],
)
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(ValueError):
        SimulationSettings(**kwargs)


def test_largest_seed_is_accepted():
    settings = SimulationSettings(item_count=3, grid_side=4, seed=2**32 - 1)
    assert len(SimulationEngine(settings).ground_truth) == 3


def test_scan_is_row_major_and_exhaustive():
    engine = SimulationEngine(SimulationSettings(item_count=5, grid_side=4, seed=1))
    events = scan_all(engine)
    assert [(e.x, e.y) for e in events] == [(x, y) for y in range(4) for x in range(4)]
    assert engine.checks == 16


def test_full_scan_example_scenario():
    engine = SimulationEngine(
        SimulationSettings(hash_count=2, item_count=100, filter_size=4096, seed=5)
    )
    events = scan_all(engine)
    progress = engine.progress()
    assert progress.checks == 22500
    assert progress.done
    assert len({(e.x, e.y) for e in events}) == 22500
    assert progress.misses == sum(e.kind == MISS for e in events)
    assert progress.hits == sum(e.kind == ABSENT for e in events)
    assert sum(e.kind == HIT for e in events) == 100
    if progress.misses:
        assert progress.format_rate() == f"{progress.misses / 22500 * 100:.2f}%"


def test_every_step_increments_exactly_one_counter_or_none():
    engine = SimulationEngine(SimulationSettings(item_count=800, filter_size=512, grid_side=40, seed=2))
    before = engine.progress()
    while not engine.done:
        event = engine.step()
        after = engine.progress()
        assert after.checks == before.checks + 1
        dh = after.hits - before.hits
        dm = after.misses - before.misses
        if event.kind == HIT:
            assert (dh, dm) == (0, 0)
        elif event.kind == MISS:
            assert (dh, dm) == (0, 1)
        else:
            assert (dh, dm) == (1, 0)
        before = after


def test_no_false_negatives_during_scan():
    engine = SimulationEngine(SimulationSettings(item_count=300, filter_size=256, grid_side=30, seed=9))
    for event in scan_all(engine):
        key = cell_key(event.x, event.y)
        if key in engine.ground_truth:
            assert event.kind == HIT
        if event.kind == ABSENT:
            assert key not in engine.ground_truth


def test_zero_items_reports_every_cell_absent():
    engine = SimulationEngine(SimulationSettings(item_count=0, seed=0))
    assert len(engine.ground_truth) == 0
    assert engine.filter.bits_set() == 0
    events = scan_all(engine)
    assert all(e.kind == ABSENT for e in events)
    assert engine.hits == 22500
    assert engine.misses == 0


def test_full_grid_has_no_false_positives():
    engine = SimulationEngine(SimulationSettings(item_count=22500, seed=0))
    events = scan_all(engine)
    assert all(e.kind == HIT for e in events)
    assert engine.misses == 0
    assert engine.hits == 0
    assert engine.checks == 22500


def test_step_after_completion_is_a_no_op():
    engine = SimulationEngine(SimulationSettings(item_count=2, grid_side=3, seed=0))
    scan_all(engine)
    snapshot = engine.progress()
    assert engine.step() is None
    assert engine.run_batch(10) == []
    assert engine.progress() == snapshot


def test_run_batch_is_bounded():
    engine = SimulationEngine(SimulationSettings(item_count=2, grid_side=5, seed=0))
    assert len(engine.run_batch(7)) == 7
    assert len(engine.run_batch(7)) == 7
    assert len(engine.run_batch(7)) == 7
    assert len(engine.run_batch(7)) == 4
    assert engine.done


def test_same_seed_gives_same_run():
    settings = SimulationSettings(item_count=400, filter_size=1024, grid_side=60, seed=11)
    a = SimulationEngine(settings)
    b = SimulationEngine(settings)
    assert set(a.ground_truth) == set(b.ground_truth)
    assert a.filter.bit_array == b.filter.bit_array
    assert scan_all(a) == scan_all(b)


def test_false_positive_rate_reporting():
    assert ScanProgress(0, 0, 0, False).false_positive_rate is None
    assert ScanProgress(10, 10, 0, False).false_positive_rate is None
    assert ScanProgress(10, 10, 0, False).format_rate() is None
    progress = ScanProgress(300, 290, 7, False)
    assert progress.false_positive_rate == pytest.approx(7 / 300 * 100)
    assert progress.format_rate() == "2.33%"


def test_false_positives_grow_with_load():
    def misses(item_count):
        engine = SimulationEngine(
            SimulationSettings(hash_count=2, item_count=item_count, filter_size=4096, seed=4)
        )
        scan_all(engine)
        return engine.misses

    assert misses(100) < misses(1000) < misses(4000)
