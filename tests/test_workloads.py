import numpy as np
import pytest

from workloads import GroundTruthSet, cell_key, generate_ground_truth, parse_key, shuffle


def test_cell_key_round_trip():
    assert cell_key(3, 14) == "3,14"
    assert parse_key("3,14") == (3, 14)


@pytest.mark.parametrize("bad", ["3", "3,4,5", "-1,2", "a,b", "3, 4", ""])
def test_parse_key_rejects_non_canonical(bad):
    with pytest.raises(ValueError):
        parse_key(bad)


def test_parse_key_rejects_non_strings():
    with pytest.raises(TypeError):
        parse_key((3, 4))


def test_ground_truth_set_is_immutable_membership():
    truth = GroundTruthSet(["1,2", "1,2", "3,4"])
    assert len(truth) == 2
    assert "1,2" in truth
    assert "2,1" not in truth
    assert sorted(truth.cells()) == [(1, 2), (3, 4)]
    assert not hasattr(truth, "add")


def test_shuffle_is_a_permutation():
    rng = np.random.RandomState(1)
    slots = list(range(100))
    shuffle(slots, rng)
    assert sorted(slots) == list(range(100))
    assert slots != list(range(100))


def test_shuffle_handles_tiny_inputs():
    rng = np.random.RandomState(1)
    assert shuffle([], rng) == []
    assert shuffle([7], rng) == [7]


@pytest.mark.parametrize("item_count", [0, 1, 100, 2500])
def test_generates_exact_distinct_count(item_count):
    keys = generate_ground_truth(item_count, 50, np.random.RandomState(3))
    assert len(keys) == item_count
    assert len(set(keys)) == item_count
    for key in keys:
        x, y = parse_key(key)
        assert 0 <= x < 50
        assert 0 <= y < 50


def test_full_grid_selects_every_cell():
    keys = generate_ground_truth(100, 10, np.random.RandomState(0))
    assert set(keys) == {cell_key(x, y) for x in range(10) for y in range(10)}


def test_seeded_generation_is_reproducible():
    a = generate_ground_truth(200, 150, np.random.RandomState(42))
    b = generate_ground_truth(200, 150, np.random.RandomState(42))
    c = generate_ground_truth(200, 150, np.random.RandomState(43))
    assert a == b
    assert a != c


def test_item_count_out_of_range():
    with pytest.raises(ValueError):
        generate_ground_truth(101, 10)
    with pytest.raises(ValueError):
        generate_ground_truth(-1, 10)


def test_no_row_or_column_bias():
    rng = np.random.RandomState(7)
    side, items, runs = 10, 10, 2000
    rows = np.zeros(side)
    cols = np.zeros(side)
    for _ in range(runs):
        for key in generate_ground_truth(items, side, rng):
            x, y = parse_key(key)
            rows[y] += 1
            cols[x] += 1
    expected = runs * items / side
    assert np.all(np.abs(rows - expected) < 0.15 * expected)
    assert np.all(np.abs(cols - expected) < 0.15 * expected)
