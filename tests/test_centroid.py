# tests/test_centroid.py

import numpy as np

from palette_kmeans.centroid import Centroid


def test_initialize_random_is_seeded_and_in_range():
    a, b = Centroid(), Centroid()
    a.initialize_random(np.random.RandomState(7))
    b.initialize_random(np.random.RandomState(7))
    assert a.color == b.color
    for channel in a.color:
        assert 0 <= channel <= 255
        assert isinstance(channel, int)


def test_initialize_random_keeps_members():
    c = Centroid(1, 2, 3)
    c.add_member((0, 1))
    c.initialize_random(np.random.RandomState(0))
    assert c.n_members == 1
    assert c.members.tolist() == [[0, 1]]


def test_add_and_clear_members():
    c = Centroid()
    assert c.n_members == 0
    assert c.members.shape == (0, 2)

    c.add_member((2, 3))
    c.add_members([[0, 0], [0, 1]])
    c.add_member((1, 1))
    assert c.n_members == 4
    # insertion order is preserved
    assert c.members.tolist() == [[2, 3], [0, 0], [0, 1], [1, 1]]

    c.clear_members()
    assert c.n_members == 0
    assert c.members.shape == (0, 2)


def test_add_members_ignores_empty_block():
    c = Centroid()
    c.add_members(np.empty((0, 2), dtype=int))
    assert c.n_members == 0


def test_no_duplicate_check_on_add_member():
    c = Centroid()
    c.add_member((0, 0))
    c.add_member((0, 0))
    assert c.n_members == 2


def test_color_setter_casts_to_int():
    c = Centroid()
    c.color = np.array([10, 20, 30], dtype=np.int64)
    assert c.color == (10, 20, 30)
    assert all(type(v) is int for v in c.color)
