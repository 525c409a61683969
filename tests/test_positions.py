# tests/test_positions.py

from __future__ import annotations

import random

import pytest

from tictac.board.positions import append_position, insert_between, needs_renumber, renumber


def test_append_position() -> None:
    assert append_position([]) == 1000
    assert append_position([1000, 2000]) == 3000
    assert append_position([2500.5, 10]) == 3500.5


@pytest.mark.parametrize(
    ("prev", "nxt", "expected"),
    [
        (1000, 2000, 1500),
        (None, 500, 250),
        (3000, None, 4000),
        (None, None, 1000),
    ],
)
def test_insert_between_cases(prev, nxt, expected) -> None:
    assert insert_between(prev, nxt) == expected


@pytest.mark.parametrize("seed", range(20))
def test_insert_between_is_strictly_between_neighbours(seed: int) -> None:
    rng = random.Random(seed)
    for _ in range(200):
        a = rng.uniform(0, 1e6)
        b = a + rng.uniform(1e-3, 1e5)
        mid = insert_between(a, b)
        assert a < mid < b


def test_repeated_midpoints_eventually_need_renumbering() -> None:
    prev, nxt = 1000.0, 2000.0
    for _ in range(40):
        nxt = insert_between(prev, nxt)
    assert needs_renumber([prev, nxt])
    assert not needs_renumber([1000.0, 1500.0, 2000.0])


def test_equal_positions_need_renumbering() -> None:
    assert needs_renumber([1000.0, 1000.0])


def test_renumber() -> None:
    assert renumber(3) == [1000, 2000, 3000]
    assert renumber(0) == []
