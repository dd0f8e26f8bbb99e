"""Tests for the Manhattan distance heuristic."""

import pytest

from kpuzzle.domains.state import PuzzleState
from kpuzzle.heuristics.manhattan import distance, distance_with_final


def test_zero_distance():
    a = PuzzleState.generate_sorted_state()
    assert distance(a, PuzzleState.generate_sorted_state()) == 0


def test_one_move():
    a = PuzzleState.generate_sorted_state()
    _, b = a.move_left()
    assert distance(a, b) == 1


def test_three_moves():
    a = PuzzleState.generate_sorted_state()
    b = a.apply_path("LLU")
    assert b.layout == 0xFEADCB0987654321
    assert distance(a, b) == 3


def test_with_final():
    assert distance_with_final(PuzzleState.generate_sorted_state()) == 0
    # tile 1 and 2 swapped in the top row
    s = PuzzleState.from_values([2, 1] + list(range(3, 16)) + [0])
    assert distance_with_final(s) == 2


@pytest.mark.parametrize("seed", range(30))
def test_symmetric(seed):
    a = PuzzleState.generate_valid_random_state(seed)
    b = PuzzleState.generate_valid_random_state(seed + 1000)
    assert distance(a, b) == distance(b, a)
    assert distance(a, a) == 0


@pytest.mark.parametrize("seed", range(30))
def test_changes_by_one_per_move(seed):
    s = PuzzleState.generate_valid_random_state(seed)
    h = distance_with_final(s)
    for move in (s.move_left, s.move_right, s.move_up, s.move_down):
        tile, nxt = move()
        if tile != -1:
            assert abs(distance_with_final(nxt) - h) == 1
