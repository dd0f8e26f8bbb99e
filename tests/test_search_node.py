"""Tests for SearchNode path and cost bookkeeping."""

import pytest

from kpuzzle.domains.state import PuzzleState
from kpuzzle.search.node import Direction, SearchNode


@pytest.fixture
def sorted_node():
    return SearchNode(PuzzleState.generate_sorted_state())


@pytest.fixture
def corner_node():
    # blank in the top-left corner
    return SearchNode(PuzzleState(0xFEDCBA9876543210))


def test_initial_node(sorted_node):
    assert sorted_node.state == PuzzleState.generate_sorted_state()
    assert sorted_node.last_move is Direction.NONE
    assert sorted_node.cost_to_here == 0
    assert sorted_node.path_length == 0
    assert sorted_node.path == ""


def test_move_left(sorted_node):
    tile, child = sorted_node.move_left()
    assert tile == 15
    assert child.cost_to_here == 1
    assert child.last_move is Direction.LEFT
    assert child.path_length == 1
    assert child.path == "L"


def test_move_left_mask_on(sorted_node):
    tile, child = sorted_node.move_left(0xF000000000000000)
    assert tile == 15
    assert child.cost_to_here == 1
    assert child.path_length == 1


def test_move_left_mask_off(sorted_node):
    tile, child = sorted_node.move_left(0x0FFFFFFFFFFFFFFF)
    assert tile == 15
    assert child.cost_to_here == 0
    assert child.last_move is Direction.LEFT
    assert child.path_length == 1
    assert child.path == "L"


@pytest.mark.parametrize("name,direction,char", [
    ("move_right", Direction.RIGHT, "R"),
    ("move_down", Direction.DOWN, "D"),
])
def test_moves_from_corner(corner_node, name, direction, char):
    tile, child = getattr(corner_node, name)()
    assert tile != -1
    assert child.last_move is direction
    assert child.path == char
    assert child.cost_to_here == 1


@pytest.mark.parametrize("name", ["move_left", "move_up"])
def test_wall_moves(corner_node, name):
    assert getattr(corner_node, name)() == (-1, None)


def test_path_accumulates(sorted_node):
    _, a = sorted_node.move_left()
    _, b = a.move_up()
    _, c = b.move_right()
    assert c.path == "LUR"
    assert c.path_length == 3
    assert c.cost_to_here == 3
    # parents keep their own path
    assert a.path == "L"
    assert b.path == "LU"


def test_cost_and_length_decouple_under_mask(sorted_node):
    mask = 0xF00000000000000F  # only tile 15 costs
    _, a = sorted_node.move_up(mask)      # moves tile 12
    _, b = a.move_down(mask)              # moves tile 12 back
    _, c = b.move_left(mask)              # moves tile 15
    assert (a.cost_to_here, b.cost_to_here, c.cost_to_here) == (0, 0, 1)
    assert c.path_length == 3


def test_children_skip_inverse(sorted_node):
    kids = list(sorted_node.children())
    assert [k.last_move for k in kids] == [Direction.LEFT, Direction.UP]
    _, left = sorted_node.move_left()
    dirs = [k.last_move for k in left.children()]
    assert Direction.RIGHT not in dirs
    assert dirs == [Direction.LEFT, Direction.UP]


def test_inverse_directions():
    assert Direction.LEFT.inverse is Direction.RIGHT
    assert Direction.UP.inverse is Direction.DOWN
    assert Direction.NONE.inverse is Direction.NONE


def test_hash_with_mask_matches_state(sorted_node):
    mask = 0xFF0000000000000F
    assert sorted_node.hash_with_mask(mask) == sorted_node.state.hash_with_mask(mask)
