from __future__ import annotations
from enum import Enum
from typing import Iterator, Optional, Tuple

from kpuzzle.domains.state import NO_MASK, PuzzleState

# Optimal 15-puzzle solutions range from 0 to 80 single-tile moves.
MAX_PATH = 80


class Direction(Enum):
    """Direction the blank moved, with the character recorded in the path."""
    NONE = ""
    LEFT = "L"
    RIGHT = "R"
    DOWN = "D"
    UP = "U"

    @property
    def inverse(self) -> "Direction":
        return _INVERSE[self]


_INVERSE = {
    Direction.NONE: Direction.NONE,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.DOWN: Direction.UP,
    Direction.UP: Direction.DOWN,
}

_STATE_MOVES = {
    Direction.LEFT: PuzzleState.move_left,
    Direction.RIGHT: PuzzleState.move_right,
    Direction.DOWN: PuzzleState.move_down,
    Direction.UP: PuzzleState.move_up,
}

# expansion order shared by IDA* and the pattern-database BFS
EXPANSION_ORDER = (Direction.LEFT, Direction.RIGHT, Direction.DOWN, Direction.UP)


class SearchNode:
    """A state plus the bookkeeping of the path that reached it.

    ``cost_to_here`` only grows for moves of tiles selected by the mask passed to
    the move methods, while ``path_length`` always counts every move. With the
    default all-ones mask both are equal.
    """

    __slots__ = ("state", "last_move", "cost_to_here", "path_length", "_trail")

    def __init__(self, state: PuzzleState, last_move: Direction = Direction.NONE,
                 cost_to_here: int = 0, path_length: int = 0, _trail=None):
        self.state = state
        self.last_move = last_move
        self.cost_to_here = cost_to_here
        self.path_length = path_length
        # (char, parent_trail) cells shared between siblings
        self._trail = _trail

    @property
    def path(self) -> str:
        out = []
        t = self._trail
        while t is not None:
            out.append(t[0])
            t = t[1]
        return "".join(reversed(out))

    def hash_with_mask(self, mask: int) -> int:
        return self.state.hash_with_mask(mask)

    def _move(self, direction: Direction, mask: int) -> Tuple[int, Optional["SearchNode"]]:
        tile, nxt = _STATE_MOVES[direction](self.state)
        if tile == -1:
            return -1, None
        cost = self.cost_to_here + 1 if (mask >> (tile << 2)) & 0x1 else self.cost_to_here
        child = SearchNode(nxt, direction, cost, self.path_length + 1,
                           (direction.value, self._trail))
        return tile, child

    def move_left(self, mask: int = NO_MASK) -> Tuple[int, Optional["SearchNode"]]:
        return self._move(Direction.LEFT, mask)

    def move_right(self, mask: int = NO_MASK) -> Tuple[int, Optional["SearchNode"]]:
        return self._move(Direction.RIGHT, mask)

    def move_down(self, mask: int = NO_MASK) -> Tuple[int, Optional["SearchNode"]]:
        return self._move(Direction.DOWN, mask)

    def move_up(self, mask: int = NO_MASK) -> Tuple[int, Optional["SearchNode"]]:
        return self._move(Direction.UP, mask)

    def children(self, mask: int = NO_MASK) -> Iterator["SearchNode"]:
        """Legal children, never undoing the last move."""
        back = self.last_move.inverse
        for d in EXPANSION_ORDER:
            if d is back:
                continue
            tile, child = self._move(d, mask)
            if tile != -1:
                yield child

    def __repr__(self):
        return (f"SearchNode({self.state!r}, last_move={self.last_move.name}, "
                f"cost={self.cost_to_here}, length={self.path_length})")
