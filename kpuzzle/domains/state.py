from __future__ import annotations
from typing import Iterable, Optional, Tuple
import random
import time

SIZE = 4                      # row length
NUM_TILES = SIZE * SIZE
SPACE = 0                     # value of the blank tile
SORTED_LAYOUT = 0x0FEDCBA987654321
NO_MASK = 0xFFFFFFFFFFFFFFFF

Move = Tuple[int, Optional["PuzzleState"]]


class PuzzleError(Exception):
    pass


class InvalidStateError(PuzzleError, ValueError):
    pass


class IllegalMoveError(PuzzleError):
    pass


def _positions_of(layout: int) -> int:
    """Inverse permutation: nibble v holds the board index of tile v."""
    positions = 0
    for i in range(NUM_TILES - 1, -1, -1):
        tile = (layout >> (i << 2)) & 0xF
        positions |= i << (tile << 2)
    return positions


def _find_space(layout: int) -> int:
    for i in range(NUM_TILES - 1, -1, -1):
        if (layout >> (i << 2)) & 0xF == SPACE:
            return i
    return -1


class PuzzleState:
    """4×4 board packed into one 64-bit integer, one nibble per cell (0 is the blank).

    Instances are immutable. Moves return a new state together with the value of
    the tile that slid into the old blank cell, or ``(-1, None)`` when the blank
    sits on the corresponding edge.
    """

    __slots__ = ("_layout", "_blank", "_positions")

    def __init__(self, layout: int):
        self._layout = layout
        self._blank = _find_space(layout)
        self._positions = _positions_of(layout)

    @classmethod
    def _derived(cls, layout: int, blank: int, positions: int) -> "PuzzleState":
        s = object.__new__(cls)
        s._layout = layout
        s._blank = blank
        s._positions = positions
        return s

    @classmethod
    def from_values(cls, values: Iterable[int]) -> "PuzzleState":
        """Build from 16 row-major tile values. Validity and solvability are not checked."""
        vals = list(values)
        if len(vals) != NUM_TILES:
            raise InvalidStateError(f"expected {NUM_TILES} values, got {len(vals)}")
        layout = 0
        for i, v in enumerate(vals):
            if not 0 <= v <= 0xF:
                raise InvalidStateError(f"tile value {v} at index {i} does not fit a nibble")
            layout |= v << (i << 2)
        return cls(layout)

    # ---------- accessors ----------
    @property
    def layout(self) -> int:
        return self._layout

    @property
    def blank_index(self) -> int:
        return self._blank

    @property
    def tile_positions(self) -> int:
        return self._positions

    def value_at(self, index: int) -> int:
        return (self._layout >> (index << 2)) & 0xF

    def position_of(self, tile: int) -> int:
        return (self._positions >> (tile << 2)) & 0xF

    def values(self) -> Tuple[int, ...]:
        return tuple(self.value_at(i) for i in range(NUM_TILES))

    def hash_with_mask(self, mask: int) -> int:
        """Tile positions projected through a partition mask."""
        return self._positions & mask

    def __eq__(self, other):
        if not isinstance(other, PuzzleState):
            return NotImplemented
        return self._layout == other._layout

    def __hash__(self):
        return hash(self._layout)

    def __repr__(self):
        return f"PuzzleState(0x{self._layout:016X})"

    def __str__(self):
        return "[" + ",".join(str(v) for v in self.values()) + "]"

    # ---------- checks ----------
    def is_valid(self) -> bool:
        seen = 0
        for i in range(NUM_TILES):
            bit = 1 << self.value_at(i)
            if seen & bit:
                return False
            seen |= bit
        return True

    def is_solvable(self) -> bool:
        """Inversions among non-blank tiles plus the blank's 1-based row (from the top) must be even."""
        assert self.is_valid(), "is_solvable() requires a valid state"
        count = 0
        for i in range(NUM_TILES):
            ti = self.value_at(i)
            if ti == SPACE:
                count += 1 + i // SIZE
                continue
            for j in range(i + 1, NUM_TILES):
                tj = self.value_at(j)
                if tj != SPACE and tj < ti:
                    count += 1
        return count % 2 == 0

    # ---------- core dynamics ----------
    def _swap_space(self, target: int) -> Move:
        b4 = self._blank << 2
        t4 = target << 2
        tile = (self._layout >> t4) & 0xF
        layout = self._layout & ~((0xF << b4) | (0xF << t4)) & NO_MASK
        layout |= (tile << b4) | (SPACE << t4)
        positions = self._positions & ~((0xF << (tile << 2)) | (0xF << (SPACE << 2))) & NO_MASK
        positions |= (self._blank << (tile << 2)) | (target << (SPACE << 2))
        return tile, PuzzleState._derived(layout, target, positions)

    def move_left(self) -> Move:
        if self._blank % SIZE == 0:
            return -1, None
        return self._swap_space(self._blank - 1)

    def move_right(self) -> Move:
        if (self._blank + 1) % SIZE == 0:
            return -1, None
        return self._swap_space(self._blank + 1)

    def move_up(self) -> Move:
        if self._blank < SIZE:
            return -1, None
        return self._swap_space(self._blank - SIZE)

    def move_down(self) -> Move:
        if self._blank >= NUM_TILES - SIZE:
            return -1, None
        return self._swap_space(self._blank + SIZE)

    def apply(self, move: str) -> "PuzzleState":
        """Replay one move character (L/R/U/D); walls raise IllegalMoveError."""
        fn = MOVES.get(move.upper())
        if fn is None:
            raise IllegalMoveError(f"unknown move {move!r}")
        tile, nxt = fn(self)
        if tile == -1:
            raise IllegalMoveError(f"move {move!r} hits the wall from blank index {self._blank}")
        return nxt

    def apply_path(self, path: Iterable[str]) -> "PuzzleState":
        s = self
        for m in path:
            s = s.apply(m)
        return s

    # ---------- instance generation ----------
    @classmethod
    def generate_sorted_state(cls) -> "PuzzleState":
        return cls(SORTED_LAYOUT)

    @classmethod
    def generate_valid_random_state(cls, seed: int) -> "PuzzleState":
        """Shuffled permutation; parity is flipped by one adjacent swap when unsolvable."""
        vals = list(range(NUM_TILES))
        random.Random(seed).shuffle(vals)
        s = cls.from_values(vals)
        if not s.is_solvable():
            if vals[0] != SPACE and vals[1] != SPACE:
                vals[0], vals[1] = vals[1], vals[0]
            else:
                vals[2], vals[3] = vals[3], vals[2]
            s = cls.from_values(vals)
        assert s.is_valid() and s.is_solvable()
        return s

    @classmethod
    def scramble(cls, depth: int, seed: int) -> "PuzzleState":
        """Depth-limited random walk from the sorted state with no immediate backtrack."""
        rng = random.Random(seed)
        s = cls.generate_sorted_state()
        last = None
        inverse = {"L": "R", "R": "L", "U": "D", "D": "U"}
        for _ in range(depth):
            moves = []
            for m, fn in MOVES.items():
                if m == inverse.get(last):
                    continue
                tile, nxt = fn(s)
                if tile != -1:
                    moves.append((m, nxt))
            last, s = rng.choice(moves)
        return s


# move character -> unbound move method, in L, R, U, D order
MOVES = {
    "L": PuzzleState.move_left,
    "R": PuzzleState.move_right,
    "U": PuzzleState.move_up,
    "D": PuzzleState.move_down,
}


def parse_state(text: str, seed: Optional[int] = None) -> PuzzleState:
    """Parse ``RANDOM`` or a comma-separated list of 16 values into a solvable state."""
    text = text.strip()
    if text.upper() == "RANDOM":
        return PuzzleState.generate_valid_random_state(time.time_ns() if seed is None else seed)
    try:
        vals = [int(tok) for tok in text.split(",")]
    except ValueError:
        raise InvalidStateError(f"cannot parse state {text!r}: expected RANDOM or 0,1,2,...") from None
    s = PuzzleState.from_values(vals)
    if not s.is_valid():
        raise InvalidStateError("The given state is not valid.")
    if not s.is_solvable():
        raise InvalidStateError("The given state is not solvable.")
    return s
