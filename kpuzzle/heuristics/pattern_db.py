"""Disjoint additive pattern databases for the 15-puzzle.

A partition is a 64-bit mask with one nibble per tile value, ``0xF`` when the
tile belongs to the partition and ``0x0`` otherwise. Nibble 0 (the blank) is
selected by every partition: the blank has to be tracked to know which moves
are free and which ones cost.

Each partition owns a table of ``16 ** (k - 1)`` one-byte costs, ``k`` being the
number of selected nibbles. A table entry holds the fewest moves of partition
tiles needed to bring them home when every other tile moves for free. Since no
tile is counted twice, the sum over partitions never overestimates.

File layout (little endian)::

    int32   number of partitions
    uint64  mask, for each partition
    uint64  table length, then that many uint8 costs, for each partition
"""

from __future__ import annotations

import logging
import struct
from collections import deque
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import BinaryIO, List, Optional, Sequence, Tuple

import numpy as np

from kpuzzle.domains.state import NO_MASK, NUM_TILES, SPACE, PuzzleState
from kpuzzle.search.node import MAX_PATH, SearchNode

logger = logging.getLogger(__name__)

UNREACHED = 127  # largest signed 8-bit cost

_COUNT = struct.Struct("<i")
_U64 = struct.Struct("<Q")


class PatternDBError(Exception):
    pass


class InvalidPartitionError(PatternDBError, ValueError):
    pass


class PatternDBNotGeneratedError(PatternDBError, RuntimeError):
    pass


class PatternDBFormatError(PatternDBError, IOError):
    pass


class TruncatedStreamError(PatternDBFormatError):
    pass


class IncompatibleModelError(PatternDBFormatError):
    pass


# ---------- partition helpers ----------
def count_enabled_fields(mask: int) -> int:
    """Number of selected nibbles, e.g. 0xFF00 -> 2, 0xF00F -> 2, 0xF000 -> 1."""
    count = 0
    for i in range(NUM_TILES):
        nib = (mask >> (i << 2)) & 0xF
        if nib not in (0x0, 0xF):
            raise InvalidPartitionError(f"mask 0x{mask:016X} has a partial nibble at {i}")
        count += nib & 0x1
    return count


def partition_of_tile(masks: Sequence[int], tile: int) -> int:
    """Index of the partition selecting ``tile``, or -1. The blank belongs to all of them."""
    assert tile != SPACE
    for i, m in enumerate(masks):
        if (m >> (tile << 2)) & 0xF:
            return i
    return -1


def compute_tile_ranks(masks: Sequence[int]) -> int:
    """Ordinal of every tile inside its own partition, one nibble per tile value.

    Tiles are ranked from the highest value down, e.g. partitions 0xFF00F and
    0x00FFF give 0x1010; 0xF0F0F and 0x0F0FF give 0x1100.
    """
    counters = [0] * len(masks)
    ranks = 0
    for tile in range(NUM_TILES - 1, 0, -1):
        p = partition_of_tile(masks, tile)
        if p == -1:
            continue
        if counters[p] > 0xF:
            raise InvalidPartitionError(f"partition {p} has too many tiles")
        ranks |= counters[p] << (tile << 2)
        counters[p] += 1
    return ranks


def check_partitions_disjoint(masks: Sequence[int]) -> bool:
    """No two partitions share a tile. The blank nibble is not considered."""
    for i in range(len(masks) - 1):
        for j in range(i + 1, len(masks)):
            if masks[i] & masks[j] & ~0xF:
                return False
    return True


def check_partitions_have_zero(masks: Sequence[int]) -> bool:
    return all(m & 0xF == 0xF for m in masks)


def check_partitions_total(masks: Sequence[int]) -> bool:
    """The union of the partitions selects every tile 1..15."""
    return all(partition_of_tile(masks, t) != -1 for t in range(NUM_TILES - 1, 0, -1))


def is_valid_partitions(masks: Sequence[int]) -> bool:
    return (check_partitions_disjoint(masks)
            and check_partitions_have_zero(masks)
            and check_partitions_total(masks))


def table_size(mask: int) -> int:
    return 1 << ((count_enabled_fields(mask) - 1) * 4)


@dataclass(frozen=True)
class PartitionModel:
    """Validated, immutable list of partition masks.

    ``require_total=False`` admits models covering only some tiles; they stay
    admissible and keep small databases cheap to build.
    """
    masks: Tuple[int, ...]
    name: str = "custom"
    require_total: bool = True
    tile_ranks: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        masks = tuple(int(m) for m in self.masks)
        object.__setattr__(self, "masks", masks)
        if not masks:
            raise InvalidPartitionError("a partition model needs at least one mask")
        for m in masks:
            if not 0 <= m <= NO_MASK:
                raise InvalidPartitionError(f"mask {m:#x} does not fit 64 bits")
            count_enabled_fields(m)
        if not check_partitions_disjoint(masks):
            raise InvalidPartitionError("partitions are not disjoint")
        if not check_partitions_have_zero(masks):
            raise InvalidPartitionError("every partition must select the blank (nibble 0)")
        if self.require_total and not check_partitions_total(masks):
            raise InvalidPartitionError("partitions do not cover every tile")
        object.__setattr__(self, "tile_ranks", compute_tile_ranks(masks))

    def __len__(self):
        return len(self.masks)

    def index_shifts(self, partition: Optional[int] = None) -> Tuple[Tuple[int, int], ...]:
        """(position shift, index shift) per tile, restricted to one partition if given."""
        out = []
        for tile in range(NUM_TILES - 1, 0, -1):
            if partition is not None and not (self.masks[partition] >> (tile << 2)) & 0xF:
                continue
            rank = (self.tile_ranks >> (tile << 2)) & 0xF
            out.append((tile << 2, rank << 2))
        return tuple(out)


def _pack(masked_hash: int, shifts) -> int:
    index = 0
    for pos_shift, idx_shift in shifts:
        index |= ((masked_hash >> pos_shift) & 0xF) << idx_shift
    return index


def build_cost_table(model: PartitionModel, partition: int) -> np.ndarray:
    """Exhaustive search from the sorted state for one partition.

    Moves of tiles outside the partition are free, so the open list is a deque
    fed at the front for free moves and at the back for paid ones, which keeps
    it ordered by cost. The close set is keyed by (table index, blank position).
    """
    mask = model.masks[partition]
    size = table_size(mask)
    shifts = model.index_shifts(partition)
    table = bytearray([UNREACHED]) * size
    closed = bytearray(size * NUM_TILES)

    t0 = perf_counter()
    logger.info("Pattern DB partition %d (mask 0x%016X): building %d entries",
                partition, mask, size)

    start = SearchNode(PuzzleState.generate_sorted_state())
    h0 = start.hash_with_mask(mask)
    i0 = _pack(h0, shifts)
    open_list = deque([(start, i0, (i0 << 4) | (h0 & 0xF))])
    n_closed = 0

    while open_list:
        node, index, key = open_list.popleft()
        if closed[key]:
            continue
        closed[key] = 1
        n_closed += 1
        cost = node.cost_to_here
        assert cost < UNREACHED
        if cost < table[index]:
            table[index] = cost
        if n_closed % (1 << 20) == 0:
            logger.debug("partition %d: %d closed, open=%d, cost=%d",
                         partition, n_closed, len(open_list), cost)

        for child in node.children(mask):
            h = child.hash_with_mask(mask)
            ci = _pack(h, shifts)
            ck = (ci << 4) | (h & 0xF)
            if closed[ck]:
                continue
            if child.cost_to_here == cost:
                open_list.appendleft((child, ci, ck))
            else:
                open_list.append((child, ci, ck))

    logger.info("Pattern DB partition %d: %d configurations closed in %.2fs",
                partition, n_closed, perf_counter() - t0)
    return _read_only(np.frombuffer(bytes(table), dtype=np.uint8).copy())


def _read_only(table: np.ndarray) -> np.ndarray:
    table.flags.writeable = False
    return table


def _read_exact(stream: BinaryIO, n: int, what: str) -> bytes:
    data = stream.read(n)
    if data is None or len(data) != n:
        raise TruncatedStreamError(f"PatternDB file is not valid: truncated while reading {what}")
    return data


class PatternDB:
    """Cost tables for a partition model. Usable as a heuristic once generated or loaded."""

    def __init__(self, model: PartitionModel):
        self.model = model
        self._tables: Optional[List[np.ndarray]] = None
        self._shifts_all = model.index_shifts()
        self._partition_shifts = [model.index_shifts(i) for i in range(len(model.masks))]

    @property
    def num_partitions(self) -> int:
        return len(self.model.masks)

    @property
    def is_generated(self) -> bool:
        return self._tables is not None

    def _require_tables(self) -> List[np.ndarray]:
        if self._tables is None:
            raise PatternDBNotGeneratedError("pattern database is neither generated nor loaded")
        return self._tables

    def generate(self, workers: int = 1) -> None:
        t0 = perf_counter()
        n = self.num_partitions
        if workers > 1 and n > 1:
            with ProcessPoolExecutor(max_workers=min(workers, n)) as ex:
                futures = [ex.submit(build_cost_table, self.model, i) for i in range(n)]
                tables = [f.result() for f in futures]
        else:
            tables = [build_cost_table(self.model, i) for i in range(n)]
        self._tables = [_read_only(t) for t in tables]
        logger.info("Pattern DB '%s' generated in %.2fs", self.model.name, perf_counter() - t0)

    def cost_table(self, partition: int) -> np.ndarray:
        return self._require_tables()[partition]

    def hash_to_index(self, masked_hash: int) -> int:
        return _pack(masked_hash, self._shifts_all)

    def get_cost(self, state: PuzzleState) -> int:
        tables = self._require_tables()
        positions = state.tile_positions
        cost = 0
        for mask, shifts, table in zip(self.model.masks, self._partition_shifts, tables):
            c = int(table[_pack(positions & mask, shifts)])
            assert c <= MAX_PATH
            cost += c
        return cost

    __call__ = get_cost

    # ---------- persistence ----------
    def serialize(self, stream: BinaryIO) -> None:
        tables = self._require_tables()
        stream.write(_COUNT.pack(self.num_partitions))
        for m in self.model.masks:
            stream.write(_U64.pack(m))
        for t in tables:
            stream.write(_U64.pack(len(t)))
            stream.write(t.astype(np.uint8).tobytes())

    def deserialize(self, stream: BinaryIO) -> None:
        """Load tables written by :meth:`serialize` for the same partition model."""
        (count,) = _COUNT.unpack(_read_exact(stream, _COUNT.size, "partition count"))
        if count != self.num_partitions:
            raise IncompatibleModelError(
                f"PatternDB file has {count} partitions, expected {self.num_partitions}")
        for i, expected in enumerate(self.model.masks):
            (mask,) = _U64.unpack(_read_exact(stream, _U64.size, f"mask {i}"))
            if mask != expected:
                raise IncompatibleModelError(
                    f"PatternDB file has a different partition model (mask {i}: "
                    f"0x{mask:016X} != 0x{expected:016X})")
        tables = []
        for i, mask in enumerate(self.model.masks):
            (size,) = _U64.unpack(_read_exact(stream, _U64.size, f"table {i} size"))
            if size != table_size(mask):
                raise IncompatibleModelError(
                    f"PatternDB table {i} has {size} entries, expected {table_size(mask)}")
            data = _read_exact(stream, size, f"table {i}")
            tables.append(np.frombuffer(data, dtype=np.uint8).copy())
        self._tables = [_read_only(t) for t in tables]

    def save(self, path) -> None:
        path = Path(path)
        with path.open("wb") as f:
            self.serialize(f)
        logger.info("Pattern DB saved to %s", path)

    def load(self, path) -> None:
        path = Path(path)
        with path.open("rb") as f:
            self.deserialize(f)
        logger.info("Pattern DB loaded from %s", path)


def load_or_generate(model: PartitionModel, path, workers: int = 1) -> PatternDB:
    """Load the database at ``path``; regenerate and save it when missing or incompatible."""
    path = Path(path)
    db = PatternDB(model)
    try:
        db.load(path)
        return db
    except FileNotFoundError:
        logger.info("No pattern DB at %s, generating '%s'", path, model.name)
    except PatternDBFormatError as e:
        logger.warning("Pattern DB at %s is unusable (%s), regenerating", path, e)
    db.generate(workers=workers)
    path.parent.mkdir(parents=True, exist_ok=True)
    db.save(path)
    return db
