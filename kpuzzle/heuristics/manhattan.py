from __future__ import annotations

from kpuzzle.domains.state import NUM_TILES, SIZE, PuzzleState

FINAL_STATE = PuzzleState.generate_sorted_state()


def distance(a: PuzzleState, b: PuzzleState) -> int:
    """Sum over non-blank tiles of the row and column offsets between the two boards."""
    pa, pb = a.tile_positions, b.tile_positions
    dist = 0
    for tile in range(1, NUM_TILES):
        ia = (pa >> (tile << 2)) & 0xF
        ib = (pb >> (tile << 2)) & 0xF
        if ia == ib:
            continue
        ra, ca = divmod(ia, SIZE)
        rb, cb = divmod(ib, SIZE)
        dist += abs(ra - rb) + abs(ca - cb)
    return dist


def distance_with_final(s: PuzzleState) -> int:
    return distance(s, FINAL_STATE)
