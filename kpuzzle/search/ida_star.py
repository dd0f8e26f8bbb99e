from __future__ import annotations
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, Optional, Tuple
import logging

from kpuzzle.domains.state import PuzzleState
from kpuzzle.search.node import MAX_PATH, SearchNode

logger = logging.getLogger(__name__)

Heuristic = Callable[[PuzzleState], int]

FINAL_STATE = PuzzleState.generate_sorted_state()
# Bounds above the longest optimal 15-puzzle solution mean the input was unsolvable.
TOTAL_DEPTH_LIMIT = MAX_PATH
REFRESH_PERIOD = 0.2


@dataclass
class SolverResult:
    solution_found: bool
    time_elapsed: float  # seconds


class IDAStar:
    """Iterative deepening A* over an explicit stack.

    The bound starts at h(start) and grows by 2 after every failed iteration:
    every move changes the distance to the goal by exactly one, so all solutions
    share the parity of the first bound. Counters are plain attributes and can
    be read from another thread while a search runs.
    """

    def __init__(self):
        self.max_depth = 0
        self.explored_nodes = 0
        self.solution_length = 0
        self.solution_path = ""

    def progress(self) -> Tuple[int, int]:
        """Snapshot of (explored nodes, current bound)."""
        return self.explored_nodes, self.max_depth

    def find_solution(self, start: PuzzleState, hfun: Heuristic) -> SolverResult:
        t0 = perf_counter()
        self.explored_nodes = 0
        self.solution_length = 0
        self.solution_path = ""
        self.max_depth = hfun(start)
        found = False

        while self.max_depth <= TOTAL_DEPTH_LIMIT and not found:
            found = self._limited_depth_search(start, hfun)
            if not found:
                self.max_depth += 2
                logger.debug("IDA* bound raised to %d (%d nodes explored)",
                             self.max_depth, self.explored_nodes)

        return SolverResult(found, perf_counter() - t0)

    def _limited_depth_search(self, start: PuzzleState, hfun: Heuristic) -> bool:
        bound = self.max_depth
        open_list = [SearchNode(start)]

        while open_list:
            self.explored_nodes += 1
            node = open_list.pop()

            if node.state == FINAL_STATE:
                self.solution_length = node.path_length
                self.solution_path = node.path
                return True

            if node.cost_to_here + hfun(node.state) <= bound:
                open_list.extend(node.children())

        return False

    # ---------- background execution ----------
    def solve_in_background(self, start: PuzzleState, hfun: Heuristic) -> "Future[SolverResult]":
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ida-star")
        future = executor.submit(self.find_solution, start, hfun)
        executor.shutdown(wait=False)
        return future

    def wait_with_progress(self, future: "Future[SolverResult]",
                           on_progress: Optional[Callable[[int, int], None]] = None,
                           period: float = REFRESH_PERIOD) -> SolverResult:
        """Block until ``future`` is done, reporting counters every ``period`` seconds."""
        while True:
            if on_progress is not None:
                on_progress(*self.progress())
            done, _ = wait([future], timeout=period)
            if done:
                break
        if on_progress is not None:
            on_progress(*self.progress())
        return future.result()


def ida_star(start: PuzzleState, hfun: Heuristic, return_path: bool = True):
    """IDA* with instrumentation, returned as a flat dict for the experiment runner."""
    solver = IDAStar()
    res = solver.find_solution(start, hfun)
    return {
        "path": solver.solution_path if (res.solution_found and return_path) else None,
        "g": solver.solution_length if res.solution_found else None,
        "expanded": solver.explored_nodes,
        "bound_final": solver.max_depth,
        "time": res.time_elapsed,
        "algorithm": "IDA*",
        "termination": "ok" if res.solution_found else "exhausted",
    }
