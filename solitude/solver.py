"""
Backtracking solvers for the non-attacking placement puzzle.

Two implementations share the same search:
- BacktrackingSolver: sequential depth-first search producing a lazy stream
- ParallelSolver: fans the first piece's candidate squares out to a thread
  pool, each worker exploring a disjoint subtree from its own board

Both emit solutions in the same deterministic order: squares are tried in
(row, column) ascending order and pieces are placed in PieceType order.
Interchangeable pieces of one type always take strictly increasing squares,
so a set of squares for a type is produced exactly once.
"""

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .board import Board, PlacementRequest
from .interfaces import SolverInterface
from .pieces import PieceType, Square
from .utils import is_consistent


# =============================================================================
# Search Statistics
# =============================================================================

@dataclass
class SearchStats:
    """Counters for one search invocation."""
    nodes_visited: int = 0
    solutions_found: int = 0
    backtracks: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict:
        return {
            'nodes_visited': self.nodes_visited,
            'solutions_found': self.solutions_found,
            'backtracks': self.backtracks,
            'elapsed': self.elapsed,
        }


# =============================================================================
# Search Plan
# =============================================================================

def _same_type_runs(plan: Tuple[PieceType, ...]) -> Tuple[int, ...]:
    """
    For each depth, how many pieces of the same type are still to be placed
    from that depth on (the plan is sorted, so they are contiguous).
    """
    runs = [0] * len(plan)
    for depth in range(len(plan) - 1, -1, -1):
        if depth + 1 < len(plan) and plan[depth + 1] is plan[depth]:
            runs[depth] = runs[depth + 1] + 1
        else:
            runs[depth] = 1
    return tuple(runs)


def _search(
    board: Board,
    plan: Tuple[PieceType, ...],
    runs: Tuple[int, ...],
    squares: Tuple[Square, ...],
    depth: int,
    start: int,
    stats: SearchStats,
    stop: Optional[threading.Event] = None
) -> Iterator[Board]:
    """
    Depth-first enumeration of every consistent completion of a board.

    Args:
        board: Current partial placement (never mutated)
        plan: Pieces to place, sorted by type
        runs: Output of _same_type_runs(plan)
        squares: All board squares in (row, column) order
        depth: Index in plan of the piece placed at this level
        start: First square index to try (past the previous same-type piece)
        stats: Counters updated in place
        stop: Event that ends the search early when set

    Yields:
        Complete solution boards.
    """
    if depth == len(plan):
        stats.solutions_found += 1
        yield board
        return

    # Not enough free squares left for the remaining pieces
    if board.area - len(board) < len(plan) - depth:
        stats.backtracks += 1
        return

    piece = plan[depth]
    next_is_same = depth + 1 < len(plan) and plan[depth + 1] is piece
    # Leave room for the same-type pieces that must follow on later squares
    end = len(squares) - runs[depth] + 1

    for index in range(start, end):
        if stop is not None and stop.is_set():
            return
        square = squares[index]
        stats.nodes_visited += 1
        if not is_consistent(board, piece, square):
            continue
        yield from _search(
            board.place(piece, square), plan, runs, squares,
            depth + 1, index + 1 if next_is_same else 0, stats, stop
        )

    stats.backtracks += 1


# =============================================================================
# Solver Base Class
# =============================================================================

class BaseSolver(SolverInterface):
    """Base class for placement solvers with common functionality."""

    def __init__(
        self,
        request: PlacementRequest,
        max_solutions: Optional[int] = None,
        verbose: bool = False
    ):
        if max_solutions is not None and max_solutions < 1:
            raise ValueError(f"max_solutions must be >= 1, got {max_solutions}")
        # Seeds are validated before any search starts
        request.validate_seed()
        self._request = request
        self._max_solutions = max_solutions
        self._verbose = verbose
        self.stats = SearchStats()

    def get_request(self) -> PlacementRequest:
        return self._request

    def _initial_state(self) -> Tuple[Board, Tuple[PieceType, ...], Tuple[int, ...], Tuple[Square, ...]]:
        seed = self._request.seed
        plan = self._request.pieces
        return seed, plan, _same_type_runs(plan), tuple(seed.squares())

    def _limited(self, stream: Iterator[Board], stats: SearchStats) -> Iterator[Board]:
        """Apply max_solutions and the verbose report to a raw stream."""
        start = time.time()
        if self._verbose:
            self._print_header()

        emitted = 0
        try:
            for board in stream:
                emitted += 1
                stats.elapsed = time.time() - start
                yield board
                if self._max_solutions is not None and emitted >= self._max_solutions:
                    break
        finally:
            stream.close()

        stats.elapsed = time.time() - start
        if self._verbose:
            self._print_footer(stats, emitted)

    def _print_header(self) -> None:
        request = self._request
        print("=" * 60)
        print(f"{type(self).__name__} - {request.width}×{request.height} board")
        print("=" * 60)
        print(f"Pinned: {len(request.seed)}, To place: {len(request.pieces)}")
        if request.pieces:
            print(f"Pieces: {', '.join(p.value for p in request.pieces)}")
        print("=" * 60)

    def _print_footer(self, stats: SearchStats, emitted: int) -> None:
        print("=" * 60)
        print(f"Completed in {stats.elapsed:.3f}s")
        print(f"Solutions: {emitted}")
        print(f"Nodes visited: {stats.nodes_visited:,}, Backtracks: {stats.backtracks:,}")
        print("=" * 60)


# =============================================================================
# Sequential Solver
# =============================================================================

class BacktrackingSolver(BaseSolver):
    """
    Sequential backtracking solver.

    Every call to solve() starts a clean search with its own state, so an
    abandoned stream never affects a later one.
    """

    def solve(self) -> Iterator[Board]:
        stats = self.stats = SearchStats()
        seed, plan, runs, squares = self._initial_state()
        raw = _search(seed, plan, runs, squares, 0, 0, stats)
        return self._limited(raw, stats)


# =============================================================================
# Parallel Solver
# =============================================================================

# Marks the end of one branch's solutions in its queue
_BRANCH_DONE = object()


def _explore_branch(
    board: Board,
    plan: Tuple[PieceType, ...],
    runs: Tuple[int, ...],
    squares: Tuple[Square, ...],
    start: int,
    sink: queue.Queue,
    stats: SearchStats,
    stop: threading.Event
) -> None:
    """Stream one top-level subtree into its queue until done or stopped."""
    try:
        for solution in _search(board, plan, runs, squares, 1, start, stats, stop):
            sink.put(solution)
    finally:
        sink.put(_BRANCH_DONE)


class ParallelSolver(BaseSolver):
    """
    Thread-pool solver exploring top-level branches concurrently.

    Each branch is rooted at one candidate square of the first piece and owns
    its own board, counters and solution queue. Queues are drained in branch
    order, so the stream matches BacktrackingSolver exactly. Closing the
    stream stops every worker and waits for the pool to finish.
    """

    def __init__(
        self,
        request: PlacementRequest,
        max_solutions: Optional[int] = None,
        verbose: bool = False,
        workers: Optional[int] = None
    ):
        super().__init__(request, max_solutions=max_solutions, verbose=verbose)
        if workers is not None and workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self._workers = workers

    def solve(self) -> Iterator[Board]:
        stats = self.stats = SearchStats()
        return self._limited(self._fan_out(stats), stats)

    def _fan_out(self, stats: SearchStats) -> Iterator[Board]:
        seed, plan, runs, squares = self._initial_state()

        if not plan:
            yield from _search(seed, plan, runs, squares, 0, 0, stats)
            return
        if seed.area - len(seed) < len(plan):
            stats.backtracks += 1
            return

        piece = plan[0]
        next_is_same = len(plan) > 1 and plan[1] is piece
        branches = []
        for index in range(0, len(squares) - runs[0] + 1):
            stats.nodes_visited += 1
            if is_consistent(seed, piece, squares[index]):
                branches.append((seed.place(piece, squares[index]), index + 1 if next_is_same else 0))

        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=self._workers)
        branch_stats = [SearchStats() for _ in branches]
        try:
            pending = []
            for (board, start), counters in zip(branches, branch_stats):
                sink = queue.Queue()
                future = executor.submit(
                    _explore_branch, board, plan, runs, squares, start, sink, counters, stop
                )
                pending.append((future, sink))

            for future, sink in pending:
                while True:
                    item = sink.get()
                    if item is _BRANCH_DONE:
                        break
                    stats.solutions_found += 1
                    yield item
                # Re-raise anything the worker raised
                future.result()
        finally:
            stop.set()
            executor.shutdown(wait=True, cancel_futures=True)
            for counters in branch_stats:
                stats.nodes_visited += counters.nodes_visited
                stats.backtracks += counters.backtracks


# =============================================================================
# Entry Points
# =============================================================================

def create_solver(
    request: PlacementRequest,
    parallel: bool = False,
    max_solutions: Optional[int] = None,
    workers: Optional[int] = None,
    verbose: bool = False
) -> BaseSolver:
    """Factory function to create the appropriate solver for a request."""
    if not isinstance(request, PlacementRequest):
        raise TypeError(f"Expected a PlacementRequest, got {type(request)}")
    if parallel:
        return ParallelSolver(request, max_solutions=max_solutions, verbose=verbose, workers=workers)
    if workers is not None:
        raise ValueError("workers is only supported by the parallel solver")
    return BacktrackingSolver(request, max_solutions=max_solutions, verbose=verbose)


def solve(
    request: PlacementRequest,
    max_solutions: Optional[int] = None,
    parallel: bool = False,
    workers: Optional[int] = None
) -> Iterator[Board]:
    """
    Enumerate every non-attacking placement for a request.

    Args:
        request: Validated PlacementRequest
        max_solutions: Stop after this many solutions (None for all)
        parallel: Explore top-level branches on a thread pool
        workers: Thread pool size for the parallel solver

    Returns:
        Lazy iterator over solution boards.
    """
    return create_solver(request, parallel=parallel, max_solutions=max_solutions,
                         workers=workers).solve()


def solve_many(
    requests: Iterable[PlacementRequest],
    max_solutions: Optional[int] = None,
    parallel: bool = False,
    workers: Optional[int] = None
) -> Iterator[List[Board]]:
    """Solve independent requests one after the other, one list per request."""
    for request in requests:
        yield list(solve(request, max_solutions=max_solutions, parallel=parallel, workers=workers))
