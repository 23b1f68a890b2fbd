"""
Test suite to verify the solver against an independent brute-force oracle.

The oracle below re-derives the attack relation from the chess rules:
- Pawn: attacks (row + 1, column ± 1)
- Knight: (±1, ±2) and (±2, ±1) jumps
- King: every adjacent square
- Bishop / Rook / Queen: along diagonals / rows and columns / both,
  up to and including the first occupied square

A placement is a solution when no piece attacks another. The oracle tries
every assignment of distinct squares to the pieces and keeps the
non-attacking ones; the solver must produce exactly that set, once each.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from itertools import permutations


def check_attack(piece, a, b, occupied):
    """
    Check if a piece standing on a attacks square b.

    Args:
        piece: Piece name ('Pawn', 'Knight', ...)
        a: (row, column) of the attacker
        b: (row, column) of the target
        occupied: Set of occupied squares
    """
    dr = b[0] - a[0]
    dc = b[1] - a[1]
    if dr == 0 and dc == 0:
        return False

    if piece == 'Pawn':
        return dr == 1 and abs(dc) == 1
    if piece == 'Knight':
        return (abs(dr), abs(dc)) in ((1, 2), (2, 1))
    if piece == 'King':
        return max(abs(dr), abs(dc)) == 1

    straight = dr == 0 or dc == 0
    diagonal = abs(dr) == abs(dc)
    if piece == 'Rook' and not straight:
        return False
    if piece == 'Bishop' and not diagonal:
        return False
    if piece == 'Queen' and not (straight or diagonal):
        return False

    # Path between a and b must be empty
    step_r = (dr > 0) - (dr < 0)
    step_c = (dc > 0) - (dc < 0)
    r, c = a[0] + step_r, a[1] + step_c
    while (r, c) != tuple(b):
        if (r, c) in occupied:
            return False
        r, c = r + step_r, c + step_c
    return True


def is_solution(placement):
    """placement: dict (row, column) -> piece name."""
    occupied = set(placement)
    squares = list(placement)
    for i in range(len(squares)):
        for j in range(len(squares)):
            if i != j and check_attack(placement[squares[i]], squares[i], squares[j], occupied):
                return False
    return True


def brute_force(width, height, pieces, pinned=None):
    """
    Enumerate all solutions by trying every square assignment.

    Returns:
        Set of frozensets of ((row, column), piece name) pairs.
    """
    pinned = dict(pinned or {})
    free = [(r, c) for r in range(height) for c in range(width) if (r, c) not in pinned]
    found = set()
    for squares in permutations(free, len(pieces)):
        placement = dict(pinned)
        placement.update(zip(squares, pieces))
        if is_solution(placement):
            found.add(frozenset(placement.items()))
    return found


def as_key(board):
    """Convert a solver Board into the oracle's representation."""
    return frozenset(((sq.row, sq.column), piece.value) for sq, piece in board.items())


def test_two_pawns_2x2():
    """Two pawns on 2×2: only the two diagonal pairs attack."""
    from solitude.board import create_request
    from solitude.solver import solve

    request = create_request(2, 2, pieces=['Pawn', 'Pawn'])
    solutions = list(solve(request))

    expected = brute_force(2, 2, ['Pawn', 'Pawn'])
    assert len(expected) == 4, f"Oracle should find 4 placements, got {len(expected)}"
    assert set(as_key(b) for b in solutions) == expected, "Solver must match brute force"
    assert len(solutions) == 4, f"Expected 4 solutions, got {len(solutions)}"

    print("✅ Two pawns 2×2 test passed")


def test_two_kings_one_rook_3x3():
    """Classic instance: 2 Kings and 1 Rook on 3×3 has 4 solutions."""
    from solitude.board import create_request
    from solitude.solver import solve

    request = create_request(3, 3, pieces=['King', 'King', 'Rook'])
    solutions = list(solve(request))

    assert len(solutions) == 4, f"Expected 4 solutions, got {len(solutions)}"
    assert set(as_key(b) for b in solutions) == brute_force(3, 3, ['King', 'King', 'Rook'])

    print("✅ 2K + 1R on 3×3 test passed")


def test_rooks_and_knights_4x4():
    """Classic instance: 2 Rooks and 4 Knights on 4×4 has 8 solutions."""
    from solitude.board import create_request
    from solitude.solver import solve

    pieces = ['Rook', 'Rook', 'Knight', 'Knight', 'Knight', 'Knight']
    solutions = list(solve(create_request(4, 4, pieces=pieces)))

    assert len(solutions) == 8, f"Expected 8 solutions, got {len(solutions)}"
    for board in solutions:
        counts = {piece.value: n for piece, n in board.piece_counts().items()}
        assert counts == {'Rook': 2, 'Knight': 4}, f"Wrong pieces on {board!r}"

    print("✅ 2R + 4N on 4×4 test passed")


def test_mixed_pieces_match_brute_force():
    """Every piece type together on small boards."""
    from solitude.board import create_request
    from solitude.solver import solve

    cases = [
        (3, 3, ['Bishop', 'Knight', 'Pawn']),
        (3, 3, ['Queen', 'Pawn', 'Pawn']),
        (3, 2, ['Rook', 'Bishop', 'Knight']),
        (2, 3, ['King', 'Pawn']),
        (4, 3, ['Bishop', 'Bishop', 'Rook']),
    ]

    for width, height, pieces in cases:
        solutions = list(solve(create_request(width, height, pieces=pieces)))
        keys = [as_key(b) for b in solutions]
        expected = brute_force(width, height, pieces)

        assert set(keys) == expected, \
            f"{width}×{height} {pieces}: solver and brute force disagree"
        assert len(keys) == len(set(keys)), \
            f"{width}×{height} {pieces}: duplicate solutions emitted"

    print("✅ Mixed pieces brute-force test passed")


def test_solutions_are_valid():
    """Every emitted board has the right pieces and no attacking pair."""
    from solitude.board import create_request
    from solitude.solver import solve
    from solitude.utils import count_attacking_pairs

    request = create_request(4, 4, pieces=['Queen', 'Knight', 'Knight', 'Pawn'])
    for board in solve(request):
        assert count_attacking_pairs(board) == 0, f"Attacking pair in {board!r}"
        assert sorted(p.value for p in board.piece_counts().elements()) == \
            sorted(p.value for p in request.pieces)
        assert (board.width, board.height) == (4, 4)

    print("✅ Solution validity test passed")


def test_pinned_pieces_match_brute_force():
    """Pinned pieces stay put and constrain the rest."""
    from solitude.board import create_request
    from solitude.solver import solve

    request = create_request(3, 3, [('King', (0, 0))], ['King'])
    solutions = list(solve(request))

    expected = brute_force(3, 3, ['King'], pinned={(0, 0): 'King'})
    assert len(expected) == 5, f"Oracle should find 5 placements, got {len(expected)}"
    assert set(as_key(b) for b in solutions) == expected
    for board in solutions:
        assert board.piece_at((0, 0)).value == 'King', "Pinned king must stay on (0, 0)"

    print("✅ Pinned pieces test passed")


def test_two_kings_2x2_has_no_solution():
    """Every pair of squares on 2×2 is adjacent."""
    from solitude.board import create_request
    from solitude.solver import solve

    assert list(solve(create_request(2, 2, pieces=['King', 'King']))) == []

    print("✅ Two kings 2×2 test passed")


def test_more_pieces_than_squares():
    """Too many pieces gives an empty stream, not an error."""
    from solitude.board import create_request
    from solitude.solver import solve
    from solitude.utils import check_feasibility

    request = create_request(2, 2, pieces=['Pawn'] * 5)
    assert list(solve(request)) == []
    assert list(solve(request, parallel=True)) == []
    assert check_feasibility(request)['feasible'] is False

    print("✅ Over-full board test passed")


def test_bishop_diagonal():
    """Bishops on one diagonal attack; side by side they do not."""
    from solitude.board import Board
    from solitude.utils import count_attacking_pairs

    diagonal = Board(2, 2, [('Bishop', (0, 0)), ('Bishop', (1, 1))])
    side_by_side = Board(2, 2, [('Bishop', (0, 0)), ('Bishop', (0, 1))])

    assert count_attacking_pairs(diagonal) == 1
    assert count_attacking_pairs(side_by_side) == 0

    print("✅ Bishop diagonal test passed")


def test_deterministic_order():
    """Two searches produce the same sequence in (row, column) order."""
    from solitude.board import create_request
    from solitude.solver import solve

    request = create_request(4, 4, pieces=['Rook', 'Knight', 'Knight'])
    first = list(solve(request))
    second = list(solve(request))

    assert first == second, "Order must be deterministic"
    assert len(first) > 0

    print("✅ Determinism test passed")


def test_parallel_matches_sequential():
    """The thread-pool solver yields exactly the sequential stream."""
    from solitude.board import create_request
    from solitude.solver import solve

    for width, height, pieces in [
        (4, 4, ['Rook', 'Rook', 'Knight', 'Knight', 'Knight', 'Knight']),
        (3, 3, ['King', 'King', 'Rook']),
        (4, 3, ['Queen', 'Pawn', 'Bishop']),
    ]:
        request = create_request(width, height, pieces=pieces)
        sequential = list(solve(request))
        for workers in (1, 2, 4):
            parallel = list(solve(request, parallel=True, workers=workers))
            assert parallel == sequential, \
                f"{width}×{height} {pieces}: parallel stream differs with {workers} workers"

    print("✅ Parallel equivalence test passed")


def test_early_termination():
    """Abandoning a stream does not disturb a later search."""
    from solitude.board import create_request
    from solitude.solver import create_solver

    request = create_request(4, 4, pieces=['Rook', 'Rook', 'Knight', 'Knight', 'Knight', 'Knight'])
    for parallel in (False, True):
        solver = create_solver(request, parallel=parallel)

        stream = solver.solve()
        first = next(stream)
        stream.close()

        assert solver.first() == first
        assert solver.count() == 8, "A fresh search must still find every solution"
        assert len(solver.solutions(limit=3)) == 3

    print("✅ Early termination test passed")


def test_early_termination_skips_remaining_search():
    """Stopping after the first solution leaves most of the tree unexplored."""
    from solitude.board import create_request
    from solitude.solver import create_solver

    request = create_request(5, 5, pieces=['Knight', 'Knight', 'Knight'])

    solver = create_solver(request)
    solver.count()
    full_nodes = solver.stats.nodes_visited

    solver.first()
    first_nodes = solver.stats.nodes_visited
    assert first_nodes * 10 < full_nodes, \
        f"first() visited {first_nodes} of {full_nodes} nodes"

    limited = create_solver(request, max_solutions=1)
    assert len(list(limited.solve())) == 1
    assert limited.stats.nodes_visited == first_nodes, \
        "max_solutions=1 should stop exactly where first() does"

    print("✅ Early termination work test passed")


def test_parallel_first_stops_workers():
    """The thread-pool solver returns its first solution without finishing a
    branch, and joins every worker when the stream is closed."""
    import threading
    import time
    from solitude.board import create_request
    from solitude.solver import create_solver

    # Each top-level branch of this request holds hundreds of thousands of nodes
    request = create_request(6, 6, pieces=['Knight'] * 6)
    expected = create_solver(request).first()

    threads_before = threading.active_count()
    for workers in (1, 2, 4):
        solver = create_solver(request, parallel=True, workers=workers)

        start = time.time()
        first = solver.first()
        elapsed = time.time() - start

        assert first == expected, "Parallel first solution must match the sequential one"
        assert elapsed < 2.0, f"first() took {elapsed:.2f}s with {workers} workers"
        assert solver.stats.nodes_visited < 50_000, \
            f"Workers kept searching: {solver.stats.nodes_visited} nodes"
        assert threading.active_count() == threads_before, \
            "Worker threads must be joined when the stream closes"

        limited = create_solver(request, parallel=True, workers=workers, max_solutions=3)
        assert len(list(limited.solve())) == 3
        assert threading.active_count() == threads_before

    print("✅ Parallel early stop test passed")


def test_max_solutions():
    from solitude.board import create_request
    from solitude.solver import solve

    request = create_request(3, 3, pieces=['King', 'King', 'Rook'])
    everything = list(solve(request))

    assert list(solve(request, max_solutions=2)) == everything[:2]
    assert list(solve(request, max_solutions=2, parallel=True)) == everything[:2]
    assert list(solve(request, max_solutions=100)) == everything

    print("✅ max_solutions test passed")


def test_seed_validation():
    """Pinned pieces that attack each other are rejected before searching."""
    import pytest
    from solitude.board import create_request, PlacementRequest, Board
    from solitude.errors import InvalidSeedError
    from solitude.solver import create_solver

    with pytest.raises(InvalidSeedError):
        create_request(3, 3, [('Rook', (0, 0)), ('Rook', (0, 2))])

    # A request built directly is checked when the solver is created
    seed = Board(3, 3, [('Queen', (0, 0)), ('Knight', (2, 2))])
    request = PlacementRequest(3, 3, (), seed)
    with pytest.raises(InvalidSeedError):
        create_solver(request)

    print("✅ Seed validation test passed")


def run_all_tests():
    """Run all tests"""
    print("\n" + "="*60)
    print("Running Implementation Tests")
    print("Checked against a brute-force oracle")
    print("="*60 + "\n")

    test_two_pawns_2x2()
    test_two_kings_one_rook_3x3()
    test_rooks_and_knights_4x4()
    test_mixed_pieces_match_brute_force()
    test_solutions_are_valid()
    test_pinned_pieces_match_brute_force()
    test_two_kings_2x2_has_no_solution()
    test_more_pieces_than_squares()
    test_bishop_diagonal()
    test_deterministic_order()
    test_parallel_matches_sequential()
    test_early_termination()
    test_early_termination_skips_remaining_search()
    test_parallel_first_stops_workers()
    test_max_solutions()
    test_seed_validation()

    print("\n" + "="*60)
    print("✅ All tests passed!")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
