"""
Utility functions for the placement solver.

This module contains:
- The attack-rule table (offsets and ray directions per piece type)
- Attack-set and single-target attack queries
- The constraint checker used by the search engine
- Attacking-pair counting (ground truth for validation and tests)
- Feasibility summary for a request
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple

from .pieces import PieceType, Square


# =============================================================================
# Attack Rules
# =============================================================================

# Pawns attack towards increasing row numbers.
PAWN_DIRECTION = 1

KING_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)

KNIGHT_OFFSETS = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
)

PAWN_OFFSETS = ((PAWN_DIRECTION, -1), (PAWN_DIRECTION, 1))

ORTHOGONAL_DIRECTIONS = ((-1, 0), (0, -1), (0, 1), (1, 0))
DIAGONAL_DIRECTIONS = ((-1, -1), (-1, 1), (1, -1), (1, 1))


@dataclass(frozen=True)
class AttackRule:
    """
    Movement rule of a piece type.

    Attributes:
        offsets: (d_row, d_column) steps; single jumps for leapers, ray
            directions for sliding pieces
        sliding: Whether the piece repeats its steps until blocked
    """
    offsets: Tuple[Tuple[int, int], ...]
    sliding: bool = False


ATTACK_RULES: Dict[PieceType, AttackRule] = {
    PieceType.PAWN: AttackRule(PAWN_OFFSETS),
    PieceType.KNIGHT: AttackRule(KNIGHT_OFFSETS),
    PieceType.KING: AttackRule(KING_OFFSETS),
    PieceType.BISHOP: AttackRule(DIAGONAL_DIRECTIONS, sliding=True),
    PieceType.ROOK: AttackRule(ORTHOGONAL_DIRECTIONS, sliding=True),
    PieceType.QUEEN: AttackRule(ORTHOGONAL_DIRECTIONS + DIAGONAL_DIRECTIONS, sliding=True),
}


def get_attack_rule(piece: PieceType) -> AttackRule:
    """
    Get the movement rule for a piece type.

    Args:
        piece: Piece type

    Returns:
        AttackRule from the table.
    """
    if piece not in ATTACK_RULES:
        raise ValueError(f"No attack rule for piece: {piece}. "
                         f"Valid options: {[p.value for p in ATTACK_RULES]}")
    return ATTACK_RULES[piece]


# =============================================================================
# Attack Queries
# =============================================================================

def attacked_squares(piece: PieceType, from_square: Square, board) -> FrozenSet[Square]:
    """
    Compute every square a piece attacks from a given square.

    Leapers (King, Knight, Pawn) attack their offsets clamped to the board.
    Sliding pieces (Bishop, Rook, Queen) attack along each ray up to and
    including the first occupied square.

    Args:
        piece: Attacking piece type
        from_square: Square the piece stands on
        board: Board providing dimensions and occupancy

    Returns:
        Frozen set of attacked squares.
    """
    rule = get_attack_rule(piece)
    row, column = from_square
    result = set()

    for d_row, d_column in rule.offsets:
        target = Square(row + d_row, column + d_column)
        if not rule.sliding:
            if board.in_bounds(target):
                result.add(target)
            continue

        while board.in_bounds(target):
            result.add(target)
            if board.is_occupied(target):
                break
            target = Square(target.row + d_row, target.column + d_column)

    return frozenset(result)


def attacks(piece: PieceType, from_square: Square, target: Square, board) -> bool:
    """
    Check whether a piece attacks one target square.

    Equivalent to ``target in attacked_squares(piece, from_square, board)`` but
    only walks the single ray that could reach the target.

    Args:
        piece: Attacking piece type
        from_square: Square the piece stands on
        target: Square being tested
        board: Board providing dimensions and occupancy

    Returns:
        True if target is attacked.
    """
    if not board.in_bounds(target):
        return False

    rule = get_attack_rule(piece)
    d_row = target[0] - from_square[0]
    d_column = target[1] - from_square[1]
    if d_row == 0 and d_column == 0:
        return False

    if not rule.sliding:
        return (d_row, d_column) in rule.offsets

    # Sliders: the target must lie on one of the rule's rays
    if d_row != 0 and d_column != 0 and abs(d_row) != abs(d_column):
        return False
    step = (_sign(d_row), _sign(d_column))
    if step not in rule.offsets:
        return False

    distance = max(abs(d_row), abs(d_column))
    for k in range(1, distance):
        between = Square(from_square[0] + step[0] * k, from_square[1] + step[1] * k)
        if board.is_occupied(between):
            return False
    return True


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


# =============================================================================
# Constraint Checking
# =============================================================================

def is_consistent(board, piece: PieceType, square: Square) -> bool:
    """
    Check whether placing a piece keeps a partial placement non-attacking.

    Both directions are tested for every placed piece, on the board that
    already includes the candidate, because attack sets are not symmetric
    between different piece types. Runs in O(k) for k placed pieces.

    Args:
        board: Current partial placement
        piece: Candidate piece type
        square: Candidate square

    Returns:
        True if the candidate can be placed.
    """
    if not board.in_bounds(square) or board.is_occupied(square):
        return False

    # The candidate only adds occupancy, which can shorten rays between other
    # pieces but never lengthen them, so only pairs with the candidate matter.
    trial = board.place(piece, square)
    for other_square, other_piece in board.items():
        if attacks(other_piece, other_square, square, trial):
            return False
        if attacks(piece, square, other_square, trial):
            return False
    return True


def attacking_pairs(board) -> List[Tuple[Square, Square]]:
    """
    List unordered pairs of occupied squares where either piece attacks the other.

    This is the ground truth used to validate seeds and solutions; it looks at
    the full board occupancy and does not depend on the search engine.

    Args:
        board: Board to inspect

    Returns:
        List of (square_a, square_b) pairs with square_a < square_b.
    """
    items = board.items()
    pairs = []
    for i in range(len(items)):
        square_a, piece_a = items[i]
        attacked_by_a = attacked_squares(piece_a, square_a, board)
        for j in range(i + 1, len(items)):
            square_b, piece_b = items[j]
            if square_b in attacked_by_a or square_a in attacked_squares(piece_b, square_b, board):
                pairs.append((square_a, square_b))
    return pairs


def count_attacking_pairs(board) -> int:
    """
    Count attacking pairs using the naive all-pairs algorithm.

    Args:
        board: Board to inspect

    Returns:
        Number of attacking pairs.
    """
    return len(attacking_pairs(board))


def endangered_squares(board) -> FrozenSet[Square]:
    """Occupied squares taking part in at least one attacking pair."""
    result = set()
    for square_a, square_b in attacking_pairs(board):
        result.add(square_a)
        result.add(square_b)
    return frozenset(result)


# =============================================================================
# Feasibility Check
# =============================================================================

def check_feasibility(request) -> Dict[str, any]:
    """
    Summarise whether a request can possibly have solutions.

    Only the cheap counting bound is checked: the pieces still to place must
    fit on the squares the seed leaves free.

    Args:
        request: PlacementRequest

    Returns:
        Dictionary with feasibility information.
    """
    seed_count = len(request.seed)
    free = request.area - seed_count
    to_place = len(request.pieces)

    return {
        'width': request.width,
        'height': request.height,
        'squares': request.area,
        'pinned': seed_count,
        'free_squares': free,
        'pieces': to_place,
        'density': (seed_count + to_place) / request.area,
        'feasible': to_place <= free,
    }
