"""
Piece types and board coordinates.

PieceType declaration order is the fixed ordering over distinct piece types:
the search places pawns first, then knights, bishops, rooks, kings, queens.
"""

import numbers
from enum import Enum
from typing import NamedTuple, Tuple, Union

from .errors import InvalidBoardError


class PieceType(Enum):
    """Chess piece kinds known to the attack-rule table."""
    PAWN = "Pawn"
    KNIGHT = "Knight"
    BISHOP = "Bishop"
    ROOK = "Rook"
    KING = "King"
    QUEEN = "Queen"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def order(self) -> int:
        """Position of this type in the fixed type ordering."""
        return _ORDER[self]

    @classmethod
    def parse(cls, text: Union[str, 'PieceType']) -> 'PieceType':
        """
        Resolve a piece from its name or one-letter symbol.

        Args:
            text: 'Bishop', 'bishop', 'B' or a PieceType

        Returns:
            Matching PieceType.
        """
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise InvalidBoardError(f"Unknown piece: {text!r}")
        key = text.strip()
        for piece in cls:
            if key.lower() == piece.value.lower() or key.upper() == piece.symbol:
                return piece
        raise InvalidBoardError(
            f"Unknown piece: {text!r}. Valid options: {[p.value for p in cls]}"
        )

    def __str__(self) -> str:
        return self.value


_SYMBOLS = {
    PieceType.PAWN: 'P',
    PieceType.KNIGHT: 'N',
    PieceType.BISHOP: 'B',
    PieceType.ROOK: 'R',
    PieceType.KING: 'K',
    PieceType.QUEEN: 'Q',
}

_ORDER = {piece: index for index, piece in enumerate(PieceType)}


class Square(NamedTuple):
    """Zero-based (row, column) coordinate; sorts row-major."""
    row: int
    column: int


def as_square(value: Union[Square, Tuple[int, int]]) -> Square:
    """Coerce a (row, column) pair into a Square."""
    if isinstance(value, Square):
        return value
    try:
        row, column = value
    except (TypeError, ValueError):
        raise InvalidBoardError(f"Square must be a (row, column) pair, got {value!r}")
    if not _is_int(row) or not _is_int(column):
        raise InvalidBoardError(f"Square coordinates must be integers, got {value!r}")
    return Square(int(row), int(column))


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)
