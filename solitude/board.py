"""
Board model and placement requests.

This module provides:
- Board: immutable W×H grid with pieces on some squares
- PlacementRequest: dimensions, pieces to place and an optional pinned seed
- create_request: validated construction of a PlacementRequest
"""

import numbers
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import InvalidBoardError, InvalidSeedError
from .interfaces import BoardInterface
from .pieces import PieceType, Square, as_square
from .utils import attacking_pairs


PieceLike = Union[PieceType, str]
SquareLike = Union[Square, Tuple[int, int]]


def _check_dimension(name: str, value) -> int:
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        raise InvalidBoardError(f"Board {name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidBoardError(f"Board {name} must be positive, got {value}")
    return int(value)


class Board(BoardInterface):
    """
    Immutable board with pieces on some of its squares.

    Rows run over [0, height) and columns over [0, width). Two boards are
    equal when they have the same dimensions and the same square -> piece
    mapping, whatever order they were built in.

    Attributes:
        _width: Number of columns
        _height: Number of rows
        _cells: Read-only mapping from Square to PieceType
        _items: Occupied (square, piece) pairs sorted by square
    """

    __slots__ = ('_width', '_height', '_cells', '_items', '_hash')

    def __init__(
        self,
        width: int,
        height: int,
        pieces: Optional[Union[Mapping[SquareLike, PieceLike],
                               Iterable[Tuple[PieceLike, SquareLike]]]] = None
    ):
        """
        Build a board and validate its contents.

        Args:
            width: Number of columns (> 0)
            height: Number of rows (> 0)
            pieces: Mapping square -> piece, or iterable of (piece, square) pairs
        """
        self._width = _check_dimension('width', width)
        self._height = _check_dimension('height', height)

        if pieces is None:
            pairs = []
        elif isinstance(pieces, Mapping):
            pairs = [(piece, square) for square, piece in pieces.items()]
        else:
            pairs = list(pieces)

        cells: Dict[Square, PieceType] = {}
        for pair in pairs:
            try:
                piece, square = pair
            except (TypeError, ValueError):
                raise InvalidBoardError(f"Expected a (piece, square) pair, got {pair!r}")
            piece = PieceType.parse(piece)
            square = as_square(square)
            if not self.in_bounds(square):
                raise InvalidBoardError(
                    f"Square {tuple(square)} is outside the "
                    f"{self._width}×{self._height} board"
                )
            if square in cells:
                raise InvalidBoardError(f"Square {tuple(square)} is occupied twice")
            cells[square] = piece

        self._set_cells(cells)

    def _set_cells(self, cells: Dict[Square, PieceType]) -> None:
        self._cells = MappingProxyType(cells)
        self._items = tuple(sorted(cells.items()))
        self._hash = None

    @classmethod
    def _from_trusted(cls, width: int, height: int, cells: Dict[Square, PieceType]) -> 'Board':
        """Build a board from already validated cells (used by place)."""
        board = cls.__new__(cls)
        board._width = width
        board._height = height
        board._set_cells(cells)
        return board

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), matching numpy row-major layout."""
        return (self._height, self._width)

    def in_bounds(self, square: SquareLike) -> bool:
        row, column = square
        return 0 <= row < self._height and 0 <= column < self._width

    def is_occupied(self, square: SquareLike) -> bool:
        return square in self._cells

    def piece_at(self, square: SquareLike) -> Optional[PieceType]:
        return self._cells.get(square)

    def occupied_squares(self) -> List[Square]:
        return [square for square, _ in self._items]

    def items(self) -> Tuple[Tuple[Square, PieceType], ...]:
        """Occupied (square, piece) pairs in (row, column) ascending order."""
        return self._items

    def squares(self) -> List[Square]:
        """Every square of the board in (row, column) ascending order."""
        return [Square(row, column)
                for row in range(self._height)
                for column in range(self._width)]

    def piece_counts(self) -> Counter:
        return Counter(self._cells.values())

    def place(self, piece: PieceLike, square: SquareLike) -> 'Board':
        piece = PieceType.parse(piece)
        square = as_square(square)
        if not self.in_bounds(square):
            raise InvalidBoardError(
                f"Square {tuple(square)} is outside the {self._width}×{self._height} board"
            )
        if square in self._cells:
            raise InvalidBoardError(f"Square {tuple(square)} is already occupied")
        cells = dict(self._cells)
        cells[square] = piece
        return Board._from_trusted(self._width, self._height, cells)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, square) -> bool:
        return square in self._cells

    def __iter__(self) -> Iterator[Square]:
        return iter(self.occupied_squares())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (self._width == other._width
                and self._height == other._height
                and self._items == other._items)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self._width, self._height, self._items))
        return self._hash

    def __repr__(self) -> str:
        pieces = ', '.join(f"{piece.value}@({sq.row},{sq.column})" for sq, piece in self._items)
        return f"Board({self._width}x{self._height}: {pieces})"

    def __str__(self) -> str:
        rows = []
        for row in range(self._height):
            cells = []
            for column in range(self._width):
                piece = self._cells.get(Square(row, column))
                cells.append(piece.symbol if piece else '.')
            rows.append(' '.join(cells))
        return '\n'.join(rows)


def _sort_pieces(pieces: Iterable[PieceLike]) -> Tuple[PieceType, ...]:
    return tuple(sorted((PieceType.parse(p) for p in pieces), key=lambda p: p.order))


@dataclass(frozen=True)
class PlacementRequest:
    """
    Everything the search engine needs to know.

    Attributes:
        width: Number of columns
        height: Number of rows
        pieces: Pieces still to place, sorted in the fixed type order
        seed: Board holding the pinned pieces (empty when nothing is pinned)
    """
    width: int
    height: int
    pieces: Tuple[PieceType, ...] = ()
    seed: Optional[Board] = None

    def __post_init__(self):
        _check_dimension('width', self.width)
        _check_dimension('height', self.height)
        object.__setattr__(self, 'pieces', _sort_pieces(self.pieces))
        seed = self.seed if self.seed is not None else Board(self.width, self.height)
        if (seed.width, seed.height) != (self.width, self.height):
            raise InvalidBoardError(
                f"Seed board is {seed.width}×{seed.height}, "
                f"request is {self.width}×{self.height}"
            )
        object.__setattr__(self, 'seed', seed)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def piece_count(self) -> int:
        """Total number of pieces on a solution board (pinned + placed)."""
        return len(self.pieces) + len(self.seed)

    def validate_seed(self) -> None:
        """Raise InvalidSeedError if pinned pieces attack each other."""
        pairs = attacking_pairs(self.seed)
        if pairs:
            described = ', '.join(f"{tuple(a)}-{tuple(b)}" for a, b in pairs)
            raise InvalidSeedError(f"Pinned pieces attack each other: {described}")

    @classmethod
    def from_board(cls, board: Board, pinned: bool = False) -> 'PlacementRequest':
        """
        Derive a request from a board.

        Args:
            board: Board listing the pieces
            pinned: Keep the pieces on their squares as a seed; otherwise only
                the piece types are used and every square is free

        Returns:
            PlacementRequest instance.
        """
        if pinned:
            request = cls(board.width, board.height, (), board)
            request.validate_seed()
            return request
        pieces = [piece for _, piece in board.items()]
        return cls(board.width, board.height, tuple(pieces))


def create_request(
    width: int,
    height: int,
    pairs: Iterable[Tuple[PieceLike, SquareLike]] = (),
    pieces: Iterable[PieceLike] = ()
) -> PlacementRequest:
    """
    Build and validate a placement request.

    Args:
        width: Number of columns
        height: Number of rows
        pairs: (piece, square) pins forming the seed placement
        pieces: Piece types to place by search

    Returns:
        Validated PlacementRequest.

    Raises:
        InvalidBoardError: bad dimensions, squares out of bounds or colliding
        InvalidSeedError: pinned pieces attack each other
    """
    seed = Board(width, height, list(pairs))
    request = PlacementRequest(seed.width, seed.height, tuple(pieces), seed)
    request.validate_seed()
    return request
