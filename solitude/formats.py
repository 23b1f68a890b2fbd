"""
Interchange formats for boards and solutions.

This module provides:
- JSON documents: {"width", "height", "pieces": [{"piece", "row", "column"}]}
- Plain-text board format: "W,H" header, then one "Piece,row,column" line per
  piece (no comments, no other headers)
- Solution files: text boards separated by blank lines
- numpy occupancy grids for plotting and statistics

Decoding a previously encoded board always yields a board equal to the
original.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np

from .board import Board
from .errors import InvalidBoardError
from .pieces import PieceType


# =============================================================================
# Dictionary / JSON
# =============================================================================

def board_to_dict(board: Board) -> Dict[str, Any]:
    """
    Convert a board into a JSON-serialisable dictionary.

    Pieces are listed in (row, column) order so equal boards always encode
    identically.
    """
    return {
        'width': board.width,
        'height': board.height,
        'pieces': [
            {'piece': piece.value, 'row': square.row, 'column': square.column}
            for square, piece in board.items()
        ],
    }


def board_from_dict(data: Dict[str, Any]) -> Board:
    """
    Rebuild a board from board_to_dict output.

    Raises:
        InvalidBoardError: missing keys or invalid board contents
    """
    if not isinstance(data, dict):
        raise InvalidBoardError(f"Board document must be an object, got {type(data).__name__}")
    try:
        width = data['width']
        height = data['height']
        entries = data.get('pieces', [])
        pairs = [(entry['piece'], (entry['row'], entry['column'])) for entry in entries]
    except (KeyError, TypeError) as e:
        raise InvalidBoardError(f"Malformed board document: {e}")
    return Board(width, height, pairs)


def board_to_json(board: Board, indent: Optional[int] = None) -> str:
    return json.dumps(board_to_dict(board), indent=indent)


def board_from_json(text: str) -> Board:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidBoardError(f"Invalid board JSON: {e}")
    return board_from_dict(data)


# =============================================================================
# Plain Text
# =============================================================================

def board_to_text(board: Board) -> str:
    """
    Encode a board in the plain-text format.

    Format:
        W,H
        Piece,row,column
        ...
    """
    lines = [f"{board.width},{board.height}"]
    for square, piece in board.items():
        lines.append(f"{piece.value},{square.row},{square.column}")
    return '\n'.join(lines) + '\n'


def board_from_text(text: str) -> Board:
    """Decode the plain-text format written by board_to_text."""
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if not lines:
        raise InvalidBoardError("Empty board text")

    header = lines[0].split(',')
    if len(header) != 2:
        raise InvalidBoardError(f"Board header must be 'W,H', got {lines[0]!r}")
    width, height = _parse_ints(header, lines[0])

    pairs = []
    for line in lines[1:]:
        fields = line.split(',')
        if len(fields) != 3:
            raise InvalidBoardError(f"Piece line must be 'Piece,row,column', got {line!r}")
        row, column = _parse_ints(fields[1:], line)
        pairs.append((PieceType.parse(fields[0]), (row, column)))

    return Board(width, height, pairs)


def _parse_ints(fields: List[str], line: str) -> List[int]:
    try:
        return [int(f.strip()) for f in fields]
    except ValueError:
        raise InvalidBoardError(f"Expected integers in {line!r}")


def save_solutions(solutions: Iterable[Board], filename: Union[str, Path]) -> str:
    """
    Write solutions to a text file, one board block per solution.

    Args:
        solutions: Boards to write
        filename: Path to save the file

    Returns:
        Path to saved file
    """
    with open(filename, 'w') as f:
        f.write('\n'.join(board_to_text(board) for board in solutions))
    return str(filename)


def load_solutions(filename: Union[str, Path]) -> List[Board]:
    """Read a file written by save_solutions."""
    with open(filename, 'r') as f:
        content = f.read()
    blocks = [block for block in content.split('\n\n') if block.strip()]
    return [board_from_text(block) for block in blocks]


# =============================================================================
# numpy
# =============================================================================

EMPTY = -1


def board_to_array(board: Board) -> np.ndarray:
    """
    Occupancy grid of shape (height, width).

    Empty squares hold -1; occupied squares hold the piece's type order
    (PieceType.order).
    """
    grid = np.full(board.shape, EMPTY, dtype=int)
    for square, piece in board.items():
        grid[square.row, square.column] = piece.order
    return grid


def square_frequency(solutions: Iterable[Board]) -> np.ndarray:
    """
    Fraction of solutions occupying each square.

    Args:
        solutions: Boards of identical dimensions

    Returns:
        Float array of shape (height, width); an empty array when there are
        no solutions.
    """
    total = None
    count = 0
    for board in solutions:
        occupied = board_to_array(board) != EMPTY
        total = occupied.astype(float) if total is None else total + occupied
        count += 1
    if total is None:
        return np.zeros((0, 0))
    return total / count
