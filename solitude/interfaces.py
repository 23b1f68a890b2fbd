"""
Abstract interfaces for Board and Solver classes.

These interfaces define the contract that all implementations must follow,
so the runner and the output helpers can work with any board or solver.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple


class BoardInterface(ABC):
    """
    Abstract interface for board representations.

    A board is a W×H grid of squares, some of which hold a piece.

    Attributes:
        width: Number of columns
        height: Number of rows
        area: Number of squares (width × height)
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Number of columns."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Number of rows."""
        pass

    @property
    def area(self) -> int:
        """Number of squares on the board."""
        return self.width * self.height

    @abstractmethod
    def piece_at(self, square: Tuple[int, int]):
        """
        Get the piece standing on a square.

        Args:
            square: (row, column) pair

        Returns:
            PieceType on that square, or None if it is empty.
        """
        pass

    @abstractmethod
    def occupied_squares(self) -> List[Tuple[int, int]]:
        """
        Get occupied squares in (row, column) ascending order.

        Returns:
            Sorted list of squares holding a piece.
        """
        pass

    @abstractmethod
    def place(self, piece, square: Tuple[int, int]) -> 'BoardInterface':
        """
        Put a piece on an empty square.

        Args:
            piece: PieceType to place
            square: Target (row, column)

        Returns:
            New BoardInterface instance; the receiver is left unchanged.
        """
        pass


class SolverInterface(ABC):
    """
    Abstract interface for placement solvers.

    A solver enumerates every non-attacking placement of a request's pieces.
    The enumeration is lazy: callers pull solutions one at a time and may stop
    whenever they like.
    """

    @abstractmethod
    def solve(self) -> Iterator[BoardInterface]:
        """
        Start a fresh search.

        Returns:
            Iterator over solution boards in deterministic order.
        """
        pass

    @abstractmethod
    def get_request(self):
        """
        Get the placement request this solver works on.

        Returns:
            PlacementRequest instance.
        """
        pass

    def count(self) -> int:
        """Count all solutions by exhausting a fresh stream."""
        return sum(1 for _ in self.solve())

    def first(self) -> Optional[BoardInterface]:
        """First solution, or None if the request is infeasible."""
        stream = self.solve()
        try:
            return next(stream, None)
        finally:
            stream.close()

    def solutions(self, limit: Optional[int] = None) -> List[BoardInterface]:
        """
        Collect solutions into a list.

        Args:
            limit: Maximum number of solutions to collect (None for all)

        Returns:
            List of solution boards.
        """
        result = []
        if limit is not None and limit < 1:
            return result
        stream = self.solve()
        try:
            for board in stream:
                result.append(board)
                if limit is not None and len(result) >= limit:
                    break
        finally:
            stream.close()
        return result
