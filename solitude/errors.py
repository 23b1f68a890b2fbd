"""
Exceptions raised while building boards and placement requests.
"""


class InvalidBoardError(ValueError):
    """Malformed dimensions, out-of-bounds or duplicate squares, unknown pieces."""


class InvalidSeedError(InvalidBoardError):
    """Pinned pieces of a seed placement already attack each other."""
