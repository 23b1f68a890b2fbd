"""
Solitude - Non-Attacking Chess Piece Placement Solver

This package enumerates every way to place a multiset of chess pieces on a
rectangular board so that no piece attacks another, using lazy backtracking
search.

Modules:
    - errors: Exception types for invalid boards and seeds
    - pieces: Piece types and board squares
    - interfaces: Abstract base classes for Board and Solver
    - utils: Attack rules, constraint checking and feasibility checks
    - board: Immutable board and placement requests
    - solver: Sequential and thread-pool backtracking solvers
    - formats: JSON, plain-text and numpy representations
    - config: Configuration management
    - visualize: Board diagrams, heatmaps and result saving
"""

from .errors import InvalidBoardError, InvalidSeedError
from .pieces import PieceType, Square
from .interfaces import BoardInterface, SolverInterface
from .utils import attacks, attacked_squares, is_consistent, count_attacking_pairs, check_feasibility
from .board import Board, PlacementRequest, create_request
from .solver import BacktrackingSolver, ParallelSolver, SearchStats, create_solver, solve, solve_many
from .formats import (
    board_to_dict,
    board_from_dict,
    board_to_json,
    board_from_json,
    board_to_text,
    board_from_text,
    board_to_array,
    save_solutions,
    load_solutions,
)
from .config import Config
from .visualize import (
    visualize_board,
    plot_square_frequency,
    save_run_results,
    create_run_output_folder,
)

__all__ = [
    'InvalidBoardError',
    'InvalidSeedError',
    'PieceType',
    'Square',
    'BoardInterface',
    'SolverInterface',
    'attacks',
    'attacked_squares',
    'is_consistent',
    'count_attacking_pairs',
    'check_feasibility',
    'Board',
    'PlacementRequest',
    'create_request',
    'BacktrackingSolver',
    'ParallelSolver',
    'SearchStats',
    'create_solver',
    'solve',
    'solve_many',
    'board_to_dict',
    'board_from_dict',
    'board_to_json',
    'board_from_json',
    'board_to_text',
    'board_from_text',
    'board_to_array',
    'save_solutions',
    'load_solutions',
    'Config',
    'visualize_board',
    'plot_square_frequency',
    'save_run_results',
    'create_run_output_folder',
]
