"""
Configuration management for the placement solver.

This module provides a clean interface for loading and validating
configuration from YAML files and turning it into placement requests.
"""

import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .board import PlacementRequest, create_request
from .errors import InvalidBoardError
from .pieces import PieceType


@dataclass
class Config:
    """
    Configuration container for the placement solver.

    Attributes:
        width: Board width (columns)
        height: Board height (rows)
        pieces: Piece names to place by search
        seed: Pinned pieces as {piece, row, column} dicts
        max_solutions: Stop after this many solutions (0 for all)
        parallel: Whether to use the thread-pool solver
        workers: Thread pool size (0 lets the executor decide)
        mode: Execution mode ('single' or 'batch')
        requests: Request dicts for batch mode (width, height, pieces, seed)
        verbose: Whether the solver prints its own progress report
        show: Whether to show plots
        save: Whether to save plots
        output_dir: Directory to save results
    """

    # Board configuration
    width: int = 3
    height: int = 3
    pieces: List[str] = field(default_factory=lambda: ['King', 'King', 'Rook'])
    seed: List[Dict[str, Any]] = field(default_factory=list)

    # Solver configuration
    max_solutions: int = 0
    parallel: bool = False
    workers: int = 0

    # Execution configuration
    mode: str = 'single'
    requests: List[Dict[str, Any]] = field(default_factory=list)
    verbose: bool = False

    # Visualization and output
    show: bool = False
    save: bool = False
    output_dir: str = 'results'

    @classmethod
    def from_yaml(cls, path: str) -> 'Config':
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """
        Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance
        """
        # Accept a single 'size' for square boards
        size = data.get('size')
        width = data.get('width', size if size is not None else 3)
        height = data.get('height', size if size is not None else 3)

        pieces = data.get('pieces', ['King', 'King', 'Rook'])
        if isinstance(pieces, str):
            pieces = [pieces]

        return cls(
            width=width,
            height=height,
            pieces=list(pieces),
            seed=list(data.get('seed', [])),
            max_solutions=data.get('max_solutions', 0),
            parallel=data.get('parallel', False),
            workers=data.get('workers', 0),
            mode=data.get('mode', 'single'),
            requests=list(data.get('requests', [])),
            verbose=data.get('verbose', False),
            show=data.get('show', False),
            save=data.get('save', False),
            output_dir=data.get('output_dir', 'results'),
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            'width': self.width,
            'height': self.height,
            'pieces': self.pieces,
            'seed': self.seed,
            'max_solutions': self.max_solutions,
            'parallel': self.parallel,
            'workers': self.workers,
            'mode': self.mode,
            'requests': self.requests,
            'verbose': self.verbose,
            'show': self.show,
            'save': self.save,
            'output_dir': self.output_dir,
        }

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        # Validate mode first; the board checks depend on it
        valid_modes = ['single', 'batch']
        if self.mode not in valid_modes:
            errors.append(f"Invalid mode '{self.mode}', must be one of {valid_modes}")

        if self.mode == 'batch':
            if not self.requests:
                errors.append("Batch mode needs at least one entry in 'requests'")
            for index, entry in enumerate(self.requests):
                if not isinstance(entry, dict):
                    errors.append(f"Request {index + 1}: must be a mapping, got {entry!r}")
                    continue
                for error in self._request_errors(entry):
                    errors.append(f"Request {index + 1}: {error}")
        else:
            errors.extend(self._request_errors(self._single_entry()))

        # Validate solver settings
        for key in ('max_solutions', 'workers'):
            value = getattr(self, key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"{key} must be an integer >= 0, got {value!r}")
        if isinstance(self.workers, int) and self.workers > 0 and not self.parallel:
            errors.append("workers is only used with parallel: true")

        return errors

    def _single_entry(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'pieces': self.pieces,
            'seed': self.seed,
        }

    @staticmethod
    def _request_errors(entry: Dict[str, Any]) -> List[str]:
        errors = []
        for key in ('width', 'height'):
            value = entry.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(f"Board {key} must be a positive integer, got {value!r}")

        for name in entry.get('pieces', []) or []:
            try:
                PieceType.parse(name)
            except InvalidBoardError as e:
                errors.append(str(e))

        if not errors:
            try:
                _entry_to_request(entry)
            except InvalidBoardError as e:
                errors.append(str(e))
        return errors

    def to_request(self) -> PlacementRequest:
        """Build the validated request described by the single-mode fields."""
        return _entry_to_request(self._single_entry())

    def to_requests(self) -> List[PlacementRequest]:
        """Build every request this configuration describes."""
        if self.mode == 'batch':
            return [_entry_to_request(entry) for entry in self.requests]
        return [self.to_request()]

    @property
    def solution_limit(self) -> Optional[int]:
        """max_solutions as the solver expects it (None for all)."""
        return self.max_solutions or None

    @property
    def worker_count(self) -> Optional[int]:
        return self.workers or None

    def print_summary(self) -> None:
        """Print configuration summary."""
        print("=" * 60)
        print("Configuration Summary")
        print("=" * 60)
        if self.mode == 'batch':
            print(f"Mode: batch ({len(self.requests)} requests)")
        else:
            print(f"Board: {self.width}×{self.height}")
            print(f"Pieces: {', '.join(str(p) for p in self.pieces) or '-'}")
            if self.seed:
                pinned = ', '.join(
                    f"{s.get('piece')}@({s.get('row')},{s.get('column')})" for s in self.seed
                )
                print(f"Pinned: {pinned}")
        print(f"Max solutions: {self.max_solutions if self.max_solutions else 'all'}")
        print(f"Solver: {'parallel' if self.parallel else 'sequential'}"
              + (f" ({self.workers} workers)" if self.parallel and self.workers else ""))
        print(f"Save: {self.save}" + (f" → {self.output_dir}" if self.save else ""))
        print("=" * 60)


def _entry_to_request(entry: Dict[str, Any]) -> PlacementRequest:
    """
    Turn one {width, height, pieces, seed} mapping into a request.

    Raises:
        InvalidBoardError: malformed entries or board contents
        InvalidSeedError: pinned pieces attack each other
    """
    pairs = []
    for pin in entry.get('seed', []) or []:
        try:
            pairs.append((pin['piece'], (pin['row'], pin['column'])))
        except (KeyError, TypeError):
            raise InvalidBoardError(f"Seed entries need piece, row and column, got {pin!r}")
    return create_request(
        entry.get('width'),
        entry.get('height'),
        pairs,
        entry.get('pieces', []) or [],
    )
