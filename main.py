"""
Main entry point for the non-attacking piece placement solver.

This script provides a config-driven interface to enumerate placements for
one request or a batch of requests, with either the sequential or the
thread-pool solver.

Usage:
    python main.py --config config.yaml
    python main.py --width 3 --height 3 --pieces King King Rook
    python main.py --width 4 --height 4 --pieces Rook Rook Knight Knight Knight Knight --parallel
"""

import argparse
import sys
import time
from typing import List, Tuple

import yaml

from solitude.board import Board, PlacementRequest
from solitude.config import Config
from solitude.errors import InvalidBoardError
from solitude.solver import SearchStats, create_solver
from solitude.utils import check_feasibility
from solitude.visualize import (
    visualize_board,
    plot_square_frequency,
    save_run_results,
)


# =============================================================================
# Runner Classes
# =============================================================================

class SolverRunner:
    """
    Orchestrates solver execution based on configuration.
    """

    def __init__(self, config: Config):
        """
        Initialize runner with configuration.

        Args:
            config: Configuration instance
        """
        self.config = config

    def run_single(self, request: PlacementRequest) -> Tuple[List[Board], SearchStats, float]:
        """
        Solve one request.

        Args:
            request: Validated PlacementRequest

        Returns:
            Tuple of (solutions, search_stats, elapsed_seconds)
        """
        solver = create_solver(
            request,
            parallel=self.config.parallel,
            max_solutions=self.config.solution_limit,
            workers=self.config.worker_count if self.config.parallel else None,
            verbose=self.config.verbose,
        )

        start = time.time()
        solutions = list(solver.solve())
        elapsed = time.time() - start

        return solutions, solver.stats, elapsed

    def run(self) -> List[dict]:
        """
        Execute the solver for every request in the configuration.

        Returns:
            List with one result dict per request
        """
        requests = self.config.to_requests()
        all_results = []

        for index, request in enumerate(requests):
            print(f"\n{'#'*60}")
            if len(requests) > 1:
                print(f"# Request {index + 1}/{len(requests)}: {request.width}×{request.height} Board")
            else:
                print(f"# {request.width}×{request.height} Board")
            print(f"{'#'*60}")

            feasibility = check_feasibility(request)
            self._print_feasibility(feasibility)

            solutions, stats, elapsed = self.run_single(request)
            result = {
                'request': request,
                'solutions': solutions,
                'stats': stats,
                'elapsed': elapsed,
                'feasibility': feasibility,
            }
            all_results.append(result)

            self._print_request_summary(result)

        return all_results

    def _print_feasibility(self, info: dict) -> None:
        """Print feasibility information."""
        print(f"\nFeasibility Check for {info['width']}×{info['height']}:")
        print(f"  Squares: {info['squares']}, Pinned: {info['pinned']}, To place: {info['pieces']}")
        print(f"  Density: {info['density']:.1%}")

        if info['feasible']:
            print(f"  ✓ Pieces fit on the {info['free_squares']} free squares")
        else:
            print(f"  ✗ INFEASIBLE: {info['pieces']} pieces, only {info['free_squares']} free squares")
        print()

    def _print_request_summary(self, result: dict) -> None:
        """Print summary for one request."""
        solutions = result['solutions']
        stats = result['stats']
        print(f"{'='*60}")
        print(f"Solutions: {len(solutions)}"
              + (" (limit reached)" if self.config.solution_limit == len(solutions) else ""))
        print(f"Time: {result['elapsed']:.3f}s, Nodes visited: {stats.nodes_visited:,}")
        if solutions and self.config.verbose:
            print("First solution:")
            print(solutions[0])
        print(f"{'='*60}")


# =============================================================================
# CLI Interface
# =============================================================================

def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Non-attacking chess piece placement solver',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Config file
    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config.yaml',
        help='Path to YAML configuration file'
    )

    # Override options
    parser.add_argument(
        '--width', '-W',
        type=int,
        help='Board width (overrides config)'
    )

    parser.add_argument(
        '--height', '-H',
        type=int,
        help='Board height (overrides config)'
    )

    parser.add_argument(
        '--pieces', '-p',
        type=str,
        nargs='+',
        help='Pieces to place, e.g. King King Rook (overrides config)'
    )

    parser.add_argument(
        '--max-solutions', '-m',
        type=int,
        help='Stop after this many solutions, 0 for all (overrides config)'
    )

    parser.add_argument(
        '--parallel',
        action='store_true',
        help='Use the thread-pool solver'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='Thread pool size for --parallel (overrides config)'
    )

    parser.add_argument(
        '--mode',
        type=str,
        choices=['single', 'batch'],
        help='Execution mode (overrides config)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--save',
        action='store_true',
        help='Save plots alongside the solution files'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        help='Output directory for saved results'
    )

    parser.add_argument(
        '--show',
        action='store_true',
        help='Show plots interactively'
    )

    return parser.parse_args(argv)


def load_config_with_overrides(args: argparse.Namespace) -> Config:
    """
    Load configuration from file and apply CLI overrides.

    Args:
        args: Parsed command line arguments

    Returns:
        Configuration with overrides applied
    """
    try:
        config = Config.from_yaml(args.config)
    except FileNotFoundError:
        print(f"Warning: Config file '{args.config}' not found, using defaults")
        config = Config()
    except (OSError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    # Apply CLI overrides
    if args.width:
        config.width = args.width
    if args.height:
        config.height = args.height
    if args.pieces:
        config.pieces = args.pieces
    if args.max_solutions is not None:
        config.max_solutions = args.max_solutions
    if args.parallel:
        config.parallel = True
    if args.workers is not None:
        config.workers = args.workers
    if args.mode:
        config.mode = args.mode
    if args.verbose:
        config.verbose = True
    if args.save:
        config.save = True
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.show:
        config.show = True

    return config


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    config = load_config_with_overrides(args)

    # Validate
    errors = config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    # Print configuration
    config.print_summary()

    # Run solver
    runner = SolverRunner(config)
    try:
        results = runner.run()
    except InvalidBoardError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Final summary
    print(f"\n{'#'*60}")
    print("# Final Results")
    print(f"{'#'*60}")

    for index, result in enumerate(results):
        request = result['request']
        count = len(result['solutions'])
        status = f"✓ {count} solutions" if count else "✗ No solutions"
        print(f"Request {index + 1} ({request.width}×{request.height}, "
              f"{request.piece_count} pieces): {status}")

    # Always save results to timestamped folders
    print(f"\n{'#'*60}")
    print("# Saving Results")
    print(f"{'#'*60}")

    for index, result in enumerate(results):
        request = result['request']
        solutions = result['solutions']
        metadata = {
            'width': request.width,
            'height': request.height,
            'pieces': [piece.value for piece in request.pieces],
            'max_solutions': config.max_solutions,
            'parallel': config.parallel,
            'workers': config.workers,
            'elapsed': result['elapsed'],
            'search': result['stats'].to_dict(),
        }
        if len(results) > 1:
            metadata['request_index'] = index + 1

        try:
            saved = save_run_results(
                config.output_dir, request, solutions, metadata,
                save_plots=config.save
            )
        except OSError as e:
            print(f"Error saving results: {e}")
            sys.exit(1)
        print(f"Request {index + 1}: Saved to {saved['run_folder']}/")
        print(f"  - solutions.txt, solutions.json")
        print(f"  - metadata.json")
        if config.save and solutions:
            print(f"  - first_solution.png, square_frequency.png")

        if config.show and solutions:
            visualize_board(solutions[0], show=True, metadata={'index': 1})
            plot_square_frequency(solutions, show=True, metadata=metadata)

    print()


if __name__ == "__main__":
    main()
