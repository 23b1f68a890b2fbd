"""
Visualization and result saving for the placement solver.

This module provides:
- Board diagrams with piece letters and attack lines
- Square-occupancy heatmaps across a set of solutions
- Timestamped run folders with solutions, metadata and optional plots
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import List, Dict, Optional, Any
from pathlib import Path
import json
from datetime import datetime

from .board import Board, PlacementRequest
from .formats import board_to_dict, save_solutions, square_frequency
from .utils import attacking_pairs, endangered_squares, check_feasibility


def draw_board_grid(ax, width: int, height: int) -> None:
    """Draw checkered squares; row 0 is the top row."""
    for row in range(height):
        for column in range(width):
            shade = '#f0d9b5' if (row + column) % 2 == 0 else '#b58863'
            ax.add_patch(plt.Rectangle(
                (column, height - 1 - row), 1, 1,
                facecolor=shade, edgecolor='black', linewidth=0.5
            ))


def draw_attack_lines(ax, board: Board, pairs: List) -> None:
    """Draw lines between attacking piece pairs."""
    height = board.height
    for a, b in pairs:
        ax.plot(
            [a.column + 0.5, b.column + 0.5],
            [height - 1 - a.row + 0.5, height - 1 - b.row + 0.5],
            color='red', linewidth=1.5, alpha=0.6, linestyle='--'
        )


def visualize_board(
    board: Board,
    filename: Optional[str] = None,
    show: bool = False,
    metadata: Optional[Dict] = None
) -> Optional[str]:
    """
    Draw a board with its pieces.

    Features:
    - Checkered grid, row 0 at the top
    - Piece letters (P, N, B, R, K, Q) on occupied squares
    - Red squares and dashed lines for pieces that attack each other

    Args:
        board: Board to draw
        filename: Optional path to save the figure
        show: Whether to display the plot
        metadata: Optional dict with run parameters

    Returns:
        Filename if saved, None otherwise
    """
    width, height = board.width, board.height
    pairs = attacking_pairs(board)
    endangered = endangered_squares(board)

    fig, ax = plt.subplots(figsize=(max(4, width * 1.2), max(4, height * 1.2)))
    draw_board_grid(ax, width, height)

    for square, piece in board.items():
        x, y = square.column, height - 1 - square.row
        if square in endangered:
            ax.add_patch(plt.Rectangle((x, y), 1, 1, facecolor='tomato', alpha=0.7))
        ax.text(x + 0.5, y + 0.5, piece.symbol, ha='center', va='center',
                fontsize=20, fontweight='bold', color='black')

    if len(pairs) <= 50:
        draw_attack_lines(ax, board, pairs)

    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_aspect('equal')
    ax.set_xticks(np.arange(width) + 0.5)
    ax.set_yticks(np.arange(height) + 0.5)
    ax.set_xticklabels(np.arange(width))
    ax.set_yticklabels(np.arange(height - 1, -1, -1))
    ax.set_xlabel('column', fontsize=12, fontweight='bold')
    ax.set_ylabel('row', fontsize=12, fontweight='bold')

    status = "Non-attacking" if not pairs else f"{len(pairs)} attacking pairs"
    title = f'{width}×{height} Board | {len(board)} pieces | {status}'
    if metadata and 'index' in metadata:
        title = f"Solution {metadata['index']}\n" + title
    ax.set_title(title, fontsize=13, fontweight='bold')

    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches='tight', facecolor='white')

    if show:
        plt.show()

    plt.close(fig)
    return filename


def plot_square_frequency(
    solutions: List[Board],
    filename: Optional[str] = None,
    show: bool = False,
    metadata: Optional[Dict] = None
) -> Optional[str]:
    """
    Heatmap of how often each square is occupied across solutions.

    Args:
        solutions: Solution boards of identical dimensions (non-empty)
        filename: Optional path to save the figure
        show: Whether to display the plot
        metadata: Optional dict with run parameters

    Returns:
        Filename if saved, None otherwise
    """
    if not solutions:
        raise ValueError("Cannot plot square frequency without solutions")
    frequency = square_frequency(solutions)
    height, width = frequency.shape

    fig, ax = plt.subplots(figsize=(max(5, width * 1.2), max(4, height * 1.2)))
    image = ax.imshow(frequency, cmap='viridis', vmin=0.0, vmax=1.0)

    for row in range(height):
        for column in range(width):
            ax.text(column, row, f'{frequency[row, column]:.2f}', ha='center', va='center',
                    fontsize=10, color='white', fontweight='bold')

    ax.set_xticks(np.arange(width))
    ax.set_yticks(np.arange(height))
    ax.set_xlabel('column', fontsize=12, fontweight='bold')
    ax.set_ylabel('row', fontsize=12, fontweight='bold')

    title = f'Square Occupancy over {len(solutions)} Solutions'
    if metadata:
        subtitle_parts = []
        if 'width' in metadata and 'height' in metadata:
            subtitle_parts.append(f"{metadata['width']}×{metadata['height']}")
        if 'pieces' in metadata:
            subtitle_parts.append(', '.join(metadata['pieces']))
        if subtitle_parts:
            title += '\n' + ' | '.join(subtitle_parts)
    ax.set_title(title, fontsize=13, fontweight='bold')

    cbar = plt.colorbar(image, ax=ax, orientation='vertical', pad=0.02, fraction=0.046)
    cbar.set_label('fraction of solutions', fontsize=11, fontweight='bold')

    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches='tight')

    if show:
        plt.show()

    plt.close(fig)
    return filename


def create_run_output_folder(
    base_output_dir: str,
    width: int,
    height: int
) -> str:
    """
    Create a timestamped output folder for a run.

    Structure: base_output_dir/{width}x{height}/run_{datetime}/

    Args:
        base_output_dir: Base output directory
        width: Board width
        height: Board height

    Returns:
        Path to created folder
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    run_folder = Path(base_output_dir) / f"{width}x{height}" / f"run_{timestamp}"
    run_folder.mkdir(parents=True, exist_ok=True)
    return str(run_folder)


def _to_json_value(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    return value


def save_run_results(
    output_dir: str,
    request: PlacementRequest,
    solutions: List[Board],
    metadata: Dict,
    save_plots: bool = True
) -> Dict[str, str]:
    """
    Save all results for a single request to a timestamped folder.

    Creates: output_dir/{W}x{H}/run_{datetime}/

    Always saves:
    - solutions.txt: Plain-text boards separated by blank lines
    - solutions.json: List of board documents
    - metadata.json: Run parameters, feasibility and search statistics

    Optionally saves:
    - first_solution.png: Diagram of the first solution
    - square_frequency.png: Occupancy heatmap

    Args:
        output_dir: Base output directory
        request: The solved PlacementRequest
        solutions: Solution boards in emission order
        metadata: Dict with run parameters and statistics
        save_plots: Whether to save visualization plots

    Returns:
        Dict mapping result type to filename
    """
    run_folder = create_run_output_folder(output_dir, request.width, request.height)
    run_path = Path(run_folder)

    saved_files = {'run_folder': run_folder}

    solutions_txt = run_path / "solutions.txt"
    save_solutions(solutions, solutions_txt)
    saved_files['solutions_txt'] = str(solutions_txt)

    solutions_json = run_path / "solutions.json"
    with open(solutions_json, 'w') as f:
        json.dump([board_to_dict(board) for board in solutions], f, indent=2)
    saved_files['solutions_json'] = str(solutions_json)

    json_metadata = {k: _to_json_value(v) for k, v in metadata.items()}
    json_metadata['feasibility'] = check_feasibility(request)
    json_metadata['pieces_to_place'] = [piece.value for piece in request.pieces]
    json_metadata['seed'] = board_to_dict(request.seed)['pieces']
    json_metadata['solution_count'] = len(solutions)
    json_metadata['timestamp'] = datetime.now().isoformat()

    json_file = run_path / "metadata.json"
    with open(json_file, 'w') as f:
        json.dump(json_metadata, f, indent=2)
    saved_files['metadata'] = str(json_file)

    if save_plots and solutions:
        board_file = run_path / "first_solution.png"
        visualize_board(solutions[0], filename=str(board_file), metadata={'index': 1})
        saved_files['first_solution_png'] = str(board_file)

        frequency_file = run_path / "square_frequency.png"
        plot_square_frequency(solutions, filename=str(frequency_file), metadata=json_metadata)
        saved_files['square_frequency_png'] = str(frequency_file)

    return saved_files
