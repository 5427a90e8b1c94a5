"""ASCII rendering of the board with a roll's destinations or a route marked."""

from typing import Optional

from .board import BOARD, BoardTopology, Position, is_cell
from .navigator import AvailableMoves, Path
from .occupancy import Occupancy


def _grid(topology: BoardTopology, layout: str) -> list[list[str]]:
    lines = layout.splitlines()
    grid = [[" "] * topology.width for _ in range(topology.height)]
    for row, line in enumerate(lines[: topology.height]):
        for col, ch in enumerate(line[: topology.width]):
            grid[row][col] = ch
    return grid


def _format(grid: list[list[str]]) -> list[str]:
    header = "   " + "".join(f"{i % 10}" for i in range(len(grid[0]) if grid else 0))
    return [header] + [f"{i:2} " + "".join(row) for i, row in enumerate(grid)]


def _mark_tokens(grid: list[list[str]], occupancy: Optional[Occupancy]):
    for cell in (occupancy.occupied_cells() if occupancy is not None else ()):
        grid[cell.y][cell.x] = "X"


def render_moves(
    topology: BoardTopology,
    start: Position,
    moves: AvailableMoves,
    occupancy: Optional[Occupancy] = None,
    layout: str = BOARD,
) -> str:
    """Board with ``*`` on every destination cell, ``X`` on tokens and ``@`` at the start."""
    grid = _grid(topology, layout)
    _mark_tokens(grid, occupancy)
    for cell in moves.cells:
        grid[cell.y][cell.x] = "*"
    if is_cell(start):
        grid[start.y][start.x] = "@"

    lines = _format(grid)
    lines.append(f"  Cells: {len(moves.cells)}")
    if moves.rooms:
        lines.append(f"  Rooms: {', '.join(sorted(moves.rooms))}")
    if moves.passages:
        lines.append(f"  Secret passage: {', '.join(sorted(moves.passages))}")
    return "\n".join(lines)


def render_route(
    topology: BoardTopology,
    path: Optional[Path],
    occupancy: Optional[Occupancy] = None,
    layout: str = BOARD,
) -> str:
    """Board with the cells of ``path`` numbered by step (mod 10)."""
    grid = _grid(topology, layout)
    _mark_tokens(grid, occupancy)
    lines = []
    if path is None:
        lines.append("  No route")
    else:
        for step, position in enumerate(path):
            if is_cell(position):
                grid[position.y][position.x] = str(step % 10)
        lines.append("  Route: " + " -> ".join(
            p.label() if is_cell(p) else p for p in path
        ))
    return "\n".join(_format(grid) + lines)
