#!/usr/bin/env python3
"""Show dice destinations or a route on the classic Clue board.

Usage:
    python scripts/show_moves.py <START> <STEPS>
    python scripts/show_moves.py <START> --room <ROOM>

START is either a room name or a cell given as x,y.

Examples:
    python scripts/show_moves.py 9,24 6
    python scripts/show_moves.py Study 4
    python scripts/show_moves.py 9,24 --room Kitchen --occupied 9,23 10,22
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running from a checkout without installing the package
_backend_dir = str(Path(__file__).resolve().parent.parent / "backend")
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from clue_engine.board import classic_board  # noqa: E402
from clue_engine.display import render_moves, render_route  # noqa: E402
from clue_engine.navigator import GridNavigator  # noqa: E402
from clue_engine.occupancy import Occupancy  # noqa: E402


def _parse_position(text: str):
    if "," in text:
        x, y = text.split(",", 1)
        return (int(x), int(y))
    return text


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render reachable squares or a route on the classic Clue board.",
    )
    parser.add_argument("start", help="Start cell as x,y or a room name")
    parser.add_argument("steps", nargs="?", type=int, help="Dice roll to evaluate")
    parser.add_argument("--room", help="Show the route to this room instead of a roll")
    parser.add_argument(
        "--occupied",
        nargs="*",
        default=[],
        metavar="X,Y",
        help="Cells holding other players' tokens",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    if args.steps is None and args.room is None:
        print("Either STEPS or --room is required", file=sys.stderr)
        return 2

    topology = classic_board()
    occupancy = Occupancy(
        {f"token{i}": _parse_position(cell) for i, cell in enumerate(args.occupied)}
    )
    navigator = GridNavigator(topology, occupancy)

    try:
        start = topology.check(_parse_position(args.start))
        if args.room is not None:
            path = navigator.find_path_to_room(start, args.room)
            print(render_route(topology, path, occupancy))
        else:
            moves = navigator.available_moves(start, args.steps)
            print(render_moves(topology, start, moves, occupancy))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
