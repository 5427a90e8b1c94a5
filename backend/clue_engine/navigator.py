"""
Grid Navigator - dice reachability and routes toward rooms

Every query runs against one immutable Occupancy snapshot, so a navigator
can be built per turn (or per speculative computation) and discarded.

Reachability is a depth-bounded BFS: open cells are reported only at the
exact rolled distance, rooms at any distance up to the roll because
stepping into a room ends the move.

Routing is a greedy walker: head for the nearest free door in straight
runs (horizontal then vertical, or vertical then horizontal), detour through
the perpendicular bisector of the blocked line when neither run is clear,
and fall back to the remaining free neighbours.  Cells proven to be dead
ends are remembered for the rest of the call, which makes the walk a
depth-first search: no route is returned only when no door can be reached.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional

from .board import BoardTopology, Cell, Position, is_cell
from .occupancy import Occupancy

logger = logging.getLogger(__name__)

Path = tuple[Position, ...]

DEFAULT_MAX_ROUTE_LENGTH = 256
# Detours of detours are tried this many times before the plain neighbour
# fallback takes over
MAX_DETOUR_LEVELS = 4


class RouteTooLong(Exception):
    """The greedy walk exceeded the route length ceiling."""


@dataclass(frozen=True)
class AvailableMoves:
    """Destinations for one roll.

    ``passages`` holds rooms reachable by secret passage; they are an
    alternative to rolling, never a dice destination.
    """

    cells: frozenset[Cell] = frozenset()
    rooms: frozenset[str] = frozenset()
    passages: frozenset[str] = frozenset()

    def __contains__(self, position) -> bool:
        return self.is_available(position)

    def __len__(self) -> int:
        return len(self.cells) + len(self.rooms) + len(self.passages)

    def is_available(self, position) -> bool:
        if isinstance(position, str):
            return position in self.rooms
        return Cell(*position) in self.cells

    def is_available_passage(self, room: str) -> bool:
        return room in self.passages

    def destinations(self) -> list[Position]:
        """Dice destinations in a stable order: cells by (x, y), then rooms by name."""
        return sorted(self.cells) + sorted(self.rooms)


def _rank(distance: Optional[int]) -> float:
    return math.inf if distance is None else distance


class GridNavigator:
    def __init__(
        self,
        topology: BoardTopology,
        occupancy: Optional[Occupancy] = None,
        max_route_length: int = DEFAULT_MAX_ROUTE_LENGTH,
    ):
        self.topology = topology
        self.occupancy = occupancy if occupancy is not None else Occupancy()
        self.max_route_length = max_route_length
        self._blocked = self.occupancy.occupied_cells()
        self._fields: dict[Cell, dict[Cell, int]] = {}

    def is_open(self, cell: Cell) -> bool:
        """On the board and not holding a token."""
        return cell in self.topology.cells and not self.occupancy.is_occupied(cell)

    # ── Reachability ────────────────────────────────────────

    def available_moves(self, start: Position, steps: int) -> AvailableMoves:
        if steps < 0:
            raise ValueError(f"steps must be non-negative, got {steps}")
        start = self.topology.check(start)

        passages = frozenset()
        if not is_cell(start):
            passage = self.topology.passage_from(start)
            if passage is not None:
                passages = frozenset([passage])

        if steps == 0:
            if not is_cell(start):
                return AvailableMoves(passages=passages)
            rooms = frozenset(self.topology.rooms_adjacent_to(start))
            return AvailableMoves(cells=frozenset([start]), rooms=rooms)

        reached = self.reachable(start, steps)
        cells = frozenset(cell for cell, dist in reached.items() if dist == steps)
        rooms = set()
        for cell in reached:
            for room in self.topology.rooms_adjacent_to(cell):
                if room != start:
                    rooms.add(room)

        logger.debug(
            "[navigator] %s with %d: %d cells, rooms=%s, passages=%s",
            start, steps, len(cells), sorted(rooms), sorted(passages),
        )
        return AvailableMoves(cells=cells, rooms=frozenset(rooms), passages=passages)

    def reachable(self, start: Position, steps: int) -> dict[Cell, int]:
        """
        BFS from `start` up to `steps` moves over unoccupied cells.
        Leaving a room costs one step and fans out through every free door.
        Returns the board distance of every cell visited.
        """
        if is_cell(start):
            frontier, dist0 = [start], 0
        else:
            doors = self.topology.room(start).doors
            frontier, dist0 = [d for d in doors if self.is_open(d)], 1
        if dist0 > steps:
            return {}

        visited: dict[Cell, int] = {cell: dist0 for cell in frontier}
        queue: deque[tuple[Cell, int]] = deque((cell, dist0) for cell in frontier)

        while queue:
            cell, dist = queue.popleft()
            if dist == steps:
                continue
            for nb in self.topology.neighbours(cell):
                if nb in visited or nb in self._blocked:
                    continue
                visited[nb] = dist + 1
                queue.append((nb, dist + 1))

        return visited

    def distance_field(self, target: Cell) -> dict[Cell, int]:
        """Unobstructed step counts from every cell that can reach ``target``.

        Occupied cells get a count (a token may be measured from its own
        square) but are never walked through.
        """
        field = self._fields.get(target)
        if field is None:
            field = {target: 0}
            queue = deque([target])
            while queue:
                cell = queue.popleft()
                for nb in self.topology.neighbours(cell):
                    if nb in field:
                        continue
                    field[nb] = field[cell] + 1
                    if nb not in self._blocked:
                        queue.append(nb)
            self._fields[target] = field
        return field

    def board_distance(self, a: Cell, b: Cell) -> Optional[int]:
        return self.distance_field(b).get(a)

    def distance_to_room(self, cell: Cell, room: str) -> Optional[int]:
        """Board distance from ``cell`` to the nearest free door of ``room``."""
        distances = [
            self.board_distance(cell, door)
            for door in self.topology.room(room).doors
            if door == cell or self.is_open(door)
        ]
        return min((d for d in distances if d is not None), default=None)

    # ── Routes ──────────────────────────────────────────────

    def find_path_to_room(self, start: Position, room: str) -> Optional[Path]:
        """Route from ``start`` ending with ``room``, or None when it is sealed off."""
        start = self.topology.check(start)
        self.topology.room(room)
        if not is_cell(start):
            return self.find_path_between_rooms(start, room)
        return _RouteSearch(self, room).run(start, ())

    def find_path_between_rooms(self, start_room: str, target_room: str) -> Optional[Path]:
        self.topology.room(target_room)
        if start_room == target_room:
            return None
        if self.topology.passage_from(start_room) == target_room:
            return (start_room, target_room)

        search = _RouteSearch(self, target_room)
        starting_doors = [d for d in self.topology.room(start_room).doors if self.is_open(d)]
        starting_doors.sort(key=lambda door: _rank(search.estimate(door)))

        for door in starting_doors:
            route = search.run(door, (start_room,))
            if route is not None:
                return route
            logger.debug(
                "[navigator] no route %s -> %s through door %s",
                start_room, target_room, door.label(),
            )
        return None

    def routes_to_rooms(self, start: Position) -> dict[str, Optional[Path]]:
        """Route to every room, keyed by room name (None when unreachable)."""
        return {name: self.find_path_to_room(start, name) for name in self.topology.rooms}

    def shortest_route(self, start: Cell, room: str, prefix: Path = ()) -> Optional[Path]:
        """Breadth-first route to the nearest reachable door of ``room``."""
        doors = {d for d in self.topology.room(room).doors if d == start or self.is_open(d)}
        if not doors:
            return None
        parents: dict[Cell, Optional[Cell]] = {start: None}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            if cell in doors:
                route = []
                while cell is not None:
                    route.append(cell)
                    cell = parents[cell]
                return tuple(prefix) + tuple(reversed(route)) + (room,)
            for nb in self.topology.neighbours(cell):
                if nb in parents or nb in prefix or not self.is_open(nb):
                    continue
                parents[nb] = cell
                queue.append(nb)
        return None


class _RouteSearch:
    """One top-level route computation toward a room.

    Owns the failure memo: cells and doors proven to be dead ends during
    this call are never attempted again by it.
    """

    def __init__(self, navigator: GridNavigator, room: str):
        self.nav = navigator
        self.topology = navigator.topology
        self.room = room
        self.doors = self.topology.room(room).doors
        self.failed: set[Cell] = set()
        self.failed_doors: set[Cell] = set()

    def run(self, start: Cell, prefix: Path) -> Optional[Path]:
        try:
            route = self._extend(start, prefix, top=True)
        except RouteTooLong:
            logger.debug(
                "[navigator] walk to %s from %s exceeded %d cells, using BFS",
                self.room, start.label(), self.nav.max_route_length,
            )
            route = self.nav.shortest_route(start, self.room, prefix)
        if route is None:
            logger.debug("[navigator] %s is sealed off from %s", self.room, start.label())
        return route

    def estimate(self, cell: Cell) -> Optional[int]:
        return self.nav.distance_to_room(cell, self.room)

    def _is_valid(self, cell: Cell, path: Path) -> bool:
        return self.nav.is_open(cell) and cell not in path

    def _doors_by_distance(self, position: Cell) -> list[Cell]:
        ranked = []
        for index, door in enumerate(self.doors):
            if door in self.failed_doors:
                continue
            if door != position and not self.nav.is_open(door):
                continue
            distance = self.nav.board_distance(position, door)
            if distance is None:
                continue
            ranked.append((distance, index, door))
        ranked.sort()
        return [door for _, _, door in ranked]

    def _extend(self, position: Cell, path: Path, top: bool = False) -> Optional[Path]:
        path = path + (position,)
        if len(path) > self.nav.max_route_length:
            raise RouteTooLong(len(path))

        for door in self._doors_by_distance(position):
            if position == door:
                return path + (self.room,)
            for step in self._next_spaces(position, door, path):
                if step in self.failed or step in path:
                    continue
                route = self._extend(step, path)
                if route is not None:
                    return route
            if top:
                self.failed_doors.add(door)
                logger.debug("[navigator] door %s of %s failed", door.label(), self.room)

        self.failed.add(position)
        return None

    # ── Step selection ──────────────────────────────────────

    def _next_spaces(self, position: Cell, door: Cell, path: Path) -> Iterator[Cell]:
        """Candidate next cells toward ``door``, most preferred first."""
        yielded: set[Cell] = set()
        for cell in self._toward_targets(position, [door], door, path, set(), 0):
            if cell not in yielded:
                yielded.add(cell)
                yield cell

        rest = [
            nb for nb in self.topology.neighbours(position)
            if nb not in yielded and self._is_valid(nb, path)
        ]
        rest.sort(key=lambda cell: _rank(self.nav.board_distance(cell, door)))
        yield from rest

    def _toward_targets(
        self,
        position: Cell,
        targets: list[Cell],
        door: Cell,
        path: Path,
        seen: set[Cell],
        level: int,
    ) -> Iterator[Cell]:
        for target in targets:
            seen.add(target)
            for step in self._unbroken_steps(position, target, door, path):
                if step not in self.failed:
                    yield step

        if level >= MAX_DETOUR_LEVELS:
            return
        detours: list[Cell] = []
        for target in targets:
            for detour in self._detour_spaces(position, target, path, seen):
                if detour not in detours:
                    detours.append(detour)
        if detours:
            detours.sort(key=lambda cell: _rank(self.nav.board_distance(cell, door)))
            yield from self._toward_targets(position, detours, door, path, seen, level + 1)

    def _can_run(self, start: Cell, end: Cell, path: Path) -> bool:
        """True if every cell after ``start`` up to ``end`` on one row/column is free."""
        if start == end or (start.x != end.x and start.y != end.y):
            return False
        dx = (end.x > start.x) - (end.x < start.x)
        dy = (end.y > start.y) - (end.y < start.y)
        cell = start
        while cell != end:
            cell = Cell(cell.x + dx, cell.y + dy)
            if not self._is_valid(cell, path):
                return False
        return True

    def _unbroken_steps(self, start: Cell, target: Cell, door: Cell, path: Path) -> list[Cell]:
        """First step of each clear two-leg walk to ``target``.

        Horizontal-first comes before vertical-first unless the vertical
        step is strictly closer to the door.
        """
        if start == target:
            return []
        sx = (target.x > start.x) - (target.x < start.x)
        sy = (target.y > start.y) - (target.y < start.y)

        steps = []
        corner = Cell(target.x, start.y)
        if self._can_run(start, corner, path) and (
            corner == target or self._can_run(corner, target, path)
        ):
            steps.append(Cell(start.x + sx, start.y))
        corner = Cell(start.x, target.y)
        if self._can_run(start, corner, path) and (
            corner == target or self._can_run(corner, target, path)
        ):
            steps.append(Cell(start.x, start.y + sy))

        steps.sort(key=lambda cell: _rank(self.nav.board_distance(cell, door)))
        return steps

    def _detour_spaces(
        self, start: Cell, target: Cell, path: Path, seen: set[Cell]
    ) -> list[Cell]:
        """Nearest free cells either side of the start-target midpoint, along its perpendicular."""
        mid_x = (start.x + target.x) / 2
        mid_y = (start.y + target.y) / 2

        detours = []
        for positive in (True, False):
            cell = self._closest_mid_space(start, target, mid_x, mid_y, path, positive)
            if cell is not None and cell not in seen and cell not in detours:
                detours.append(cell)

        detours.sort(key=lambda cell: abs(cell.x - mid_x) + abs(cell.y - mid_y))
        return detours

    def _closest_mid_space(
        self,
        start: Cell,
        target: Cell,
        mid_x: float,
        mid_y: float,
        path: Path,
        positive: bool,
    ) -> Optional[Cell]:
        base_x, base_y = math.floor(mid_x), math.floor(mid_y)
        sign = 1 if positive else -1
        span = max(self.topology.width, self.topology.height)

        for tenth in range(span * 10):
            delta = sign * tenth / 10
            if start.y == target.y:
                # Horizontal line: walk the vertical through the midpoint
                cell = Cell(base_x, math.floor(base_y + delta))
            elif start.x == target.x:
                cell = Cell(math.floor(base_x + delta), base_y)
            else:
                slope = -(start.x - target.x) / (start.y - target.y)
                intercept = mid_y - slope * mid_x
                dx = base_x + delta
                cell = Cell(math.floor(dx), math.floor(slope * dx + intercept))
            if self._is_valid(cell, path):
                return cell
        return None
