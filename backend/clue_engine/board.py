"""
Clue Board - Topology: cells, rooms, doors and secret passages

Standard board: 25 rows x 24 cols (0-indexed), addressed as Cell(x=col, y=row)
Legend: .=hallway  blank=void  room keys are lowercase letters
Room keys: s=Study h=Hall o=Lounge l=Library b=Billiard
           n=Dining c=Conservatory a=Ballroom k=Kitchen

Rooms have no internal cells.  A token in a room sits at the room's name,
not at a coordinate; the open cells bordering a room through its doors are
the room's entrances.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import NamedTuple, Optional, Union


class InvalidPosition(ValueError):
    """An off-board cell or an unknown room name reached the navigator."""


class Cell(NamedTuple):
    x: int
    y: int

    def label(self) -> str:
        return f"({self.x},{self.y})"


# A token is either on an open cell or inside a named room
Position = Union[Cell, str]


def is_cell(position) -> bool:
    return isinstance(position, tuple)


@dataclass(frozen=True)
class Room:
    name: str
    doors: tuple[Cell, ...]
    passage: Optional[str] = None
    adjacent: frozenset[Cell] = frozenset()

    def __post_init__(self):
        if not self.adjacent:
            object.__setattr__(self, "adjacent", frozenset(self.doors))


@dataclass(frozen=True, eq=False)
class BoardTopology:
    cells: frozenset[Cell]
    rooms: dict[str, Room]
    width: int = 0
    height: int = 0
    _entrances: dict[Cell, tuple[str, ...]] = field(
        default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self):
        entrances: dict[Cell, list[str]] = {}
        for room in self.rooms.values():
            for cell in room.adjacent:
                entrances.setdefault(cell, []).append(room.name)
        object.__setattr__(
            self,
            "_entrances",
            {cell: tuple(sorted(names)) for cell, names in entrances.items()},
        )
        if not self.width or not self.height:
            object.__setattr__(
                self, "width", max((c.x for c in self.cells), default=-1) + 1
            )
            object.__setattr__(
                self, "height", max((c.y for c in self.cells), default=-1) + 1
            )

    # ── Lookups ─────────────────────────────────────────────

    def is_on_board(self, cell: Cell) -> bool:
        return cell in self.cells

    def room(self, name: str) -> Room:
        try:
            return self.rooms[name]
        except KeyError:
            raise InvalidPosition(f"Unknown room: {name!r}") from None

    def passage_from(self, name: str) -> Optional[str]:
        return self.room(name).passage

    def rooms_adjacent_to(self, cell: Cell) -> tuple[str, ...]:
        """Rooms a token standing on ``cell`` may step into."""
        return self._entrances.get(cell, ())

    def neighbours(self, cell: Cell) -> list[Cell]:
        """On-board orthogonal neighbours in a fixed order: up, down, left, right."""
        x, y = cell
        candidates = (Cell(x, y - 1), Cell(x, y + 1), Cell(x - 1, y), Cell(x + 1, y))
        return [c for c in candidates if c in self.cells]

    def check(self, position) -> Position:
        """Return ``position`` normalised, or raise InvalidPosition."""
        if isinstance(position, str):
            self.room(position)
            return position
        if isinstance(position, (tuple, list)) and len(position) == 2:
            cell = Cell(int(position[0]), int(position[1]))
            if cell not in self.cells:
                raise InvalidPosition(f"Cell {cell.label()} is not on the board")
            return cell
        raise InvalidPosition(f"Not a board position: {position!r}")


# ── Board Data ──────────────────────────────────────────────

STUDY = "Study"
HALL = "Hall"
LOUNGE = "Lounge"
LIBRARY = "Library"
BILLIARD_ROOM = "Billiard Room"
DINING_ROOM = "Dining Room"
CONSERVATORY = "Conservatory"
BALLROOM = "Ballroom"
KITCHEN = "Kitchen"

SECRET_PASSAGES = {
    STUDY: KITCHEN,
    KITCHEN: STUDY,
    LOUNGE: CONSERVATORY,
    CONSERVATORY: LOUNGE,
}

ROOM_KEYS = {
    "s": STUDY,
    "h": HALL,
    "o": LOUNGE,
    "l": LIBRARY,
    "b": BILLIARD_ROOM,
    "n": DINING_ROOM,
    "c": CONSERVATORY,
    "a": BALLROOM,
    "k": KITCHEN,
}

# Doors as (row, col) ON the room perimeter; the entrance cells are the
# hallway squares just outside them
DOORS = {
    # Study: south-east corner
    (3, 6): STUDY,
    # Hall: 2 south, 1 west
    (6, 11): HALL,
    (6, 12): HALL,
    (4, 9): HALL,
    # Lounge: south-west
    (5, 17): LOUNGE,
    # Library: east, south
    (8, 6): LIBRARY,
    (10, 3): LIBRARY,
    # Billiard Room: north, east
    (12, 1): BILLIARD_ROOM,
    (15, 5): BILLIARD_ROOM,
    # Dining Room: west, north
    (12, 16): DINING_ROOM,
    (9, 17): DINING_ROOM,
    # Conservatory: north-east
    (19, 4): CONSERVATORY,
    # Ballroom: 2 north, west, east
    (17, 9): BALLROOM,
    (17, 14): BALLROOM,
    (19, 8): BALLROOM,
    (19, 15): BALLROOM,
    # Kitchen: north-west
    (18, 19): KITCHEN,
}

# Start positions (row, col)
START_POSITIONS = {
    "Miss Scarlett": (24, 9),  # bottom, between Conservatory & Ballroom
    "Colonel Mustard": (7, 23),  # right side
    "Mrs. White": (24, 14),  # bottom, between Ballroom & Kitchen
    "Reverend Green": (0, 16),  # top, between Hall & Lounge
    "Professor Plum": (5, 0),  # left side, between Study & Library
    "Mrs. Peacock": (18, 0),  # left side, between Billiard & Conservatory
}

BOARD = """ssssss .        . oooooo
sssssss..hhhhhh..ooooooo
sssssss..hhhhhh..ooooooo
sssssss..hhhhhh..ooooooo
 ........hhhhhh..ooooooo
.........hhhhhh..ooooooo
 lllll...hhhhhh........
lllllll.................
lllllll..     .........
lllllll..     ..nnnnnnnn
 lllll...     ..nnnnnnnn
 ........     ..nnnnnnnn
bbbbbb...     ..nnnnnnnn
bbbbbb...     ..nnnnnnnn
bbbbbb...     ..nnnnnnnn
bbbbbb.............nnnnn
bbbbbb.................
 .......aaaaaaaa........
........aaaaaaaa..kkkkk
 cccc...aaaaaaaa..kkkkkk
cccccc..aaaaaaaa..kkkkkk
cccccc..aaaaaaaa..kkkkkk
cccccc..aaaaaaaa..kkkkkk
cccccc ...aaaa... kkkkkk
         .    .         """


# ── Builder ─────────────────────────────────────────────────


def parse_board(
    layout: str,
    room_keys: dict[str, str],
    doors: dict[tuple[int, int], str],
    passages: Optional[dict[str, str]] = None,
) -> BoardTopology:
    """Build a topology from an ASCII layout.

    ``doors`` maps (row, col) to a room name.  A door placed on a room
    letter contributes every open neighbour outside the room as an
    entrance; a door placed on an open cell is used as-is.
    """
    passages = passages or {}
    lines = layout.splitlines()
    grid: dict[tuple[int, int], str] = {}
    for row, line in enumerate(lines):
        for col, ch in enumerate(line):
            grid[(row, col)] = ch

    cells = frozenset(Cell(col, row) for (row, col), ch in grid.items() if ch == ".")
    entrances: dict[str, list[Cell]] = {name: [] for name in room_keys.values()}
    for (r, c), name in doors.items():
        if name not in entrances:
            raise InvalidPosition(f"Door ({r},{c}) names unknown room {name!r}")
        if grid.get((r, c)) == ".":
            candidates = [Cell(c, r)]
        else:
            candidates = [
                Cell(c + dc, r + dr)
                for dr, dc in [(-1, 0), (1, 0), (0, -1), (0, 1)]
                if grid.get((r + dr, c + dc)) == "."
            ]
        for cell in candidates:
            if cell not in entrances[name]:
                entrances[name].append(cell)

    rooms = {
        name: Room(name=name, doors=tuple(cells_), passage=passages.get(name))
        for name, cells_ in entrances.items()
    }
    width = max((len(line) for line in lines), default=0)
    return BoardTopology(cells=cells, rooms=rooms, width=width, height=len(lines))


def validate_topology(topology: BoardTopology) -> list[str]:
    errors = []

    for room in topology.rooms.values():
        for door in room.doors:
            if door not in topology.cells:
                errors.append(f"Door {door.label()} of {room.name} is not on the board")
        if room.passage is not None and room.passage not in topology.rooms:
            errors.append(f"{room.name} has a passage to unknown room {room.passage!r}")
        if not room.doors and room.passage is None:
            errors.append(f"{room.name} has no doors and no secret passage")

    return errors


@lru_cache(maxsize=None)
def classic_board() -> BoardTopology:
    topology = parse_board(BOARD, ROOM_KEYS, DOORS, SECRET_PASSAGES)
    errors = validate_topology(topology)
    if errors:
        raise ValueError("Invalid classic board: " + "; ".join(errors))
    return topology


def start_cells() -> dict[str, Cell]:
    return {name: Cell(col, row) for name, (row, col) in START_POSITIONS.items()}
