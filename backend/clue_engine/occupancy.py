"""Occupancy: where every token on the board currently sits.

``Occupancy`` is an immutable snapshot handed to the navigator for the
duration of one query.  ``OccupancyTracker`` is the mutable record kept by
the turn engine; only it changes positions, and only between queries.
"""

import logging
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .board import Cell, Position, is_cell

logger = logging.getLogger(__name__)


class Occupancy(Mapping):
    """Read-only mapping of player id -> Position (or None when off the board)."""

    def __init__(self, positions: Optional[Mapping[str, Optional[Position]]] = None):
        normalised: dict[str, Optional[Position]] = {}
        for player_id, position in (positions or {}).items():
            if position is not None and not isinstance(position, str):
                position = Cell(*position)
            normalised[player_id] = position
        self._positions = MappingProxyType(normalised)
        self._cells = frozenset(p for p in normalised.values() if p is not None and is_cell(p))

    def __getitem__(self, player_id: str) -> Optional[Position]:
        return self._positions[player_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self):
        return f"Occupancy({dict(self._positions)!r})"

    def position_of(self, player_id: str) -> Optional[Position]:
        return self._positions.get(player_id)

    def occupied_cells(self) -> frozenset[Cell]:
        return self._cells

    def is_occupied(self, cell: Cell) -> bool:
        return cell in self._cells


class OccupancyTracker:
    """Mutable positions owned by the turn engine.

    At most one token may stand on an open cell; rooms hold any number.
    """

    def __init__(self, positions: Optional[Mapping[str, Optional[Position]]] = None):
        self._positions: dict[str, Optional[Position]] = {}
        for player_id, position in (positions or {}).items():
            self.place(player_id, position)

    def place(self, player_id: str, position: Optional[Position]):
        if position is not None and not isinstance(position, str):
            position = Cell(*position)
            holder = self.holder_of(position)
            if holder is not None and holder != player_id:
                raise ValueError(
                    f"Cell {position.label()} is already occupied by {holder}"
                )
        previous = self._positions.get(player_id)
        self._positions[player_id] = position
        logger.debug("[occupancy] %s: %s -> %s", player_id, previous, position)

    def remove(self, player_id: str):
        """Take a player's token off the board (eliminated or not yet placed)."""
        self._positions[player_id] = None

    def holder_of(self, cell: Cell) -> Optional[str]:
        for player_id, position in self._positions.items():
            if position == cell and is_cell(position):
                return player_id
        return None

    def position_of(self, player_id: str) -> Optional[Position]:
        return self._positions.get(player_id)

    def snapshot(self) -> Occupancy:
        return Occupancy(self._positions)
