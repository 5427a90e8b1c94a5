"""Pydantic models for CPU decisions and the query service."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from .board import Cell


class NotepadState(str, Enum):
    UNKNOWN = "unknown"
    PROVED = "proved"
    DISPROVED = "disproved"


class Phase(str, Enum):
    ROLL = "roll"
    ROLL_OR_SUGGEST = "roll_or_suggest"
    MOVE = "move"
    SUGGEST = "suggest"
    END = "end"


class ActionType(str, Enum):
    ROLL = "roll"
    MOVE = "move"
    PASSAGE = "passage"
    SUGGEST = "suggest"
    ACCUSE = "accuse"
    END = "end"


class Suggestion(BaseModel):
    """A (suspect, weapon, room) triple; an accusation has the same shape."""

    suspect: str
    weapon: str
    room: str


class Action(BaseModel):
    type: ActionType
    move_to: Optional[Union[Cell, str]] = None
    suggestion: Optional[Suggestion] = None

    @classmethod
    def roll(cls) -> Action:
        return cls(type=ActionType.ROLL)

    @classmethod
    def end(cls) -> Action:
        return cls(type=ActionType.END)

    @classmethod
    def move(cls, destination) -> Action:
        return cls(type=ActionType.MOVE, move_to=destination)

    @classmethod
    def passage(cls, room: str) -> Action:
        return cls(type=ActionType.PASSAGE, move_to=room)

    @classmethod
    def suggest(cls, suggestion: Suggestion) -> Action:
        return cls(type=ActionType.SUGGEST, suggestion=suggestion)

    @classmethod
    def accuse(cls, accusation: Suggestion) -> Action:
        return cls(type=ActionType.ACCUSE, suggestion=accusation)


# ---------------------------------------------------------------------------
# Query service responses and requests
# ---------------------------------------------------------------------------


class PositionRequest(BaseModel):
    room: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None


class MovesResponse(BaseModel):
    player_id: str
    steps: int
    cells: list[list[int]]
    rooms: list[str]
    passages: list[str]


class RouteResponse(BaseModel):
    player_id: str
    room: str
    path: Optional[list[Union[list[int], str]]] = None


class OccupancyRecord(BaseModel):
    """Stored positions of one game, as kept in redis."""

    positions: dict[str, Optional[Union[Cell, str]]] = {}


class BoardResponse(BaseModel):
    width: int
    height: int
    cells: list[list[int]]
    rooms: dict[str, dict]
    start_positions: dict[str, list[int]]
