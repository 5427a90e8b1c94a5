"""The card deck: every value the hidden solution can take, per category."""

from enum import Enum

from .board import (
    BALLROOM,
    BILLIARD_ROOM,
    CONSERVATORY,
    DINING_ROOM,
    HALL,
    KITCHEN,
    LIBRARY,
    LOUNGE,
    STUDY,
)


class Category(str, Enum):
    SUSPECT = "suspect"
    WEAPON = "weapon"
    ROOM = "room"


SUSPECTS = [
    "Miss Scarlett",
    "Colonel Mustard",
    "Mrs. White",
    "Reverend Green",
    "Mrs. Peacock",
    "Professor Plum",
]

WEAPONS = [
    "Candlestick",
    "Knife",
    "Lead Pipe",
    "Revolver",
    "Rope",
    "Wrench",
]

ROOMS = [
    KITCHEN,
    BALLROOM,
    CONSERVATORY,
    BILLIARD_ROOM,
    LIBRARY,
    STUDY,
    HALL,
    LOUNGE,
    DINING_ROOM,
]

ALL_CARDS = SUSPECTS + WEAPONS + ROOMS

CLASSIC_DECK = {
    Category.SUSPECT: SUSPECTS,
    Category.WEAPON: WEAPONS,
    Category.ROOM: ROOMS,
}
