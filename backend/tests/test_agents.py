"""Tests for agents.py: EasyCpu targeting, movement, suggestions and accusations."""

import pytest

from clue_engine.agents import EasyCpu
from clue_engine.board import BoardTopology, Cell, Room, classic_board
from clue_engine.deck import Category
from clue_engine.models import ActionType, NotepadState, Phase
from clue_engine.navigator import AvailableMoves, GridNavigator
from clue_engine.occupancy import Occupancy

SMALL_DECK = {
    Category.SUSPECT: ["Miss Scarlett", "Colonel Mustard", "Mrs. White"],
    Category.WEAPON: ["Knife", "Rope", "Wrench"],
    Category.ROOM: ["Kitchen", "Hall", "Study"],
}


@pytest.fixture(scope="module")
def small_board():
    """5x5 open hall: Hall top-right, Study bottom-left, Kitchen bottom-right."""
    cells = frozenset(Cell(x, y) for x in range(5) for y in range(5))
    rooms = {
        "Kitchen": Room("Kitchen", doors=(Cell(4, 4),), passage="Study"),
        "Study": Room("Study", doors=(Cell(0, 4),), passage="Kitchen"),
        "Hall": Room("Hall", doors=(Cell(4, 0),)),
    }
    return BoardTopology(cells=cells, rooms=rooms)


@pytest.fixture
def cpu():
    return EasyCpu("cpu1", SMALL_DECK)


def _disprove(cpu, *cards):
    for card in cards:
        cpu.notepad.mark(card, NotepadState.DISPROVED)
    cpu.notepad.evaluate()


# ---------------------------------------------------------------------------
# Observations
# ---------------------------------------------------------------------------


def test_own_cards_are_disproved(cpu):
    cpu.observe_own_cards(["Knife", "Hall"])
    assert cpu.notepad.state_of("Knife") == NotepadState.DISPROVED
    assert cpu.notepad.state_of("Hall") == NotepadState.DISPROVED
    assert cpu.hand == {"Knife", "Hall"}


def test_shown_card_is_disproved(cpu):
    cpu.observe_shown_card("Rope", shown_by="p2")
    cpu.observe_shown_card("Wrench", shown_by="p3")
    assert cpu.notepad.state_of("Knife") == NotepadState.PROVED


def test_unrefuted_suggestion_proves_cards_not_held(cpu):
    cpu.observe_own_cards(["Rope"])
    cpu.observe_suggestion_no_show("Mrs. White", "Rope", "Study")
    assert cpu.notepad.state_of("Mrs. White") == NotepadState.PROVED
    assert cpu.notepad.state_of("Study") == NotepadState.PROVED
    assert cpu.notepad.state_of("Rope") == NotepadState.DISPROVED


def test_reveal_prefers_card_already_shown(cpu):
    assert cpu.choose_card_to_reveal(["Study", "Knife"], "p2") == "Knife"
    assert cpu.choose_card_to_reveal(["Study", "Knife"], "p3") == "Knife"
    assert cpu.choose_card_to_reveal(["Study", "Miss Scarlett"], "p2") == "Miss Scarlett"
    assert cpu.choose_card_to_reveal(["Study", "Knife"], "p2") == "Knife"
    assert cpu.shown_to["p2"] == {"Knife", "Miss Scarlett"}


def test_reveal_reuses_old_card(cpu):
    cpu.choose_card_to_reveal(["Hall"], "p2")
    assert cpu.choose_card_to_reveal(["Knife", "Hall"], "p2") == "Hall"


# ---------------------------------------------------------------------------
# Targeting
# ---------------------------------------------------------------------------


def test_target_tie_broken_by_room_name(cpu, small_board):
    action = cpu.start_turn(Cell(0, 0), GridNavigator(small_board), Phase.ROLL)
    assert action.type == ActionType.ROLL
    assert cpu.target_path[-1] == "Hall"
    assert cpu.target_path[0] == Cell(0, 0)


def test_target_skips_disproved_room(cpu, small_board):
    _disprove(cpu, "Hall")
    cpu.start_turn(Cell(0, 0), GridNavigator(small_board), Phase.ROLL)
    assert cpu.target_path[-1] == "Study"


def test_target_falls_back_to_disproved_rooms(cpu, small_board):
    _disprove(cpu, "Hall", "Study")
    occupancy = Occupancy({"other": Cell(4, 4)})
    cpu.start_turn(Cell(0, 0), GridNavigator(small_board, occupancy), Phase.ROLL)
    assert cpu.target_path[-1] == "Hall"


def test_only_reachable_room_is_taken(cpu, small_board):
    _disprove(cpu, "Hall")
    occupancy = Occupancy({"a": Cell(4, 4), "b": Cell(0, 4)})
    cpu.start_turn(Cell(0, 0), GridNavigator(small_board, occupancy), Phase.ROLL)
    assert cpu.target_path[-1] == "Hall"


def test_boxed_in_ends_turn(cpu, small_board):
    occupancy = Occupancy({"me": Cell(0, 0), "a": Cell(1, 0), "b": Cell(0, 1)})
    nav = GridNavigator(small_board, occupancy)
    assert cpu.start_turn(Cell(0, 0), nav, Phase.ROLL).type == ActionType.END
    assert cpu.target_path is None
    assert cpu.decide(Phase.ROLL_OR_SUGGEST).type == ActionType.END


def test_secret_passage_to_target(cpu, small_board):
    _disprove(cpu, "Hall", "Study")
    action = cpu.start_turn("Study", GridNavigator(small_board), Phase.ROLL)
    assert action.type == ActionType.PASSAGE
    assert action.move_to == "Kitchen"


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------


def test_moves_furthest_along_route(cpu, small_board):
    _disprove(cpu, "Hall", "Study")
    nav = GridNavigator(small_board)
    cpu.start_turn(Cell(0, 0), nav, Phase.ROLL)
    action = cpu.decide(Phase.MOVE, nav.available_moves(Cell(0, 0), 3))
    assert action.type == ActionType.MOVE
    assert action.move_to == Cell(3, 0)


def test_enters_room_when_roll_allows(cpu, small_board):
    _disprove(cpu, "Hall", "Study")
    nav = GridNavigator(small_board)
    cpu.start_turn(Cell(0, 0), nav, Phase.ROLL)
    action = cpu.decide(Phase.MOVE, nav.available_moves(Cell(0, 0), 10))
    assert action.move_to == "Kitchen"


def test_stale_route_moves_closer(cpu, small_board):
    _disprove(cpu, "Hall", "Study")
    nav = GridNavigator(small_board)
    cpu.start_turn(Cell(0, 0), nav, Phase.ROLL)
    moves = AvailableMoves(cells=frozenset([Cell(0, 2), Cell(2, 2)]))
    action = cpu.decide(Phase.MOVE, moves)
    assert action.move_to == Cell(2, 2)


def test_prefers_undisproved_room_off_route(cpu, small_board):
    _disprove(cpu, "Hall")
    nav = GridNavigator(small_board)
    cpu.position = Cell(2, 2)
    cpu.navigator = nav
    cpu.target_path = (Cell(2, 2), Cell(3, 2), Cell(4, 2), Cell(4, 3), Cell(4, 4), "Kitchen")
    moves = AvailableMoves(cells=frozenset([Cell(1, 2)]), rooms=frozenset(["Hall", "Study"]))
    assert cpu.decide(Phase.MOVE, moves).move_to == "Study"


def test_no_moves_ends_turn(cpu, small_board):
    nav = GridNavigator(small_board)
    cpu.start_turn(Cell(0, 0), nav, Phase.ROLL)
    assert cpu.decide(Phase.MOVE, AvailableMoves()).type == ActionType.END
    assert cpu.decide(Phase.MOVE, None).type == ActionType.END


# ---------------------------------------------------------------------------
# Suggestions and accusations
# ---------------------------------------------------------------------------


def test_suggests_before_rolling_in_open_room(cpu, small_board):
    action = cpu.start_turn("Hall", GridNavigator(small_board), Phase.ROLL_OR_SUGGEST)
    assert action.type == ActionType.SUGGEST
    assert action.suggestion.room == "Hall"
    assert action.suggestion.suspect == "Miss Scarlett"
    assert action.suggestion.weapon == "Knife"


def test_suggests_before_taking_passage(cpu, small_board):
    _disprove(cpu, "Hall")
    action = cpu.start_turn("Study", GridNavigator(small_board), Phase.ROLL_OR_SUGGEST)
    assert action.type == ActionType.SUGGEST
    assert action.suggestion.room == "Study"
    assert cpu.target_path == ("Study", "Kitchen")


def test_rolls_from_disproved_room(cpu, small_board):
    _disprove(cpu, "Hall")
    action = cpu.start_turn("Hall", GridNavigator(small_board), Phase.ROLL_OR_SUGGEST)
    assert action.type == ActionType.ROLL


def test_suggestion_rotates_least_suggested(cpu):
    cpu.position = "Hall"
    first = cpu.make_suggestion()
    second = cpu.make_suggestion()
    assert (first.suspect, first.weapon) == ("Miss Scarlett", "Knife")
    assert (second.suspect, second.weapon) == ("Colonel Mustard", "Rope")


def test_suggestion_uses_proved_value(cpu):
    _disprove(cpu, "Miss Scarlett", "Colonel Mustard")
    cpu.position = "Hall"
    for _ in range(3):
        assert cpu.make_suggestion().suspect == "Mrs. White"


def test_suggestion_skips_disproved(cpu):
    _disprove(cpu, "Knife")
    cpu.position = "Study"
    assert cpu.make_suggestion().weapon == "Rope"


def test_suggest_phase(cpu):
    cpu.position = "Study"
    assert cpu.decide(Phase.SUGGEST).type == ActionType.SUGGEST
    cpu.position = Cell(1, 1)
    assert cpu.decide(Phase.SUGGEST).type == ActionType.END
    _disprove(cpu, "Study")
    cpu.position = "Study"
    assert cpu.decide(Phase.SUGGEST).type == ActionType.END


def test_accuses_only_when_solved(cpu):
    assert cpu.decide(Phase.END).type == ActionType.END
    _disprove(cpu, "Miss Scarlett", "Colonel Mustard", "Knife", "Wrench", "Hall", "Study")
    action = cpu.decide(Phase.END)
    assert action.type == ActionType.ACCUSE
    assert action.suggestion.suspect == "Mrs. White"
    assert action.suggestion.weapon == "Rope"
    assert action.suggestion.room == "Kitchen"


def test_classic_board_turn():
    cpu = EasyCpu("cpu1")
    topology = classic_board()
    nav = GridNavigator(topology)
    action = cpu.start_turn("Study", nav, Phase.ROLL)
    # Kitchen is the closest room from the Study: one step by passage
    assert action.type == ActionType.PASSAGE
    assert action.move_to == "Kitchen"
