"""Clue CPU players: automated decision policies driven by the navigator.

CpuPolicy defines the shared interface and notepad bookkeeping.
EasyCpu walks toward the nearest room it has not ruled out, suggests with
its best current beliefs and accuses once every category is proved.

Every choice is deterministic: ties fall back to path length, then room
name, then deck order, so a game replays identically from the same dice.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Optional

from .board import Cell, Position, is_cell
from .deck import CLASSIC_DECK, Category
from .models import Action, NotepadState, Phase, Suggestion
from .navigator import AvailableMoves, GridNavigator, Path
from .notepad import Notepad

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class CpuPolicy(ABC):
    """Abstract base for CPU players.

    Owns a private ``Notepad`` that only this player's observation hooks
    change.  Subclasses implement the per-phase decisions.
    """

    agent_type: str = "base"

    def __init__(self, player_id: str, deck: dict[Category, list[str]] = CLASSIC_DECK):
        self.player_id = player_id
        self.deck = deck
        self.notepad = Notepad.for_deck(deck)
        self.hand: set[str] = set()
        self.shown_to: dict[str, set[str]] = {}
        self.position: Optional[Position] = None
        self.navigator: Optional[GridNavigator] = None
        logger.info("[%s:%s] CPU player created", self.agent_type, player_id)

    # ------------------------------------------------------------------
    # Observations (shared by all policies)
    # ------------------------------------------------------------------

    def observe_own_cards(self, cards: list[str]):
        """Called once at game start with the dealt hand."""
        self.hand.update(cards)
        for card in cards:
            self.notepad.mark(card, NotepadState.DISPROVED)
        self.notepad.evaluate()
        logger.info(
            "[%s:%s] Received hand: %s (%d cards)",
            self.agent_type, self.player_id, cards, len(cards),
        )

    def observe_shown_card(self, card: str, shown_by: Optional[str] = None):
        """Called when another player shows us a card."""
        is_new = self.notepad.state_of(card) != NotepadState.DISPROVED
        self.notepad.mark(card, NotepadState.DISPROVED)
        self.notepad.evaluate()
        logger.info(
            "[%s:%s] Card shown by %s: '%s' (new_info=%s)",
            self.agent_type, self.player_id, shown_by, card, is_new,
        )

    def observe_suggestion_no_show(self, suspect: str, weapon: str, room: str):
        """Called when nobody could disprove one of our own suggestions.

        Any of the three cards we do not hold ourselves must be in the
        solution.
        """
        for card in (suspect, weapon, room):
            if card not in self.hand:
                self.notepad.mark(card, NotepadState.PROVED)
        self.notepad.evaluate()
        logger.info(
            "[%s:%s] Unrefuted suggestion: %s / %s / %s",
            self.agent_type, self.player_id, suspect, weapon, room,
        )

    def observe_position(self, position: Optional[Position]):
        """Called by the turn engine whenever this player's token moves."""
        self.position = position

    # ------------------------------------------------------------------
    # Decision interface
    # ------------------------------------------------------------------

    @abstractmethod
    def start_turn(self, position: Position, navigator: GridNavigator, phase: Phase) -> Action:
        """Plan the turn and return the action for its first phase."""
        ...

    @abstractmethod
    def decide(
        self,
        phase: Phase,
        available_moves: Optional[AvailableMoves] = None,
        navigator: Optional[GridNavigator] = None,
    ) -> Action:
        """Return the action for the given turn phase."""
        ...

    @abstractmethod
    def choose_card_to_reveal(self, cards: list[str], requester: str) -> str:
        """Pick which matching card to show a suggesting player."""
        ...


# ---------------------------------------------------------------------------
# EasyCpu
# ---------------------------------------------------------------------------


class EasyCpu(CpuPolicy):
    """Rule-based CPU that heads for the closest room it has not ruled out.

    1. **Target** the reachable, undisproved room with the shortest route.
    2. **Move** as far along that route as this roll allows.
    3. **Suggest** in undisproved rooms, naming a proved value when there is
       one, otherwise the least-suggested undisproved value.
    4. **Accuse** only when the notepad has proved all three categories.
    """

    agent_type = "easy"

    def __init__(self, player_id: str, deck: dict[Category, list[str]] = CLASSIC_DECK):
        super().__init__(player_id, deck)
        self.target_path: Optional[Path] = None
        self.suggestion: Optional[Suggestion] = None
        self._times_suggested: Counter = Counter()

    # ------------------------------------------------------------------
    # Turn planning
    # ------------------------------------------------------------------

    def start_turn(self, position: Position, navigator: GridNavigator, phase: Phase) -> Action:
        self.position = position
        self.navigator = navigator
        room_paths = navigator.routes_to_rooms(position)
        self.target_path = self._pick_target_path(room_paths)
        logger.info(
            "[%s:%s] Turn start at %s | target=%s (%s steps)",
            self.agent_type, self.player_id, position,
            self.target_path[-1] if self.target_path else None,
            len(self.target_path) - 1 if self.target_path else "-",
        )
        return self.decide(phase)

    def _pick_target_path(self, room_paths: dict[str, Optional[Path]]) -> Optional[Path]:
        """Pick the route to follow this turn.

        Priority:
        1. The only reachable room, even if disproved
        2. The undisproved room with the shortest route (ties by room name)
        3. Any reachable room with the shortest route
        """
        reachable = {room: path for room, path in room_paths.items() if path is not None}
        if not reachable:
            return None
        if len(reachable) == 1:
            return next(iter(reachable.values()))

        disproved = set(self.notepad.values_in_state(Category.ROOM, NotepadState.DISPROVED))
        candidates = {r: p for r, p in reachable.items() if r not in disproved} or reachable
        room = min(candidates, key=lambda r: (len(candidates[r]), r))
        return candidates[room]

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(
        self,
        phase: Phase,
        available_moves: Optional[AvailableMoves] = None,
        navigator: Optional[GridNavigator] = None,
    ) -> Action:
        if navigator is not None:
            self.navigator = navigator

        if phase in (Phase.ROLL, Phase.ROLL_OR_SUGGEST):
            action = self._roll_phase(phase)
        elif phase == Phase.MOVE:
            destination = self._choose_space_to_move(available_moves)
            action = Action.end() if destination is None else Action.move(destination)
        elif phase == Phase.SUGGEST:
            action = self._suggest_or_end()
        elif phase == Phase.END:
            accusation = self.notepad.accusation()
            action = Action.end() if accusation is None else Action.accuse(accusation)
        else:
            raise ValueError(f"Unknown phase: {phase}")

        logger.info(
            "[%s:%s] %s -> %s", self.agent_type, self.player_id, phase.value, action.type.value
        )
        return action

    def _roll_phase(self, phase: Phase) -> Action:
        # A suggestion in the current room comes before taking its secret passage
        if phase == Phase.ROLL_OR_SUGGEST and self._can_suggest():
            return Action.suggest(self.make_suggestion())
        if self.target_path is None:
            return Action.end()
        if _is_passage(self.target_path):
            return Action.passage(self.target_path[1])
        return Action.roll()

    def _suggest_or_end(self) -> Action:
        if self._can_suggest():
            return Action.suggest(self.make_suggestion())
        return Action.end()

    def _can_suggest(self) -> bool:
        return (
            isinstance(self.position, str)
            and self.notepad.state_of(self.position) != NotepadState.DISPROVED
        )

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def _choose_space_to_move(self, moves: Optional[AvailableMoves]) -> Optional[Position]:
        if not moves or not (moves.cells or moves.rooms):
            return None

        choice = _furthest_on_path(self.target_path, moves)
        if choice is None and self.target_path is not None and self.navigator is not None:
            # Another token has blocked the planned route since it was made
            room = self.target_path[-1]
            self.target_path = self.navigator.find_path_to_room(self.position, room)
            logger.info(
                "[%s:%s] Route to %s went stale, recomputed (%s)",
                self.agent_type, self.player_id, room,
                "found" if self.target_path else "none",
            )
            choice = _furthest_on_path(self.target_path, moves)
        if choice is None:
            choice = self._closest_destination(moves)
        return choice

    def _closest_destination(self, moves: AvailableMoves) -> Position:
        """Any legal destination, preferring the planned room and then proximity to it."""
        room = self.target_path[-1] if self.target_path else None
        if room is not None and room in moves.rooms:
            return room
        disproved = set(self.notepad.values_in_state(Category.ROOM, NotepadState.DISPROVED))
        for candidate in sorted(moves.rooms):
            if candidate not in disproved:
                return candidate
        destinations = moves.destinations()
        if room is None or self.navigator is None or not moves.cells:
            return destinations[0]

        def distance(cell: Cell) -> float:
            d = self.navigator.distance_to_room(cell, room)
            return float("inf") if d is None else d

        return min(sorted(moves.cells), key=distance)

    # ------------------------------------------------------------------
    # Suggestions and cards
    # ------------------------------------------------------------------

    def make_suggestion(self) -> Suggestion:
        self.suggestion = Suggestion(
            suspect=self._choose_subject(Category.SUSPECT),
            weapon=self._choose_subject(Category.WEAPON),
            room=self.position,
        )
        self._times_suggested.update([self.suggestion.suspect, self.suggestion.weapon])
        logger.info(
            "[%s:%s] Suggesting %s / %s / %s",
            self.agent_type, self.player_id,
            self.suggestion.suspect, self.suggestion.weapon, self.suggestion.room,
        )
        return self.suggestion

    def _choose_subject(self, category: Category) -> str:
        proved = self.notepad.values_in_state(category, NotepadState.PROVED)
        if len(proved) == 1:
            return proved[0]
        possible = self.notepad.possible(category) or list(self.deck[category])
        order = {value: index for index, value in enumerate(possible)}
        return min(possible, key=lambda v: (self._times_suggested[v], order[v]))

    def choose_card_to_reveal(self, cards: list[str], requester: str) -> str:
        """Prefer a card the requester has already seen, otherwise the first in deck order."""
        already_known = self.shown_to.get(requester, set())
        for card in cards:
            if card in already_known:
                logger.info(
                    "[%s:%s] Showing '%s' (already known to %s)",
                    self.agent_type, self.player_id, card, requester,
                )
                return card

        deck_order = [v for values in self.deck.values() for v in values]
        card = min(cards, key=lambda c: deck_order.index(c) if c in deck_order else len(deck_order))
        self.shown_to.setdefault(requester, set()).add(card)
        logger.info(
            "[%s:%s] Showing '%s' (new info for %s)",
            self.agent_type, self.player_id, card, requester,
        )
        return card


def _is_passage(path: Path) -> bool:
    return len(path) == 2 and not is_cell(path[0]) and not is_cell(path[1])


def _furthest_on_path(path: Optional[Path], moves: AvailableMoves) -> Optional[Position]:
    """The furthest position along ``path`` (after its start) that this roll can land on."""
    if not path:
        return None
    selected = None
    for position in path[1:]:
        if moves.is_available(position):
            selected = position
    return selected
