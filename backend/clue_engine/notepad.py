"""Deduction notepad: one CPU player's private belief over the hidden solution."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from .deck import CLASSIC_DECK, Category
from .models import NotepadState, Suggestion

logger = logging.getLogger(__name__)


class Notepad(BaseModel):
    """Tri-state marks per category value, plus the working accusation draft.

    At most one value per category may be proved; ``evaluate`` repairs any
    state that breaks this and proves values by elimination.
    """

    entries: dict[Category, dict[str, NotepadState]]
    accusation_draft: dict[Category, Optional[str]] = Field(default_factory=dict)

    @classmethod
    def for_deck(cls, deck: dict[Category, list[str]] = CLASSIC_DECK) -> Notepad:
        return cls(
            entries={
                category: {value: NotepadState.UNKNOWN for value in values}
                for category, values in deck.items()
            },
            accusation_draft={category: None for category in deck},
        )

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def category_of(self, value: str) -> Category:
        for category, values in self.entries.items():
            if value in values:
                return category
        raise ValueError(f"Unknown card: {value!r}")

    def state_of(self, value: str) -> NotepadState:
        return self.entries[self.category_of(value)][value]

    def mark(self, value: str, state: NotepadState):
        self.entries[self.category_of(value)][value] = state

    def values_in_state(self, category: Category, state: NotepadState) -> list[str]:
        return [v for v, s in self.entries[category].items() if s == state]

    def possible(self, category: Category) -> list[str]:
        """Values not yet disproved, in deck order."""
        return [
            v for v, s in self.entries[category].items() if s != NotepadState.DISPROVED
        ]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self):
        for category in self.entries:
            self._evaluate_category(category)

    def _evaluate_category(self, category: Category):
        proved = self.values_in_state(category, NotepadState.PROVED)
        if len(proved) == 1:
            self.accusation_draft[category] = proved[0]
            return
        if len(proved) > 1:
            logger.warning(
                "[notepad] %d %s values proved at once (%s); resetting to unknown",
                len(proved), category.value, proved,
            )
            for value in proved:
                self.entries[category][value] = NotepadState.UNKNOWN

        self.accusation_draft[category] = None
        possible = self.possible(category)
        if len(possible) == 1:
            self.entries[category][possible[0]] = NotepadState.PROVED
            self.accusation_draft[category] = possible[0]
            logger.info("[notepad] %s proved by elimination: %s", category.value, possible[0])

    def is_solved(self) -> bool:
        return all(
            len(self.values_in_state(category, NotepadState.PROVED)) == 1
            for category in self.entries
        )

    def accusation(self) -> Optional[Suggestion]:
        """The drafted triple, or None while any category is still open."""
        if not self.is_solved():
            return None
        if any(self.accusation_draft.get(category) is None for category in self.entries):
            return None
        return Suggestion(
            suspect=self.accusation_draft[Category.SUSPECT],
            weapon=self.accusation_draft[Category.WEAPON],
            room=self.accusation_draft[Category.ROOM],
        )
