"""Keyboard selection over the suggestion dropdown."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from typeahead.domain.value_objects import (
    NavigationEvent,
    SelectEvent,
    SubmitEvent,
    Suggestion,
)


class SelectionState(str, Enum):
    """Visibility state of the dropdown."""

    IDLE = "idle"  # Nothing typed or focused yet
    OPEN = "open"  # Dropdown visible, keyboard navigation active
    CLOSED = "closed"  # Dropdown hidden, selection discarded


class Key(str, Enum):
    """Keys the dropdown reacts to."""

    ARROW_DOWN = "ArrowDown"
    ARROW_UP = "ArrowUp"
    ENTER = "Enter"
    ESCAPE = "Escape"


NO_SELECTION = -1


@dataclass(frozen=True)
class SelectionOutcome:
    """Result of a transition: an optional event for the sink and a blur hint."""

    event: Optional[NavigationEvent] = None
    blur: bool = False


class SelectionStateMachine:
    """
    Tracks which suggestion is highlighted by keyboard and resolves
    Enter/Escape/Arrow semantics.

    The index lives in ``[-1, N-1]``; ``-1`` means free-form submit wins.
    In wrap mode ArrowDown on the last item returns to the first one and
    ArrowUp from "no selection" jumps to the last item. In clamp mode both
    stop at the boundary.
    """

    def __init__(self, wrap: bool = True):
        self.wrap = wrap
        self.state = SelectionState.IDLE
        self.index = NO_SELECTION
        self.query = ""
        self._items: List[Suggestion] = []

    @property
    def items(self) -> List[Suggestion]:
        return list(self._items)

    @property
    def is_open(self) -> bool:
        return self.state == SelectionState.OPEN

    @property
    def selected(self) -> Optional[Suggestion]:
        if self.index == NO_SELECTION:
            return None
        return self._items[self.index]

    def focus(self) -> None:
        self.state = SelectionState.OPEN

    def input(self, query: str) -> None:
        """Typing opens the dropdown and drops any keyboard selection."""
        self.query = query
        self.index = NO_SELECTION
        self.state = SelectionState.OPEN

    def update_items(self, items: Sequence[Suggestion]) -> None:
        """
        Replace the list and re-clamp the index.

        The selection survives only if the same suggestion is still at the
        same position; otherwise it resets to no selection rather than
        pointing at an unrelated item.
        """
        previous = self.selected
        self._items = list(items)

        if previous is None:
            self.index = NO_SELECTION
            return

        if self.index >= len(self._items) or self._items[self.index].id != previous.id:
            self.index = NO_SELECTION

    def key(self, key: str) -> SelectionOutcome:
        """Apply a key press."""
        try:
            pressed = Key(key)
        except ValueError:
            return SelectionOutcome()

        if pressed == Key.ARROW_DOWN:
            self._move_down()
            return SelectionOutcome()

        if pressed == Key.ARROW_UP:
            self._move_up()
            return SelectionOutcome()

        if pressed == Key.ENTER:
            return self._enter()

        self._close()
        return SelectionOutcome(blur=True)

    def hover(self, index: int) -> None:
        if self.is_open and 0 <= index < len(self._items):
            self.index = index

    def click(self, index: int) -> SelectionOutcome:
        """Pick the item under the pointer."""
        if not 0 <= index < len(self._items):
            return SelectionOutcome()
        target = self._items[index]
        self._close()
        return SelectionOutcome(event=SelectEvent(target=target))

    def click_outside(self) -> None:
        self._close()

    def _move_down(self) -> None:
        count = len(self._items)
        if not self.is_open or count == 0:
            return

        if self.index < count - 1:
            self.index += 1
        elif self.wrap:
            self.index = 0

    def _move_up(self) -> None:
        count = len(self._items)
        if not self.is_open or count == 0:
            return

        if self.index > NO_SELECTION:
            self.index -= 1
        elif self.wrap:
            self.index = count - 1

    def _enter(self) -> SelectionOutcome:
        if self.is_open and self.index != NO_SELECTION:
            target = self._items[self.index]
            self._close()
            return SelectionOutcome(event=SelectEvent(target=target))

        submitted = self.query.strip()
        if not submitted:
            return SelectionOutcome()

        self._close()
        return SelectionOutcome(event=SubmitEvent(query=submitted))

    def _close(self) -> None:
        self.state = SelectionState.CLOSED
        self.index = NO_SELECTION
