"""Domain layer package exposing pure typeahead abstractions."""

from . import interfaces
from .highlight import highlight
from .selection import SelectionStateMachine
from .value_objects import Suggestion, SuggestionCategory

__all__ = [
    "interfaces",
    "highlight",
    "SelectionStateMachine",
    "Suggestion",
    "SuggestionCategory",
]
