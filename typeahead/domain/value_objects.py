"""Domain value objects shared by the suggestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class SuggestionCategory(str, Enum):
    """Category of a rendered suggestion row."""

    TAXONOMY = "taxonomy"
    ATTRIBUTE = "attribute"
    HISTORY = "history"


@dataclass(frozen=True)
class TaxonomySource:
    """A taxonomy node (subcategory) returned by the suggestion source."""

    id: str
    label: str
    parent_label: str
    icon: Optional[str] = None
    navigation_target: Optional[str] = None

    @property
    def kind(self) -> str:
        return "taxonomy"


@dataclass(frozen=True)
class AttributeSource:
    """An attribute value (brand, breed, ...) returned by the suggestion source."""

    field_name: str
    field_label: str
    value: str
    context_label: str
    icon: Optional[str] = None
    navigation_target: Optional[str] = None

    @property
    def kind(self) -> str:
        return "attribute"


SuggestionSource = Union[TaxonomySource, AttributeSource]


@dataclass(frozen=True)
class Suggestion:
    """Rendering-ready suggestion built by the aggregator."""

    id: str
    title: str
    category: SuggestionCategory
    subtitle: Optional[str] = None
    icon: Optional[str] = None
    navigation_target: Optional[str] = None


@dataclass(frozen=True)
class Segment:
    """Piece of a label, marked when it matches the typed needle."""

    text: str
    matched: bool


@dataclass(frozen=True)
class SelectEvent:
    """The user picked a suggestion."""

    target: Suggestion

    @property
    def type(self) -> str:
        return "select"


@dataclass(frozen=True)
class SubmitEvent:
    """The user submitted free-form text without picking a suggestion."""

    query: str

    def __post_init__(self):
        if not self.query.strip():
            raise ValueError("Submitted query must not be blank")

    @property
    def type(self) -> str:
        return "submit"


NavigationEvent = Union[SelectEvent, SubmitEvent]


@dataclass(frozen=True)
class RenderedSuggestion:
    """A suggestion row with highlight segments and selection state."""

    suggestion: Suggestion
    segments: Tuple[Segment, ...]
    selected: bool
