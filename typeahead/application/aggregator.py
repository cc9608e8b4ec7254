"""
Suggestion Aggregator

Normalizes taxonomy and attribute suggestions (or the search history when
nothing is typed) into one ordered, capped, rendering-ready list.
"""

from typing import Dict, List, Sequence

from typeahead.domain.value_objects import (
    AttributeSource,
    Suggestion,
    SuggestionCategory,
    SuggestionSource,
    TaxonomySource,
)

HISTORY_ICON = "history"
HISTORY_SUBTITLE = "Recent search"
TAXONOMY_ICON = "subcategory"
GENERIC_ATTRIBUTE_ICON = "attribute"

# Attribute field names (as sent by the source) -> semantic icon
ATTRIBUTE_ICONS: Dict[str, str] = {
    "marca": "brand",
    "brand": "brand",
    "raza": "breed",
    "breed": "breed",
    "tipobovino": "livestock",
    "tipoequino": "livestock",
    "tipoovino": "livestock",
    "tipoporcino": "livestock",
    "modelo": "model",
    "model": "model",
    "provincia": "location",
    "localidad": "location",
    "ubicacion": "location",
    "location": "location",
}


def attribute_icon(field_name: str) -> str:
    """Icon for an attribute field, falling back to the generic one."""
    return ATTRIBUTE_ICONS.get((field_name or "").strip().lower(), GENERIC_ATTRIBUTE_ICON)


def merge(
    remote: Sequence[SuggestionSource],
    history: Sequence[str],
    query: str,
    limit: int = 5
) -> List[Suggestion]:
    """
    Build the dropdown list.

    With a blank query the list is the search history (most recent first),
    capped at ``limit``. Otherwise it is built from ``remote`` only: taxonomy
    entries first, then attribute entries, each group in source order,
    deduplicated by title (first occurrence wins) and capped at ``limit * 2``.

    Args:
        remote: Items returned by the suggestion source
        history: Remembered searches, most recent first
        query: Current raw input
        limit: Per-category limit used for the request

    Returns:
        New list of suggestions; inputs are never mutated
    """
    if not query.strip():
        return [
            Suggestion(
                id=f"history-{idx}",
                title=term,
                category=SuggestionCategory.HISTORY,
                subtitle=HISTORY_SUBTITLE,
                icon=HISTORY_ICON,
            )
            for idx, term in enumerate(history[:limit])
        ]

    taxonomy: List[Suggestion] = []
    attributes: List[Suggestion] = []

    for index, item in enumerate(remote):
        if isinstance(item, TaxonomySource):
            taxonomy.append(_from_taxonomy(item))
        elif isinstance(item, AttributeSource):
            attributes.append(_from_attribute(item, index))

    merged: List[Suggestion] = []
    seen_titles = set()
    for suggestion in taxonomy + attributes:
        if suggestion.title in seen_titles:
            continue
        seen_titles.add(suggestion.title)
        merged.append(suggestion)

    return merged[:limit * 2]


def _from_taxonomy(item: TaxonomySource) -> Suggestion:
    return Suggestion(
        id=item.id,
        title=item.label,
        category=SuggestionCategory.TAXONOMY,
        subtitle=item.parent_label or None,
        icon=item.icon or TAXONOMY_ICON,
        navigation_target=item.navigation_target,
    )


def _from_attribute(item: AttributeSource, index: int) -> Suggestion:
    return Suggestion(
        id=f"{item.field_name}-{item.value}-{index}",
        title=item.value,
        category=SuggestionCategory.ATTRIBUTE,
        subtitle=f"{item.field_label} in {item.context_label}",
        icon=_attribute_row_icon(item),
        navigation_target=item.navigation_target,
    )


def _attribute_row_icon(item: AttributeSource) -> str:
    icon = attribute_icon(item.field_name)
    if icon == GENERIC_ATTRIBUTE_ICON and item.icon:
        return item.icon
    return icon
