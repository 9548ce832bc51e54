"""
Source x tag filtering over the enriched collection.

Selection changes are pure functions returning a new FilterState. Every
derived value (visible stories, counts) is recomputed from the current state
and collection on each call, so nothing can drift out of date.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from mindfeed.models import EnrichedStory, SourceConfig


@dataclass(frozen=True)
class FilterState:
    selected_sources: FrozenSet[str] = frozenset()
    # Empty means no tag filter, not "match nothing"
    selected_tags: FrozenSet[str] = frozenset()


def _names(registry: Iterable[SourceConfig]) -> List[str]:
    return [source.name for source in registry]


def _flip(selection: FrozenSet[str], value: str) -> FrozenSet[str]:
    return selection ^ {value}


def initial_state(registry: Sequence[SourceConfig]) -> FilterState:
    """Every registered source selected, no tag filter."""
    return FilterState(selected_sources=frozenset(_names(registry)))


def toggle_source(state: FilterState, name: str) -> FilterState:
    return replace(state, selected_sources=_flip(state.selected_sources, name))


def toggle_tag(state: FilterState, tag: str) -> FilterState:
    return replace(state, selected_tags=_flip(state.selected_tags, tag))


def solo_source(state: FilterState, name: str) -> FilterState:
    return replace(state, selected_sources=frozenset({name}))


def solo_tag(state: FilterState, tag: str) -> FilterState:
    return replace(state, selected_tags=frozenset({tag}))


def select_all_sources(state: FilterState, registry: Sequence[SourceConfig]) -> FilterState:
    return replace(state, selected_sources=frozenset(_names(registry)))


def invert_sources(state: FilterState, registry: Sequence[SourceConfig]) -> FilterState:
    """Complement over the whole registry, including sources with no stories right now."""
    inverted = [name for name in _names(registry) if name not in state.selected_sources]
    return replace(state, selected_sources=frozenset(inverted))


def clear_tags(state: FilterState) -> FilterState:
    return replace(state, selected_tags=frozenset())


def stories_in_sources(stories: Sequence[EnrichedStory], state: FilterState) -> List[EnrichedStory]:
    return [story for story in stories if story.source in state.selected_sources]


def visible_stories(stories: Sequence[EnrichedStory], state: FilterState) -> List[EnrichedStory]:
    """Stories from a selected source that carry any selected tag (or all, with no tag filter)."""
    by_source = stories_in_sources(stories, state)
    if not state.selected_tags:
        return by_source
    return [story for story in by_source if state.selected_tags.intersection(story.tags)]


def source_counts(stories: Sequence[EnrichedStory], registry: Sequence[SourceConfig]) -> Dict[str, int]:
    """Stories per registered source over the full collection, independent of selection."""
    counts = {name: 0 for name in _names(registry)}
    for story in stories:
        if story.source in counts:
            counts[story.source] += 1
    return counts


def tag_counts(stories: Sequence[EnrichedStory], state: FilterState) -> List[Tuple[str, int]]:
    """
    Tag frequencies over the source-filtered subset, most frequent first.

    The tag selection itself is not applied, so the palette reflects the
    current source selection only. Ties keep first-appearance order.
    """
    counts: Dict[str, int] = {}
    for story in stories_in_sources(stories, state):
        for tag in story.tags:
            counts[tag] = counts.get(tag, 0) + 1
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


VALUE_ACTIONS = {
    "toggle_source": toggle_source,
    "solo_source": solo_source,
    "toggle_tag": toggle_tag,
    "solo_tag": solo_tag,
}
REGISTRY_ACTIONS = {
    "select_all_sources": select_all_sources,
    "invert_sources": invert_sources,
}
PLAIN_ACTIONS = {
    "clear_tags": clear_tags,
}
