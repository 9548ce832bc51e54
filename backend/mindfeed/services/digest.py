"""
Digest session: the state an interactive client works against.

Holds the enriched collection, filter selection, feedback markers and the
user profile, and wires refresh/feedback into the pipeline. All mutation
happens on the event loop, which serializes it; a threaded host would need a
lock around ``preferences``.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple

from mindfeed.config import all_sources
from mindfeed.core import filters
from mindfeed.core.filters import FilterState
from mindfeed.models import EnrichedStory, RawStory, SourceConfig, StoryId, story_key
from mindfeed.schemas import FeedbackKind, UserPreferences
from mindfeed.services.enrichment import enrich_stories
from mindfeed.services.preferences_store import PreferencesStore
from mindfeed.services.reasoning import ReasoningClient
from mindfeed.services.refiner import refine_preferences
from mindfeed.sources.collector import collect_stories
from mindfeed.utils import now_utc

logger = logging.getLogger(__name__)

Collector = Callable[[], Awaitable[List[RawStory]]]
Enricher = Callable[[Sequence[RawStory], UserPreferences], Awaitable[List[EnrichedStory]]]
Refiner = Callable[[UserPreferences, Sequence[RawStory], Sequence[RawStory]], Awaitable[str]]


@dataclass
class DigestView:
    """Snapshot of everything derived from the current state."""

    stories: List[EnrichedStory]
    total: int
    source_counts: Dict[str, int]
    tag_counts: List[Tuple[str, int]]
    state: FilterState
    feedback: Dict[str, FeedbackKind] = field(default_factory=dict)


class UnknownFilterAction(ValueError):
    pass


class DigestSession:
    def __init__(
        self,
        store: PreferencesStore,
        *,
        registry: Optional[Sequence[SourceConfig]] = None,
        collector: Optional[Collector] = None,
        enricher: Optional[Enricher] = None,
        refiner: Optional[Refiner] = None,
        reasoning: Optional[ReasoningClient] = None,
    ):
        self.store = store
        self.registry: List[SourceConfig] = list(registry or all_sources())
        # One reasoning client for the session's lifetime, closed by close()
        self.reasoning = reasoning or ReasoningClient()
        self.collector = collector or collect_stories
        self.enricher = enricher or functools.partial(enrich_stories, client=self.reasoning)
        self.refiner = refiner or functools.partial(refine_preferences, client=self.reasoning)

        self.preferences: UserPreferences = store.load()
        self.stories: List[EnrichedStory] = []
        self.state: FilterState = filters.initial_state(self.registry)
        self.feedback: Dict[str, FeedbackKind] = {}
        self.as_of: Optional[datetime] = None
        self._refreshing = 0
        self._learning: Set[asyncio.Task] = set()

    # --- Pipeline ---------------------------------------------------------

    @property
    def loading(self) -> bool:
        return self._refreshing > 0

    @property
    def learning(self) -> bool:
        return bool(self._learning)

    async def refresh(self) -> List[EnrichedStory]:
        """
        Run a full collect -> enrich cycle.

        Uses the profile as it stood when the cycle started. Overlapping
        cycles are allowed; whichever settles last wins.
        """
        preferences = self.preferences
        self._refreshing += 1
        try:
            raw = await self.collector()
            logger.info("Enriching %d stories", len(raw))
            enriched = await self.enricher(raw, preferences)
        finally:
            self._refreshing -= 1

        self.stories = enriched
        self.as_of = now_utc()
        return enriched

    # --- Preferences ------------------------------------------------------

    def _set_preferences(self, preferences: UserPreferences) -> None:
        self.preferences = preferences
        self.store.save(preferences)

    def update_preferences(self, **changes) -> UserPreferences:
        """Apply a direct edit. The result is validated as a whole before it is swapped in."""
        updated = UserPreferences.model_validate({**self.preferences.model_dump(), **changes})
        self._set_preferences(updated)
        return updated

    def find_story(self, story_id: StoryId) -> Optional[EnrichedStory]:
        key = story_key(story_id)
        return next((story for story in self.stories if story.key == key), None)

    def record_feedback(self, story_id: StoryId, kind: FeedbackKind) -> Optional[asyncio.Task]:
        """
        Mark a story liked/disliked and start a background profile rewrite.

        The rewrite is never awaited here; it updates the profile for the
        next refresh when it completes.
        """
        story = self.find_story(story_id)
        if story is None:
            logger.warning("Feedback for unknown story %s ignored", story_id)
            return None

        self.feedback[story.key] = kind
        liked = [story] if kind == "liked" else []
        disliked = [story] if kind == "disliked" else []

        task = asyncio.get_running_loop().create_task(self._learn(liked, disliked))
        self._learning.add(task)
        task.add_done_callback(self._learning.discard)
        return task

    async def _learn(self, liked: List[RawStory], disliked: List[RawStory]) -> None:
        new_context = await self.refiner(self.preferences, liked, disliked)
        if new_context == self.preferences.additional_context:
            return
        # Apply onto whatever the profile is now, other edits may have landed meanwhile
        try:
            self._set_preferences(self.preferences.model_copy(update={"additional_context": new_context}))
        except OSError as e:
            logger.error("Failed to persist refined preferences: %s", e)
        else:
            logger.info("Profile context refined from %s feedback", "liked" if liked else "disliked")

    async def wait_for_learning(self) -> None:
        if self._learning:
            await asyncio.gather(*self._learning, return_exceptions=True)

    async def close(self) -> None:
        """Let pending refinements finish, then release the reasoning client."""
        await self.wait_for_learning()
        await self.reasoning.aclose()

    # --- Filters ----------------------------------------------------------

    def apply(self, action: str, value: Optional[str] = None) -> FilterState:
        """Apply a named filter action to the selection."""
        if action in filters.VALUE_ACTIONS:
            if not value:
                raise UnknownFilterAction(f"Filter action {action!r} needs a value")
            self.state = filters.VALUE_ACTIONS[action](self.state, value)
        elif action in filters.REGISTRY_ACTIONS:
            self.state = filters.REGISTRY_ACTIONS[action](self.state, self.registry)
        elif action in filters.PLAIN_ACTIONS:
            self.state = filters.PLAIN_ACTIONS[action](self.state)
        else:
            raise UnknownFilterAction(f"Unknown filter action {action!r}")
        return self.state

    def view(self) -> DigestView:
        return DigestView(
            stories=filters.visible_stories(self.stories, self.state),
            total=len(self.stories),
            source_counts=filters.source_counts(self.stories, self.registry),
            tag_counts=filters.tag_counts(self.stories, self.state),
            state=self.state,
            feedback=dict(self.feedback),
        )
