"""
AI-powered enrichment of collected stories against a user profile.

One batch call annotates every story; the response is merged back by id. The
output always has exactly one EnrichedStory per input RawStory.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from mindfeed.config import settings
from mindfeed.errors import EnrichmentUnavailable, PartialAnnotation
from mindfeed.models import EnrichedStory, RawStory, story_key
from mindfeed.schemas import StoryAnnotation, UserPreferences
from mindfeed.services.reasoning import ReasoningClient
from mindfeed.utils import clamp

logger = logging.getLogger(__name__)

# Filler for a story the service skipped or half-answered
MISSING_SUMMARY = "No summary available."
MISSING_ABSTRACT = "No detailed abstract available."
MISSING_RELEVANCE = 10
MISSING_REASON = ""

# Uniform annotation when the whole call fails
FALLBACK_SUMMARY = "AI analysis unavailable."
FALLBACK_ABSTRACT = "Unable to retrieve a detailed abstract."
FALLBACK_RELEVANCE = 0
FALLBACK_REASON = "Analysis service unavailable."

ANNOTATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "stories": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "summary": {"type": "string"},
                    "abstract": {"type": "string"},
                    "relevance_score": {"type": "integer"},
                    "reason": {"type": "string"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["id", "summary", "abstract", "relevance_score", "reason", "tags"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["stories"],
    "additionalProperties": False,
}


def build_story_payload(stories: Sequence[RawStory]) -> List[Dict[str, str]]:
    """Minimal projection of each story, to bound request size."""
    return [
        {"id": story.key, "title": story.title, "source": story.source, "url": story.url}
        for story in stories
    ]


def build_system_prompt(preferences: UserPreferences, language: Optional[str] = None) -> str:
    language = language or settings.OUTPUT_LANGUAGE
    return (
        "You are an intelligent news editor and personal curator. "
        "Analyze a list of technical articles from various sources (blogs, Hacker News, etc.) "
        "and curate them for the user.\n\n"
        "User profile:\n"
        f"- Interested topics: {', '.join(preferences.topics)}\n"
        f"- Blocked keywords: {', '.join(preferences.blocked_keywords)}\n"
        f"- Preferred complexity: {preferences.complexity_level}\n"
        f"- Preferred tone: {preferences.tone}\n"
        f"- User context: {preferences.additional_context}\n\n"
        "IMPORTANT: return exactly one annotation object for EVERY story in the input, "
        "using the story's id unchanged. Do not skip any story.\n\n"
        "Relevance score rules:\n"
        "- Specialized technical blogs are high quality; boost their score by default.\n"
        "- Content matching the user's specific stack scores 90 or above.\n"
        "- Content matching a blocked keyword scores low.\n\n"
        f"For each story, write in {language}:\n"
        "1. summary: a concise one-sentence hook (TL;DR).\n"
        "2. abstract: a detailed abstract-style summary of about 80-120 words.\n"
        "3. relevance_score: an integer from 0 to 100.\n"
        "4. reason: why this story is included (mention source quality where relevant).\n"
        "5. tags: 2-3 short topic tags."
    )


def parse_annotations(payload: Any) -> Dict[str, StoryAnnotation]:
    """
    Validate the structured response and index it by canonical story key.

    Args:
        payload: Decoded response, either a list or {"stories": [...]}

    Returns:
        Annotations keyed by story key; malformed elements are dropped

    Raises:
        EnrichmentUnavailable: If the payload has neither accepted shape
    """
    if isinstance(payload, dict):
        payload = payload.get("stories")
    if not isinstance(payload, list):
        raise EnrichmentUnavailable("Reasoning service did not return a list of annotations")

    annotations: Dict[str, StoryAnnotation] = {}
    for element in payload:
        try:
            annotation = StoryAnnotation.model_validate(element)
        except ValidationError as e:
            logger.warning("Dropping malformed annotation: %s", PartialAnnotation(str(e)))
            continue
        # First answer for an id wins
        annotations.setdefault(story_key(annotation.id), annotation)
    return annotations


def _normalize_tags(tags: Optional[Sequence[str]]) -> tuple:
    seen: List[str] = []
    for tag in tags or ():
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


def _raw_fields(story: RawStory) -> Dict[str, Any]:
    return {field.name: getattr(story, field.name) for field in dataclasses.fields(RawStory)}


def merge_story(story: RawStory, annotation: Optional[StoryAnnotation]) -> EnrichedStory:
    """Build the EnrichedStory for one story, filling each missing field with its default."""
    annotation = annotation or StoryAnnotation(id=story.key)
    score = annotation.relevance_score
    relevance = MISSING_RELEVANCE if score is None else clamp(score, 0, 100)

    return EnrichedStory(
        **_raw_fields(story),
        ai_summary=(annotation.summary or "").strip() or MISSING_SUMMARY,
        ai_abstract=(annotation.abstract or "").strip() or MISSING_ABSTRACT,
        relevance_score=relevance,
        recommendation_reason=(annotation.reason or "").strip() or MISSING_REASON,
        tags=_normalize_tags(annotation.tags),
    )


def merge_annotations(
    stories: Sequence[RawStory],
    annotations: Dict[str, StoryAnnotation],
) -> List[EnrichedStory]:
    """Merge annotations onto stories by id. One output per input, input order kept."""
    missing = [story.key for story in stories if story.key not in annotations]
    if missing:
        logger.warning(
            "Reasoning service skipped %d of %d stories: %s",
            len(missing), len(stories), ", ".join(missing),
        )
    return [merge_story(story, annotations.get(story.key)) for story in stories]


def fallback_annotations(stories: Sequence[RawStory]) -> List[EnrichedStory]:
    """Uniform 'analysis unavailable' annotation for every story."""
    return [
        EnrichedStory(
            **_raw_fields(story),
            ai_summary=FALLBACK_SUMMARY,
            ai_abstract=FALLBACK_ABSTRACT,
            relevance_score=FALLBACK_RELEVANCE,
            recommendation_reason=FALLBACK_REASON,
            tags=(),
        )
        for story in stories
    ]


def sort_by_relevance(stories: Sequence[EnrichedStory]) -> List[EnrichedStory]:
    return sorted(stories, key=lambda story: story.relevance_score, reverse=True)


async def enrich_stories(
    stories: Sequence[RawStory],
    preferences: UserPreferences,
    *,
    client: Optional[ReasoningClient] = None,
) -> List[EnrichedStory]:
    """
    Annotate every story and sort by relevance.

    Args:
        stories: Aggregated raw stories
        preferences: User profile to score against
        client: Reasoning client (defaults to one built from settings)

    Returns:
        EnrichedStory list, same length as ``stories``, relevance descending
    """
    if not stories:
        return []

    client = client or ReasoningClient()

    try:
        payload = await client.generate_json(
            build_system_prompt(preferences),
            build_story_payload(stories),
            ANNOTATION_SCHEMA,
        )
        annotations = parse_annotations(payload)
    except EnrichmentUnavailable as e:
        logger.error("Story analysis failed, using fallback annotations: %s", e)
        return fallback_annotations(stories)
    except Exception:
        logger.exception("Unexpected error during story analysis, using fallback annotations")
        return fallback_annotations(stories)

    return sort_by_relevance(merge_annotations(stories, annotations))
