"""
Feedback-driven rewrite of the free-text profile context.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from mindfeed.errors import EnrichmentUnavailable, RefinementFailure
from mindfeed.models import RawStory
from mindfeed.schemas import UserPreferences
from mindfeed.services.reasoning import ReasoningClient

logger = logging.getLogger(__name__)


def _describe(stories: Sequence[RawStory]) -> str:
    return "; ".join(f"[{story.source}] {story.title}" for story in stories)


def build_refinement_prompt(
    preferences: UserPreferences,
    liked: Sequence[RawStory],
    disliked: Sequence[RawStory],
) -> str:
    return (
        f'Current user context: "{preferences.additional_context}"\n\n'
        "Interaction data:\n"
        f"LIKED: {_describe(liked)}\n"
        f"DISLIKED: {_describe(disliked)}\n\n"
        "Rewrite the user context so it describes the user's interests more accurately. "
        "If they like specialized technical blogs (Karpathy, etc.), emphasize deep learning theory. "
        "Keep the same tone and language as the current context. "
        "Reply with the new context only, no preamble."
    )


async def refine_preferences(
    preferences: UserPreferences,
    liked: Sequence[RawStory],
    disliked: Sequence[RawStory],
    *,
    client: Optional[ReasoningClient] = None,
) -> str:
    """
    Ask the reasoning service to rewrite the profile context from feedback.

    Args:
        preferences: Current profile
        liked: Stories the user liked
        disliked: Stories the user disliked

    Returns:
        The rewritten context, or the current one unchanged on failure
    """
    client = client or ReasoningClient()
    prompt = build_refinement_prompt(preferences, liked, disliked)

    try:
        new_context = (await client.generate_text(prompt)).strip()
        if not new_context:
            raise RefinementFailure("Empty rewrite")
    except (EnrichmentUnavailable, RefinementFailure) as e:
        logger.error("Failed to refine preferences, keeping current context: %s", e)
        return preferences.additional_context
    except Exception:
        logger.exception("Unexpected error refining preferences, keeping current context")
        return preferences.additional_context

    return new_context
