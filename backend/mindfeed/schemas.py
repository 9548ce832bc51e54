# mindfeed/schemas.py
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ComplexityLevel = Literal["beginner", "intermediate", "expert"]
Tone = Literal["neutral", "enthusiastic", "critical"]
FeedbackKind = Literal["liked", "disliked"]


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    topics: List[str] = Field(default_factory=list)
    blocked_keywords: List[str] = Field(default_factory=list)
    complexity_level: ComplexityLevel = "intermediate"
    tone: Tone = "neutral"
    additional_context: str = ""


DEFAULT_PREFERENCES = UserPreferences(
    topics=[
        "Robotics", "Embodied AI", "Large Language Models", "AI Agents",
        "AI Coding", "System Architecture", "C++", "Major News",
    ],
    blocked_keywords=["Politics", "Celebrity gossip", "Low-quality content"],
    complexity_level="expert",
    tone="neutral",
    additional_context=(
        "I am a software engineer focused on robotics, embodied AI, large language models, "
        "AI agents, AI coding, system architecture design and C/C++. I also follow major "
        "global news. Prefer high-quality, in-depth content with real technical insight."
    ),
)


class PreferencesUpdate(BaseModel):
    """Partial edit of the profile; omitted fields keep their current value."""

    topics: Optional[List[str]] = None
    blocked_keywords: Optional[List[str]] = None
    complexity_level: Optional[ComplexityLevel] = None
    tone: Optional[Tone] = None
    additional_context: Optional[str] = None


class StoryAnnotation(BaseModel):
    """One element of the reasoning service's structured response."""

    id: Union[str, int]
    summary: Optional[str] = None
    abstract: Optional[str] = None
    relevance_score: Optional[int] = None
    reason: Optional[str] = None
    tags: Optional[List[str]] = None

    # Malformed fields degrade to None so the merge can fill them individually

    @field_validator("summary", "abstract", "reason", mode="before")
    @classmethod
    def _text_or_none(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _score_or_none(cls, value):
        if isinstance(value, bool):
            return None
        try:
            return round(float(value))
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator("tags", mode="before")
    @classmethod
    def _string_tags_or_none(cls, value):
        if not isinstance(value, list):
            return None
        return [tag for tag in value if isinstance(tag, str)]


class StoryOut(BaseModel):
    id: Union[str, int]
    title: str
    url: str
    source: str
    author: Optional[str] = None
    publish_date: Optional[str] = None
    score: Optional[int] = None
    ai_summary: str
    ai_abstract: str
    relevance_score: int
    recommendation_reason: str = Field(default="")
    tags: List[str] = Field(default_factory=list)
    feedback: Optional[FeedbackKind] = None


class SourceOut(BaseModel):
    name: str
    web_url: str
    count: int
    selected: bool


class TagOut(BaseModel):
    tag: str
    count: int
    selected: bool


class DigestResponse(BaseModel):
    as_of: Optional[str] = None
    loading: bool
    learning: bool
    total: int
    visible: int
    sources: List[SourceOut]
    tags: List[TagOut]
    stories: List[StoryOut]


class FeedbackRequest(BaseModel):
    story_id: Union[str, int]
    kind: FeedbackKind
