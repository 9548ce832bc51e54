"""
Application configuration with environment variable support.
"""
from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from mindfeed.models import SourceConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Reasoning service
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.3
    OUTPUT_LANGUAGE: str = "English"

    # Sources
    HN_BASE_URL: str = "https://hacker-news.firebaseio.com/v0"
    HN_STORY_LIMIT: int = 12
    FEED_BRIDGE_URL: str = "https://api.rss2json.com/v1/api.json"
    FEED_ITEM_LIMIT: int = 2
    HTTP_TIMEOUT: float = 15.0

    # Preferences store
    PREFERENCES_PATH: str = "mindfeed_prefs.json"
    PREFERENCES_NAMESPACE: str = "mindfeed_preferences"

    # Server
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


settings = Settings()


# HTTP Client Configuration
USER_AGENT = "mindfeed/0.1 (+https://github.com/mindfeed)"
HTTP_HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/json"}

HACKER_NEWS = SourceConfig(
    name="Hacker News",
    feed_url=None,
    web_url="https://news.ycombinator.com/",
)

# Syndicated feeds, fetched through the feed-to-JSON bridge
BLOG_FEEDS: List[SourceConfig] = [
    # Research blogs
    SourceConfig("Andrej Karpathy", "https://karpathy.github.io/feed.xml", "https://karpathy.github.io/"),
    SourceConfig("Scientific Spaces (Su Jianlin)", "https://kexue.fm/feed", "https://kexue.fm/"),
    SourceConfig("OpenAI Blog", "https://openai.com/index/rss.xml", "https://openai.com/news/"),
    SourceConfig("Hugging Face Blog", "https://huggingface.co/blog/feed.xml", "https://huggingface.co/blog"),

    # Model labs
    SourceConfig("Google DeepMind", "https://deepmind.google/blog/rss.xml", "https://deepmind.google/blog/"),
    SourceConfig("Qwen Blog", "https://qwenlm.github.io/feed.xml", "https://qwenlm.github.io/"),
    SourceConfig("Synced Review", "https://syncedreview.com/feed/", "https://syncedreview.com/"),

    # Robotics & embodied AI
    SourceConfig("IEEE Robotics", "https://spectrum.ieee.org/feeds/topic/robotics.rss", "https://spectrum.ieee.org/robotics"),
    SourceConfig("BAIR (Berkeley)", "https://bair.berkeley.edu/blog/feed.xml", "https://bair.berkeley.edu/blog/"),
    SourceConfig("MIT Robotics", "https://news.mit.edu/rss/topic/robotics", "https://news.mit.edu/topic/robotics"),
    SourceConfig("NVIDIA Blog", "https://blogs.nvidia.com/feed/", "https://blogs.nvidia.com/"),
]


def all_sources() -> List[SourceConfig]:
    """Full source registry: the ranked API first, then every blog feed."""
    return [HACKER_NEWS, *BLOG_FEEDS]


def source_names() -> List[str]:
    return [source.name for source in all_sources()]
