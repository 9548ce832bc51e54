"""
Failure taxonomy for the digest pipeline.

None of these is fatal to a refresh cycle: each is raised close to where the
failure happens and recovered at the nearest component boundary.
"""
from __future__ import annotations


class MindFeedError(Exception):
    """Base class for pipeline errors."""


class SourceUnavailable(MindFeedError):
    """An adapter could not fetch or parse its source. Recovered as an empty contribution."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class EnrichmentUnavailable(MindFeedError):
    """The reasoning service call failed or returned unparsable output."""


class PartialAnnotation(MindFeedError):
    """The reasoning service omitted or malformed some annotations."""


class RefinementFailure(MindFeedError):
    """The profile rewrite call failed."""
