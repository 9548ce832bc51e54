"""
Main FastAPI application and routing layer.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from mindfeed.config import settings
from mindfeed.models import EnrichedStory
from mindfeed.schemas import (
    DigestResponse,
    FeedbackRequest,
    PreferencesUpdate,
    SourceOut,
    StoryOut,
    TagOut,
    UserPreferences,
)
from mindfeed.services.digest import DigestSession, DigestView, UnknownFilterAction
from mindfeed.services.preferences_store import PreferencesStore
from mindfeed.utils import now_utc

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


def story_to_schema(story: EnrichedStory, view: DigestView) -> StoryOut:
    return StoryOut(
        id=story.id,
        title=story.title,
        url=story.url,
        source=story.source,
        author=story.author,
        publish_date=story.publish_date,
        score=story.score,
        ai_summary=story.ai_summary,
        ai_abstract=story.ai_abstract,
        relevance_score=story.relevance_score,
        recommendation_reason=story.recommendation_reason,
        tags=list(story.tags),
        feedback=view.feedback.get(story.key),
    )


def build_digest_response(session: DigestSession) -> DigestResponse:
    """
    Build the API response from the session's current derived view.

    Args:
        session: The live digest session

    Returns:
        DigestResponse with visible stories and filter chips
    """
    view = session.view()
    return DigestResponse(
        as_of=session.as_of.isoformat() if session.as_of else None,
        loading=session.loading,
        learning=session.learning,
        total=view.total,
        visible=len(view.stories),
        sources=[
            SourceOut(
                name=source.name,
                web_url=source.web_url,
                count=view.source_counts.get(source.name, 0),
                selected=source.name in view.state.selected_sources,
            )
            for source in session.registry
        ],
        tags=[
            TagOut(tag=tag, count=count, selected=tag in view.state.selected_tags)
            for tag, count in view.tag_counts
        ],
        stories=[story_to_schema(story, view) for story in view.stories],
    )


def create_app(session: Optional[DigestSession] = None) -> FastAPI:
    """Build the application around a digest session (a default one if omitted)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "session", None) is None:
            app.state.session = DigestSession(PreferencesStore())
        yield
        await app.state.session.close()

    app = FastAPI(
        title="MindFeed API",
        version="0.1.0",
        description="Personalized technical news digest with AI curation",
        lifespan=lifespan,
    )
    app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_session(request: Request) -> DigestSession:
        return request.app.state.session

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "as_of": now_utc().isoformat(),
            "service": "mindfeed-api",
        }

    @app.get("/sources", response_model=list[SourceOut])
    async def list_sources(session: DigestSession = Depends(get_session)):
        return build_digest_response(session).sources

    @app.get("/digest", response_model=DigestResponse)
    async def get_digest(session: DigestSession = Depends(get_session)):
        return build_digest_response(session)

    @app.post("/digest/refresh", response_model=DigestResponse)
    async def refresh_digest(session: DigestSession = Depends(get_session)):
        """Collect and enrich a fresh batch of stories."""
        logger.info("Refreshing digest")
        await session.refresh()
        return build_digest_response(session)

    @app.post("/filters/{action}", response_model=DigestResponse)
    async def apply_filter(
        action: str,
        value: Optional[str] = Query(None, description="Source name or tag, for toggle/solo actions"),
        session: DigestSession = Depends(get_session),
    ):
        try:
            session.apply(action, value)
        except UnknownFilterAction as e:
            raise HTTPException(status_code=400, detail=str(e))
        return build_digest_response(session)

    @app.get("/preferences", response_model=UserPreferences)
    async def get_preferences(session: DigestSession = Depends(get_session)):
        return session.preferences

    @app.put("/preferences", response_model=UserPreferences)
    async def update_preferences(
        update: PreferencesUpdate,
        session: DigestSession = Depends(get_session),
    ):
        return session.update_preferences(**update.model_dump(exclude_none=True))

    @app.post("/feedback", status_code=202)
    async def submit_feedback(
        feedback: FeedbackRequest,
        session: DigestSession = Depends(get_session),
    ):
        """Record feedback; the profile rewrite runs in the background."""
        task = session.record_feedback(feedback.story_id, feedback.kind)
        if task is None:
            raise HTTPException(status_code=404, detail=f"Unknown story {feedback.story_id}")
        return {"status": "accepted", "learning": session.learning}

    return app


app = create_app()


if __name__ == "__main__":
    # For development
    import uvicorn
    uvicorn.run("mindfeed.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
