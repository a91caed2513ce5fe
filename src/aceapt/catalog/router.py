"""Catalog router: categories, questions by topic, and the test-series list."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.auth.dependencies import Identity, get_optional_identity
from aceapt.catalog.schemas import (
    CategoryResponse,
    QuestionItem,
    TestSeriesItem,
    TopicDetail,
    TopicQuestionsResponse,
)
from aceapt.catalog.service import get_topic, list_categories, list_test_series, list_topic_questions
from aceapt.database import get_session

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/categories", response_model=list[CategoryResponse])
async def categories(
    db: AsyncSession = Depends(get_session),
) -> list[CategoryResponse]:
    """All categories with their topics and question counts."""
    rows = await list_categories(db)
    return [CategoryResponse(**row) for row in rows]


@router.get(
    "/questions/topic/{topic_id}",
    response_model=TopicQuestionsResponse,
    response_model_exclude_unset=True,
)
async def topic_questions(
    topic_id: int,
    identity: Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_session),
) -> TopicQuestionsResponse:
    """Questions for a topic. Signed-in callers also get ``attempted`` and ``correct``."""
    user_id = identity.user_id if identity else None
    questions = await list_topic_questions(db, topic_id, user_id)
    topic = await get_topic(db, topic_id)
    return TopicQuestionsResponse(
        topic=TopicDetail(**topic) if topic else None,
        questions=[QuestionItem(**q) for q in questions],
    )


@router.get("/test-series", response_model=list[TestSeriesItem], response_model_exclude_unset=True)
async def test_series(
    identity: Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_session),
) -> list[TestSeriesItem]:
    """All test series. Signed-in callers also get ``purchased``."""
    rows = await list_test_series(db, identity.user_id if identity else None)
    return [TestSeriesItem(**row) for row in rows]
