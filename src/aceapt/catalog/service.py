"""Catalog reads: categories, topics, questions and test series.

Listings that depend on the caller come in two explicit variants, one for
anonymous callers and one that joins the caller's own progress or
entitlements. The variant is picked by whether an identity is present.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, and_, case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.db.models import Category, Question, TestSeries, Topic, UserProgress, UserTestSeries

logger = logging.getLogger(__name__)

_QUESTION_COLUMNS = (
    Question.id,
    Question.topic_id,
    Question.question,
    Question.option_a,
    Question.option_b,
    Question.option_c,
    Question.option_d,
    Question.difficulty_level,
    Question.coins_reward,
)


# ---------------------------------------------------------------------------
# Categories and topics
# ---------------------------------------------------------------------------


async def list_categories(db: AsyncSession) -> list[dict[str, Any]]:
    """All categories ordered by id, each with its topics and their question counts."""
    categories = await db.execute(
        select(Category.id, Category.name, Category.description, Category.icon, Category.color).order_by(
            Category.id
        )
    )

    question_count = (
        select(func.count(Question.id)).where(Question.topic_id == Topic.id).correlate(Topic).scalar_subquery()
    )
    topics = await db.execute(
        select(
            Topic.id,
            Topic.category_id,
            Topic.name,
            Topic.description,
            question_count.label("question_count"),
        ).order_by(Topic.category_id, Topic.name)
    )

    by_category: dict[int, list[dict[str, Any]]] = {}
    for row in topics:
        by_category.setdefault(row.category_id, []).append(dict(row._mapping))

    return [
        {**dict(row._mapping), "topics": by_category.get(row.id, [])}
        for row in categories
    ]


async def get_topic(db: AsyncSession, topic_id: int) -> dict[str, Any] | None:
    """Topic with its category's name, icon and color, or None."""
    result = await db.execute(
        select(
            Topic.id,
            Topic.category_id,
            Topic.name,
            Topic.description,
            Topic.created_at,
            Category.name.label("category_name"),
            Category.icon.label("category_icon"),
            Category.color.label("category_color"),
        )
        .join(Category, Topic.category_id == Category.id)
        .where(Topic.id == topic_id)
    )
    row = result.first()
    return dict(row._mapping) if row else None


# ---------------------------------------------------------------------------
# Questions by topic
# ---------------------------------------------------------------------------


def _anonymous_questions_query(topic_id: int) -> Select:
    return select(*_QUESTION_COLUMNS).where(Question.topic_id == topic_id).order_by(Question.id)


def _member_questions_query(topic_id: int, user_id: int) -> Select:
    return (
        select(
            *_QUESTION_COLUMNS,
            case((UserProgress.id.is_not(None), True), else_=False).label("attempted"),
            UserProgress.is_correct.label("correct"),
        )
        .outerjoin(
            UserProgress,
            and_(UserProgress.question_id == Question.id, UserProgress.user_id == user_id),
        )
        .where(Question.topic_id == topic_id)
        .order_by(Question.id)
    )


async def list_topic_questions(
    db: AsyncSession,
    topic_id: int,
    user_id: int | None = None,
) -> list[dict[str, Any]]:
    """Questions of a topic without answers; with the caller's progress if signed in."""
    if user_id is None:
        result = await db.execute(_anonymous_questions_query(topic_id))
        return [dict(row._mapping) for row in result]

    result = await db.execute(_member_questions_query(topic_id, user_id))
    questions = []
    for row in result:
        item = dict(row._mapping)
        item["attempted"] = bool(item["attempted"])
        item["correct"] = None if item["correct"] is None else bool(item["correct"])
        questions.append(item)
    return questions


# ---------------------------------------------------------------------------
# Test series
# ---------------------------------------------------------------------------


def _series_question_count():
    return (
        select(func.count(Question.id))
        .where(Question.test_series_id == TestSeries.id)
        .correlate(TestSeries)
        .scalar_subquery()
    )


def _anonymous_series_query() -> Select:
    return select(
        TestSeries.id,
        TestSeries.name,
        TestSeries.description,
        TestSeries.coin_cost,
        TestSeries.created_at,
        _series_question_count().label("question_count"),
    ).order_by(TestSeries.name)


def _member_series_query(user_id: int) -> Select:
    purchased = (
        exists()
        .where(UserTestSeries.test_series_id == TestSeries.id, UserTestSeries.user_id == user_id)
        .correlate(TestSeries)
    )
    return _anonymous_series_query().add_columns(purchased.label("purchased"))


async def list_test_series(db: AsyncSession, user_id: int | None = None) -> list[dict[str, Any]]:
    """All test series by name with question counts; ``purchased`` flag when signed in."""
    if user_id is None:
        result = await db.execute(_anonymous_series_query())
        return [dict(row._mapping) for row in result]

    result = await db.execute(_member_series_query(user_id))
    series = []
    for row in result:
        item = dict(row._mapping)
        item["purchased"] = bool(item["purchased"])
        series.append(item)
    logger.debug("Listed %d test series for user %s", len(series), user_id)
    return series
