"""Catalog response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TopicSummary(BaseModel):
    id: int
    category_id: int
    name: str
    description: str | None = None
    question_count: int = 0


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    topics: list[TopicSummary] = []


class TopicDetail(BaseModel):
    id: int
    category_id: int
    name: str
    description: str | None = None
    created_at: datetime | None = None
    category_name: str
    category_icon: str | None = None
    category_color: str | None = None


class QuestionItem(BaseModel):
    """A question as shown before answering. Never carries the answer."""

    id: int
    topic_id: int
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    difficulty_level: str
    coins_reward: int
    attempted: bool | None = None
    correct: bool | None = None


class TopicQuestionsResponse(BaseModel):
    topic: TopicDetail | None = None
    questions: list[QuestionItem]


class TestSeriesItem(BaseModel):
    id: int
    name: str
    description: str | None = None
    coin_cost: int
    created_at: datetime | None = None
    question_count: int = 0
    purchased: bool | None = None
