"""Request/response schemas for answer submission."""

from __future__ import annotations

from pydantic import Field

from aceapt.auth.schemas import CamelModel


class AnswerRequest(CamelModel):
    """``{questionId, userAnswer}``; the answer letter is normalized by the service."""

    question_id: int = Field(..., gt=0)
    user_answer: str = Field(..., min_length=1, max_length=8)


class AnswerResponse(CamelModel):
    is_correct: bool
    coins_earned: int
    correct_option: str
    explanation: str
