"""Answer submission router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.answers.schemas import AnswerRequest, AnswerResponse
from aceapt.answers.service import submit_answer
from aceapt.auth.dependencies import Identity, get_current_identity
from aceapt.database import get_session

router = APIRouter(prefix="/api/questions", tags=["Questions"])


@router.post("/answer", response_model=AnswerResponse)
async def answer_question(
    body: AnswerRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> AnswerResponse:
    """Grade an answer; coins are awarded only for a correct first attempt."""
    result = await submit_answer(db, identity, body.question_id, body.user_answer)
    return AnswerResponse(
        is_correct=result.is_correct,
        coins_earned=result.coins_earned,
        correct_option=result.correct_option,
        explanation=result.explanation,
    )
