"""Answer settlement: grade a submission and award coins at most once per question.

The whole read-check-write sequence runs in one transaction that first locks
the caller's user row, so two concurrent submissions by the same user are
serialized. UNIQUE(user_id, question_id) on ``user_progress`` backs this up:
if a concurrent first submission still wins the insert, the loser is settled
again as a resubmission and earns nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from aceapt.db.models import OPTIONS, Question, User, UserProgress
from aceapt.errors import AppError, NotFoundError, StoreError, ValidationError
from aceapt.users.service import lock_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from aceapt.auth.dependencies import Identity

logger = structlog.get_logger()


@dataclass(frozen=True)
class AnswerResult:
    is_correct: bool
    coins_earned: int
    correct_option: str
    explanation: str


def normalize_option(raw: str) -> str:
    """Map a submitted answer to one of A/B/C/D, ignoring case and surrounding space.

    Raises:
        ValidationError: If the answer is not one of the four options.
    """
    option = (raw or "").strip().upper()
    if option not in OPTIONS:
        msg = "User answer must be one of A, B, C or D"
        raise ValidationError(msg)
    return option


async def submit_answer(
    db: AsyncSession,
    identity: Identity,
    question_id: int,
    user_answer: str,
) -> AnswerResult:
    """
    Grade an answer and record the attempt, committing as one unit.

    Coins are credited only on the first attempt for this (user, question)
    pair and only if it is correct. Later submissions refresh the stored
    answer and correctness but never grant or revoke coins.

    Raises:
        ValidationError: If the answer is not A-D.
        NotFoundError: If the question does not exist.
        StoreError: On any database failure (the transaction is rolled back).
    """
    option = normalize_option(user_answer)
    try:
        try:
            return await _settle(db, identity, question_id, option)
        except IntegrityError:
            await db.rollback()
            logger.warning("answer_attempt_conflict", user_id=identity.user_id, question_id=question_id)
            return await _settle(db, identity, question_id, option)
    except AppError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("answer_settlement_failed", user_id=identity.user_id, question_id=question_id, error=str(e))
        msg = "An error occurred while submitting your answer"
        raise StoreError(msg) from e


async def _settle(db: AsyncSession, identity: Identity, question_id: int, option: str) -> AnswerResult:
    await lock_user(db, identity.user_id)

    question = await db.get(Question, question_id)
    if question is None:
        msg = "Question not found"
        raise NotFoundError(msg)

    is_correct = option == question.correct_option.upper()

    existing = await db.execute(
        select(UserProgress)
        .where(
            UserProgress.user_id == identity.user_id,
            UserProgress.question_id == question_id,
        )
        .execution_options(populate_existing=True)
    )
    attempt = existing.scalar_one_or_none()
    now = datetime.now(timezone.utc)

    coins_earned = 0
    if attempt is None:
        if is_correct:
            coins_earned = question.coins_reward
        db.add(
            UserProgress(
                user_id=identity.user_id,
                question_id=question_id,
                user_answer=option,
                is_correct=is_correct,
                coins_earned=coins_earned,
                attempt_time=now,
            )
        )
        await db.flush()
        if coins_earned > 0:
            await db.execute(
                update(User)
                .where(User.id == identity.user_id)
                .values(coins=User.coins + coins_earned)
                .execution_options(synchronize_session=False)
            )
    else:
        attempt.user_answer = option
        attempt.is_correct = is_correct
        attempt.attempt_time = now
        await db.flush()

    await db.commit()

    logger.info(
        "answer_settled",
        user_id=identity.user_id,
        question_id=question_id,
        is_correct=is_correct,
        first_attempt=attempt is None,
        coins_earned=coins_earned,
    )
    return AnswerResult(
        is_correct=is_correct,
        coins_earned=coins_earned,
        correct_option=question.correct_option,
        explanation=question.explanation or "",
    )
