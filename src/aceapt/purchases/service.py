"""Purchase settlement: debit coins and grant a test-series entitlement atomically."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from aceapt.db.models import TestSeries, User, UserTestSeries
from aceapt.errors import AppError, ConflictError, InsufficientFundsError, NotFoundError, StoreError
from aceapt.users.service import lock_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from aceapt.auth.dependencies import Identity

logger = structlog.get_logger()


@dataclass(frozen=True)
class PurchaseResult:
    message: str
    remaining_coins: int


async def has_entitlement(db: AsyncSession, user_id: int, test_series_id: int) -> bool:
    result = await db.execute(
        select(UserTestSeries.id).where(
            UserTestSeries.user_id == user_id,
            UserTestSeries.test_series_id == test_series_id,
        )
    )
    return result.first() is not None


async def purchase_test_series(
    db: AsyncSession,
    identity: Identity,
    test_series_id: int,
) -> PurchaseResult:
    """
    Buy a test series with coins.

    Runs as one transaction holding a lock on the buyer's row:
    1. Re-read the balance and the series cost
    2. Debit with ``coins = coins - cost WHERE coins >= cost``
    3. Insert the entitlement row
    4. Commit, or roll back everything on any failure

    Raises:
        ConflictError: If the user already owns the series.
        NotFoundError: If the series does not exist.
        InsufficientFundsError: If the balance is below the cost.
        StoreError: On any other database failure.
    """
    try:
        return await _settle(db, identity, test_series_id)
    except AppError as e:
        await db.rollback()
        logger.info(
            "purchase_rejected",
            user_id=identity.user_id,
            test_series_id=test_series_id,
            reason=type(e).__name__,
        )
        raise
    except IntegrityError as e:
        # UNIQUE(user_id, test_series_id): a concurrent purchase committed first
        await db.rollback()
        msg = "You have already purchased this test series"
        raise ConflictError(msg) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("purchase_failed", user_id=identity.user_id, test_series_id=test_series_id, error=str(e))
        msg = "An error occurred while purchasing the test series"
        raise StoreError(msg) from e


async def _settle(db: AsyncSession, identity: Identity, test_series_id: int) -> PurchaseResult:
    user = await lock_user(db, identity.user_id)

    if await has_entitlement(db, identity.user_id, test_series_id):
        msg = "You have already purchased this test series"
        raise ConflictError(msg)

    series = await db.get(TestSeries, test_series_id)
    if series is None:
        msg = "Test series not found"
        raise NotFoundError(msg)

    if user.coins < series.coin_cost:
        msg = "Not enough coins to purchase this test series"
        raise InsufficientFundsError(msg)

    debit = await db.execute(
        update(User)
        .where(User.id == identity.user_id, User.coins >= series.coin_cost)
        .values(coins=User.coins - series.coin_cost)
        .returning(User.coins)
        .execution_options(synchronize_session=False)
    )
    remaining = debit.scalar_one_or_none()
    if remaining is None:
        # Balance changed between the read and the debit
        msg = "Not enough coins to purchase this test series"
        raise InsufficientFundsError(msg)

    db.add(UserTestSeries(user_id=identity.user_id, test_series_id=test_series_id))
    await db.flush()
    await db.commit()

    logger.info(
        "test_series_purchased",
        user_id=identity.user_id,
        test_series_id=test_series_id,
        cost=series.coin_cost,
        remaining_coins=remaining,
    )
    return PurchaseResult(message=f"Successfully purchased {series.name}", remaining_coins=remaining)
