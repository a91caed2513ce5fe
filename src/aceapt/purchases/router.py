"""Test-series purchase router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.auth.dependencies import Identity, get_current_identity
from aceapt.database import get_session
from aceapt.purchases.schemas import PurchaseRequest, PurchaseResponse
from aceapt.purchases.service import purchase_test_series

router = APIRouter(prefix="/api/test-series", tags=["Test Series"])


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase(
    body: PurchaseRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> PurchaseResponse:
    """Spend coins on a test series. Each series can be bought once per user."""
    result = await purchase_test_series(db, identity, body.test_series_id)
    return PurchaseResponse(message=result.message, remaining_coins=result.remaining_coins)
