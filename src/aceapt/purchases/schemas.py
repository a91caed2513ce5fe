"""Request/response schemas for test-series purchases."""

from __future__ import annotations

from pydantic import Field

from aceapt.auth.schemas import CamelModel


class PurchaseRequest(CamelModel):
    test_series_id: int = Field(..., gt=0)


class PurchaseResponse(CamelModel):
    message: str
    remaining_coins: int
