"""
Analytics API endpoints.

WHAT: Dashboard figures for the admin: receipt counts and revenue, invoice
totals by status, monthly revenue and the latest receipts.

HOW: ADMIN-only router over AnalyticsService; amounts are grouped per
currency and never converted.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.services.analytics_service import AnalyticsService


router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", summary="Dashboard analytics")
async def get_dashboard(
    months: int = Query(default=12, ge=1, le=24, description="Months of revenue history"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await AnalyticsService(db).dashboard(months)


@router.get("/receipts", summary="Receipt summary")
async def get_receipt_summary(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await AnalyticsService(db).receipt_summary()


@router.get("/invoices", summary="Invoice summary")
async def get_invoice_summary(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await AnalyticsService(db).invoice_summary()
