"""
Admin maintenance endpoints.

WHAT: Seeding of defaults, repair jobs and scheduler status.

WHY: Each task is idempotent, so they are safe to run again after a partial
failure.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.services.maintenance_service import MaintenanceService
from receiptdesk.services.scheduler import get_scheduler_status


router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/seed", summary="Install default currencies and templates")
async def seed_defaults(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"created": await MaintenanceService(db).seed_defaults()}


@router.post("/backfill/qr-codes", summary="Generate missing QR codes")
async def backfill_qr_codes(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"updated": await MaintenanceService(db).backfill_qr_codes()}


@router.post("/backfill/freelancer-info", summary="Fill missing freelancer info on receipts")
async def backfill_freelancer_info(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"updated": await MaintenanceService(db).backfill_freelancer_info()}


@router.get("/scheduler", summary="Scheduler status")
async def scheduler_status(admin: TokenClaims = Depends(require_admin)) -> dict:
    return get_scheduler_status()
