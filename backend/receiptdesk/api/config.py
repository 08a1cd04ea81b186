"""
Configuration API endpoints.

WHAT: Read, replace and reset the stored freelancer identity used on the
FROM side of new documents.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.schemas.settings import FreelancerInfoResponse, FreelancerInfoUpdate
from receiptdesk.services.config_service import ConfigService


router = APIRouter(prefix="/config", tags=["config"])


@router.get("/freelancer-info", response_model=FreelancerInfoResponse, summary="Get freelancer info")
async def get_freelancer_info(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> FreelancerInfoResponse:
    return FreelancerInfoResponse(**await ConfigService(db).get_freelancer_info())


@router.put("/freelancer-info", response_model=FreelancerInfoResponse, summary="Update freelancer info")
async def update_freelancer_info(
    data: FreelancerInfoUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> FreelancerInfoResponse:
    """Applies to documents created from now on; existing envelopes keep their copy."""
    return FreelancerInfoResponse(**await ConfigService(db).update_freelancer_info(data.model_dump()))


@router.post("/freelancer-info/reset", response_model=FreelancerInfoResponse, summary="Reset freelancer info")
async def reset_freelancer_info(
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> FreelancerInfoResponse:
    return FreelancerInfoResponse(**await ConfigService(db).reset_freelancer_info())
