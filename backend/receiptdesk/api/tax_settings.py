"""
Tax setting API endpoints.

WHAT: CRUD for tax rates with one default per region.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.dao.currency import TaxSettingDAO
from receiptdesk.db.session import get_db
from receiptdesk.models.tax_setting import TaxSetting
from receiptdesk.schemas.common import MessageResponse
from receiptdesk.schemas.settings import TaxSettingCreate, TaxSettingResponse, TaxSettingUpdate


router = APIRouter(prefix="/tax-settings", tags=["tax-settings"])


def _not_found(tax_setting_id) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        message=f"Tax setting {tax_setting_id} not found",
        resource_type="TaxSetting",
        resource_id=tax_setting_id,
    )


@router.get("", response_model=List[TaxSettingResponse], summary="List tax settings")
async def list_tax_settings(
    region: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> List[TaxSettingResponse]:
    settings = await TaxSettingDAO(db).find_many(filters={"region": region}, sort="region", descending=False)
    return [TaxSettingResponse.model_validate(s) for s in settings]


@router.get("/default", response_model=TaxSettingResponse, summary="Default tax setting of a region")
async def get_default_tax_setting(
    region: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> TaxSettingResponse:
    tax_setting: Optional[TaxSetting] = await TaxSettingDAO(db).get_default(region)
    if tax_setting is None:
        raise _not_found(f"default:{region}")
    return TaxSettingResponse.model_validate(tax_setting)


@router.post(
    "",
    response_model=TaxSettingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tax setting",
)
async def create_tax_setting(
    data: TaxSettingCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TaxSettingResponse:
    tax_setting = await TaxSettingDAO(db).create_with_default(**data.model_dump(mode="json"))
    return TaxSettingResponse.model_validate(tax_setting)


@router.put("/{tax_setting_id}", response_model=TaxSettingResponse, summary="Update tax setting")
async def update_tax_setting(
    tax_setting_id: int,
    data: TaxSettingUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TaxSettingResponse:
    tax_setting = await TaxSettingDAO(db).update_with_default(
        tax_setting_id, data.model_dump(mode="json", exclude_none=True)
    )
    if tax_setting is None:
        raise _not_found(tax_setting_id)
    return TaxSettingResponse.model_validate(tax_setting)


@router.post(
    "/{tax_setting_id}/set-default",
    response_model=TaxSettingResponse,
    summary="Make tax setting the default of its region",
)
async def set_default_tax_setting(
    tax_setting_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TaxSettingResponse:
    return TaxSettingResponse.model_validate(await TaxSettingDAO(db).set_as_default(tax_setting_id))


@router.delete("/{tax_setting_id}", response_model=MessageResponse, summary="Delete tax setting")
async def delete_tax_setting(
    tax_setting_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if not await TaxSettingDAO(db).soft_delete(tax_setting_id):
        raise _not_found(tax_setting_id)
    return MessageResponse(message="Tax setting deleted successfully")
