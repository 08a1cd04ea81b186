"""
Currency API endpoints.

WHAT: Active currencies with manually maintained exchange rates.

WHY: Receipts and invoices store an ISO currency code; this list backs the
currency picker. Rates are entered by hand, there is no rate feed.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.core.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from receiptdesk.dao.currency import CurrencyDAO
from receiptdesk.db.session import get_db
from receiptdesk.schemas.common import MessageResponse
from receiptdesk.schemas.settings import CurrencyCreate, CurrencyRatesUpdate, CurrencyResponse


router = APIRouter(prefix="/currencies", tags=["currencies"])


@router.get("", response_model=List[CurrencyResponse], summary="List active currencies")
async def list_currencies(db: AsyncSession = Depends(get_db)) -> List[CurrencyResponse]:
    currencies = await CurrencyDAO(db).find_many(descending=False)
    return [CurrencyResponse.model_validate(c) for c in currencies]


@router.post(
    "",
    response_model=CurrencyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add currency",
)
async def create_currency(
    data: CurrencyCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> CurrencyResponse:
    """
    A deactivated currency with the same code is reactivated with the new
    values instead of creating a duplicate.

    Raises:
        ResourceAlreadyExistsError (409): Code already active
    """
    dao = CurrencyDAO(db)
    existing = await dao.get_by_code(data.code, include_inactive=True)
    if existing is not None and existing.is_active:
        raise ResourceAlreadyExistsError(
            message=f"Currency {data.code} already exists",
            resource_type="Currency",
        )
    if existing is not None:
        for name, value in data.model_dump().items():
            setattr(existing, name, value)
        existing.is_active = True
        currency = await dao.save(existing)
    else:
        currency = await dao.create(**data.model_dump())
    return CurrencyResponse.model_validate(currency)


@router.put("/rates", summary="Update exchange rates")
async def update_rates(
    data: CurrencyRatesUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Set rates for several codes at once; unknown codes are skipped."""
    updated = await CurrencyDAO(db).update_rates(data.rates)
    return {"updated": updated}


@router.delete("/{code}", response_model=MessageResponse, summary="Deactivate currency")
async def delete_currency(
    code: str,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    dao = CurrencyDAO(db)
    currency = await dao.get_by_code(code)
    if currency is None:
        raise ResourceNotFoundError(
            message=f"Currency {code.upper()} not found",
            resource_type="Currency",
            resource_id=code.upper(),
        )
    await dao.soft_delete(currency.id)
    return MessageResponse(message=f"Currency {currency.code} deactivated")
