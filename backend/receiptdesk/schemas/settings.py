"""Currency, tax setting and freelancer config schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import EmailStr, Field, field_validator

from receiptdesk.models.tax_setting import TaxApplicability, TaxType
from receiptdesk.schemas.common import CamelModel


# ============================================================================
# Currencies
# ============================================================================


class CurrencyCreate(CamelModel):
    code: str = Field(..., min_length=3, max_length=3)
    name: str = Field(..., min_length=1, max_length=100)
    symbol: str = Field(..., min_length=1, max_length=10)
    exchange_rate: float = Field(default=1.0, gt=0)

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        return value.upper()


class CurrencyRatesUpdate(CamelModel):
    """Batch update: {code: rate}."""

    rates: Dict[str, float] = Field(..., min_length=1)

    @field_validator("rates")
    @classmethod
    def positive_rates(cls, value: Dict[str, float]) -> Dict[str, float]:
        for code, rate in value.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive")
        return {code.upper(): rate for code, rate in value.items()}


class CurrencyResponse(CamelModel):
    id: int
    code: str
    name: str
    symbol: str
    exchange_rate: float
    is_active: bool
    last_updated: datetime


# ============================================================================
# Tax settings
# ============================================================================


class TaxSettingCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    region: str = Field(..., min_length=1, max_length=100)
    tax_type: TaxType
    rate: float = Field(..., ge=0, le=100)
    applicable_to: TaxApplicability = TaxApplicability.BOTH
    is_default: bool = False


class TaxSettingUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    region: Optional[str] = Field(default=None, min_length=1, max_length=100)
    tax_type: Optional[TaxType] = None
    rate: Optional[float] = Field(default=None, ge=0, le=100)
    applicable_to: Optional[TaxApplicability] = None
    is_default: Optional[bool] = None


class TaxSettingResponse(CamelModel):
    id: int
    name: str
    region: str
    tax_type: TaxType
    rate: float
    applicable_to: TaxApplicability
    is_default: bool
    is_active: bool
    created_at: datetime


# ============================================================================
# Freelancer config
# ============================================================================


class FreelancerInfoUpdate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    website: Optional[str] = ""


class FreelancerInfoResponse(CamelModel):
    name: str
    email: str
    phone: str
    address: str
    website: Optional[str] = ""
