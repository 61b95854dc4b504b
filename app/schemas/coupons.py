"""
Pydantic schemas for coupon request/response models.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field, field_validator

from app.models.base import as_utc

from .common import ApiResponse, CamelModel


class CouponCreate(CamelModel):
    """Schema for coupon creation request."""
    code: str = Field(min_length=1)
    amount: float = Field(gt=0)
    discount: Union[str, float]
    name: Optional[str] = None
    expires_at: Optional[datetime] = None
    category: List[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Coupon code is required")
        return value

    @field_validator("discount")
    @classmethod
    def parse_discount(cls, value) -> float:
        """Accepts "25", " 25 " or 25 and returns the percentage as a number."""
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("Discount is required")
            try:
                value = float(value)
            except ValueError:
                raise ValueError("Discount must be a number")
        if not 0 <= value <= 100:
            raise ValueError("Discount must be between 0 and 100")
        return float(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @field_validator("expires_at")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Naive input is taken to be UTC."""
        return as_utc(value)


class CouponRead(CamelModel):
    """Schema for a stored coupon."""
    id: str
    code: str
    name: Optional[str] = None
    active: bool
    amount: float
    discount: float
    expires_at: Optional[datetime] = None
    is_used: bool = False
    used_at: Optional[datetime] = None
    usage_count: Optional[int] = 0
    total_discount: Optional[float] = 0
    category: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CouponResponse(ApiResponse):
    """Schema for create/toggle responses."""
    coupon: CouponRead


class CouponListResponse(CamelModel):
    """Schema for a page of coupons."""
    success: bool = True
    count: int
    total: int
    coupons: List[CouponRead]


class CouponUsage(CamelModel):
    """Schema for one row of the usage summary."""
    code: str
    name: Optional[str] = None
    amount: float
    discount: float
    usage_count: int
    total_discount: float


class CouponValidationResponse(CamelModel):
    """Schema for coupon validation response."""
    valid: bool = True
    coupon: CouponRead
    discount_amount: float


class CouponRedemptionResponse(ApiResponse):
    """Schema for coupon redemption response."""
    coupon: CouponRead
    original_amount: float
    discount_amount: float
    order_amount_after_discount: float
