"""
Pydantic schemas for payment request/response models.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import Field, StringConstraints, ValidationInfo, field_validator

from .common import ApiResponse, CamelModel

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CardDetails(CamelModel):
    card_name: NonBlank
    card_number: str = Field(min_length=12)
    expiry: NonBlank
    cvv: str = Field(min_length=3)


class UpiDetails(CamelModel):
    app: Optional[str] = None
    upi_id: NonBlank


class PaymentCreate(CamelModel):
    """Schema for payment recording request. The details matching ``method`` are required."""
    method: Literal["card", "upi"]
    amount: float
    card: Optional[CardDetails] = Field(default=None, validate_default=True)
    upi: Optional[UpiDetails] = Field(default=None, validate_default=True)

    @field_validator("card", "upi")
    @classmethod
    def require_details_for_method(cls, value, info: ValidationInfo):
        if value is None and info.data.get("method") == info.field_name:
            raise ValueError(f"{info.field_name} details are required")
        return value


class PaymentRead(CamelModel):
    id: str
    method: str
    amount: float
    card: Optional[CardDetails] = None
    upi: Optional[UpiDetails] = None
    created_at: datetime


class PaymentResponse(ApiResponse):
    payment: PaymentRead
