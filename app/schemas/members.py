"""
Pydantic schemas for membership request/response models.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field

from .common import ApiResponse, CamelModel

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"
WHATSAPP_PATTERN = r"^\d{10,15}$"


def normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def normalize_whatsapp(value):
    if isinstance(value, str):
        return value.strip()
    return value


class MemberDuplicateCheck(CamelModel):
    """Schema for the duplicate check request."""
    email: Annotated[Optional[str], BeforeValidator(normalize_email)] = None
    whatsapp: Annotated[Optional[str], BeforeValidator(normalize_whatsapp)] = None


class MemberCreate(CamelModel):
    """Schema for member registration request."""
    email: Annotated[str, BeforeValidator(normalize_email), Field(pattern=EMAIL_PATTERN)]
    whatsapp: Annotated[str, BeforeValidator(normalize_whatsapp), Field(pattern=WHATSAPP_PATTERN)]
    name: Optional[str] = None
    company_name: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    city: Optional[str] = None
    coupon_code: Optional[str] = None
    payment_amount: Optional[float] = None


class MemberRead(CamelModel):
    id: str
    email: str
    whatsapp: str
    name: Optional[str] = None
    company_name: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    city: Optional[str] = None
    coupon_code: Optional[str] = None
    payment_amount: Optional[float] = None
    created_at: datetime


class MemberResponse(ApiResponse):
    member: MemberRead
