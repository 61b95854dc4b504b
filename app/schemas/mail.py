"""
Pydantic schemas for transactional mail requests.
"""
from typing import Optional, Union

from pydantic import EmailStr

from .common import ApiResponse, CamelModel


class WelcomeMailRequest(CamelModel):
    """Schema for the welcome email request."""
    name: str
    email: EmailStr
    coupon_code: Optional[str] = None
    payment_amount: Optional[Union[float, str]] = None


class MailResponse(ApiResponse):
    pass
