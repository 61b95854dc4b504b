"""
SQLModel database model for registered members.
"""
import uuid
from typing import Optional

from sqlmodel import Field

from .base import BaseModel


class Member(BaseModel, table=True):
    __tablename__ = "members"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: Optional[str] = Field(default=None, max_length=255)
    company_name: Optional[str] = Field(default=None, max_length=255)
    linkedin: Optional[str] = Field(default=None, max_length=500)
    website: Optional[str] = Field(default=None, max_length=500)
    city: Optional[str] = Field(default=None, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)  # Lowercase, trimmed
    whatsapp: str = Field(unique=True, index=True, max_length=15)
    # Advisory reference to the redeemed coupon, not a foreign key
    coupon_code: Optional[str] = Field(default=None, max_length=100)
    payment_amount: Optional[float] = Field(default=None)

    def __repr__(self):
        return f"<Member(id={self.id}, email='{self.email}')>"
