"""
SQLModel database model for coupons.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Column, JSON

from .base import BaseModel, UTCDateTime


class Coupon(BaseModel, table=True):
    """Discount coupon with usage accounting."""
    __tablename__ = "coupons"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    code: str = Field(unique=True, index=True, max_length=100)  # Uppercase, trimmed
    name: Optional[str] = Field(default=None, max_length=255)
    active: bool = Field(default=True)
    amount: float = Field(ge=0)
    discount: float = Field(ge=0, le=100)  # Percentage
    expires_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    # Legacy single-use markers
    is_used: bool = Field(default=False)
    used_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    # Nullable so rows created before the counters existed can be backfilled
    usage_count: Optional[int] = Field(default=0, nullable=True)
    total_discount: Optional[float] = Field(default=0, nullable=True)
    category: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    def __repr__(self):
        return f"<Coupon(id={self.id}, code='{self.code}', active={self.active})>"
