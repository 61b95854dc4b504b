import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from .base import UTCDateTime, utc_now


class Order(SQLModel, table=True):
    """Order record. Not exposed by any route yet."""
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True, max_length=255)
    total_amount: Optional[float] = Field(default=None)
    coupon_code: Optional[str] = Field(default=None, max_length=100)
    discount_amount: float = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
