"""
SQLModel database model for recorded payments.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field, Column, JSON

from .base import UTCDateTime, utc_now


class Payment(SQLModel, table=True):
    """Write-once payment log entry. No gateway is involved."""
    __tablename__ = "payments"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    method: str = Field(max_length=10)  # 'card' or 'upi'
    amount: float
    card: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    upi: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    def __repr__(self):
        return f"<Payment(id={self.id}, method='{self.method}', amount={self.amount})>"
