from .base import BaseModel
from .coupons import Coupon
from .members import Member
from .orders import Order
from .payments import Payment

__all__ = ["BaseModel", "Coupon", "Member", "Order", "Payment"]
