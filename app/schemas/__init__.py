from .common import ApiResponse, CamelModel
from .coupons import (
    CouponCreate,
    CouponRead,
    CouponResponse,
    CouponListResponse,
    CouponUsage,
    CouponValidationResponse,
    CouponRedemptionResponse,
)
from .members import MemberDuplicateCheck, MemberCreate, MemberRead, MemberResponse
from .payments import CardDetails, UpiDetails, PaymentCreate, PaymentRead, PaymentResponse
from .mail import WelcomeMailRequest, MailResponse
