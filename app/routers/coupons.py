from typing import List, Optional

from fastapi import APIRouter, Query, status

from app.core.database import AsyncDBSession
from app.schemas.common import ApiResponse
from app.schemas.coupons import (
    CouponCreate,
    CouponListResponse,
    CouponRedemptionResponse,
    CouponResponse,
    CouponUsage,
    CouponValidationResponse,
)
from app.services.coupon_service import CouponService

router = APIRouter()


@router.post("/create", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(coupon_data: CouponCreate, session: AsyncDBSession):
    coupon = await CouponService(session).create_coupon(coupon_data)
    return {"message": "Coupon created successfully", "coupon": coupon}


@router.get("", response_model=CouponListResponse)
async def list_coupons(
    session: AsyncDBSession,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    return await CouponService(session).list_coupons(page, limit)


@router.get("/usage", response_model=List[CouponUsage])
async def coupon_usage(session: AsyncDBSession):
    return await CouponService(session).usage_summary()


@router.get("/validate/{code}", response_model=CouponValidationResponse)
async def validate_coupon(code: str, session: AsyncDBSession):
    coupon, discount_amount = await CouponService(session).validate_coupon(code)
    return {"valid": True, "coupon": coupon, "discount_amount": discount_amount}


@router.post("/use/{code}", response_model=CouponRedemptionResponse)
async def use_coupon(code: str, session: AsyncDBSession):
    result = await CouponService(session).redeem_coupon(code)
    return {"message": "Coupon applied successfully", **result}


@router.put("/toggle/{coupon_id}", response_model=CouponResponse)
async def toggle_coupon(coupon_id: str, session: AsyncDBSession):
    coupon = await CouponService(session).toggle_coupon(coupon_id)
    state = "activated" if coupon.active else "deactivated"
    return {"message": f"Coupon {state} successfully", "coupon": coupon}


@router.delete("/{coupon_id}", response_model=ApiResponse)
async def delete_coupon(coupon_id: str, session: AsyncDBSession):
    await CouponService(session).delete_coupon(coupon_id)
    return {"message": "Coupon deleted successfully"}
