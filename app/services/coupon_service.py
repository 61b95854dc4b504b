"""
Coupon service: creation, lookup, validation, redemption and usage accounting.
"""
import logging
import re
import uuid
from typing import Any, Dict, List, Optional, Tuple, Union

from fastapi import HTTPException
from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    DomainRuleError,
    NotFoundError,
    ServerError,
    ValidationFailedError,
)
from app.models.base import utc_now
from app.models.coupons import Coupon
from app.schemas.coupons import CouponCreate

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def calculate_discount(amount: float, discount_percent: float) -> Dict[str, float]:
    """
    Apply the redemption discount rule to a coupon's nominal amount.

    The percentage discount is computed first, then only
    ``COUPON_REDEMPTION_SHARE_PERCENT`` of it is granted, capped at
    ``COUPON_MAX_DISCOUNT``.

    Args:
        amount: Nominal order amount attached to the coupon
        discount_percent: Coupon percentage, 0-100

    Returns:
        Dictionary with the base discount, granted discount and the amount
        left to pay
    """
    order_amount = float(amount)
    base_discount_amount = order_amount * float(discount_percent) / 100
    discount_amount = base_discount_amount * settings.COUPON_REDEMPTION_SHARE_PERCENT / 100
    discount_amount = min(discount_amount, settings.COUPON_MAX_DISCOUNT)

    return {
        "original_amount": order_amount,
        "base_discount_amount": base_discount_amount,
        "discount_amount": discount_amount,
        "order_amount_after_discount": order_amount - discount_amount,
    }


def parse_positive_int(value, default: int) -> int:
    """Leading integer of ``value``; anything missing, unparsable or below 1 gives ``default``."""
    match = re.match(r"\s*([+-]?\d+)", str(value)) if value is not None else None
    number = int(match.group(1)) if match else 0
    return number if number > 0 else default


def parse_coupon_id(coupon_id: str) -> Optional[str]:
    try:
        return str(uuid.UUID(str(coupon_id)))
    except ValueError:
        return None


class CouponService:
    """Service for coupon operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _server_error(self, message: str, error: Exception):
        logger.exception(f"{message}: {error}")
        await self.db.rollback()
        return ServerError(message)

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self.db.exec(select(Coupon).where(Coupon.code == normalize_code(code)))
        return result.first()

    async def get_by_id(self, coupon_id: str) -> Optional[Coupon]:
        parsed = parse_coupon_id(coupon_id)
        if parsed is None:
            return None
        return await self.db.get(Coupon, parsed)

    async def create_coupon(self, data: CouponCreate) -> Coupon:
        """
        Create a coupon with a unique, uppercase code.

        Raises:
            ValidationFailedError: If the expiry date is not in the future
            ConflictError: If a coupon with the same code already exists
        """
        if data.expires_at is not None and data.expires_at <= utc_now():
            raise ValidationFailedError("Expiry date must be in the future")

        try:
            if await self.get_by_code(data.code):
                raise ConflictError("Coupon with this code already exists")

            coupon = Coupon(
                code=normalize_code(data.code),
                name=data.name,
                amount=data.amount,
                discount=data.discount,
                expires_at=data.expires_at,
                category=list(data.category),
                usage_count=0,
                total_discount=0,
            )
            self.db.add(coupon)
            await self.db.commit()
            await self.db.refresh(coupon)

        except HTTPException:
            raise
        except IntegrityError:
            # Lost a race with a concurrent create of the same code
            await self.db.rollback()
            raise ConflictError("Coupon with this code already exists")
        except SQLAlchemyError as e:
            raise await self._server_error("Server error while creating coupon", e)

        logger.info(f"Coupon created: {coupon.code} (ID: {coupon.id})")
        return coupon

    async def list_coupons(
        self,
        page: Union[int, str, None] = 1,
        limit: Union[int, str, None] = settings.COUPON_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page = parse_positive_int(page, 1)
        limit = parse_positive_int(limit, settings.COUPON_PAGE_SIZE)
        skip = (page - 1) * limit

        try:
            result = await self.db.exec(
                select(Coupon).order_by(Coupon.created_at.desc()).offset(skip).limit(limit)
            )
            coupons = list(result.all())
            total_result = await self.db.exec(select(func.count()).select_from(Coupon))
            total = total_result.one()
        except SQLAlchemyError as e:
            raise await self._server_error("Error fetching coupons", e)

        return {"count": len(coupons), "total": total, "coupons": coupons}

    async def usage_summary(self) -> List[Dict[str, Any]]:
        """
        Summarize usage for every coupon, backfilling missing counters to 0.

        Returns:
            List of ``code, name, amount, discount, usage_count, total_discount``
        """
        try:
            result = await self.db.exec(select(Coupon).order_by(Coupon.created_at.desc()))
            coupons = list(result.all())

            fixed = 0
            for coupon in coupons:
                updated = False
                if coupon.usage_count is None:
                    coupon.usage_count = 0
                    updated = True
                if coupon.total_discount is None:
                    coupon.total_discount = 0
                    updated = True
                if updated:
                    self.db.add(coupon)
                    fixed += 1
            if fixed:
                await self.db.commit()
                logger.info(f"Backfilled usage counters on {fixed} coupons")
        except SQLAlchemyError as e:
            raise await self._server_error("Failed to fetch coupon usage data", e)

        return [
            {
                "code": coupon.code,
                "name": coupon.name,
                "amount": coupon.amount,
                "discount": coupon.discount,
                "usage_count": coupon.usage_count,
                "total_discount": coupon.total_discount,
            }
            for coupon in coupons
        ]

    async def backfill_usage_counters(self) -> int:
        """Bulk-set missing usage counters to 0. Returns the number of rows fixed."""
        try:
            result = await self.db.execute(
                update(Coupon)
                .where(or_(Coupon.usage_count.is_(None), Coupon.total_discount.is_(None)))
                .values(
                    usage_count=func.coalesce(Coupon.usage_count, 0),
                    total_discount=func.coalesce(Coupon.total_discount, 0),
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._server_error("Failed to backfill coupon usage counters", e)
        return result.rowcount

    async def _get_redeemable(self, code: str) -> Coupon:
        coupon = await self.get_by_code(code)
        if not coupon:
            raise NotFoundError("Coupon not found")
        if coupon.expires_at is not None and coupon.expires_at < utc_now():
            raise DomainRuleError("Coupon expired")
        if not coupon.active:
            raise DomainRuleError("Coupon is inactive")
        return coupon

    async def validate_coupon(self, code: str) -> Tuple[Coupon, float]:
        """
        Check that a coupon can be redeemed right now.

        Returns:
            The coupon and the discount a redemption would grant

        Raises:
            NotFoundError: Unknown code
            DomainRuleError: Coupon expired or inactive
        """
        try:
            coupon = await self._get_redeemable(code)
        except HTTPException:
            raise
        except SQLAlchemyError as e:
            raise await self._server_error("Validation server error", e)

        projected = calculate_discount(coupon.amount, coupon.discount)
        return coupon, projected["discount_amount"]

    async def redeem_coupon(self, code: str) -> Dict[str, Any]:
        """
        Redeem a coupon once and record the granted discount.

        Repeat redemptions are allowed; only ``active`` and ``expires_at`` gate
        them. Counters are incremented in a single UPDATE so concurrent
        redemptions are all counted.

        Returns:
            Dictionary with the updated coupon, original amount, discount
            amount and the amount after discount
        """
        try:
            coupon = await self._get_redeemable(code)
            outcome = calculate_discount(coupon.amount, coupon.discount)
            now = utc_now()

            await self.db.execute(
                update(Coupon)
                .where(Coupon.id == coupon.id)
                .values(
                    usage_count=func.coalesce(Coupon.usage_count, 0) + 1,
                    total_discount=func.coalesce(Coupon.total_discount, 0) + outcome["discount_amount"],
                    used_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            await self.db.refresh(coupon)

        except HTTPException:
            raise
        except SQLAlchemyError as e:
            raise await self._server_error("Server error while using coupon", e)

        logger.info(
            f"Coupon used: {coupon.code} usageCount={coupon.usage_count}, "
            f"totalDiscount={coupon.total_discount}"
        )

        return {
            "coupon": coupon,
            "original_amount": outcome["original_amount"],
            "discount_amount": outcome["discount_amount"],
            "order_amount_after_discount": outcome["order_amount_after_discount"],
        }

    async def toggle_coupon(self, coupon_id: str) -> Coupon:
        try:
            coupon = await self.get_by_id(coupon_id)
            if not coupon:
                raise NotFoundError("Coupon not found")

            coupon.active = not coupon.active
            coupon.updated_at = utc_now()
            self.db.add(coupon)
            await self.db.commit()
            await self.db.refresh(coupon)

        except HTTPException:
            raise
        except SQLAlchemyError as e:
            raise await self._server_error("Server error while toggling coupon", e)

        logger.info(f"Coupon {coupon.code} {'activated' if coupon.active else 'deactivated'}")
        return coupon

    async def delete_coupon(self, coupon_id: str) -> None:
        parsed = parse_coupon_id(coupon_id)
        if parsed is None:
            raise ValidationFailedError("Invalid coupon id")

        try:
            coupon = await self.db.get(Coupon, parsed)
            if not coupon:
                raise NotFoundError("Coupon not found")

            await self.db.delete(coupon)
            await self.db.commit()

        except HTTPException:
            raise
        except SQLAlchemyError as e:
            raise await self._server_error("Error deleting coupon", e)

        logger.info(f"Coupon deleted: {coupon.code} (ID: {parsed})")
