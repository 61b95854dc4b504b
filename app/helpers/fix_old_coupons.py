"""
Backfill usage counters on coupons created before they were tracked.

Usage: python -m app.helpers.fix_old_coupons
"""
import asyncio
import logging

from app.core.database import async_session_maker, dispose_engine
from app.services.coupon_service import CouponService

logger = logging.getLogger(__name__)


async def fix_old_coupons() -> int:
    async with async_session_maker() as session:
        fixed = await CouponService(session).backfill_usage_counters()
    logger.info(f"Fixed {fixed} old coupons.")
    return fixed


async def main():
    try:
        await fix_old_coupons()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
