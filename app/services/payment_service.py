import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ServerError
from app.models.payments import Payment
from app.schemas.payments import PaymentCreate

logger = logging.getLogger(__name__)


def mask_card_number(card_number: str) -> str:
    if not card_number:
        return ""
    return f"{'*' * max(len(card_number) - 4, 0)}{card_number[-4:]}"


class PaymentService:
    """Records payment transactions. There is no gateway; this is a log write."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_payment(self, data: PaymentCreate) -> Payment:
        card = data.card.model_dump(by_alias=True, exclude_none=True) if data.card else None
        upi = data.upi.model_dump(by_alias=True, exclude_none=True) if data.upi else None

        payment = Payment(method=data.method, amount=data.amount, card=card, upi=upi)
        try:
            self.db.add(payment)
            await self.db.commit()
            await self.db.refresh(payment)
        except SQLAlchemyError as e:
            logger.exception(f"Error recording payment: {e}")
            await self.db.rollback()
            raise ServerError("Server error")

        if data.method == "card":
            reference = mask_card_number(card.get("cardNumber", "")) if card else ""
        else:
            reference = upi.get("upiId", "") if upi else ""
        logger.info(f"Payment recorded: {payment.id} {payment.method} {payment.amount} ({reference})")
        return payment
