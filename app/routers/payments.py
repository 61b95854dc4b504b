from fastapi import APIRouter, status

from app.core.database import AsyncDBSession
from app.schemas.payments import PaymentCreate, PaymentResponse
from app.services.payment_service import PaymentService

router = APIRouter()


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(payment_data: PaymentCreate, session: AsyncDBSession):
    payment = await PaymentService(session).record_payment(payment_data)
    return {"message": "Payment successful", "payment": payment}
