from fastapi import APIRouter

from app.schemas.mail import MailResponse, WelcomeMailRequest
from app.services.mail_service import MailService

router = APIRouter()


@router.post("/send-mail", response_model=MailResponse)
async def send_mail(payload: WelcomeMailRequest):
    await MailService().send_welcome_email(
        payload.name,
        payload.email,
        payload.coupon_code,
        payload.payment_amount,
    )
    return {"message": "Email sent successfully"}
