import logging
from typing import Dict, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, ServerError
from app.models.members import Member
from app.schemas.members import MemberCreate, normalize_email, normalize_whatsapp

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member registration."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_duplicate(self, email: Optional[str], whatsapp: Optional[str]) -> Dict[str, str]:
        """
        Look up each identity field independently.

        Returns:
            Mapping of field name to error message, empty when both are free
        """
        email = normalize_email(email)
        whatsapp = normalize_whatsapp(whatsapp)
        errors = {}

        try:
            if email:
                result = await self.db.exec(select(Member.id).where(Member.email == email))
                if result.first():
                    errors["email"] = "Email already used."
            if whatsapp:
                result = await self.db.exec(select(Member.id).where(Member.whatsapp == whatsapp))
                if result.first():
                    errors["whatsapp"] = "WhatsApp already used."
        except SQLAlchemyError as e:
            logger.exception(f"Error checking duplicate member (email={email}, whatsapp={whatsapp}): {e}")
            raise ServerError("Server error")

        return errors

    async def register_member(self, data: MemberCreate) -> Member:
        try:
            result = await self.db.exec(
                select(Member).where(or_(Member.email == data.email, Member.whatsapp == data.whatsapp))
            )
            if result.first():
                raise ConflictError("Email or WhatsApp number already used")

            member = Member(**data.model_dump())
            self.db.add(member)
            await self.db.commit()
            await self.db.refresh(member)

        except HTTPException:
            raise
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email or WhatsApp number already used")
        except SQLAlchemyError as e:
            logger.exception(f"Error registering member: {e}")
            await self.db.rollback()
            raise ServerError("Server error while registering member")

        logger.info(f"Member registered: {member.email} (ID: {member.id})")
        return member
