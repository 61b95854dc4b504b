from fastapi import APIRouter, status

from app.core.database import AsyncDBSession
from app.core.exceptions import ConflictError
from app.schemas.common import ApiResponse
from app.schemas.members import MemberCreate, MemberDuplicateCheck, MemberResponse
from app.services.member_service import MemberService

router = APIRouter()


@router.post("/check-duplicate", response_model=ApiResponse)
async def check_duplicate(payload: MemberDuplicateCheck, session: AsyncDBSession):
    errors = await MemberService(session).check_duplicate(payload.email, payload.whatsapp)
    if errors:
        raise ConflictError("Duplicate member details", errors=errors)
    return {"message": "Email and WhatsApp are available"}


@router.post("/register", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def register_member(member_data: MemberCreate, session: AsyncDBSession):
    member = await MemberService(session).register_member(member_data)
    return {"message": "Member registered successfully", "member": member}
