from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth import get_current_user
from academy.crud import get_enrollments_by_user
from academy.database import get_session
from academy.models import User
from academy.schemas import EnrollmentRead

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.get("/me", response_model=list[EnrollmentRead])
async def my_enrollments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await get_enrollments_by_user(db, current_user.id)
