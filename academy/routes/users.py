from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.schemas import UserResponse, LanguageUpdate
from academy.models import User
from academy.database import get_session
from academy.crud import save_user
from academy.auth import get_current_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Return details for the authenticated user."""
    return current_user


@router.patch("/me/language", response_model=UserResponse)
async def update_language(
    data: LanguageUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Set the locale used when loading translated quiz content."""
    current_user.locale = data.locale
    return await save_user(db, current_user)
