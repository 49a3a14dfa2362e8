from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth import get_current_user
from academy.crud import get_course_progress, mark_lesson_complete, mark_module_complete
from academy.database import get_session
from academy.models import User
from academy.schemas import (
    CourseProgressRead,
    LessonComplete,
    ModuleComplete,
    ProgressUpdate,
)

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/{course_id}", response_model=CourseProgressRead)
async def read_progress(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await get_course_progress(db, current_user.id, course_id)


@router.patch("/{course_id}/lesson", response_model=ProgressUpdate)
async def complete_lesson(
    course_id: int,
    data: LessonComplete,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await mark_lesson_complete(db, current_user.id, course_id, data.lesson_id)


@router.patch("/{course_id}/module", response_model=ProgressUpdate)
async def complete_module(
    course_id: int,
    data: ModuleComplete,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await mark_module_complete(db, current_user.id, course_id, data.module_id)
