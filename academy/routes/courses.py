"""Course catalog and enrollment routes."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth import get_current_user, require_role
from academy.crud import (
    create_course,
    create_enrollment,
    get_course_detail,
    get_published_courses,
)
from academy.database import get_session
from academy.errors import NotFoundError
from academy.models import User
from academy.schemas import CourseCreate, CourseDetail, CourseRead, EnrollmentRead

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("/", response_model=list[CourseRead])
async def list_courses(db: AsyncSession = Depends(get_session)):
    return await get_published_courses(db)


@router.post("/", response_model=CourseDetail)
async def add_course(
    data: CourseCreate,
    current_user: User = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_session),
):
    course = await create_course(db, data)
    logger.info("Course %s created by user %s", course.slug, current_user.id)
    return course


@router.get("/{course_id}", response_model=CourseDetail)
async def read_course(course_id: int, db: AsyncSession = Depends(get_session)):
    course = await get_course_detail(db, course_id)
    if not course:
        raise NotFoundError("Course", course_id)
    return course


@router.post("/{course_id}/enroll", response_model=EnrollmentRead)
async def enroll(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    enrollment = await create_enrollment(db, current_user.id, course_id)
    logger.info("User %s enrolled in course %s", current_user.id, course_id)
    return enrollment
