"""Asynchronous CRUD helpers for the application's data models.

Each function in this module encapsulates a specific database operation
using SQLModel and SQLAlchemy.  Centralizing the logic keeps route
handlers light and makes behavior easier to test.

The quiz ledger and the progress counters write through SQL increments
inside a single transaction per call, so concurrent requests for the same
user never lose an update.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import func, case, update
from sqlmodel import select

from academy.models import (
    User,
    Course,
    CourseModule,
    Lesson,
    Enrollment,
    CourseProgress,
    LessonCompletion,
    ModuleCompletion,
    QuizAttempt,
    QuizBestScore,
)
from academy.auth import get_password_hash
from academy.errors import (
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
)
from academy.grading import round_percent
from academy.schemas import (
    CourseCreate,
    CourseProgressRead,
    GradeResult,
    ProgressCounts,
    ProgressUpdate,
    Quiz,
    RecordedAttempt,
)

logger = logging.getLogger(__name__)


# --- users ---------------------------------------------------------------


async def create_user(db: AsyncSession, user: User) -> User:
    """Create a new user, hashing the password if it is still plain text."""

    if not user.password_hash.startswith("$2b$"):
        user.password_hash = get_password_hash(user.password_hash)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar()


async def save_user(db: AsyncSession, user: User) -> User:
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


# --- catalog -------------------------------------------------------------


async def create_course(db: AsyncSession, data: CourseCreate) -> Course:
    """Create a course together with its ordered modules and lessons."""

    existing = await get_course_by_slug(db, data.slug)
    if existing:
        raise ConflictError("Course slug already exists", {"slug": [data.slug]})

    course = Course(
        slug=data.slug,
        title=data.title,
        description=data.description,
        status=data.status,
    )
    db.add(course)
    await db.flush()
    for m_index, mod in enumerate(data.modules, start=1):
        module = CourseModule(
            course_id=course.id,
            order=m_index,
            slug=f"module-{m_index}",
            title=mod.title,
        )
        db.add(module)
        await db.flush()
        for l_index, title in enumerate(mod.lessons, start=1):
            db.add(
                Lesson(
                    module_id=module.id,
                    order=l_index,
                    slug=f"lesson-{l_index}",
                    title=title,
                )
            )
    await db.commit()
    return await get_course_detail(db, course.id)


async def ensure_course_catalog(db: AsyncSession) -> None:
    """Seed the database with the built-in course catalog."""

    from academy.course_catalog import COURSE_CATALOG

    for data in COURSE_CATALOG:
        if await get_course_by_slug(db, data["slug"]):
            continue
        await create_course(
            db,
            CourseCreate(
                slug=data["slug"],
                title=data["title"],
                description=data["description"],
                status=data["status"],
                modules=[
                    {
                        "title": m["title"],
                        "lessons": [f"Lesson {i}" for i in range(1, m["lesson_count"] + 1)],
                    }
                    for m in data["modules"]
                ],
            ),
        )
        logger.info("Seeded course %s", data["slug"])


async def get_course(db: AsyncSession, course_id: int) -> Course | None:
    result = await db.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


async def get_course_by_slug(db: AsyncSession, slug: str) -> Course | None:
    result = await db.execute(select(Course).where(Course.slug == slug))
    return result.scalar_one_or_none()


async def get_course_detail(db: AsyncSession, course_id: int) -> Course | None:
    result = await db.execute(
        select(Course)
        .where(Course.id == course_id)
        .options(selectinload(Course.modules).selectinload(CourseModule.lessons))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_published_courses(db: AsyncSession) -> list[Course]:
    result = await db.execute(
        select(Course).where(Course.status == "published").order_by(Course.id)
    )
    return result.scalars().all()


async def count_course_modules(db: AsyncSession, course_id: int) -> int:
    result = await db.execute(
        select(func.count(CourseModule.id)).where(CourseModule.course_id == course_id)
    )
    return result.scalar()


async def count_course_lessons(db: AsyncSession, course_id: int) -> int:
    result = await db.execute(
        select(func.count(Lesson.id))
        .join(CourseModule, Lesson.module_id == CourseModule.id)
        .where(CourseModule.course_id == course_id)
    )
    return result.scalar()


# --- enrollment ----------------------------------------------------------


async def get_enrollment(
    db: AsyncSession, user_id: int, course_id: int
) -> Enrollment | None:
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.user_id == user_id, Enrollment.course_id == course_id
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_enrollment(db: AsyncSession, user_id: int, course_id: int) -> Enrollment:
    course = await get_course(db, course_id)
    if not course:
        raise NotFoundError("Course", course_id)
    if await get_enrollment(db, user_id, course_id):
        raise ConflictError("User already enrolled in this course")
    enrollment = Enrollment(user_id=user_id, course_id=course_id)
    db.add(enrollment)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("User already enrolled in this course") from exc
    await db.refresh(enrollment)
    return enrollment


async def get_enrollments_by_user(db: AsyncSession, user_id: int) -> list[Enrollment]:
    result = await db.execute(
        select(Enrollment)
        .where(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


# --- quiz ledger ---------------------------------------------------------


async def get_best_score(
    db: AsyncSession, user_id: int, quiz_id: str
) -> QuizBestScore | None:
    result = await db.execute(
        select(QuizBestScore).where(
            QuizBestScore.user_id == user_id, QuizBestScore.quiz_id == quiz_id
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_quiz_attempts(
    db: AsyncSession, user_id: int, quiz_id: str
) -> list[QuizAttempt]:
    result = await db.execute(
        select(QuizAttempt)
        .where(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.attempt_number)
    )
    return result.scalars().all()


async def record_quiz_attempt(
    db: AsyncSession,
    user_id: int,
    quiz: Quiz,
    grade: GradeResult,
    *,
    course_id: int,
    module_id: str,
    lesson_id: str,
    time_taken_ms: int,
) -> RecordedAttempt:
    """Store an attempt and fold it into the best-score row atomically.

    Both writes share one transaction; on any database failure neither is
    visible.  ``best_score`` never decreases and ``passed`` never resets.
    """

    now = datetime.utcnow()
    try:
        result = await db.execute(
            select(QuizBestScore)
            .where(QuizBestScore.user_id == user_id, QuizBestScore.quiz_id == quiz.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        previous = result.scalar_one_or_none()
        previous_best = previous.best_score if previous else None
        attempt_number = (previous.total_attempts if previous else 0) + 1

        attempt = QuizAttempt(
            user_id=user_id,
            course_id=course_id,
            module_id=module_id,
            lesson_id=lesson_id,
            quiz_id=quiz.id,
            score=grade.score,
            total_questions=grade.total_questions,
            correct_answers=grade.correct_answers,
            passed=grade.passed,
            answers=[a.model_dump() for a in grade.stored_answers],
            time_taken_ms=time_taken_ms,
            attempt_number=attempt_number,
        )
        db.add(attempt)

        if previous is None:
            db.add(
                QuizBestScore(
                    user_id=user_id,
                    quiz_id=quiz.id,
                    best_score=grade.score,
                    total_attempts=1,
                    passed=grade.passed,
                    first_passed_at=now if grade.passed else None,
                    updated_at=now,
                )
            )
        else:
            values = {
                "best_score": case(
                    (QuizBestScore.best_score < grade.score, grade.score),
                    else_=QuizBestScore.best_score,
                ),
                "total_attempts": QuizBestScore.total_attempts + 1,
                "updated_at": now,
            }
            if grade.passed:
                values["passed"] = True
                values["first_passed_at"] = func.coalesce(
                    QuizBestScore.first_passed_at, now
                )
            await db.execute(
                update(QuizBestScore)
                .where(QuizBestScore.id == previous.id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        await db.flush()
        attempt_id = attempt.id
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning(
            "Concurrent attempt for user %s on quiz %s rolled back", user_id, quiz.id
        )
        raise ConflictError(
            "Another attempt for this quiz was recorded at the same time",
            retryable=True,
        ) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to record attempt for quiz %s", quiz.id)
        raise DatabaseError("Could not record quiz attempt") from exc

    logger.info(
        "User %s attempt %s on quiz %s scored %s",
        user_id,
        attempt_number,
        quiz.id,
        grade.score,
    )
    return RecordedAttempt(
        attempt_id=attempt_id,
        attempt_number=attempt_number,
        is_new_best_score=previous_best is None or grade.score > previous_best,
        previous_best_score=previous_best,
    )


# --- progress ------------------------------------------------------------


async def _require_enrollment(
    db: AsyncSession, user_id: int, course_id: int
) -> Enrollment:
    enrollment = await get_enrollment(db, user_id, course_id)
    if not enrollment:
        raise AuthorizationError("Not enrolled in this course")
    return enrollment


async def _load_progress(
    db: AsyncSession, user_id: int, course_id: int
) -> CourseProgress | None:
    result = await db.execute(
        select(CourseProgress)
        .where(CourseProgress.user_id == user_id, CourseProgress.course_id == course_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _increment_progress(
    db: AsyncSession,
    user_id: int,
    course_id: int,
    *,
    lessons: int = 0,
    modules: int = 0,
    last_lesson_id: int | None = None,
) -> None:
    """Add to the progress counters, creating the row on first use."""

    now = datetime.utcnow()
    values = {
        "lessons_complete": CourseProgress.lessons_complete + lessons,
        "modules_complete": CourseProgress.modules_complete + modules,
        "last_accessed_at": now,
        "updated_at": now,
    }
    if last_lesson_id is not None:
        values["last_lesson_id"] = last_lesson_id
    result = await db.execute(
        update(CourseProgress)
        .where(CourseProgress.user_id == user_id, CourseProgress.course_id == course_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.add(
            CourseProgress(
                user_id=user_id,
                course_id=course_id,
                lessons_complete=lessons,
                modules_complete=modules,
                last_lesson_id=last_lesson_id,
                last_accessed_at=now,
                updated_at=now,
            )
        )
        await db.flush()


async def _module_completion_exists(db: AsyncSession, user_id: int, module_id: int) -> bool:
    result = await db.execute(
        select(ModuleCompletion.id).where(
            ModuleCompletion.user_id == user_id, ModuleCompletion.module_id == module_id
        )
    )
    return result.first() is not None


async def _all_lessons_done(db: AsyncSession, user_id: int, module_id: int) -> bool:
    total = await db.execute(
        select(func.count(Lesson.id)).where(Lesson.module_id == module_id)
    )
    done = await db.execute(
        select(func.count(LessonCompletion.id)).where(
            LessonCompletion.user_id == user_id,
            LessonCompletion.module_id == module_id,
        )
    )
    total_count = total.scalar()
    return total_count > 0 and done.scalar() >= total_count


async def _refresh_enrollment_progress(
    db: AsyncSession, enrollment: Enrollment, modules_complete: int
) -> int:
    """Overwrite the cached enrollment percentage from the module counter."""

    total_modules = await count_course_modules(db, enrollment.course_id)
    overall = round_percent(min(modules_complete, total_modules), total_modules)
    await db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment.id)
        .values(progress=overall)
        .execution_options(synchronize_session=False)
    )
    return overall


async def _finish_progress_update(
    db: AsyncSession,
    enrollment: Enrollment,
    user_id: int,
    course_id: int,
    **fields,
) -> ProgressUpdate:
    progress = await _load_progress(db, user_id, course_id)
    lessons_complete = progress.lessons_complete if progress else 0
    modules_complete = progress.modules_complete if progress else 0
    overall = await _refresh_enrollment_progress(db, enrollment, modules_complete)
    await db.commit()
    return ProgressUpdate(
        lessons_complete=lessons_complete,
        modules_complete=modules_complete,
        overall_progress=overall,
        **fields,
    )


async def mark_lesson_complete(
    db: AsyncSession, user_id: int, course_id: int, lesson_id: int
) -> ProgressUpdate:
    """Record a finished lesson; completes its module when it was the last one."""

    enrollment = await _require_enrollment(db, user_id, course_id)
    lesson = await db.get(Lesson, lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson", lesson_id)
    module = await db.get(CourseModule, lesson.module_id)
    if module is None or module.course_id != course_id:
        raise AuthorizationError("Lesson does not belong to this course")

    try:
        result = await db.execute(
            select(LessonCompletion.id).where(
                LessonCompletion.user_id == user_id,
                LessonCompletion.lesson_id == lesson_id,
            )
        )
        already_complete = result.first() is not None
        if already_complete:
            await _increment_progress(db, user_id, course_id, last_lesson_id=lesson_id)
        else:
            db.add(
                LessonCompletion(user_id=user_id, lesson_id=lesson_id, module_id=module.id)
            )
            await db.flush()
            finishes_module = await _all_lessons_done(
                db, user_id, module.id
            ) and not await _module_completion_exists(db, user_id, module.id)
            if finishes_module:
                db.add(
                    ModuleCompletion(
                        user_id=user_id, module_id=module.id, course_id=course_id
                    )
                )
            await _increment_progress(
                db,
                user_id,
                course_id,
                lessons=1,
                modules=1 if finishes_module else 0,
                last_lesson_id=lesson_id,
            )
        outcome = await _finish_progress_update(
            db,
            enrollment,
            user_id,
            course_id,
            lesson_id=lesson_id,
            module_id=module.id,
            already_complete=already_complete,
        )
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(
            "Lesson completion was recorded concurrently", retryable=True
        ) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to mark lesson %s complete", lesson_id)
        raise DatabaseError("Could not update course progress") from exc
    logger.info(
        "User %s completed lesson %s of course %s (%s%%)",
        user_id,
        lesson_id,
        course_id,
        outcome.overall_progress,
    )
    return outcome


async def mark_module_complete(
    db: AsyncSession, user_id: int, course_id: int, module_id: int
) -> ProgressUpdate:
    """Record a finished module and bulk-complete its remaining lessons."""

    enrollment = await _require_enrollment(db, user_id, course_id)
    module = await db.get(CourseModule, module_id)
    if module is None:
        raise NotFoundError("Module", module_id)
    if module.course_id != course_id:
        raise AuthorizationError("Module does not belong to this course")

    try:
        already_complete = await _module_completion_exists(db, user_id, module_id)
        if already_complete:
            await _increment_progress(db, user_id, course_id)
        else:
            lesson_rows = await db.execute(
                select(Lesson.id).where(Lesson.module_id == module_id)
            )
            done_rows = await db.execute(
                select(LessonCompletion.lesson_id).where(
                    LessonCompletion.user_id == user_id,
                    LessonCompletion.module_id == module_id,
                )
            )
            done = set(done_rows.scalars().all())
            new_lessons = [i for i in lesson_rows.scalars().all() if i not in done]
            for new_id in new_lessons:
                db.add(
                    LessonCompletion(
                        user_id=user_id,
                        lesson_id=new_id,
                        module_id=module_id,
                        source="module",
                    )
                )
            db.add(
                ModuleCompletion(user_id=user_id, module_id=module_id, course_id=course_id)
            )
            await db.flush()
            await _increment_progress(
                db, user_id, course_id, lessons=len(new_lessons), modules=1
            )
        outcome = await _finish_progress_update(
            db,
            enrollment,
            user_id,
            course_id,
            module_id=module_id,
            already_complete=already_complete,
        )
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(
            "Module completion was recorded concurrently", retryable=True
        ) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to mark module %s complete", module_id)
        raise DatabaseError("Could not update course progress") from exc
    logger.info(
        "User %s completed module %s of course %s (%s%%)",
        user_id,
        module_id,
        course_id,
        outcome.overall_progress,
    )
    return outcome


async def get_course_progress(
    db: AsyncSession, user_id: int, course_id: int
) -> CourseProgressRead:
    enrollment = await _require_enrollment(db, user_id, course_id)
    progress = await _load_progress(db, user_id, course_id)
    total_modules = await count_course_modules(db, course_id)
    total_lessons = await count_course_lessons(db, course_id)
    modules_complete = progress.modules_complete if progress else 0
    lessons_complete = progress.lessons_complete if progress else 0
    return CourseProgressRead(
        course_id=course_id,
        enrollment_status=enrollment.status,
        modules=ProgressCounts(
            complete=modules_complete,
            total=total_modules,
            percentage=round_percent(modules_complete, total_modules),
        ),
        lessons=ProgressCounts(
            complete=lessons_complete,
            total=total_lessons,
            percentage=round_percent(lessons_complete, total_lessons),
        ),
        overall_progress=enrollment.progress,
        last_accessed_at=progress.last_accessed_at if progress else None,
    )
