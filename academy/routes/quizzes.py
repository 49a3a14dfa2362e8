"""Routes for lesson quizzes: metadata, questions, submission and history.

Quiz content is addressed by the course slug plus the module and lesson
content keys (``module-1``, ``lesson-2``) used in the content directory.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth import get_current_user
from academy.crud import (
    get_best_score,
    get_course_by_slug,
    get_quiz_attempts,
    record_quiz_attempt,
)
from academy.database import get_session
from academy.errors import NotFoundError, ValidationError
from academy.grading import grade_quiz, validate_answers
from academy.models import User
from academy.quiz_store import (
    get_public_questions,
    list_course_quizzes,
    load_quiz,
    quiz_exists,
)
from academy.schemas import (
    Quiz,
    QuizAttemptRead,
    QuizListing,
    QuizMetadata,
    QuizQuestionsResponse,
    QuizSubmission,
    QuizSubmitResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quizzes", tags=["quizzes"])


def _require_quiz(
    course_slug: str, module_id: str, lesson_id: str, locale: Optional[str]
) -> Quiz:
    quiz = load_quiz(course_slug, module_id, lesson_id, locale)
    if not quiz:
        if quiz_exists(course_slug, module_id, lesson_id):
            logger.error(
                "Quiz content for %s/%s/%s exists but is unusable",
                course_slug,
                module_id,
                lesson_id,
            )
        raise NotFoundError("Quiz", f"{course_slug}/{module_id}/{lesson_id}")
    return quiz


@router.get("/{course_slug}", response_model=list[QuizListing])
async def list_quizzes(
    course_slug: str,
    current_user: User = Depends(get_current_user),
):
    return list_course_quizzes(course_slug)


@router.get("/{course_slug}/{module_id}/{lesson_id}", response_model=QuizMetadata)
async def quiz_metadata(
    course_slug: str,
    module_id: str,
    lesson_id: str,
    locale: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    quiz = _require_quiz(course_slug, module_id, lesson_id, locale or current_user.locale)
    best = await get_best_score(db, current_user.id, quiz.id)
    return QuizMetadata(
        id=quiz.id,
        lesson_id=quiz.lesson_id,
        module_id=quiz.module_id,
        title=quiz.title,
        question_count=len(quiz.questions),
        passing_score=quiz.passing_score,
        best_score=best.best_score if best else None,
        passed=best.passed if best else False,
        attempt_count=best.total_attempts if best else 0,
    )


@router.get(
    "/{course_slug}/{module_id}/{lesson_id}/questions",
    response_model=QuizQuestionsResponse,
)
async def quiz_questions(
    course_slug: str,
    module_id: str,
    lesson_id: str,
    locale: Optional[str] = None,
    current_user: User = Depends(get_current_user),
):
    quiz = _require_quiz(course_slug, module_id, lesson_id, locale or current_user.locale)
    return QuizQuestionsResponse(
        quiz_id=quiz.id,
        title=quiz.title,
        passing_score=quiz.passing_score,
        questions=get_public_questions(quiz),
    )


@router.post(
    "/{course_slug}/{module_id}/{lesson_id}/submit",
    response_model=QuizSubmitResponse,
)
async def submit_quiz(
    course_slug: str,
    module_id: str,
    lesson_id: str,
    submission: QuizSubmission,
    locale: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    quiz = _require_quiz(course_slug, module_id, lesson_id, locale or current_user.locale)
    course = await get_course_by_slug(db, course_slug)
    if not course:
        raise NotFoundError("Course", course_slug)

    validation = validate_answers(quiz, submission.answers)
    if not validation.valid:
        logger.info(
            "Rejected submission for quiz %s by user %s: %s",
            quiz.id,
            current_user.id,
            validation.errors,
        )
        raise ValidationError("Invalid quiz answers", {"answers": validation.errors})

    grade = grade_quiz(quiz, submission.answers)
    recorded = await record_quiz_attempt(
        db,
        current_user.id,
        quiz,
        grade,
        course_id=course.id,
        module_id=module_id,
        lesson_id=lesson_id,
        time_taken_ms=submission.time_taken_ms,
    )
    return QuizSubmitResponse(
        attempt_id=recorded.attempt_id,
        score=grade.score,
        passed=grade.passed,
        correct_answers=grade.correct_answers,
        total_questions=grade.total_questions,
        results=grade.results,
        is_new_best_score=recorded.is_new_best_score,
        previous_best_score=recorded.previous_best_score,
    )


@router.get(
    "/{course_slug}/{module_id}/{lesson_id}/attempts",
    response_model=list[QuizAttemptRead],
)
async def quiz_attempts(
    course_slug: str,
    module_id: str,
    lesson_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    quiz = _require_quiz(course_slug, module_id, lesson_id, current_user.locale)
    return await get_quiz_attempts(db, current_user.id, quiz.id)
