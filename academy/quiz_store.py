"""Read-only access to quiz definitions stored as JSON content files.

Quizzes live next to the course content they belong to::

    <COURSES_DIR>/<course>/content/<module>/quiz-<lesson>.json
    <COURSES_DIR>/<course>/content/<module>/quiz-<lesson>.<locale>.json

A translated file is optional; whenever it cannot be used the default file
is served instead.  Broken content is logged and reported as "no quiz" so a
typo in a JSON file never looks like an outage.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import ValidationError as SchemaError

from academy.schemas.quiz import Quiz, QuizListing, QuizQuestionPublic

logger = logging.getLogger(__name__)

COURSES_DIR = os.getenv("COURSES_DIR", "./courses")
DEFAULT_LOCALE = os.getenv("DEFAULT_LOCALE", "en")

# Content keys become path segments, so keep them to plain slugs.
_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_QUIZ_FILE_RE = re.compile(r"^quiz-(?P<lesson>[A-Za-z0-9_-]+)\.json$")

T = TypeVar("T")
K = TypeVar("K")


def first_available(candidates: Iterable[K], probe: Callable[[K], Optional[T]]) -> Optional[T]:
    """Return the first non-``None`` result of ``probe`` over ``candidates``."""

    for candidate in candidates:
        found = probe(candidate)
        if found is not None:
            return found
    return None


def _module_dir(course_id: str, module_id: str) -> Optional[Path]:
    if not (_KEY_RE.match(course_id) and _KEY_RE.match(module_id)):
        return None
    return Path(COURSES_DIR) / course_id / "content" / module_id


def _read_quiz_file(path: Path) -> Optional[Quiz]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning("Could not read quiz file %s: %s", path, exc)
        return None
    except UnicodeDecodeError as exc:
        logger.warning("Quiz file %s is not valid UTF-8: %s", path, exc)
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON in quiz file %s: %s", path, exc)
        return None

    if (
        not isinstance(data, dict)
        or not data.get("id")
        or not isinstance(data.get("questions"), list)
    ):
        logger.warning("Invalid quiz file format: %s", path)
        return None

    try:
        return Quiz.model_validate(data)
    except SchemaError as exc:
        logger.warning("Quiz file %s does not match the quiz schema: %s", path, exc)
        return None


def load_quiz(
    course_id: str, module_id: str, lesson_id: str, locale: Optional[str] = None
) -> Optional[Quiz]:
    """Load a quiz, preferring the ``locale`` translation when one exists.

    Returns ``None`` when there is no usable quiz for the lesson.
    """

    base = _module_dir(course_id, module_id)
    if base is None or not _KEY_RE.match(lesson_id):
        return None

    candidates = []
    if locale and locale != DEFAULT_LOCALE and _KEY_RE.match(locale):
        candidates.append(base / f"quiz-{lesson_id}.{locale}.json")
    candidates.append(base / f"quiz-{lesson_id}.json")
    return first_available(candidates, _read_quiz_file)


def quiz_exists(course_id: str, module_id: str, lesson_id: str) -> bool:
    base = _module_dir(course_id, module_id)
    if base is None or not _KEY_RE.match(lesson_id):
        return False
    return (base / f"quiz-{lesson_id}.json").is_file()


def get_public_questions(quiz: Quiz) -> list[QuizQuestionPublic]:
    """Strip answers and explanations from every question."""

    return [
        QuizQuestionPublic(
            id=q.id,
            type=q.type,
            question=q.question,
            options=[o.model_copy() for o in q.options] if q.options is not None else None,
        )
        for q in quiz.questions
    ]


def list_course_quizzes(course_id: str) -> list[QuizListing]:
    """Enumerate the default-locale quizzes available for a course."""

    if not _KEY_RE.match(course_id):
        return []
    content_dir = Path(COURSES_DIR) / course_id / "content"
    if not content_dir.is_dir():
        return []

    quizzes: list[QuizListing] = []
    for module_dir in sorted(content_dir.iterdir()):
        if not module_dir.is_dir():
            continue
        for entry in sorted(module_dir.iterdir()):
            match = _QUIZ_FILE_RE.match(entry.name)
            if not match or not entry.is_file():
                continue
            lesson_id = match.group("lesson")
            quizzes.append(
                QuizListing(
                    module_id=module_dir.name,
                    lesson_id=lesson_id,
                    quiz_id=f"quiz-{module_dir.name}-{lesson_id}",
                )
            )
    return quizzes
