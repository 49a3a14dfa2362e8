"""Convenience imports for all schema classes used by the API."""

from .user import UserCreate, UserResponse, UserLogin, LanguageUpdate
from .course import (
    CourseCreate,
    CourseRead,
    CourseDetail,
    ModuleCreate,
    ModuleRead,
    LessonRead,
    EnrollmentRead,
)
from .quiz import (
    Quiz,
    QuizQuestion,
    QuizOption,
    QuizQuestionPublic,
    QuizListing,
    QuizMetadata,
    QuizQuestionsResponse,
    QuizAnswer,
    QuizSubmission,
    AnswerValidation,
    QuestionResult,
    StoredAnswer,
    GradeResult,
    RecordedAttempt,
    QuizSubmitResponse,
    QuizAttemptRead,
)
from .progress import (
    LessonComplete,
    ModuleComplete,
    ProgressUpdate,
    ProgressCounts,
    CourseProgressRead,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "UserLogin",
    "LanguageUpdate",
    "CourseCreate",
    "CourseRead",
    "CourseDetail",
    "ModuleCreate",
    "ModuleRead",
    "LessonRead",
    "EnrollmentRead",
    "Quiz",
    "QuizQuestion",
    "QuizOption",
    "QuizQuestionPublic",
    "QuizListing",
    "QuizMetadata",
    "QuizQuestionsResponse",
    "QuizAnswer",
    "QuizSubmission",
    "AnswerValidation",
    "QuestionResult",
    "StoredAnswer",
    "GradeResult",
    "RecordedAttempt",
    "QuizSubmitResponse",
    "QuizAttemptRead",
    "LessonComplete",
    "ModuleComplete",
    "ProgressUpdate",
    "ProgressCounts",
    "CourseProgressRead",
]
