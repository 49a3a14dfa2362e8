"""Database models used by the academy API.

The models are defined with SQLModel (built on SQLAlchemy and Pydantic)
and cover the course catalog, enrollments, progress counters and the quiz
attempt ledger.  Quiz definitions themselves live in static JSON content
and are never stored here.
"""

from typing import Optional, List, Any
from datetime import datetime
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON, UniqueConstraint


class User(SQLModel, table=True):
    """Account holder; either a student or an admin."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    password_hash: str
    role: str = "student"  # 'student' or 'admin'
    locale: str = "en"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    enrollments: List["Enrollment"] = Relationship(back_populates="user")


class Course(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True)
    title: str
    description: str = ""
    status: str = "published"  # 'draft' or 'published'
    created_at: datetime = Field(default_factory=datetime.utcnow)

    modules: List["CourseModule"] = Relationship(
        back_populates="course",
        sa_relationship_kwargs={"order_by": "CourseModule.order"},
    )


class CourseModule(SQLModel, table=True):
    """Ordered chapter of a course.  ``slug`` names its content directory."""

    __tablename__ = "course_module"

    id: Optional[int] = Field(default=None, primary_key=True)
    course_id: int = Field(foreign_key="course.id", index=True)
    order: int
    slug: str
    title: str

    course: Course = Relationship(back_populates="modules")
    lessons: List["Lesson"] = Relationship(
        back_populates="module",
        sa_relationship_kwargs={"order_by": "Lesson.order"},
    )


class Lesson(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    module_id: int = Field(foreign_key="course_module.id", index=True)
    order: int
    slug: str
    title: str

    module: CourseModule = Relationship(back_populates="lessons")


class Enrollment(SQLModel, table=True):
    """Membership of a user in a course with a cached progress percentage."""

    __table_args__ = (UniqueConstraint("user_id", "course_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    course_id: int = Field(foreign_key="course.id", index=True)
    status: str = "active"
    progress: int = 0  # 0-100, rewritten on every completion event
    enrolled_at: datetime = Field(default_factory=datetime.utcnow)

    user: User = Relationship(back_populates="enrollments")
    course: Course = Relationship()


class CourseProgress(SQLModel, table=True):
    """Per-user completion counters for a course."""

    __tablename__ = "course_progress"
    __table_args__ = (UniqueConstraint("user_id", "course_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    course_id: int = Field(foreign_key="course.id", index=True)
    last_lesson_id: Optional[int] = Field(default=None, foreign_key="lesson.id")
    lessons_complete: int = 0
    modules_complete: int = 0
    last_accessed_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LessonCompletion(SQLModel, table=True):
    """One row per lesson a user has finished; guards double counting."""

    __tablename__ = "lesson_completion"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    lesson_id: int = Field(foreign_key="lesson.id")
    module_id: int = Field(foreign_key="course_module.id", index=True)
    source: str = "lesson"  # 'lesson' or 'module'
    completed_at: datetime = Field(default_factory=datetime.utcnow)


class ModuleCompletion(SQLModel, table=True):
    __tablename__ = "module_completion"
    __table_args__ = (UniqueConstraint("user_id", "module_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    module_id: int = Field(foreign_key="course_module.id")
    course_id: int = Field(foreign_key="course.id", index=True)
    completed_at: datetime = Field(default_factory=datetime.utcnow)


class QuizAttempt(SQLModel, table=True):
    """Append-only record of one graded quiz submission."""

    __tablename__ = "quiz_attempt"
    __table_args__ = (UniqueConstraint("user_id", "quiz_id", "attempt_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    course_id: int = Field(foreign_key="course.id")
    module_id: str
    lesson_id: str
    quiz_id: str = Field(index=True)
    score: int
    total_questions: int
    correct_answers: int
    passed: bool
    answers: List[dict[str, Any]] = Field(sa_column=Column(JSON), default_factory=list)
    time_taken_ms: int
    attempt_number: int
    created_at: datetime = Field(default_factory=datetime.utcnow)


class QuizBestScore(SQLModel, table=True):
    """Best score and attempt bookkeeping for one (user, quiz) pair."""

    __tablename__ = "quiz_best_score"
    __table_args__ = (UniqueConstraint("user_id", "quiz_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    quiz_id: str
    best_score: int
    total_attempts: int = 1
    passed: bool = False
    first_passed_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)
