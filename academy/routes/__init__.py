"""Aggregate import for all API route modules."""

from . import (
    auth,
    users,
    courses,
    enrollments,
    quizzes,
    progress,
)

__all__ = [
    "auth",
    "users",
    "courses",
    "enrollments",
    "quizzes",
    "progress",
]
