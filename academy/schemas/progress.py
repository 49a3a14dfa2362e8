from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class LessonComplete(BaseModel):
    lesson_id: int


class ModuleComplete(BaseModel):
    module_id: int


class ProgressUpdate(BaseModel):
    """Counters returned after a lesson or module completion event."""

    lesson_id: Optional[int] = None
    module_id: Optional[int] = None
    lessons_complete: int
    modules_complete: int
    overall_progress: int
    already_complete: bool = False


class ProgressCounts(BaseModel):
    complete: int
    total: int
    percentage: int


class CourseProgressRead(BaseModel):
    course_id: int
    enrollment_status: str
    modules: ProgressCounts
    lessons: ProgressCounts
    overall_progress: int
    last_accessed_at: Optional[datetime] = None
