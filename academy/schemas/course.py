from datetime import datetime
from pydantic import BaseModel, Field
from typing import List


class LessonRead(BaseModel):
    id: int
    order: int
    slug: str
    title: str

    class Config:
        from_attributes = True


class ModuleRead(BaseModel):
    id: int
    order: int
    slug: str
    title: str
    lessons: List[LessonRead] = []

    class Config:
        from_attributes = True


class CourseRead(BaseModel):
    id: int
    slug: str
    title: str
    description: str
    status: str

    class Config:
        from_attributes = True


class CourseDetail(CourseRead):
    modules: List[ModuleRead] = []


class ModuleCreate(BaseModel):
    title: str
    lessons: List[str] = Field(default_factory=list)


class CourseCreate(BaseModel):
    slug: str = Field(min_length=1)
    title: str
    description: str = ""
    status: str = "published"
    modules: List[ModuleCreate] = Field(default_factory=list)


class EnrollmentRead(BaseModel):
    id: int
    course_id: int
    status: str
    progress: int
    enrolled_at: datetime

    class Config:
        from_attributes = True
