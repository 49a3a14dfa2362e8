from datetime import datetime
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

QuestionType = Literal["multiple-choice", "true-false"]
# Multiple-choice answers are option ids, true/false answers are booleans.
AnswerValue = Union[StrictBool, StrictStr]


class QuizOption(BaseModel):
    id: str
    text: str


class QuizQuestion(BaseModel):
    """Question as authored in the JSON content files."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: QuestionType
    question: str
    options: Optional[List[QuizOption]] = None
    correct_answer: AnswerValue = Field(alias="correctAnswer")
    explanation: str = ""


class Quiz(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    lesson_id: str = Field(default="", alias="lessonId")
    module_id: str = Field(default="", alias="moduleId")
    title: str = ""
    passing_score: int = Field(default=70, ge=0, le=100, alias="passingScore")
    questions: List[QuizQuestion]


class QuizQuestionPublic(BaseModel):
    """Question without its answer, safe to send before grading."""

    id: str
    type: QuestionType
    question: str
    options: Optional[List[QuizOption]] = None


class QuizListing(BaseModel):
    module_id: str
    lesson_id: str
    quiz_id: str


class QuizMetadata(BaseModel):
    id: str
    lesson_id: str
    module_id: str
    title: str
    question_count: int
    passing_score: int
    best_score: Optional[int]
    passed: bool
    attempt_count: int


class QuizQuestionsResponse(BaseModel):
    quiz_id: str
    title: str
    passing_score: int
    questions: List[QuizQuestionPublic]


class QuizAnswer(BaseModel):
    question_id: str = Field(min_length=1)
    selected_answer: AnswerValue


class QuizSubmission(BaseModel):
    answers: List[QuizAnswer]
    time_taken_ms: int = Field(ge=0)


class AnswerValidation(BaseModel):
    valid: bool
    errors: List[str]


class QuestionResult(BaseModel):
    question_id: str
    question: str
    type: QuestionType
    selected_answer: AnswerValue
    correct_answer: AnswerValue
    is_correct: bool
    explanation: str
    options: Optional[List[QuizOption]] = None


class StoredAnswer(BaseModel):
    """Reduced per-question record kept in ``QuizAttempt.answers``."""

    question_id: str
    selected_answer: AnswerValue
    is_correct: bool


class GradeResult(BaseModel):
    score: int
    passed: bool
    correct_answers: int
    total_questions: int
    results: List[QuestionResult]
    stored_answers: List[StoredAnswer]


class RecordedAttempt(BaseModel):
    attempt_id: int
    attempt_number: int
    is_new_best_score: bool
    previous_best_score: Optional[int]


class QuizSubmitResponse(BaseModel):
    attempt_id: int
    score: int
    passed: bool
    correct_answers: int
    total_questions: int
    results: List[QuestionResult]
    is_new_best_score: bool
    previous_best_score: Optional[int]


class QuizAttemptRead(BaseModel):
    id: int
    quiz_id: str
    attempt_number: int
    score: int
    passed: bool
    correct_answers: int
    total_questions: int
    time_taken_ms: int
    created_at: datetime

    class Config:
        from_attributes = True
