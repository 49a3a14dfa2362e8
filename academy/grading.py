"""Server-side validation and grading of quiz submissions.

Everything here is pure: the same quiz and answers always produce the same
result, and nothing touches the database or the filesystem.
"""

from typing import Sequence

from academy.schemas.quiz import (
    AnswerValidation,
    AnswerValue,
    GradeResult,
    Quiz,
    QuizAnswer,
    QuizQuestion,
    QuestionResult,
    StoredAnswer,
)


def round_percent(part: int, whole: int) -> int:
    """``part / whole`` as a 0-100 integer, halves rounded up; 0 if ``whole`` is 0."""

    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


def validate_answers(quiz: Quiz, answers: Sequence[QuizAnswer]) -> AnswerValidation:
    """Collect every reason a submission cannot be graded."""

    errors: list[str] = []
    questions = {q.id: q for q in quiz.questions}

    for answer in answers:
        if answer.question_id not in questions:
            errors.append(f"Unknown question ID: {answer.question_id}")

    for answer in answers:
        question = questions.get(answer.question_id)
        if question is None:
            continue
        selected = answer.selected_answer

        if question.type == "true-false" and not isinstance(selected, bool):
            errors.append(f"Question {answer.question_id} requires a boolean answer")

        if question.type == "multiple-choice":
            if not isinstance(selected, str):
                errors.append(f"Question {answer.question_id} requires a string answer")
            elif question.options is not None and selected not in {o.id for o in question.options}:
                errors.append(f"Invalid option for question {answer.question_id}: {selected}")

    return AnswerValidation(valid=not errors, errors=errors)


def _default_answer(question: QuizQuestion) -> AnswerValue:
    return False if question.type == "true-false" else ""


def _is_correct(correct: AnswerValue, selected: AnswerValue) -> bool:
    # bool is not a str and "true" is not True: compare type and value.
    return type(correct) is type(selected) and correct == selected


def grade_quiz(quiz: Quiz, answers: Sequence[QuizAnswer]) -> GradeResult:
    """Score ``answers`` against ``quiz`` in the quiz's question order.

    Unanswered questions are shown with a placeholder answer and always
    count as wrong.
    """

    submitted = {a.question_id: a.selected_answer for a in answers}
    results: list[QuestionResult] = []
    stored: list[StoredAnswer] = []
    correct_count = 0

    for question in quiz.questions:
        answered = question.id in submitted
        selected = submitted[question.id] if answered else _default_answer(question)
        is_correct = answered and _is_correct(question.correct_answer, selected)
        if is_correct:
            correct_count += 1

        results.append(
            QuestionResult(
                question_id=question.id,
                question=question.question,
                type=question.type,
                selected_answer=selected,
                correct_answer=question.correct_answer,
                is_correct=is_correct,
                explanation=question.explanation,
                options=question.options,
            )
        )
        stored.append(
            StoredAnswer(
                question_id=question.id,
                selected_answer=selected,
                is_correct=is_correct,
            )
        )

    total = len(quiz.questions)
    score = round_percent(correct_count, total)
    return GradeResult(
        score=score,
        passed=score >= quiz.passing_score,
        correct_answers=correct_count,
        total_questions=total,
        results=results,
        stored_answers=stored,
    )
