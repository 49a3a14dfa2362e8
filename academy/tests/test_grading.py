"""Unit tests for answer validation and quiz grading."""

import pathlib
import sys

# Allow importing the academy package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from academy.grading import grade_quiz, round_percent, validate_answers
from academy.schemas import Quiz, QuizAnswer


def _quiz(passing_score: int = 70) -> Quiz:
    return Quiz.model_validate(
        {
            "id": "quiz-module-1-lesson-1",
            "lessonId": "lesson-1",
            "moduleId": "module-1",
            "title": "Basics",
            "passingScore": passing_score,
            "questions": [
                {
                    "id": "q1",
                    "type": "true-false",
                    "question": "Is the sky blue?",
                    "correctAnswer": True,
                    "explanation": "Rayleigh scattering.",
                },
                {
                    "id": "q2",
                    "type": "multiple-choice",
                    "question": "Pick b",
                    "options": [{"id": "a", "text": "A"}, {"id": "b", "text": "B"}],
                    "correctAnswer": "b",
                    "explanation": "It says so.",
                },
            ],
        }
    )


def _answers(*pairs) -> list[QuizAnswer]:
    return [QuizAnswer(question_id=q, selected_answer=a) for q, a in pairs]


def test_perfect_score():
    quiz = _quiz()
    answers = _answers(("q1", True), ("q2", "b"))
    assert validate_answers(quiz, answers).valid
    result = grade_quiz(quiz, answers)
    assert result.score == 100
    assert result.correct_answers == 2
    assert result.total_questions == 2
    assert result.passed is True
    assert [r.question_id for r in result.results] == ["q1", "q2"]
    assert all(r.is_correct for r in result.results)


def test_unanswered_question_defaults_and_counts_wrong():
    quiz = _quiz()
    answers = _answers(("q1", True))
    assert validate_answers(quiz, answers).valid
    result = grade_quiz(quiz, answers)
    assert result.score == 50
    assert result.passed is False
    q2 = result.results[1]
    assert q2.selected_answer == ""
    assert q2.correct_answer == "b"
    assert q2.is_correct is False
    assert result.stored_answers[1].model_dump() == {
        "question_id": "q2",
        "selected_answer": "",
        "is_correct": False,
    }


def test_unanswered_true_false_defaults_to_false_but_is_not_correct():
    quiz = Quiz.model_validate(
        {
            "id": "tf",
            "passingScore": 50,
            "questions": [
                {
                    "id": "q1",
                    "type": "true-false",
                    "question": "Is water dry?",
                    "correctAnswer": False,
                }
            ],
        }
    )
    result = grade_quiz(quiz, [])
    assert result.results[0].selected_answer is False
    assert result.results[0].is_correct is False
    assert result.score == 0


def test_invalid_option_is_rejected():
    quiz = _quiz()
    validation = validate_answers(quiz, _answers(("q1", True), ("q2", "z")))
    assert validation.valid is False
    assert len(validation.errors) == 1
    assert "q2" in validation.errors[0]


def test_validator_accumulates_all_errors():
    quiz = _quiz()
    validation = validate_answers(
        quiz, _answers(("q1", "yes"), ("q2", False), ("q9", True))
    )
    assert validation.valid is False
    assert "Unknown question ID: q9" in validation.errors
    assert "Question q1 requires a boolean answer" in validation.errors
    assert "Question q2 requires a string answer" in validation.errors
    assert len(validation.errors) == 3


def test_grading_is_deterministic():
    quiz = _quiz()
    answers = _answers(("q2", "a"), ("q1", False))
    first = grade_quiz(quiz, answers)
    second = grade_quiz(quiz, answers)
    assert first.model_dump_json() == second.model_dump_json()


def test_no_type_coercion_when_comparing():
    quiz = Quiz.model_validate(
        {
            "id": "mixed",
            "questions": [
                {
                    "id": "q1",
                    "type": "multiple-choice",
                    "question": "?",
                    "options": [{"id": "true", "text": "yes"}],
                    "correctAnswer": "true",
                }
            ],
        }
    )
    result = grade_quiz(quiz, _answers(("q1", True)))
    assert result.correct_answers == 0


def test_empty_quiz_scores_zero():
    quiz = Quiz.model_validate({"id": "empty", "passingScore": 0, "questions": []})
    result = grade_quiz(quiz, [])
    assert result.score == 0
    assert result.total_questions == 0
    assert result.passed is True


def test_pass_threshold_is_inclusive():
    quiz = _quiz(passing_score=50)
    assert grade_quiz(quiz, _answers(("q1", True))).passed is True
    quiz = _quiz(passing_score=51)
    assert grade_quiz(quiz, _answers(("q1", True))).passed is False


def test_round_percent_bounds_and_half_up():
    assert round_percent(0, 0) == 0
    assert round_percent(0, 7) == 0
    assert round_percent(7, 7) == 100
    assert round_percent(1, 8) == 13
    assert round_percent(2, 3) == 67
    assert round_percent(1, 3) == 33
    for total in range(1, 30):
        for correct in range(total + 1):
            assert 0 <= round_percent(correct, total) <= 100
