"""Tests for loading quiz content from the courses directory."""

import json
import logging
import pathlib
import sys

import pytest

# Allow importing the academy package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from academy import quiz_store


QUIZ = {
    "id": "quiz-module-1-lesson-1",
    "lessonId": "lesson-1",
    "moduleId": "module-1",
    "title": "Default title",
    "passingScore": 70,
    "questions": [
        {
            "id": "q1",
            "type": "multiple-choice",
            "question": "Pick a",
            "options": [{"id": "a", "text": "A"}, {"id": "b", "text": "B"}],
            "correctAnswer": "a",
            "explanation": "Because.",
        },
        {
            "id": "q2",
            "type": "true-false",
            "question": "True?",
            "correctAnswer": True,
            "explanation": "",
        },
    ],
}


@pytest.fixture
def courses_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(quiz_store, "COURSES_DIR", str(tmp_path))
    return tmp_path


def _write(root: pathlib.Path, module: str, name: str, data) -> None:
    target = root / "ddd" / "content" / module
    target.mkdir(parents=True, exist_ok=True)
    body = data if isinstance(data, str) else json.dumps(data)
    (target / name).write_text(body, encoding="utf-8")


def test_load_default_quiz(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    quiz = quiz_store.load_quiz("ddd", "module-1", "lesson-1")
    assert quiz is not None
    assert quiz.id == "quiz-module-1-lesson-1"
    assert quiz.passing_score == 70
    assert quiz.questions[1].correct_answer is True


def test_missing_quiz_is_not_found(courses_dir):
    assert quiz_store.load_quiz("ddd", "module-1", "lesson-9") is None
    assert quiz_store.load_quiz("nope", "module-1", "lesson-1") is None


def test_locale_file_preferred_then_falls_back(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    _write(
        courses_dir,
        "module-1",
        "quiz-lesson-1.es.json",
        {**QUIZ, "title": "Titulo"},
    )
    assert quiz_store.load_quiz("ddd", "module-1", "lesson-1", "es").title == "Titulo"
    assert quiz_store.load_quiz("ddd", "module-1", "lesson-1", "fr").title == "Default title"
    assert quiz_store.load_quiz("ddd", "module-1", "lesson-1", "en").title == "Default title"


def test_broken_locale_file_falls_back_to_default(courses_dir, caplog):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    _write(courses_dir, "module-1", "quiz-lesson-1.de.json", "{not json")
    with caplog.at_level(logging.WARNING, logger="academy.quiz_store"):
        quiz = quiz_store.load_quiz("ddd", "module-1", "lesson-1", "de")
    assert quiz.title == "Default title"
    assert "Invalid JSON" in caplog.text


def test_undecodable_locale_file_falls_back_to_default(courses_dir, caplog):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    target = courses_dir / "ddd" / "content" / "module-1" / "quiz-lesson-1.es.json"
    target.write_bytes(b'{"id": "\xff\xfe"}')
    with caplog.at_level(logging.WARNING, logger="academy.quiz_store"):
        quiz = quiz_store.load_quiz("ddd", "module-1", "lesson-1", "es")
    assert quiz.title == "Default title"
    assert "not valid UTF-8" in caplog.text


def test_undecodable_default_file_is_not_found(courses_dir, caplog):
    target = courses_dir / "ddd" / "content" / "module-1"
    target.mkdir(parents=True)
    (target / "quiz-lesson-1.json").write_bytes(b'{"id": "\xff\xfe"}')
    with caplog.at_level(logging.WARNING, logger="academy.quiz_store"):
        assert quiz_store.load_quiz("ddd", "module-1", "lesson-1") is None
    assert "not valid UTF-8" in caplog.text


@pytest.mark.parametrize(
    "content",
    [
        {**QUIZ, "id": ""},
        {**QUIZ, "questions": {"q1": "not a list"}},
        {k: v for k, v in QUIZ.items() if k != "questions"},
        {**QUIZ, "questions": [{"id": "q1", "type": "essay", "question": "?"}]},
    ],
)
def test_malformed_quiz_logged_and_not_found(courses_dir, caplog, content):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", content)
    with caplog.at_level(logging.WARNING, logger="academy.quiz_store"):
        assert quiz_store.load_quiz("ddd", "module-1", "lesson-1") is None
    assert caplog.records


def test_path_like_keys_are_rejected(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    assert quiz_store.load_quiz("..", "module-1", "lesson-1") is None
    assert quiz_store.load_quiz("ddd", "module-1", "lesson-1", "../../x") is not None
    assert quiz_store.list_course_quizzes("../ddd") == []


def test_public_questions_hide_answers(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    quiz = quiz_store.load_quiz("ddd", "module-1", "lesson-1")
    public = quiz_store.get_public_questions(quiz)
    assert [q.id for q in public] == ["q1", "q2"]
    for question in public:
        dumped = question.model_dump()
        assert "correct_answer" not in dumped
        assert "correctAnswer" not in question.model_dump_json()
        assert "explanation" not in dumped
    # the source quiz keeps its answers
    assert quiz.questions[0].correct_answer == "a"


def test_list_course_quizzes_skips_locale_variants(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    _write(courses_dir, "module-1", "quiz-lesson-1.es.json", QUIZ)
    _write(courses_dir, "module-1", "notes.json", {})
    _write(courses_dir, "module-2", "quiz-lesson-3.json", QUIZ)
    (courses_dir / "ddd" / "content" / "README.md").write_text("x")

    listing = quiz_store.list_course_quizzes("ddd")
    assert [q.model_dump() for q in listing] == [
        {"module_id": "module-1", "lesson_id": "lesson-1", "quiz_id": "quiz-module-1-lesson-1"},
        {"module_id": "module-2", "lesson_id": "lesson-3", "quiz_id": "quiz-module-2-lesson-3"},
    ]


def test_list_course_quizzes_without_content(courses_dir):
    assert quiz_store.list_course_quizzes("ddd") == []


def test_quiz_exists(courses_dir):
    _write(courses_dir, "module-1", "quiz-lesson-1.json", QUIZ)
    assert quiz_store.quiz_exists("ddd", "module-1", "lesson-1")
    assert not quiz_store.quiz_exists("ddd", "module-1", "lesson-2")


def test_first_available_returns_first_hit():
    seen = []

    def probe(key):
        seen.append(key)
        return {"b": 2, "c": 3}.get(key)

    assert quiz_store.first_available(["a", "b", "c"], probe) == 2
    assert seen == ["a", "b"]
    assert quiz_store.first_available([], probe) is None
