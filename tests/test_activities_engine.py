"""
Tests for the health quiz, wellness tips and breathing exercise.
"""

import random
from datetime import date

import pytest

from medimate.activities.engine import (
    QUESTIONS,
    WELLNESS_TIPS,
    breathing_plan,
    build_record,
    check_answer,
    daily_tip,
    random_tip,
    score_quiz,
)


class TestQuiz:
    def test_check_answer(self) -> None:
        assert check_answer(1, 1) is True
        assert check_answer(3, 0) is False

    def test_unknown_question(self) -> None:
        with pytest.raises(KeyError):
            check_answer(99, 0)

    def test_perfect_score(self) -> None:
        answers = {item["id"]: item["correct"] for item in QUESTIONS}
        result = score_quiz(answers)
        assert result == {"score": 5, "total_questions": 5, "message": "Perfect! You're a health expert!"}

    @pytest.mark.parametrize(
        "correct_count, message",
        [
            (4, "Great job! You know your health facts!"),
            (3, "Good work! Keep learning about health!"),
            (2, "Keep studying! Health knowledge is important!"),
            (0, "Keep studying! Health knowledge is important!"),
        ],
    )
    def test_verdicts(self, correct_count, message) -> None:
        answers = {}
        for index, item in enumerate(QUESTIONS):
            answers[item["id"]] = item["correct"] if index < correct_count else (item["correct"] + 1) % 4
        result = score_quiz(answers)
        assert result["score"] == correct_count
        assert result["message"] == message

    def test_unanswered_counts_as_wrong(self) -> None:
        assert score_quiz({1: 1, 2: None})["score"] == 1

    def test_build_record(self) -> None:
        record = build_record(score_quiz({1: 1}))
        assert record["score"] == 1
        assert record["totalQuestions"] == 5


class TestTips:
    def test_daily_tip_uses_day_of_month(self) -> None:
        assert daily_tip(date(2024, 3, 13)) == WELLNESS_TIPS[3]
        assert daily_tip(date(2024, 3, 13)) == daily_tip(date(2024, 7, 13))

    def test_random_tip_is_from_the_list(self) -> None:
        assert random_tip(random.Random(7)) in WELLNESS_TIPS


def test_breathing_plan() -> None:
    plan = breathing_plan()
    assert len(plan) == 20
    assert plan[0] == {"cycle": 1, "phase": "inhale", "seconds": 4, "prompt": "Breathe in slowly..."}
    assert plan[-1]["cycle"] == 5
    assert plan[-1]["phase"] == "rest"
    assert sum(step["seconds"] for step in plan) == 80
