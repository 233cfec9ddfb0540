"""
Tests for the skincare questionnaire engine.
"""

import pytest

from medimate.skin.engine import (
    DEFAULT_SERUM,
    EVENING_ROUTINE,
    MIN_SCORE,
    MORNING_ROUTINE,
    UNIVERSAL_TIPS,
    build_record,
    get_inputs,
    run_inference,
)


class TestSkinScore:
    def test_neutral_answers_keep_base_score(self, neutral_skin_answers) -> None:
        assert run_inference(neutral_skin_answers)["skin_score"] == 85

    def test_no_sunscreen_and_weekly_breakouts(self, neutral_skin_answers) -> None:
        """85 - 20 for sunscreen - 15 for breakouts."""
        neutral_skin_answers.update({3: "Often (weekly)", 8: "Never"})
        assert run_inference(neutral_skin_answers)["skin_score"] == 50

    def test_daily_breakouts_also_penalized(self, neutral_skin_answers) -> None:
        neutral_skin_answers[3] = "Very often (daily)"
        assert run_inference(neutral_skin_answers)["skin_score"] == 70

    @pytest.mark.parametrize(
        "question, answer, expected",
        [
            (7, "More than 4 hours", 75),
            (8, "Rarely", 65),
            (8, "Sometimes", 85),
            (9, "8", 75),
            (9, "7", 85),
            (10, "Less than 5 hours", 75),
            (11, "Less than 4 glasses", 75),
        ],
    )
    def test_single_penalties(self, neutral_skin_answers, question, answer, expected) -> None:
        neutral_skin_answers[question] = answer
        assert run_inference(neutral_skin_answers)["skin_score"] == expected

    def test_score_never_drops_below_floor(self, neutral_skin_answers) -> None:
        neutral_skin_answers.update(
            {
                3: "Very often (daily)",
                7: "More than 4 hours",
                8: "Never",
                9: "10",
                10: "Less than 5 hours",
                11: "Less than 4 glasses",
            }
        )
        assert run_inference(neutral_skin_answers)["skin_score"] == MIN_SCORE

    def test_empty_answers(self) -> None:
        result = run_inference({})
        assert result["skin_score"] == 85
        assert result["skin_type"] == "Normal"
        assert result["primary_concerns"] == []


class TestSkinType:
    @pytest.mark.parametrize(
        "midday, expected",
        [
            ("Very oily all over", "Oily"),
            ("Tight or dry", "Dry"),
            ("Flaky or very dry", "Dry"),
            ("Oily in T-zone only", "Combination"),
            ("Normal/comfortable", "Normal"),
        ],
    )
    def test_midday_feel_overrides(self, neutral_skin_answers, midday, expected) -> None:
        neutral_skin_answers[4] = midday
        assert run_inference(neutral_skin_answers)["skin_type"] == expected

    def test_very_sensitive_wins(self, neutral_skin_answers) -> None:
        neutral_skin_answers.update({4: "Very oily all over", 5: "Very sensitive, reacts easily"})
        result = run_inference(neutral_skin_answers)

        assert result["skin_type"] == "Sensitive"
        assert result["recommendations"]["cleanser"]["name"] == "Fragrance-Free Gentle Cleanser"
        assert result["recommendations"]["toner"]["name"] == "Rose Water Balancing Toner"
        assert result["recommendations"]["moisturizer"]["name"] == "Balanced Hydrating Lotion"

    def test_string_keys_are_accepted(self, neutral_skin_answers) -> None:
        keyed = {f"q{key}": value for key, value in neutral_skin_answers.items()}
        keyed["q1"] = "Dry"
        assert run_inference(keyed)["skin_type"] == "Dry"


class TestRecommendations:
    def test_serum_priority(self, neutral_skin_answers) -> None:
        """Dark spots outrank wrinkles, which outrank acne."""
        neutral_skin_answers[2] = ["Acne/Breakouts", "Fine Lines/Wrinkles", "Dark Spots"]
        assert run_inference(neutral_skin_answers)["recommendations"]["serum"]["name"] == "Vitamin C Brightening Serum"

        neutral_skin_answers[2] = ["Acne/Breakouts", "Fine Lines/Wrinkles"]
        assert run_inference(neutral_skin_answers)["recommendations"]["serum"]["name"] == "Retinol Anti-Aging Serum"

        neutral_skin_answers[2] = ["Acne/Breakouts"]
        assert run_inference(neutral_skin_answers)["recommendations"]["serum"]["name"] == "Niacinamide Pore Refining Serum"

        neutral_skin_answers[2] = ["Dullness"]
        assert run_inference(neutral_skin_answers)["recommendations"]["serum"] == DEFAULT_SERUM

    def test_oily_products(self, neutral_skin_answers) -> None:
        neutral_skin_answers[1] = "Oily"
        products = run_inference(neutral_skin_answers)["recommendations"]
        assert products["cleanser"]["name"] == "Salicylic Acid Foaming Cleanser"
        assert products["toner"]["name"] == "BHA Clarifying Toner"
        assert products["moisturizer"]["name"] == "Oil-Free Gel Moisturizer"
        assert set(products) == {"cleanser", "toner", "serum", "moisturizer", "sunscreen"}

    def test_tips(self, neutral_skin_answers) -> None:
        neutral_skin_answers.update({1: "Dry", 2: ["Acne/Breakouts"], 8: "Never"})
        tips = run_inference(neutral_skin_answers)["tips"]

        assert tips[:3] == UNIVERSAL_TIPS
        assert "Apply moisturizer to damp skin to lock in hydration" in tips
        assert "Avoid touching your face throughout the day" in tips
        assert tips[-1].startswith("Sunscreen is crucial")
        assert len(tips) == 8

    def test_routine_is_the_same_for_everyone(self, neutral_skin_answers) -> None:
        first = run_inference(neutral_skin_answers)["routine"]
        neutral_skin_answers.update({1: "Oily", 2: ["Dark Spots"]})
        second = run_inference(neutral_skin_answers)["routine"]

        assert first == second
        assert first["morning"] == MORNING_ROUTINE
        assert first["evening"] == EVENING_ROUTINE


def test_inputs_one_per_question() -> None:
    inputs = get_inputs()
    assert len(inputs) == 13
    assert inputs[1]["type"] == "multiselect"
    assert inputs[8]["type"] == "select_slider"


def test_build_record(neutral_skin_answers) -> None:
    result = run_inference(neutral_skin_answers)
    record = build_record(result)
    assert record["skinType"] == "Normal"
    assert record["score"] == 85
    assert record["concerns"] == []
