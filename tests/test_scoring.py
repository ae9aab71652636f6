"""Tests for negative-marking scores, tiers and result building."""
import random

import pytest

from examprep.services.errors import AnswerVectorError
from examprep.services.randomizer import randomize_session
from examprep.services.scoring import (
    calculate_net,
    calculate_percentage,
    calculate_results,
    calculate_score,
    format_score,
    format_time,
    performance_tier,
    student_status,
)
from tests.conftest import make_question


def _session(n=12, seed=0):
    questions = [
        make_question(text=f"Q{i}", options=[f"Q{i}-{c}" for c in "abcd"], correct_index=i % 4, number=100 + i)
        for i in range(n)
    ]
    return randomize_session(questions, random.Random(seed))


def _wrong_index(question):
    return (question.correct_index + 1) % len(question.options)


class TestArithmetic:
    def test_negative_marking(self):
        assert calculate_net(9, 3) == pytest.approx(8.0)
        assert calculate_score(9, 3) == pytest.approx(16.0)

    def test_net_not_floored_but_score_is(self):
        assert calculate_net(0, 6) == pytest.approx(-2.0)
        assert calculate_score(0, 6) == 0.0

    def test_percentage_rounds_half_up(self):
        assert calculate_percentage(1, 8) == 13  # 12.5
        assert calculate_percentage(2, 3) == 67
        assert calculate_percentage(0, 0) == 0

    def test_format_score(self):
        assert format_score(8) == "8.00"
        assert format_score(2.675) == "2.68"
        assert format_score(-1 / 3) == "-0.33"

    def test_format_time(self):
        assert format_time(0) == "0:00"
        assert format_time(125) == "2:05"
        assert format_time(3600) == "60:00"


class TestPerformanceTier:
    @pytest.mark.parametrize(
        "percentage, key",
        [(100, "excellent"), (90, "excellent"), (89, "very_good"), (80, "very_good"), (70, "good"),
         (60, "average"), (50, "passing"), (49, "insufficient"), (0, "insufficient")],
    )
    def test_bands(self, percentage, key):
        assert performance_tier(percentage).key == key

    def test_tier_carries_display_metadata(self):
        tier = performance_tier(95)
        assert tier.label == "Excellent"
        assert tier.emblem
        assert tier.color.startswith("#")


class TestStudentStatus:
    def test_bands(self):
        assert student_status(0) == "just getting started 🚀"
        assert student_status(90).startswith("excellent")
        assert student_status(76).startswith("doing great")
        assert student_status(60).startswith("on the right track")
        assert student_status(45).startswith("needs more practice")
        assert student_status(10).startswith("needs a lot more")


class TestCalculateResults:
    def test_empty_session(self):
        result = calculate_results([], [])
        assert (result.correct, result.wrong, result.skipped, result.total) == (0, 0, 0, 0)
        assert result.percentage == 0
        assert result.performance.key == "insufficient"
        dumped = result.model_dump()
        assert dumped["net"] == "0.00"
        assert dumped["score"] == "0.00"

    def test_counts_and_scores(self):
        session = _session(12)
        answers = (
            [q.correct_index for q in session[:9]]
            + [_wrong_index(q) for q in session[9:12]]
        )
        result = calculate_results(answers, session, time_spent=300, exam_types="Midterm")
        assert (result.correct, result.wrong, result.skipped) == (9, 3, 0)
        assert result.net == pytest.approx(8.0)
        assert result.score == pytest.approx(16.0)
        assert result.percentage == 75
        assert result.performance.key == "good"
        assert result.time_spent == 300
        assert result.exam_types == "Midterm"
        assert result.model_dump()["score"] == "16.00"

    def test_skipped_answers(self):
        session = _session(4)
        result = calculate_results([None, None, session[2].correct_index, None], session)
        assert (result.correct, result.wrong, result.skipped) == (1, 0, 3)
        assert result.percentage == 25

    def test_wrong_answer_uses_shuffled_option_texts(self):
        session = _session(3, seed=11)
        target = session[1]
        chosen = _wrong_index(target)
        answers = [session[0].correct_index, chosen, None]

        result = calculate_results(answers, session)

        assert len(result.wrong_answers) == 1
        wrong = result.wrong_answers[0]
        assert wrong.user_answer == target.options[chosen]
        assert wrong.correct_answer == target.options[target.correct_index]
        assert wrong.question == target.text
        assert wrong.question_number == target.number
        assert wrong.display_order == 2

    def test_length_mismatch_fails_fast(self):
        session = _session(3)
        with pytest.raises(AnswerVectorError) as excinfo:
            calculate_results([0, 1], session)
        assert excinfo.value.context == {"answers": 2, "questions": 3}

    def test_out_of_range_answer_fails_fast(self):
        session = _session(2)
        with pytest.raises(AnswerVectorError):
            calculate_results([0, 9], session)

    def test_result_is_immutable(self):
        result = calculate_results([], [])
        with pytest.raises(Exception):
            result.correct = 3
