"""Tests for the aggregate statistics accumulator and the profile fold."""
from datetime import datetime, timedelta

import pytest

from examprep.schemas.session import SessionResult, WrongAnswer
from examprep.schemas.student import StudentProfile, StudentStatistics
from examprep.services.progress import apply_completed_session
from examprep.services.scoring import performance_tier
from examprep.services.statistics import apply_session, course_summary, running_average

NOW = datetime(2026, 3, 10, 14, 30)


def make_result(score, correct=None, wrong=0, skipped=0, time_spent=60, wrong_answers=(), exam_types="Final"):
    correct = int(score / 2) if correct is None else correct
    total = correct + wrong + skipped
    return SessionResult(
        correct=correct,
        wrong=wrong,
        skipped=skipped,
        total=total,
        net=score / 2,
        score=score,
        percentage=round(correct / total * 100) if total else 0,
        performance=performance_tier(0),
        time_spent=time_spent,
        exam_types=exam_types,
        wrong_answers=list(wrong_answers),
    )


def wrong_answer(n=1):
    return WrongAnswer(
        display_order=n,
        question_number=n,
        question=f"Question {n}",
        user_answer="A) no",
        correct_answer="B) yes",
        explanation="because",
    )


class TestRunningAverage:
    def test_running_average(self):
        assert running_average(0.0, 0, 10) == 10
        assert running_average(10.0, 1, 20) == 15
        assert running_average(15.0, 2, 30) == 20

    def test_sequence_of_sessions(self):
        stats = StudentStatistics()
        averages = []
        for score in (10, 20, 30):
            stats = apply_session(stats, make_result(score), "Algorithms", NOW)
            averages.append(stats.average_score)
        assert averages == [pytest.approx(10), pytest.approx(15), pytest.approx(20)]
        assert stats.courses["Algorithms"].average_score == pytest.approx(20)


class TestApplySession:
    def test_lifetime_counters(self):
        stats = apply_session(StudentStatistics(), make_result(12, correct=7, wrong=3, skipped=2, time_spent=90), "Math", NOW)
        stats = apply_session(stats, make_result(4, correct=2, wrong=0, skipped=1, time_spent=30), "Math", NOW)
        assert stats.sessions_taken == 2
        assert stats.total_time == 120
        assert (stats.total_correct, stats.total_wrong, stats.total_skipped) == (9, 3, 3)

    def test_course_bucket_created_on_first_use(self):
        stats = apply_session(StudentStatistics(), make_result(10), "Physics", NOW)
        course = stats.courses["Physics"]
        assert course.session_count == 1
        assert course.highest_score == 10
        assert course.lowest_score == 10

    def test_lowest_starts_from_first_score_not_zero(self):
        stats = StudentStatistics()
        for score in (14, 8, 20):
            stats = apply_session(stats, make_result(score), "Chemistry", NOW)
        course = stats.courses["Chemistry"]
        assert course.lowest_score == 8
        assert course.highest_score == 20

    def test_zero_score_session_lowers_lowest(self):
        stats = apply_session(StudentStatistics(), make_result(10), "Chemistry", NOW)
        stats = apply_session(stats, make_result(0, correct=0, wrong=3), "Chemistry", NOW)
        stats = apply_session(stats, make_result(6), "Chemistry", NOW)
        assert stats.courses["Chemistry"].lowest_score == 0

    def test_courses_are_independent(self):
        stats = apply_session(StudentStatistics(), make_result(10), "A", NOW)
        stats = apply_session(stats, make_result(30), "B", NOW)
        assert stats.courses["A"].average_score == 10
        assert stats.courses["B"].average_score == 30
        assert stats.average_score == 20

    def test_wrong_answers_logged_in_course_and_globally(self):
        result = make_result(4, correct=3, wrong=2, wrong_answers=[wrong_answer(1), wrong_answer(2)])
        stats = apply_session(StudentStatistics(), result, "History", NOW)
        course_log = stats.courses["History"].wrong_questions
        assert len(course_log) == 2
        assert stats.wrong_questions == course_log
        entry = stats.wrong_questions[0]
        assert entry.course_name == "History"
        assert entry.recorded_at == NOW
        assert (entry.question, entry.user_answer, entry.correct_answer) == ("Question 1", "A) no", "B) yes")

    def test_last_exam_is_overwritten(self):
        stats = apply_session(StudentStatistics(), make_result(10, exam_types="Midterm"), "A", NOW)
        later = NOW + timedelta(hours=2)
        stats = apply_session(stats, make_result(6, skipped=1, time_spent=45, exam_types=""), "B", later)
        last = stats.last_exam
        assert last.taken_at == later
        assert last.course_name == "B"
        assert last.exam_type == "Mixed"
        assert last.score == 6
        assert (last.correct, last.wrong, last.skipped, last.time_spent) == (3, 0, 1, 45)

    def test_input_is_not_modified(self):
        stats = StudentStatistics()
        apply_session(stats, make_result(10, wrong_answers=[wrong_answer()]), "A", NOW)
        assert stats == StudentStatistics()


class TestCourseSummary:
    def test_two_decimal_formatting(self):
        stats = StudentStatistics()
        for score in (10, 20, 20):
            stats = apply_session(stats, make_result(score), "Math", NOW)
        summary = course_summary(stats, "Math")
        assert summary.average_score == "16.67"
        assert summary.highest_score == "20.00"
        assert summary.lowest_score == "10.00"
        assert summary.session_count == 3

    def test_unknown_course(self):
        assert course_summary(StudentStatistics(), "Nope") is None


class TestApplyCompletedSession:
    def test_updates_streak_statistics_and_status(self):
        profile = StudentProfile(display_name="foster")
        updated = apply_completed_session(profile, make_result(90, correct=45), "Math", NOW)
        assert updated.display_name == "foster"
        assert updated.streak.current_streak == 1
        assert updated.streak.last_activity_date == NOW.date()
        assert updated.statistics.sessions_taken == 1
        assert updated.status.startswith("excellent")
        assert profile.statistics.sessions_taken == 0

    def test_two_sessions_same_day_count_once_for_streak(self):
        profile = apply_completed_session(StudentProfile(), make_result(10), "Math", NOW)
        profile = apply_completed_session(profile, make_result(10), "Math", NOW + timedelta(hours=1))
        assert profile.streak.current_streak == 1
        assert profile.statistics.sessions_taken == 2
