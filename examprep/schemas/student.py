"""Pydantic schemas for long-lived student state: streak, statistics, profile."""
from datetime import date, datetime

from pydantic import BaseModel, Field

DEFAULT_STATUS = "just getting started 🚀"

# Student ids double as file names in the json profile backend
STUDENT_ID_PATTERN = r"^[A-Za-z0-9_@-][A-Za-z0-9_.@-]{0,127}$"


class StreakState(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None
    streak_dates: list[date] = []


class WrongQuestionEntry(BaseModel):
    question: str
    user_answer: str
    correct_answer: str
    explanation: str = ""
    course_name: str
    recorded_at: datetime


class CourseStats(BaseModel):
    session_count: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    total_correct: int = 0
    total_wrong: int = 0
    wrong_questions: list[WrongQuestionEntry] = []


class LastExam(BaseModel):
    taken_at: datetime
    course_name: str
    exam_type: str
    score: float
    correct: int
    wrong: int
    skipped: int
    time_spent: int


class StudentStatistics(BaseModel):
    sessions_taken: int = 0
    total_time: int = 0
    total_correct: int = 0
    total_wrong: int = 0
    total_skipped: int = 0
    average_score: float = 0.0
    courses: dict[str, CourseStats] = {}
    wrong_questions: list[WrongQuestionEntry] = []
    last_exam: LastExam | None = None


class StudentProfile(BaseModel):
    display_name: str = "student"
    status: str = DEFAULT_STATUS
    streak: StreakState = Field(default_factory=StreakState)
    statistics: StudentStatistics = Field(default_factory=StudentStatistics)


class NameUpdateIn(BaseModel):
    name: str = Field(min_length=1)


class CourseSummaryOut(BaseModel):
    course_name: str
    session_count: int
    average_score: str
    highest_score: str
    lowest_score: str
    total_correct: int
    total_wrong: int
    wrong_question_count: int


class StreakOut(BaseModel):
    streak: StreakState
    emblem: str
    message: str
    active_today: bool
    at_risk: bool
