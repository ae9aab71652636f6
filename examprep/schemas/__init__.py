from examprep.schemas.question import BuildSessionIn, ExamFacetsOut, ExamOut, Question, SessionQuestion
from examprep.schemas.report import QuestionEditIn, ReportIn, ReportOut
from examprep.schemas.session import (
    CompleteSessionIn,
    CompleteSessionOut,
    PerformanceTier,
    SessionResult,
    SessionState,
    WrongAnswer,
)
from examprep.schemas.student import (
    CourseStats,
    CourseSummaryOut,
    LastExam,
    NameUpdateIn,
    StreakOut,
    StreakState,
    StudentProfile,
    StudentStatistics,
    WrongQuestionEntry,
)

__all__ = [
    "BuildSessionIn",
    "CompleteSessionIn",
    "CompleteSessionOut",
    "CourseStats",
    "CourseSummaryOut",
    "ExamFacetsOut",
    "ExamOut",
    "LastExam",
    "NameUpdateIn",
    "PerformanceTier",
    "Question",
    "QuestionEditIn",
    "ReportIn",
    "ReportOut",
    "SessionQuestion",
    "SessionResult",
    "SessionState",
    "StreakOut",
    "StreakState",
    "StudentProfile",
    "StudentStatistics",
    "WrongAnswer",
    "WrongQuestionEntry",
]
