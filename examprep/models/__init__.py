from examprep.models.report import QuestionReport
from examprep.models.student_profile import StudentProfileRow
from examprep.models.user import AccountWarning, User

__all__ = ["User", "AccountWarning", "QuestionReport", "StudentProfileRow"]
