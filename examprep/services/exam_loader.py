"""Question source: loads exam JSON files and answers catalog queries.

Layout on disk::

    <exams_dir>/<Course name>/<2024-2025 Güz Dönemi Vize Sınavı>.json

Each file holds a JSON list of question records. Exam type, year and
semester are read from the file name; the course from its directory.
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from examprep.schemas.question import SOURCE_KEYS, Question

logger = logging.getLogger(__name__)

# Files or folders holding known-bad question sets
FAULTY_MARKER = "hatalı"
COURSE_DIR_SUFFIX = " sınavlar"

# (file name keyword, exam type label), first match wins
EXAM_TYPE_KEYWORDS = [
    ("Vize", "Midterm"),
    ("Final", "Final"),
    ("Bütünleme", "Make-up"),
    ("Mezuniyet", "Graduation"),
    ("Yaz Okulu", "Summer School"),
    ("Ara Sınav", "Midterm"),
]
OTHER_EXAM_TYPE = "Other"

SEMESTER_KEYWORDS = [("Güz", "Fall"), ("Bahar", "Spring")]

YEAR_RE = re.compile(r"(\d{4})-(\d{4})")
DEFAULT_YEAR_RANGE = (2018, 2025)


class ExamNotFoundError(LookupError):
    """Unknown exam id or question number."""


class ExamFileError(RuntimeError):
    """An exam file could not be read back or rewritten."""


@dataclass(slots=True)
class Exam:
    id: str
    filename: str
    course_name: str
    exam_type: str
    path: Path
    year: str | None = None
    semester: str | None = None
    questions: list[Question] = field(default_factory=list)

    @property
    def start_year(self) -> int | None:
        return int(self.year.split("-")[0]) if self.year else None


def _nfc(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def parse_exam_metadata(path: Path, root: Path, default_course: str) -> Exam:
    """Build an (empty) Exam from a file path under `root`."""
    relative = path.relative_to(root)
    filename = _nfc(path.stem)

    course_name = default_course
    if len(relative.parts) >= 2:
        course_name = _nfc(relative.parts[0]).removesuffix(COURSE_DIR_SUFFIX)

    year_match = YEAR_RE.search(filename)
    year = f"{year_match.group(1)}-{year_match.group(2)}" if year_match else None

    exam_type = next((label for keyword, label in EXAM_TYPE_KEYWORDS if keyword in filename), OTHER_EXAM_TYPE)
    semester = next((label for keyword, label in SEMESTER_KEYWORDS if keyword in filename), None)

    return Exam(
        id=f"{course_name}_{filename}",
        filename=filename,
        course_name=course_name,
        exam_type=exam_type,
        path=path,
        year=year,
        semester=semester,
    )


def _load_records(path: Path) -> list:
    """Raw question records of an exam file; raises ExamFileError if unusable."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ExamFileError(f"Unreadable exam file {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise ExamFileError(f"Exam file {path} is not a list of questions")
    return raw


def _write_records(path: Path, records: list) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(records, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_questions(path: Path) -> list[Question]:
    try:
        raw = _load_records(path)
    except ExamFileError as exc:
        logger.warning("Skipping exam file: %s", exc)
        return []
    return _validate_records(raw, path)


def _validate_records(raw: list, path: Path) -> list[Question]:
    """Valid questions in file order; invalid records are logged and skipped."""
    questions = []
    for position, record in enumerate(raw):
        try:
            questions.append(Question.model_validate(record))
        except ValidationError as exc:
            logger.warning("Skipping question %d in %s: %s", position, path, exc.errors()[0]["msg"])
    return questions


class ExamCatalog:
    """All exams found under one directory."""

    def __init__(self, exams: Iterable[Exam] = ()) -> None:
        self._exams: dict[str, Exam] = {exam.id: exam for exam in exams}

    @classmethod
    def load(cls, root: Path, default_course: str = "General") -> "ExamCatalog":
        if not root.is_dir():
            logger.warning("Exams directory %s does not exist; catalog is empty", root)
            return cls()

        exams = []
        for path in sorted(root.rglob("*.json")):
            if FAULTY_MARKER in _nfc(str(path.relative_to(root))).lower():
                continue
            exam = parse_exam_metadata(path, root, default_course)
            exam.questions = _read_questions(path)
            if exam.questions:
                exams.append(exam)
        logger.info("Loaded %d exams from %s", len(exams), root)
        return cls(exams)

    def __len__(self) -> int:
        return len(self._exams)

    def all(self) -> list[Exam]:
        return list(self._exams.values())

    def get(self, exam_id: str) -> Exam:
        try:
            return self._exams[exam_id]
        except KeyError:
            raise ExamNotFoundError(f"Exam {exam_id!r} not found") from None

    def courses(self) -> list[str]:
        return sorted({exam.course_name for exam in self._exams.values()})

    def exam_types(self) -> list[str]:
        return sorted({exam.exam_type for exam in self._exams.values()})

    def year_range(self) -> tuple[int, int]:
        years = [
            int(part)
            for exam in self._exams.values()
            if exam.year
            for part in exam.year.split("-")
        ]
        if not years:
            return DEFAULT_YEAR_RANGE
        return min(years), max(years)

    def filter(
        self,
        courses: Iterable[str] | None = None,
        exam_types: Iterable[str] | None = None,
        year_min: int | None = None,
        year_max: int | None = None,
    ) -> list[Exam]:
        """Exams matching every given filter; empty filters match everything."""
        courses = set(courses or ())
        exam_types = set(exam_types or ())
        result = []
        for exam in self._exams.values():
            if courses and exam.course_name not in courses:
                continue
            if exam_types and exam.exam_type not in exam_types:
                continue
            start = exam.start_year
            if start is not None:
                if year_min is not None and start < year_min:
                    continue
                if year_max is not None and start > year_max:
                    continue
            result.append(exam)
        return result

    @staticmethod
    def combine(exams: Iterable[Exam]) -> list[Question]:
        """Questions of all `exams`, tagged with their source exam and course."""
        return [
            question.model_copy(update={"source_exam": exam.id, "course_name": exam.course_name})
            for exam in exams
            for question in exam.questions
        ]

    def get_question(self, exam_id: str, number: int) -> Question:
        exam = self.get(exam_id)
        for question in exam.questions:
            if question.number == number:
                return question
        raise ExamNotFoundError(f"Question {number} not found in exam {exam_id!r}")

    def replace_question(self, exam_id: str, number: int, question: Question) -> Question:
        """Overwrite question `number` in the exam file and reload the exam's questions.

        Records that failed validation at load time can be fixed this way too;
        the in-memory list is rebuilt from the rewritten file. Blocking file
        I/O: call from a worker thread inside the app.
        """
        exam = self.get(exam_id)
        raw = _load_records(exam.path)
        number_key = SOURCE_KEYS["number"]
        for position, record in enumerate(raw):
            if isinstance(record, dict) and record.get(number_key) == number:
                break
        else:
            raise ExamNotFoundError(f"Question {number} not found in exam {exam_id!r}")

        updated = question.model_copy(update={"number": number})
        raw[position] = updated.to_source_dict()
        try:
            _write_records(exam.path, raw)
        except OSError as exc:
            raise ExamFileError(f"Failed to write {exam.path}: {exc}") from exc

        exam.questions = _validate_records(raw, exam.path)
        logger.info("Replaced question %d in exam %s", number, exam_id)
        return updated
