"""Exam catalog and session building: JSON API."""
import random
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from examprep.routers.deps import get_catalog
from examprep.schemas.question import BuildSessionIn, ExamFacetsOut, ExamOut, SessionQuestion
from examprep.services.exam_loader import Exam, ExamCatalog, ExamNotFoundError
from examprep.services.randomizer import randomize_session

router = APIRouter(prefix="/api", tags=["exams"])


def _exam_out(exam: Exam) -> ExamOut:
    return ExamOut(
        id=exam.id,
        filename=exam.filename,
        course_name=exam.course_name,
        exam_type=exam.exam_type,
        year=exam.year,
        semester=exam.semester,
        question_count=len(exam.questions),
    )


@router.get("/exams", response_model=list[ExamOut])
def list_exams(
    catalog: Annotated[ExamCatalog, Depends(get_catalog)],
    course: Annotated[list[str] | None, Query()] = None,
    exam_type: Annotated[list[str] | None, Query()] = None,
    year_min: int | None = None,
    year_max: int | None = None,
):
    """Exams matching the filters (repeat `course` / `exam_type` for several)."""
    exams = catalog.filter(courses=course, exam_types=exam_type, year_min=year_min, year_max=year_max)
    return [_exam_out(exam) for exam in exams]


@router.get("/exams/facets", response_model=ExamFacetsOut)
def exam_facets(catalog: Annotated[ExamCatalog, Depends(get_catalog)]):
    year_min, year_max = catalog.year_range()
    return ExamFacetsOut(
        courses=catalog.courses(),
        exam_types=catalog.exam_types(),
        year_min=year_min,
        year_max=year_max,
    )


@router.post("/sessions", response_model=list[SessionQuestion])
def build_session(
    body: BuildSessionIn,
    catalog: Annotated[ExamCatalog, Depends(get_catalog)],
):
    """Randomized session over the questions of the selected exams."""
    try:
        exams = [catalog.get(exam_id) for exam_id in body.exam_ids]
    except ExamNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    questions = ExamCatalog.combine(exams)
    if not questions:
        raise HTTPException(status_code=422, detail="Selected exams have no questions")

    rng = random.Random(body.seed) if body.seed is not None else None
    return randomize_session(questions, rng)
