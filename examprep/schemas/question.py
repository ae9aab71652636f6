"""Pydantic schemas for questions, session questions and exams."""
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

MAX_OPTIONS = 5

# Field name -> key used in the exam JSON files
SOURCE_KEYS = {
    "number": "soru numarası",
    "text": "soru cümlesi",
    "options": "seçenekler",
    "correct_index": "doğru cevap indeksi",
    "explanation": "açıklama",
}


class Question(BaseModel):
    """One multiple-choice question. Accepts field names or the exam-file keys."""

    text: str = Field(min_length=1, validation_alias=AliasChoices("text", "soru cümlesi"))
    options: list[str] = Field(
        min_length=1,
        max_length=MAX_OPTIONS,
        validation_alias=AliasChoices("options", "seçenekler", "secenekler"),
    )
    correct_index: int = Field(ge=0, validation_alias=AliasChoices("correct_index", "doğru cevap indeksi"))
    explanation: str = Field(default="", validation_alias=AliasChoices("explanation", "açıklama"))
    number: int | None = Field(default=None, validation_alias=AliasChoices("number", "soru numarası"))
    # set by ExamCatalog.combine
    source_exam: str | None = None
    course_name: str | None = None

    @field_validator("explanation", mode="before")
    @classmethod
    def _none_explanation(cls, value):
        return "" if value is None else value

    @model_validator(mode="after")
    def _check_correct_index(self):
        if self.correct_index >= len(self.options):
            raise ValueError(
                f"correct index {self.correct_index} out of range for {len(self.options)} options"
            )
        return self

    def to_source_dict(self) -> dict:
        """Dump with the exam-file keys (for writing a question back to disk)."""
        data = {SOURCE_KEYS[name]: getattr(self, name) for name in SOURCE_KEYS}
        if data[SOURCE_KEYS["number"]] is None:
            del data[SOURCE_KEYS["number"]]
        return data


class SessionQuestion(Question):
    """A question as shown in one session: shuffled options and a display ordinal."""

    display_order: int = Field(ge=1)
    original_correct_index: int = Field(ge=0)


class ExamOut(BaseModel):
    id: str
    filename: str
    course_name: str
    exam_type: str
    year: str | None = None
    semester: str | None = None
    question_count: int


class ExamFacetsOut(BaseModel):
    courses: list[str]
    exam_types: list[str]
    year_min: int
    year_max: int


class BuildSessionIn(BaseModel):
    exam_ids: list[str] = Field(min_length=1)
    seed: int | None = None
