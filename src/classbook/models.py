"""Pydantic models for class progress data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Python attributes are snake_case; the endpoint speaks camelCase, so every
multi-word field carries an alias and models are dumped with by_alias=True.
"""

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# A raw spreadsheet value as returned by getValues(); bool comes from checkboxes
Cell = str | int | float | bool | None
Grid = list[list[Cell]]

UNKNOWN_COACH = "Unknown Coach"

# rowStart/rowEnd of a date that exists only client-side (not yet in the sheet)
NEW_ENTRY_ROW = -1


class ProgressField(str, Enum):
    """Canonical identifiers for the per-student rows of a date block."""

    SPECIALIZATION = "specialization"
    LEVEL = "level"
    FINISHED_LESSONS = "finishedLessons"
    UPCOMING_LESSONS = "upcomingLessons"
    HOMEWORK = "homework"
    HOMEWORK_LINK = "homeworkLink"
    USERNAME = "username"
    PASSWORD = "password"
    COMMENTS = "comments"
    PERFORMANCE = "performance"


class StudentInfo(BaseModel):
    """A student column from the class tab header."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    coach: str = UNKNOWN_COACH  # carried forward from the coach row above


class StudentDailyProgress(BaseModel):
    """One student's values for one date block.

    Every field defaults to the empty string, so a missing row in the sheet
    and an empty cell read the same.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    specialization: str = ""
    level: str = ""
    finished_lessons: str = Field(default="", alias="finishedLessons")
    upcoming_lessons: str = Field(default="", alias="upcomingLessons")
    homework: str = ""
    homework_link: str = Field(default="", alias="homeworkLink")
    username: str = ""
    password: str = ""
    comments: str = ""
    performance: str = ""

    @classmethod
    def from_fields(
        cls, values: Mapping[ProgressField, str]
    ) -> "StudentDailyProgress":
        """Build a record from a ProgressField -> value mapping."""
        return cls(**{_attribute_for(field): value for field, value in values.items()})

    def get(self, field: ProgressField | str) -> str:
        """Return the value for a field identifier (e.g. "finishedLessons")."""
        return getattr(self, _attribute_for(field))

    def with_values(
        self, values: Mapping[ProgressField, str]
    ) -> "StudentDailyProgress":
        """Return a copy with the given fields replaced."""
        return self.model_copy(
            update={_attribute_for(field): value for field, value in values.items()}
        )

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


_ATTRIBUTE_BY_FIELD: dict[ProgressField, str] = {
    ProgressField(info.alias or name): name
    for name, info in StudentDailyProgress.model_fields.items()
}


def _attribute_for(field: ProgressField | str) -> str:
    return _ATTRIBUTE_BY_FIELD[ProgressField(field)]


class ClassDateEntry(BaseModel):
    """A date block: the rows of the sheet that belong to one session date.

    row_start/row_end are zero-based indexes into the raw grid, so the save
    path can target an in-place update. Both are -1 for a date that has not
    been written to the sheet yet.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str  # sheet-native text, e.g. "5/1/2024"; never parsed
    row_start: int = Field(alias="rowStart")
    row_end: int = Field(alias="rowEnd")
    student_data: dict[str, StudentDailyProgress] = Field(
        default_factory=dict, alias="studentData"
    )

    @model_validator(mode="after")
    def _check_row_span(self) -> "ClassDateEntry":
        if self.row_start == NEW_ENTRY_ROW or self.row_end == NEW_ENTRY_ROW:
            if self.row_start != self.row_end:
                raise ValueError("rowStart and rowEnd must both be -1 for a new date")
        elif not 0 <= self.row_start <= self.row_end:
            raise ValueError(
                f"invalid row span {self.row_start}..{self.row_end} for {self.date!r}"
            )
        return self

    @classmethod
    def new(cls, date: str) -> "ClassDateEntry":
        """A placeholder for a date not yet present in the sheet."""
        return cls(date=date, row_start=NEW_ENTRY_ROW, row_end=NEW_ENTRY_ROW)

    @property
    def is_new(self) -> bool:
        return self.row_start == NEW_ENTRY_ROW

    def progress_for(self, student_name: str) -> StudentDailyProgress:
        return self.student_data.get(student_name) or StudentDailyProgress()


class ClassData(BaseModel):
    """Everything parsed from one class tab.

    students are in column order, dates in row order (latest first in
    practice, since new sessions are inserted at the top).
    """

    model_config = ConfigDict(frozen=True)

    students: list[StudentInfo] = Field(default_factory=list)
    dates: list[ClassDateEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.students and not self.dates

    def find_date(self, date: str) -> ClassDateEntry | None:
        for entry in self.dates:
            if entry.date == date:
                return entry
        return None


class SessionFields(BaseModel):
    """The subset of progress fields the save action writes back."""

    model_config = ConfigDict(populate_by_name=True)

    specialization: str = ""
    level: str = ""
    finished_lessons: str = Field(default="", alias="finishedLessons")
    homework: str = ""
    performance: str = ""


class SessionPayload(BaseModel):
    """Body of the saveClassData action."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(alias="className")
    date: str
    row_start: int = Field(default=NEW_ENTRY_ROW, alias="rowStart")
    data: dict[str, SessionFields] = Field(default_factory=dict)

    def to_request(self) -> dict:
        return self.model_dump(by_alias=True)


class UserAccount(BaseModel):
    """A user as returned by the endpoint's login action."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    name: str = ""
    role: str = "coach"  # "admin" sees every student
    assigned_class: str | None = Field(default=None, alias="assignedClass")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SaveResult(BaseModel):
    ok: bool
    message: str | None = None
