"""Class tab parser - rebuilds students and date blocks from a raw sheet range.

Sheet layout (one tab per class, as kept by the coaches):

    row h-1  |        |           | Coach Lee | (blank)  | Coach Kim |
    row h    | Date   | Field     | Alice     | Bob      | Chen      |
    row h+1  | 5/1/24 | Specialization | Scratch | Khan ... | ...    |
    row h+2  |        | Homework  | Done      | ...      | ...       |
    row h+3  | 4/1/24 | Level     | Rookie    | ...      | ...       |

  - The student header row h is found in the first 10 rows by "date" in
    column 0 or "coder" in column 1.
  - Coach names sit in row h-1 over the first student of each group; blank
    cells to the right belong to the same coach (visually merged headers).
  - A non-blank column 0 opens a date block; column 1 holds a free-text
    field label; columns 2.. hold one value per student.
  - New sessions are inserted at the top, so blocks run latest first. Order
    is preserved as-is.

The parser never raises: when the header row can't be found the result is an
empty ClassData, and every gap in the grid becomes an empty string.
"""

from collections.abc import Callable, Sequence

from src.classbook.fields import map_field_label
from src.classbook.logging import get_logger
from src.classbook.models import (
    UNKNOWN_COACH,
    Cell,
    ClassData,
    ClassDateEntry,
    ProgressField,
    StudentDailyProgress,
    StudentInfo,
)
from src.classbook.utils import cell_at, cell_text, is_blank, is_empty

log = get_logger(__name__)

HEADER_SCAN_ROWS = 10

DATE_COLUMN = 0
LABEL_COLUMN = 1
FIRST_STUDENT_COLUMN = 2


def parse_class_data(grid: Sequence[Sequence[Cell]] | None) -> ClassData:
    """Parse a class tab's full used range into a ClassData.

    Args:
        grid: rawData from the getClassData action. Rows may be ragged.

    Returns:
        ClassData with students in column order and dates in row order, or an
        empty ClassData if the layout can't be recognised.
    """
    if not grid or len(grid) < 2:
        log.debug("class_tab_too_short", rows=len(grid or []))
        return ClassData()

    rows = [_as_row(row) for row in grid]

    header_index = find_student_header_row(rows)
    if header_index is None:
        log.warning(
            "student_header_not_found",
            rows=len(rows),
            scanned=min(HEADER_SCAN_ROWS, len(rows)),
        )
        return ClassData()

    coach_row = rows[header_index - 1] if header_index > 0 else None
    students = extract_students(rows[header_index], coach_row)
    _warn_on_duplicates(students)

    dates: list[ClassDateEntry] = []
    state: _Idle | _OpenBlock = _Idle(students)
    for index in range(header_index + 1, len(rows)):
        state = state.feed(index, rows[index], dates.append)
    state.flush(dates.append)

    log.debug(
        "class_tab_parsed",
        header_row=header_index,
        students=len(students),
        dates=len(dates),
    )
    return ClassData(students=students, dates=dates)


def find_student_header_row(rows: Sequence[Sequence[Cell]]) -> int | None:
    """Return the index of the student header row, or None.

    Only the first HEADER_SCAN_ROWS rows are considered.
    """
    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        row = _as_row(row)
        first = cell_text(cell_at(row, DATE_COLUMN)).lower()
        second = cell_text(cell_at(row, LABEL_COLUMN)).lower()
        if "date" in first or "coder" in second:
            return index
    return None


def extract_students(
    header_row: Sequence[Cell], coach_row: Sequence[Cell] | None
) -> list[StudentInfo]:
    """Read student names from the header row and attribute their coaches.

    A coach name applies to its own column and every student column after
    it until the next non-blank coach cell. Any non-empty header cell is a
    student, including one holding only whitespace.
    """
    header_row = _as_row(header_row)
    coach_row = _as_row(coach_row) if coach_row is not None else []

    students: list[StudentInfo] = []
    current_coach = UNKNOWN_COACH
    for column in range(FIRST_STUDENT_COLUMN, len(header_row)):
        name = header_row[column]
        if is_empty(name):
            continue

        coach_cell = cell_at(coach_row, column)
        if not is_blank(coach_cell):
            current_coach = cell_text(coach_cell)

        students.append(StudentInfo(name=cell_text(name), coach=current_coach))

    blanks = _count_header_gaps(header_row, len(students))
    if blanks:
        # Values are read by student position, so a gap shifts later columns
        log.warning("student_header_gap", students=len(students), gaps=blanks)

    return students


class _Idle:
    """No date block open: rows above the first date cell are skipped."""

    def __init__(self, students: list[StudentInfo]) -> None:
        self.students = students

    def feed(
        self,
        index: int,
        row: list[Cell],
        emit: Callable[[ClassDateEntry], None],
    ) -> "_Idle | _OpenBlock":
        date_cell = cell_at(row, DATE_COLUMN)
        if is_blank(date_cell):
            return self
        block = _OpenBlock(self.students, cell_text(date_cell), index)
        block.read_field_row(index, row)
        return block

    def flush(self, emit: Callable[[ClassDateEntry], None]) -> None:
        pass


class _OpenBlock:
    """A date block being accumulated.

    Values are kept per student position until flush, where they are keyed by
    name. Every student starts with an empty record.
    """

    def __init__(self, students: list[StudentInfo], date: str, row_index: int) -> None:
        self.students = students
        self.date = date
        self.row_start = row_index
        self.row_end = row_index
        self.values: list[dict[ProgressField, str]] = [{} for _ in students]

    def feed(
        self,
        index: int,
        row: list[Cell],
        emit: Callable[[ClassDateEntry], None],
    ) -> "_Idle | _OpenBlock":
        date_cell = cell_at(row, DATE_COLUMN)
        if is_blank(date_cell):
            self.read_field_row(index, row)
            return self

        self.flush(emit)
        block = _OpenBlock(self.students, cell_text(date_cell), index)
        block.read_field_row(index, row)
        return block

    def read_field_row(self, index: int, row: list[Cell]) -> None:
        label = cell_at(row, LABEL_COLUMN)
        if is_empty(label):
            return

        # Unrecognised labels still belong to this block's physical extent
        self.row_end = index

        field = map_field_label(label)
        if field is None:
            return

        for position, values in enumerate(self.values):
            values[field] = cell_text(cell_at(row, FIRST_STUDENT_COLUMN + position))

    def flush(self, emit: Callable[[ClassDateEntry], None]) -> None:
        student_data: dict[str, StudentDailyProgress] = {}
        for student, values in zip(self.students, self.values):
            existing = student_data.get(student.name)
            if existing is None:
                student_data[student.name] = StudentDailyProgress.from_fields(values)
            else:
                # Duplicate name: keep earlier data unless this column has a value
                filled = {field: value for field, value in values.items() if value}
                student_data[student.name] = existing.with_values(filled)

        emit(
            ClassDateEntry(
                date=self.date,
                row_start=self.row_start,
                row_end=self.row_end,
                student_data=student_data,
            )
        )


def _as_row(row: object) -> list[Cell]:
    if isinstance(row, (list, tuple)):
        return list(row)
    return []


def _count_header_gaps(header_row: list[Cell], student_count: int) -> int:
    """Count empty header cells from the first student column to the last name."""
    if student_count == 0:
        return 0
    named = [
        column
        for column in range(FIRST_STUDENT_COLUMN, len(header_row))
        if not is_empty(header_row[column])
    ]
    return (named[-1] - FIRST_STUDENT_COLUMN + 1) - len(named)


def _warn_on_duplicates(students: list[StudentInfo]) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for student in students:
        if student.name in seen and student.name not in duplicates:
            duplicates.append(student.name)
        seen.add(student.name)
    if duplicates:
        log.warning("duplicate_student_names", names=duplicates)
