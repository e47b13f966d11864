"""Session editing and the save payload for one class.

assemble_session_payload() is the inverse of the class tab parser: it turns
the effective values for one date back into the saveClassData body, carrying
the date block's rowStart so the sheet is updated in place instead of
appended to.

ClassSession holds the unsaved edits between a load and a save. Edits are
keyed by (date, student, field) and always win over the parsed value, even
when the edit clears a cell.
"""

from collections.abc import Callable, Iterable
from datetime import date as Date

from src.classbook.logging import get_logger
from src.classbook.models import (
    NEW_ENTRY_ROW,
    ClassData,
    ClassDateEntry,
    ProgressField,
    SessionFields,
    SessionPayload,
    StudentInfo,
)
from src.classbook.options import DEFAULT_CATALOG, OptionCatalog

log = get_logger(__name__)

# The fields the save action writes back. upcomingLessons, homeworkLink,
# username, password and comments are read from the sheet but not edited here.
SAVED_FIELDS: tuple[ProgressField, ...] = (
    ProgressField.SPECIALIZATION,
    ProgressField.LEVEL,
    ProgressField.FINISHED_LESSONS,
    ProgressField.HOMEWORK,
    ProgressField.PERFORMANCE,
)

ValueLookup = Callable[[str, ProgressField], str]


def assemble_session_payload(
    class_name: str,
    date: str,
    students: Iterable[StudentInfo],
    get_value: ValueLookup,
    row_start: int = NEW_ENTRY_ROW,
) -> SessionPayload:
    """Build the saveClassData body for one date.

    Args:
        class_name: Sheet tab of the class.
        date: Sheet-native date text of the session.
        students: Students visible to the acting user; only these are sent.
        get_value: Returns the effective value for (student name, field).
        row_start: rowStart of the matching date block, or -1 for a new date.

    Returns:
        SessionPayload with the five saved fields per student.
    """
    data: dict[str, SessionFields] = {}
    for student in students:
        values = {field: get_value(student.name, field) or "" for field in SAVED_FIELDS}
        data[student.name] = SessionFields(
            specialization=values[ProgressField.SPECIALIZATION],
            level=values[ProgressField.LEVEL],
            finished_lessons=values[ProgressField.FINISHED_LESSONS],
            homework=values[ProgressField.HOMEWORK],
            performance=values[ProgressField.PERFORMANCE],
        )

    return SessionPayload(
        class_name=class_name,
        date=date,
        row_start=row_start,
        data=data,
    )


def format_session_date(day: Date) -> str:
    """Format a date the way new sessions are labelled: D/M/YYYY, no padding."""
    return f"{day.day}/{day.month}/{day.year}"


class ClassSession:
    """In-memory editing state for one loaded class.

    Holds the parsed ClassData, the selected date and unsaved edits. Nothing
    here talks to the endpoint; pass build_payload() to client.save_session().
    """

    def __init__(
        self,
        class_name: str,
        data: ClassData,
        catalog: OptionCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.class_name = class_name
        self.data = data
        self.catalog = catalog
        self.selected_date = data.dates[0].date if data.dates else ""
        # date -> student -> field -> value
        self._edits: dict[str, dict[str, dict[ProgressField, str]]] = {}

    @property
    def has_unsaved_changes(self) -> bool:
        return any(self._edits.values())

    def select_date(self, date: str) -> None:
        self.selected_date = date

    def start_new_session(self, today: Date | None = None) -> str:
        """Select today's date, whether or not the sheet already has it.

        Returns:
            The selected date text.
        """
        label = format_session_date(today or Date.today())
        self.select_date(label)
        log.debug(
            "session_date_selected",
            class_name=self.class_name,
            date=label,
            new=self.data.find_date(label) is None,
        )
        return label

    def current_entry(self) -> ClassDateEntry:
        """Return the selected date block, or an unsaved placeholder for it."""
        return self.data.find_date(self.selected_date) or ClassDateEntry.new(
            self.selected_date
        )

    def get_value(self, student_name: str, field: ProgressField | str) -> str:
        """Effective value: unsaved edit first, then the sheet, then ""."""
        field = ProgressField(field)
        edits = self._edits.get(self.selected_date, {}).get(student_name, {})
        if field in edits:
            return edits[field]
        return self.current_entry().progress_for(student_name).get(field)

    def set_value(
        self, student_name: str, field: ProgressField | str, value: str
    ) -> None:
        field = ProgressField(field)
        by_student = self._edits.setdefault(self.selected_date, {})
        by_student.setdefault(student_name, {})[field] = value

    def lesson_options(self, student_name: str) -> list[str]:
        """Finished-lesson choices for the student's effective specialization."""
        return self.catalog.lessons_for(
            self.get_value(student_name, ProgressField.SPECIALIZATION)
        )

    def discard_changes(self) -> None:
        self._edits.clear()

    def build_payload(self, students: Iterable[StudentInfo]) -> SessionPayload:
        """Assemble the save payload for the selected date."""
        entry = self.current_entry()
        return assemble_session_payload(
            class_name=self.class_name,
            date=self.selected_date,
            students=students,
            get_value=self.get_value,
            row_start=entry.row_start,
        )
