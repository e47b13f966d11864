"""Map free-text row labels from a class tab to progress fields.

Labels are typed by coaches ("Homework Link", "Finished lesson(s)", ...), so
matching is case-insensitive substring containment, checked in order. The
order matters: "homework link" must win over the bare "homework".
"""

from src.classbook.models import Cell, ProgressField
from src.classbook.utils import cell_text

# (substring, excluded substring, field), first match wins
FIELD_RULES: tuple[tuple[str, str | None, ProgressField], ...] = (
    ("homework link", None, ProgressField.HOMEWORK_LINK),
    ("homework", "link", ProgressField.HOMEWORK),
    ("finish", None, ProgressField.FINISHED_LESSONS),
    ("upcoming", None, ProgressField.UPCOMING_LESSONS),
    ("specialization", None, ProgressField.SPECIALIZATION),
    ("level", None, ProgressField.LEVEL),
    ("username", None, ProgressField.USERNAME),
    ("password", None, ProgressField.PASSWORD),
    ("performance", None, ProgressField.PERFORMANCE),
    ("comment", None, ProgressField.COMMENTS),
)


def map_field_label(label: Cell) -> ProgressField | None:
    """Return the field a row label refers to, or None if it matches nothing.

    Never raises; empty and non-text labels simply don't match.
    """
    text = cell_text(label).lower()
    if not text.strip():
        return None

    for needle, excluded, field in FIELD_RULES:
        if needle in text and (excluded is None or excluded not in text):
            return field
    return None
