"""Cell value helpers shared by the parser and the mapper."""

from src.classbook.models import Cell


def cell_text(value: Cell) -> str:
    """Stringify a raw spreadsheet value.

    This is the only coercion the parser uses, so a cell compares and stores
    the same way everywhere.

    Args:
        value: A value from the endpoint's rawData grid.

    Returns:
        "" for empty cells, "true"/"false" for checkboxes, integer text for
        whole-number floats (5.0 -> "5"), str() for anything else.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value
    return str(value)


def is_blank(value: Cell) -> bool:
    """True for empty or whitespace-only cells (date and coach cells)."""
    return cell_text(value).strip() == ""


def is_empty(value: Cell) -> bool:
    """True only for cells with no text at all; " " is not empty.

    Student names and field labels use this test, so a stray space still
    holds its column position.
    """
    return cell_text(value) == ""


def cell_at(row: list[Cell], index: int) -> Cell:
    """Return row[index], or None past the end of a ragged row."""
    if 0 <= index < len(row):
        return row[index]
    return None
