"""Coaching class progress tracker backed by a Google Sheet.

Reads a class tab through the sheet's Apps Script endpoint, rebuilds students
and per-date progress from the raw grid, and writes edited sessions back in
place.
"""

from src.classbook.client import AppsScriptClient, load_class_data, save_session
from src.classbook.fields import map_field_label
from src.classbook.models import (
    ClassData,
    ClassDateEntry,
    ProgressField,
    SessionPayload,
    StudentDailyProgress,
    StudentInfo,
)
from src.classbook.session import ClassSession, assemble_session_payload
from src.classbook.sheets.class_tab import parse_class_data

__all__ = [
    "AppsScriptClient",
    "ClassData",
    "ClassDateEntry",
    "ClassSession",
    "ProgressField",
    "SessionPayload",
    "StudentDailyProgress",
    "StudentInfo",
    "assemble_session_payload",
    "load_class_data",
    "map_field_label",
    "parse_class_data",
    "save_session",
]
