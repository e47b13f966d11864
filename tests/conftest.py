"""Shared fixtures for classbook tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from src.classbook.client import AppsScriptClient


@pytest.fixture
def example_grid():
    """The small two-date class tab used throughout the docs."""
    return [
        ["", "", "Coach Lee", ""],
        ["Date", "Field", "Alice", "Bob"],
        ["5/1/2024", "Specialization", "Scratch", "Khan Academy"],
        ["", "Homework", "Done", "In progress"],
        ["4/1/2024", "Level", "Rookie", "Trainee"],
    ]


@pytest.fixture
def coach_grid():
    """Four students under two coaches, with a full set of field rows."""
    return [
        ["Tuesday 4PM", "", "", "", "", ""],
        ["", "", "Coach A", "", "", "Coach B"],
        ["Date", "Coder", "S1", "S2", "S3", "S4"],
        ["12/3/2024", "Specialization", "Scratch", "App Lab", "TinkerCAD", "Trinket io"],
        ["", "Level", "Rookie", "Trainee", "Master", "Boss"],
        ["", "Finished Lessons", "Setting a Scene", "App beginner", "", "My Python"],
        ["", "Upcoming Lessons", "Choose it yourself", "", "", ""],
        ["", "Homework", "Done", "", "Missing", ""],
        ["", "Homework Link", "http://hw/1", "", "", ""],
        ["", "Username", "s1.user", "s2.user", "", ""],
        ["", "Password", "pw1", "pw2", "", ""],
        ["", "Comments", "Great focus", "", "", ""],
        ["", "Performance", 9, 7.0, 6.5, ""],
        ["5/3/2024", "Level", "Rookie", "Rookie", "Master", "Boss"],
    ]


def make_response(status: int = 200, json_data=None, reason: str = "OK"):
    """Build a stand-in for requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.reason = reason
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def http_session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http_session):
    return AppsScriptClient(
        "https://script.example.com/macros/s/abc/exec",
        timeout=5,
        max_retries=3,
        retry_wait=0,
        ignored_tabs=["Instruction Guide", "Coaches Account"],
        session=http_session,
    )
