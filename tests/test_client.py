"""Tests for the Apps Script client and its boundary helpers."""

from __future__ import annotations

import json

import pytest
import requests

from src.classbook.client import (
    AppsScriptClient,
    authenticate,
    load_class_data,
    save_session,
)
from src.classbook.config import ClassbookConfig
from src.classbook.errors import (
    AuthenticationError,
    ConfigurationError,
    EndpointError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.classbook.models import SessionFields, SessionPayload

from tests.conftest import make_response


def _payload(row_start: int = 2) -> SessionPayload:
    return SessionPayload(
        class_name="Tuesday 4PM",
        date="5/1/2024",
        row_start=row_start,
        data={"Alice": SessionFields(level="Rookie")},
    )


class TestConstruction:
    def test_missing_url(self):
        with pytest.raises(ConfigurationError):
            AppsScriptClient("")

    def test_from_config(self):
        config = ClassbookConfig(
            apps_script_url="https://script.example.com/exec",
            max_retries=5,
            ignored_tabs=["Guide"],
        )
        client = AppsScriptClient.from_config(config)
        assert client.url == "https://script.example.com/exec"
        assert client.max_retries == 5
        assert client.ignored_tabs == ["Guide"]


class TestRequests:
    def test_get_sends_action_and_params(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"rawData": []})
        client.get_class_grid("Tuesday 4PM")

        _, kwargs = http_session.get.call_args
        assert kwargs["params"] == {"action": "getClassData", "className": "Tuesday 4PM"}
        assert kwargs["timeout"] == 5

    def test_post_sends_text_plain_json(self, client, http_session):
        http_session.post.return_value = make_response(json_data={"status": "success"})
        client.save_class_data(_payload())

        _, kwargs = http_session.post.call_args
        assert kwargs["params"] == {"action": "saveClassData"}
        assert kwargs["headers"]["Content-Type"].startswith("text/plain")
        body = json.loads(kwargs["data"])
        assert body["action"] == "saveClassData"
        assert body["className"] == "Tuesday 4PM"
        assert body["rowStart"] == 2
        assert body["data"]["Alice"]["level"] == "Rookie"

    def test_error_in_body(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"error": "Sheet not found"})
        with pytest.raises(EndpointError, match="Sheet not found"):
            client.get_class_grid("Nope")

    def test_non_json_response(self, client, http_session):
        http_session.get.return_value = make_response(json_data=ValueError("html"))
        with pytest.raises(PermanentError):
            client.list_sheets()

    def test_non_object_response(self, client, http_session):
        http_session.get.return_value = make_response(json_data=["a", "b"])
        with pytest.raises(PermanentError):
            client.list_sheets()

    def test_client_error_not_retried(self, client, http_session):
        http_session.get.return_value = make_response(status=404, reason="Not Found")
        with pytest.raises(PermanentError):
            client.list_sheets()
        assert http_session.get.call_count == 1


class TestRetries:
    def test_transient_then_success(self, client, http_session):
        http_session.get.side_effect = [
            requests.Timeout("slow"),
            make_response(status=503, reason="Service Unavailable"),
            make_response(json_data={"sheets": ["Tuesday 4PM"]}),
        ]
        assert client.list_sheets() == ["Tuesday 4PM"]
        assert http_session.get.call_count == 3

    def test_gives_up_after_max_retries(self, client, http_session):
        http_session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(TransientError):
            client.list_sheets()
        assert http_session.get.call_count == 3

    def test_rate_limit_is_transient(self, client, http_session):
        http_session.get.return_value = make_response(status=429, reason="Too Many")
        with pytest.raises(RateLimitError):
            client.list_sheets()
        assert http_session.get.call_count == 3


class TestOperations:
    def test_list_classes_filters_ignored_tabs(self, client, http_session):
        http_session.get.return_value = make_response(
            json_data={"sheets": ["Instruction Guide", "Tuesday 4PM", "Coaches Account", "Sat 10AM"]}
        )
        assert client.list_classes() == ["Tuesday 4PM", "Sat 10AM"]

    def test_list_sheets_requires_list(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"status": "success"})
        with pytest.raises(PermanentError):
            client.list_sheets()

    def test_get_class_grid_requires_raw_data(self, client, http_session):
        http_session.get.return_value = make_response(json_data={})
        with pytest.raises(PermanentError):
            client.get_class_grid("Tuesday 4PM")

    def test_get_class_grid_replaces_non_list_rows(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"rawData": [["a"], None]})
        assert client.get_class_grid("Tuesday 4PM") == [["a"], []]

    def test_save_status_error(self, client, http_session):
        http_session.post.return_value = make_response(
            json_data={"status": "error", "message": "locked"}
        )
        with pytest.raises(EndpointError, match="locked"):
            client.save_class_data(_payload())

    def test_login_success(self, client, http_session):
        http_session.get.return_value = make_response(
            json_data={"status": "success", "user": {"name": "Coach Lee", "role": "coach"}}
        )
        user = client.login("lee@example.com", "pw")
        assert user.name == "Coach Lee"
        assert user.email == "lee@example.com"
        _, kwargs = http_session.get.call_args
        assert kwargs["params"]["action"] == "login"

    def test_login_rejected(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"status": "fail"})
        with pytest.raises(AuthenticationError):
            client.login("lee@example.com", "wrong")


class TestBoundaryHelpers:
    def test_load_class_data_parses(self, client, http_session, example_grid):
        http_session.get.return_value = make_response(json_data={"rawData": example_grid})
        data = load_class_data(client, "Tuesday 4PM")
        assert [s.name for s in data.students] == ["Alice", "Bob"]
        assert [d.date for d in data.dates] == ["5/1/2024", "4/1/2024"]

    def test_load_class_data_failure_is_none(self, client, http_session):
        http_session.get.side_effect = requests.ConnectionError("down")
        assert load_class_data(client, "Tuesday 4PM") is None

    def test_save_session_ok(self, client, http_session):
        http_session.post.return_value = make_response(
            json_data={"status": "success", "message": "Saved 1 students"}
        )
        result = save_session(client, _payload())
        assert result.ok
        assert result.message == "Saved 1 students"

    def test_save_session_failure(self, client, http_session):
        http_session.post.return_value = make_response(json_data={"error": "boom"})
        result = save_session(client, _payload())
        assert not result.ok
        assert result.message == "boom"

    def test_authenticate_blank_credentials(self, client, http_session):
        assert authenticate(client, "", "pw") is None
        http_session.get.assert_not_called()

    def test_authenticate_failure_is_none(self, client, http_session):
        http_session.get.return_value = make_response(json_data={"error": "Invalid"})
        assert authenticate(client, "lee@example.com", "pw") is None

    def test_authenticate_success(self, client, http_session):
        http_session.get.return_value = make_response(
            json_data={"status": "success", "user": {"name": "Root", "role": "admin"}}
        )
        assert authenticate(client, "root@example.com", "pw").is_admin
