"""Client for the Apps Script web app that fronts the class spreadsheet.

The spreadsheet has no other API: every read and write goes through the
deployed script's doGet/doPost with an ``action`` query parameter.

    GET  ?action=getMetadata                       -> {"sheets": [...]}
    GET  ?action=getClassData&className=...        -> {"rawData": [[...], ...]}
    GET  ?action=login&email=...&password=...      -> {"status": "success", "user": {...}}
    POST ?action=saveClassData  body={"action": ..., **payload}

POST bodies are sent as text/plain JSON; Apps Script exposes them as
postData.contents and rejects CORS preflights for application/json.

AppsScriptClient raises the errors.py hierarchy and retries TransientError.
The module-level helpers at the bottom are the boundary the rest of the
project uses: they turn any failure into None / SaveResult(ok=False).
"""

import json

import requests
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.classbook.config import ClassbookConfig, get_config
from src.classbook.errors import (
    AuthenticationError,
    ClassbookError,
    ConfigurationError,
    EndpointError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.classbook.logging import bind_class, get_logger
from src.classbook.models import ClassData, Grid, SaveResult, SessionPayload, UserAccount
from src.classbook.sheets.class_tab import parse_class_data

logger = get_logger(__name__)


class AppsScriptClient:
    """Request/response wrapper around the Apps Script endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_wait: float = 1.0,
        ignored_tabs: list[str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Deployed web app URL (ends in /exec).
            timeout: Seconds per HTTP request.
            max_retries: Attempts per action before a TransientError escapes.
            retry_wait: Base of the exponential backoff between attempts.
            ignored_tabs: Sheet tabs list_classes() never returns.
            session: Optional requests.Session (connection reuse, tests).

        Raises:
            ConfigurationError: If url is empty.
        """
        if not url:
            raise ConfigurationError("Apps Script URL not configured (APPS_SCRIPT_URL)")

        self.url = url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_wait = retry_wait
        self.ignored_tabs = list(ignored_tabs or [])
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: ClassbookConfig | None = None) -> "AppsScriptClient":
        config = config or get_config()
        return cls(
            config.apps_script_url,
            timeout=config.request_timeout_seconds,
            max_retries=config.max_retries,
            ignored_tabs=config.ignored_tabs,
        )

    def _request(
        self,
        action: str,
        params: dict[str, str] | None = None,
        *,
        method: str = "GET",
        body: dict | None = None,
    ) -> dict:
        """Call an action, retrying transient failures with exponential backoff."""
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait, max=30),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )
        return retrying(self._send, action, params or {}, method, body)

    def _send(
        self, action: str, params: dict[str, str], method: str, body: dict | None
    ) -> dict:
        # Never log params or body: login carries the password as a query param
        logger.debug("endpoint_request", action=action, method=method)

        try:
            if method == "POST":
                response = self.session.post(
                    self.url,
                    params={"action": action},
                    data=json.dumps({"action": action, **(body or {})}),
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                    timeout=self.timeout,
                )
            else:
                response = self.session.get(
                    self.url,
                    params={"action": action, **params},
                    timeout=self.timeout,
                )
        except requests.Timeout as e:
            logger.warning("endpoint_timeout", action=action, error=str(e))
            raise TransientError(f"{action} timed out: {e}") from e
        except requests.ConnectionError as e:
            logger.warning("endpoint_unreachable", action=action, error=str(e))
            raise TransientError(f"{action} connection failed: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimitError(f"{action} rate limited (HTTP 429)")
        if status >= 500:
            raise TransientError(f"{action} failed: HTTP {status} {response.reason}")
        if status >= 400:
            raise PermanentError(f"{action} failed: HTTP {status} {response.reason}")

        try:
            payload = response.json()
        except ValueError as e:
            # Apps Script answers with an HTML error page when the script throws
            raise PermanentError(f"{action} returned a non-JSON response") from e

        if not isinstance(payload, dict):
            raise PermanentError(f"{action} returned {type(payload).__name__}, not an object")
        if payload.get("error"):
            logger.error("endpoint_error", action=action, error=payload["error"])
            raise EndpointError(str(payload["error"]))

        return payload

    def list_sheets(self) -> list[str]:
        """Return every tab name in the spreadsheet."""
        payload = self._request("getMetadata")
        sheets = payload.get("sheets")
        if not isinstance(sheets, list):
            raise PermanentError("getMetadata response has no sheets list")
        return [str(name) for name in sheets]

    def list_classes(self) -> list[str]:
        """Return tab names that hold a class, in spreadsheet order."""
        classes = [name for name in self.list_sheets() if name not in self.ignored_tabs]
        logger.info("classes_listed", count=len(classes))
        return classes

    def get_class_grid(self, class_name: str) -> Grid:
        """Return the raw used range of a class tab."""
        payload = self._request("getClassData", {"className": class_name})
        raw = payload.get("rawData")
        if not isinstance(raw, list):
            raise PermanentError(f"getClassData returned no rawData for {class_name!r}")
        return [row if isinstance(row, list) else [] for row in raw]

    def save_class_data(self, payload: SessionPayload) -> SaveResult:
        """Write one session to the sheet.

        Raises:
            EndpointError: If the script reports an error or a non-success status.
        """
        response = self._request("saveClassData", method="POST", body=payload.to_request())
        if response.get("status") == "error":
            raise EndpointError(str(response.get("message") or "saveClassData failed"))
        message = response.get("message")
        return SaveResult(ok=True, message=str(message) if message else None)

    def login(self, email: str, password: str) -> UserAccount:
        """Verify credentials against the Coaches Account tab.

        Raises:
            AuthenticationError: If the script does not accept the credentials.
        """
        payload = self._request("login", {"email": email, "password": password})
        user = payload.get("user")
        if payload.get("status") != "success" or not isinstance(user, dict):
            raise AuthenticationError("Credentials rejected")
        try:
            return UserAccount.model_validate({**user, "email": user.get("email") or email})
        except ValidationError as e:
            raise PermanentError(f"login returned a malformed user: {e}") from e


def load_class_data(client: AppsScriptClient, class_name: str) -> ClassData | None:
    """Fetch and parse a class tab.

    Returns:
        Parsed ClassData, or None if the grid could not be fetched for any reason.
    """
    try:
        grid = client.get_class_grid(class_name)
    except ClassbookError as e:
        logger.error(
            "class_load_failed",
            class_name=class_name,
            error=str(e),
            type=type(e).__name__,
        )
        return None

    with bind_class(class_name):
        data = parse_class_data(grid)
    logger.info(
        "class_loaded",
        class_name=class_name,
        students=len(data.students),
        dates=len(data.dates),
    )
    return data


def save_session(client: AppsScriptClient, payload: SessionPayload) -> SaveResult:
    """Persist a session payload, reporting failure instead of raising."""
    try:
        result = client.save_class_data(payload)
    except ClassbookError as e:
        logger.error(
            "session_save_failed",
            class_name=payload.class_name,
            date=payload.date,
            error=str(e),
        )
        return SaveResult(ok=False, message=str(e))

    logger.info(
        "session_saved",
        class_name=payload.class_name,
        date=payload.date,
        row_start=payload.row_start,
        students=len(payload.data),
    )
    return result


def authenticate(
    client: AppsScriptClient, email: str, password: str
) -> UserAccount | None:
    """Return the account for valid credentials, or None."""
    if not email or not password:
        return None
    try:
        user = client.login(email, password)
    except ClassbookError as e:
        logger.warning("authentication_failed", error=str(e), type=type(e).__name__)
        return None

    logger.info("authentication_succeeded", role=user.role)
    return user
