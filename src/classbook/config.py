"""Classbook configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

# Spreadsheet tabs that hold reference data rather than a class roster
DEFAULT_IGNORED_TABS: tuple[str, ...] = (
    "Instruction Guide",
    "Campus Data",
    "Coders' Data",
    "Point Rewards",
    "Point Data",
    "Assessment Data",
    "Drop & Postpone",
    "Achievement Done",
    "Coach Name",
    "Coaches Account",
)


class ClassbookConfig(BaseSettings):
    """Classbook configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Apps Script web app deployment (the spreadsheet's only API)
    apps_script_url: str = Field(
        default="",
        description="Deployed Apps Script web app URL (.../exec)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single request to the Apps Script endpoint",
    )
    max_retries: int = Field(
        default=3,
        description="Attempts per request before a transient failure is surfaced",
    )

    ignored_tabs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_TABS),
        description="Sheet tabs that are never offered as classes",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ClassbookConfig | None = None


def get_config() -> ClassbookConfig:
    """Get the classbook configuration singleton.

    Returns:
        ClassbookConfig: Classbook configuration instance
    """
    global _config
    if _config is None:
        _config = ClassbookConfig()
    return _config
