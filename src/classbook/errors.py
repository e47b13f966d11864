"""Error hierarchy for endpoint retry classification.

This hierarchy lets tenacity retry decorators tell transient failures
(should retry) from permanent failures (should not retry).

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def get_class_grid(class_name: str):
        ...

The grid parser never raises any of these: a malformed sheet degrades to an
empty or partial ClassData instead.
"""


class ClassbookError(Exception):
    """Base exception for all classbook errors."""

    pass


class TransientError(ClassbookError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded - needs longer backoff.

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(ClassbookError):
    """Failure that won't succeed on retry.

    Examples: unknown class tab, malformed response body, 4xx status.
    """

    pass


class AuthenticationError(PermanentError):
    """Credentials rejected by the endpoint's login action."""

    pass


class EndpointError(PermanentError):
    """The endpoint answered but reported an error in its JSON body."""

    pass


class ConfigurationError(PermanentError):
    """Required configuration (e.g. the endpoint URL) is missing."""

    pass
