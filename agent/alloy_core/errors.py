"""
Error types raised by the Alloy client.

Transport and HTTP failures are retried by api.invoke(); everything
else surfaces on the first occurrence.
"""


class AlloyApiError(RuntimeError):
    """Base class for every failure talking to the Alloy API."""


class ApiInterruptedError(AlloyApiError):
    """No response reached the client (connection lost, DNS, timeout)."""


class ApiHttpError(AlloyApiError):
    """The server answered, but with a non-success HTTP status."""

    def __init__(self, status_code, reason="", url=""):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"HTTP {status_code} {reason}".strip() + (f" ({url})" if url else ""))


class ApiLogicalError(AlloyApiError):
    """The response envelope came back with success=false."""

    def __init__(self, operation, error_code=None, error_text=None):
        self.operation = operation
        self.error_code = error_code
        self.error_text = error_text
        super().__init__(f"{operation} failed: [{error_code}] {error_text}")


class ApiNoDataError(AlloyApiError):
    """The call succeeded at HTTP level but carried no decodable body."""


class TokenGrantError(AlloyApiError):
    """The token endpoint answered without a usable token."""


class ConfigError(ValueError):
    """Missing or malformed local settings."""
