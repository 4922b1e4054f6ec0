"""Custom exception hierarchy for the CORS forward proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        status_code: HTTP status of the error reply
        title: Fixed `error` field of the reply; the message then goes to `message`
    """

    status_code = 500
    title: str | None = None


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class ValidationError(ProxyError):
    """Raised when required caller input is missing or malformed.

    Attributes:
        message: Error message
        usage: Example of a valid request (optional)
    """

    status_code = 400

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.usage = usage


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""

    status_code = 413


class InvalidJSON(ProxyError):
    """Request body is not valid JSON."""

    status_code = 400
    title = "Invalid JSON"


class UpstreamError(ProxyError):
    """Raised when the outbound request to the target could not complete.

    Upstream 4xx/5xx replies are relayed, never raised.

    Attributes:
        message: Error message
        url: Target URL of the failed request (optional)
    """

    title = "Proxy request failed"

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class InvalidTargetURL(UpstreamError):
    """Raised when the target URL cannot be parsed or has no origin."""


class UpstreamTimeoutError(UpstreamError):
    """Raised when the target does not answer within the deadline."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to reach the target (DNS, TCP, TLS)."""


class TooManyRedirectsError(UpstreamError):
    """Raised when the target exceeds the redirect limit."""
