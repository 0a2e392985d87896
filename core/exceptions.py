"""Custom exceptions for the socorro-digest application."""


class CrashStatsError(Exception):
    """Base exception for all socorro-digest errors."""


class ConfigurationError(CrashStatsError):
    """Raised when configuration is invalid or missing."""


class ProviderNotFoundError(CrashStatsError):
    """Raised when a requested integration provider is not registered."""

    def __init__(self, category: str, provider: str | None = None):
        self.category = category
        self.provider = provider
        detail = f" (provider={provider})" if provider else ""
        super().__init__(f"No provider found for category '{category}'{detail}")


class InvalidRequestError(CrashStatsError):
    """Raised when caller-supplied parameters are rejected before any fetch."""


class UpstreamError(CrashStatsError):
    """Raised when a fetch against a remote service fails."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class NotFoundError(UpstreamError):
    """Raised when the requested record does not exist upstream."""


class DataNotReadyError(UpstreamError):
    """Raised when the service accepted the request but has not produced the data yet (HTTP 202)."""


class RateLimitedError(UpstreamError):
    """Raised on HTTP 429 from the crash-stats API."""

    def __init__(self, provider: str):
        super().__init__(
            provider,
            "Rate limited. Configure an API token with no permissions attached "
            "(SOCORRO_API_TOKEN or SOCORRO_API_TOKEN_PATH) for higher limits",
        )


class UpstreamHTTPError(UpstreamError):
    """Raised for any other non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(provider, f"HTTP {status_code} from {url}")


class TransportError(UpstreamError):
    """Raised when the request never produced a response (DNS, TLS, timeout)."""


class PayloadParseError(UpstreamError):
    """Raised when a response body is not the JSON shape we expect."""

    PREVIEW_LENGTH = 200

    def __init__(self, provider: str, reason: str, payload: str):
        self.reason = reason
        self.preview = payload[: self.PREVIEW_LENGTH]
        super().__init__(provider, f"Failed to parse response: {reason}: {self.preview}")


class RenderError(CrashStatsError):
    """Raised when a renderer is asked for a format or summary type it does not know."""
