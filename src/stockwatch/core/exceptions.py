"""
Custom exceptions for stockwatch.
"""


class StockWatchError(Exception):
    """Base exception for all stockwatch errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class CacheError(StockWatchError):
    """Raised when a cache or store operation fails."""

    def __init__(self, operation: str, details: str | None = None):
        super().__init__(f"Cache error during {operation}", details=details)
        self.operation = operation


class NetworkError(StockWatchError):
    """Raised when a network request fails."""

    def __init__(self, url: str, status_code: int | None = None, details: str | None = None):
        message = f"Network request failed: {url}"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(message, details=details)
        self.url = url
        self.status_code = status_code


class RateLimitError(StockWatchError):
    """Raised when the market-data API throttles us."""

    def __init__(
        self,
        service: str,
        reset_time: int | None = None,
        details: str | None = None,
    ):
        if details is None and reset_time:
            details = f"Rate limit resets in {reset_time} seconds."
        super().__init__(f"Rate limit exceeded for {service}", details=details)
        self.service = service
        self.reset_time = reset_time


class ApiError(StockWatchError):
    """Raised when the API answers with an in-band error message."""

    def __init__(self, function: str, details: str | None = None):
        super().__init__(f"API rejected {function} request", details=details)
        self.function = function


class PayloadError(StockWatchError):
    """Raised when a response body cannot be decoded."""

    def __init__(self, function: str, details: str | None = None):
        super().__init__(f"Malformed response for {function}", details=details)
        self.function = function


class ValidationError(StockWatchError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class ConfigError(StockWatchError):
    """Raised when configuration cannot be loaded."""

    def __init__(self, source: str, details: str | None = None):
        super().__init__(f"Invalid configuration in {source}", details=details)
        self.source = source
