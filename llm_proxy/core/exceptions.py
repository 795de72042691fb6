"""Error taxonomy shared by the gates, the adapters and the HTTP layer."""


class AppError(Exception):
    """Base class for errors that map onto a JSON ``{"error": ...}`` response."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class QuotaExceededError(AppError):
    status_code = 429


class ConfigurationError(AppError):
    """A required credential or setting is absent."""

    status_code = 500


class TranscriptionError(AppError):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(f"Transcription failed: {message}")
        self.reason = message


class UpstreamError(Exception):
    """Non-success response from a provider, returned to the caller verbatim."""

    def __init__(self, status_code: int, body: bytes, content_type: str | None = None):
        super().__init__(f"Upstream responded with HTTP {status_code}")
        self.status_code = status_code
        self.body = body
        self.content_type = content_type
