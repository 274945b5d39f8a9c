"""Errors surfaced to the caller of an analysis.

Each error carries an internal `message` (logged) and a `user_message`
(returned to the client) plus the HTTP status the API layer uses.
Unusable text from the reasoning engine is not an error: the normalizer
absorbs it into the fallback analysis.
"""


class AnalysisError(Exception):
    """Base exception for all analysis failures."""

    status_code: int = 500
    default_user_message: str = "An unexpected error occurred during analysis"

    def __init__(self, message: str, user_message: str | None = None) -> None:
        self.message = message
        self.user_message = user_message or self.default_user_message
        super().__init__(self.message)


class InvalidInputError(AnalysisError):
    """Missing or malformed URL. Raised before any network activity."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message, user_message=message)


class ExtractionError(AnalysisError):
    """The target website could not be fetched."""

    status_code = 400
    default_user_message = "Unable to access the website. Please check the URL and try again."

    KINDS = ("tls", "connection", "timeout", "http", "unknown")

    def __init__(self, message: str, kind: str = "unknown") -> None:
        self.kind = kind if kind in self.KINDS else "unknown"
        super().__init__(message)


class ReasoningEngineError(AnalysisError):
    """The reasoning-engine call itself failed or returned nothing."""

    default_user_message = "AI analysis failed. Please try again later."


class EngineNotConfiguredError(AnalysisError):
    """No API key is configured for the reasoning engine."""

    default_user_message = "AI analysis service is not configured"


class UnexpectedAnalysisError(AnalysisError):
    """Catch-all for failures outside the taxonomy above."""

    pass
