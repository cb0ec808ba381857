"""Exception types raised by the NOTAM briefing pipeline."""
from typing import Optional


class NotamError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(NotamError):
    """Raised when user input (ICAO code, time window) is malformed."""


class UpstreamError(NotamError):
    """
    Failure talking to an upstream NOTAM source.

    Args:
        source: Human-readable source name (e.g. "FAA", "NAV CANADA")
        message: Description of the failure
        status_code: HTTP or API status code when one is known
        body: Response body, if any
    """

    def __init__(self, source: str, message: str,
                 status_code: Optional[int] = None, body: Optional[str] = None):
        self.source = source
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else 'N/A'
        super().__init__(f"{source} ({status}): {message}")


class UpstreamHttpError(UpstreamError):
    """Non-2xx response or transport failure."""


class UpstreamApiError(UpstreamError):
    """2xx response carrying an error field in its body."""


class AggregateFetchError(NotamError):
    """Raised when no NOTAMs could be retrieved and the primary source failed."""

    def __init__(self, icao_code: str, primary_error: Exception,
                 secondary_error: Optional[Exception] = None):
        self.icao_code = icao_code
        self.primary_error = primary_error
        self.secondary_error = secondary_error

        parts = [f"primary: {primary_error}"]
        if secondary_error is not None:
            parts.append(f"secondary: {secondary_error}")
        super().__init__(f"Failed to retrieve NOTAMs for {icao_code} ({'; '.join(parts)})")


class BudgetExceededError(NotamError):
    """Raised when a summarization prompt cannot be made to fit the model budget."""

    def __init__(self, estimated_tokens: int, budget: int):
        self.estimated_tokens = estimated_tokens
        self.budget = budget
        super().__init__(
            f"Prompt still too large: {estimated_tokens} tokens (limit: {budget}). "
            "Try reducing the time window."
        )


class SummarizerError(NotamError):
    """Raised when the summarization backend fails or returns an unusable response."""
