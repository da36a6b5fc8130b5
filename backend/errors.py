"""Error types shared by the recommendation and autocomplete services."""

from typing import Optional


class DestinationFinderError(Exception):
    """Base error. Carries a readable message and the exception behind it, if any."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class InvalidInput(DestinationFinderError):
    """Caller supplied missing or malformed data. Maps to a 400."""


class RecommendationFailed(DestinationFinderError):
    """No recommendation is possible: the suggestion step failed."""


class SuggestionParseError(RecommendationFailed):
    """The suggestion payload was not a list of {city, iataCode} objects."""


class LookupFailed(DestinationFinderError):
    """The location reference lookup failed; `detail` holds the upstream reason."""

    def __init__(self, message: str, detail: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.detail = detail


# Raised by the upstream adapters.

class SuggestionSourceError(DestinationFinderError):
    pass


class FareSourceError(DestinationFinderError):
    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.description = description or message
        self.status_code = status_code
