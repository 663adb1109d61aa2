from __future__ import annotations


class SearchError(Exception):
    """Base class for catalog search failures surfaced to callers."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(SearchError):
    """Search term missing or the request URL could not be built."""


class MissingCredentials(SearchError):
    """API key or host not configured."""


class NetworkFailure(SearchError):
    """Transport error or non-success HTTP status."""


class EmptyResults(SearchError):
    """Response parsed but carried no `results` array."""


class DecodeFailure(SearchError):
    """Response body was not the JSON object we expected."""
