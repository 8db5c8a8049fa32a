"""Chart repository and resolution exceptions."""

from __future__ import annotations

from helm_broker.exceptions import (
    BrokerError,
    InvalidFormatError,
    NotFoundError,
    UpstreamFailureError,
)


class ChartError(BrokerError):
    """Base class for chart lookup, download and verification failures."""


class ChartNotFoundError(ChartError, NotFoundError):
    """Raised when no path, cache entry or repository entry matches a reference."""


class InvalidSearchError(ChartError, InvalidFormatError):
    """Raised when a search term is not a valid regular expression."""


class VerificationFailedError(ChartError):
    """Raised when a chart archive fails its provenance check."""

    status_code = 422
    error_code = "VerificationFailed"


class DownloadFailedError(ChartError, UpstreamFailureError):
    """Raised when fetching a chart or repository index fails in transit."""

    error_code = "DownloadFailed"


class RepositoryIndexError(ChartError):
    """Raised when a repositories file or index file cannot be read."""

    error_code = "InvalidRepositoryIndex"


__all__ = [
    "ChartError",
    "ChartNotFoundError",
    "DownloadFailedError",
    "InvalidSearchError",
    "RepositoryIndexError",
    "VerificationFailedError",
]
