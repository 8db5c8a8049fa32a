"""Broker-level exception taxonomy."""

from __future__ import annotations

from typing import Any


class BrokerError(RuntimeError):
    """Base class for failures surfaced to broker clients."""

    status_code: int = 500
    error_code: str = "InternalError"

    def to_response(self) -> dict[str, Any]:
        """Render the error as an Open Service Broker fault body."""

        return {"error": self.error_code, "description": str(self)}


class InvalidFormatError(BrokerError):
    """Raised when an identifier or name does not follow the expected pattern."""

    status_code = 400
    error_code = "InvalidFormat"


class NotFoundError(BrokerError):
    """Raised when an instance, chart or release is unknown."""

    status_code = 404
    error_code = "NotFound"


class ConflictError(BrokerError):
    """Raised when an instance id is reused with different attributes."""

    status_code = 409
    error_code = "Conflict"


class MissingNamespaceError(BrokerError):
    """Raised when a provision request carries no target namespace."""

    status_code = 400
    error_code = "MissingNamespace"


class UpstreamFailureError(BrokerError):
    """Raised when a collaborator call fails for a reason other than not-found."""

    status_code = 502
    error_code = "UpstreamFailure"


class UnsupportedVersionError(BrokerError):
    """Raised when a client speaks an incompatible broker API version."""

    status_code = 412
    error_code = "UnsupportedVersion"


__all__ = [
    "BrokerError",
    "ConflictError",
    "InvalidFormatError",
    "MissingNamespaceError",
    "NotFoundError",
    "UnsupportedVersionError",
    "UpstreamFailureError",
]
