"""Release manager exceptions."""

from __future__ import annotations

import re

from helm_broker.exceptions import NotFoundError, UpstreamFailureError


class ReleaseManagerError(UpstreamFailureError):
    """Raised when the release manager rejects or fails an operation."""


class ReleaseNotFoundError(ReleaseManagerError, NotFoundError):
    """Raised when the named release does not exist."""

    status_code = 404
    error_code = "NotFound"


_NOT_FOUND = re.compile(r'release:?\s*(?:"(?P<name>[^"]*)"\s*)?not found', re.IGNORECASE)


def is_release_not_found(name: str, message: str) -> bool:
    """Recognise the release manager's "release not found" error text.

    Helm 2 reports ``release: "<name>" not found``; Helm 3 reports
    ``<name>: release: not found``. A quoted name must be the release asked for.
    """

    match = _NOT_FOUND.search(message)
    if match is None:
        return False
    quoted = match.group("name")
    return quoted is None or quoted == name


__all__ = ["ReleaseManagerError", "ReleaseNotFoundError", "is_release_not_found"]
