"""Release manager contract and implementations."""

from .base import DEFAULT_OPERATION_TIMEOUT, ReleaseManager
from .exceptions import ReleaseManagerError, ReleaseNotFoundError, is_release_not_found
from .helm_cli import HelmCliReleaseManager
from .memory import InMemoryReleaseManager, RecordedCall
from .naming import MAX_RELEASE_NAME_LENGTH, release_name_for

__all__ = [
    "DEFAULT_OPERATION_TIMEOUT",
    "HelmCliReleaseManager",
    "InMemoryReleaseManager",
    "MAX_RELEASE_NAME_LENGTH",
    "RecordedCall",
    "ReleaseManager",
    "ReleaseManagerError",
    "ReleaseNotFoundError",
    "is_release_not_found",
    "release_name_for",
]
