"""Translation of release statuses into broker operation states."""

from __future__ import annotations

from helm_broker.domain import OperationState, ReleaseStatus

_IN_PROGRESS = frozenset(
    {
        ReleaseStatus.DELETING,
        ReleaseStatus.PENDING_INSTALL,
        ReleaseStatus.PENDING_UPGRADE,
        ReleaseStatus.PENDING_ROLLBACK,
    }
)
_SUCCEEDED = frozenset({ReleaseStatus.DEPLOYED, ReleaseStatus.DELETED})


def map_release_status(status: ReleaseStatus | str | None) -> OperationState:
    """Map a release status onto ``in progress``, ``succeeded`` or ``failed``.

    Anything not known to be pending or settled, including ``unknown`` and
    unrecognised strings, is reported as failed.
    """

    if not isinstance(status, ReleaseStatus):
        status = ReleaseStatus.parse(status)
    if status in _IN_PROGRESS:
        return OperationState.IN_PROGRESS
    if status in _SUCCEEDED:
        return OperationState.SUCCEEDED
    return OperationState.FAILED


__all__ = ["map_release_status"]
