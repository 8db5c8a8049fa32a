"""Enumerations used across the broker domain layer."""

from __future__ import annotations

from enum import StrEnum


class OperationState(StrEnum):
    """Open Service Broker last-operation states."""

    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ReleaseStatus(StrEnum):
    """Status codes reported by the release manager for a release."""

    UNKNOWN = "unknown"
    DEPLOYED = "deployed"
    DELETED = "deleted"
    SUPERSEDED = "superseded"
    FAILED = "failed"
    DELETING = "deleting"
    PENDING_INSTALL = "pending-install"
    PENDING_UPGRADE = "pending-upgrade"
    PENDING_ROLLBACK = "pending-rollback"

    @classmethod
    def parse(cls, raw: str | None) -> ReleaseStatus:
        """Normalise a status string from any Helm generation.

        Helm 3 renamed ``deleted``/``deleting`` to ``uninstalled``/``uninstalling``
        and older releases report upper-case enum names such as ``PENDING_INSTALL``.
        Unrecognised values map to :attr:`UNKNOWN`.
        """

        if not raw:
            return cls.UNKNOWN
        normalized = raw.strip().lower().replace("_", "-")
        normalized = _STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


_STATUS_ALIASES = {
    "uninstalled": "deleted",
    "uninstalling": "deleting",
}


class IdentifierStrategy(StrEnum):
    """How catalog service identifiers are derived from charts."""

    NAME = "name"
    DIGEST = "digest"
