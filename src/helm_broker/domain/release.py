"""Release records reported by the release manager."""

from __future__ import annotations

from datetime import datetime

from .base import DomainModel
from .enums import ReleaseStatus


class Release(DomainModel):
    """Snapshot of a release as last reported by the release manager."""

    name: str
    namespace: str | None = None
    revision: int = 1
    status: ReleaseStatus = ReleaseStatus.UNKNOWN
    chart: str | None = None
    app_version: str | None = None
    description: str | None = None
    updated_at: datetime | None = None
