"""Release manager contract consumed by the broker."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from helm_broker.domain import Release

DEFAULT_OPERATION_TIMEOUT = 300.0


@runtime_checkable
class ReleaseManager(Protocol):
    """Install, upgrade, delete and inspect releases by name.

    Implementations raise :class:`~helm_broker.release.ReleaseNotFoundError`
    when the named release is unknown and
    :class:`~helm_broker.release.ReleaseManagerError` for any other failure.
    """

    async def install(
        self,
        chart_path: Path,
        *,
        name: str,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release: ...

    async def upgrade(
        self,
        name: str,
        chart_path: Path,
        *,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release: ...

    async def delete(
        self,
        name: str,
        *,
        namespace: str,
        purge: bool = True,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release: ...

    async def status(self, name: str, *, namespace: str) -> Release: ...

    async def history(
        self,
        name: str,
        *,
        namespace: str,
        max_entries: int = 1,
    ) -> Sequence[Release]: ...


__all__ = ["DEFAULT_OPERATION_TIMEOUT", "ReleaseManager"]
