"""In-memory release manager for tests and dry runs."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from helm_broker.domain import Release, ReleaseStatus
from helm_broker.utils import utc_now

from .base import DEFAULT_OPERATION_TIMEOUT
from .exceptions import ReleaseManagerError, ReleaseNotFoundError


@dataclass(slots=True)
class RecordedCall:
    operation: str
    name: str
    namespace: str
    chart_path: Path | None = None
    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class InMemoryReleaseManager:
    """Keeps release history in a dictionary keyed by ``(namespace, name)``.

    ``initial_status`` is the status new revisions start in, and ``failures``
    maps an operation name to an exception raised on its next invocation.
    """

    initial_status: ReleaseStatus = ReleaseStatus.DEPLOYED
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    _releases: dict[tuple[str, str], list[Release]] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def _raise_if_scheduled(self, operation: str) -> None:
        failure = self.failures.pop(operation, None)
        if failure is not None:
            raise failure

    def _history(self, name: str, namespace: str) -> list[Release]:
        history = self._releases.get((namespace, name))
        if not history:
            raise ReleaseNotFoundError(f"release {name!r} not found")
        return history

    def _revision(
        self,
        name: str,
        namespace: str,
        chart_path: Path,
        revision: int,
        description: str,
        values: Mapping[str, Any],
    ) -> Release:
        _ = values
        return Release(
            name=name,
            namespace=namespace,
            revision=revision,
            status=self.initial_status,
            chart=chart_path.name,
            description=description,
            updated_at=utc_now(),
        )

    def set_status(self, name: str, status: ReleaseStatus, *, namespace: str) -> None:
        history = self._history(name, namespace)
        history[-1] = history[-1].model_copy(update={"status": status})

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call.operation == operation)

    async def install(
        self,
        chart_path: Path,
        *,
        name: str,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        _ = timeout
        async with self._lock:
            self.calls.append(RecordedCall("install", name, namespace, chart_path, dict(values)))
            self._raise_if_scheduled("install")
            existing = self._releases.get((namespace, name))
            if existing and existing[-1].status is not ReleaseStatus.DELETED:
                raise ReleaseManagerError(f"cannot re-use a name that is still in use: {name}")
            release = self._revision(name, namespace, chart_path, 1, "Install complete", values)
            self._releases[(namespace, name)] = [release]
            return release

    async def upgrade(
        self,
        name: str,
        chart_path: Path,
        *,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        _ = timeout
        async with self._lock:
            self.calls.append(RecordedCall("upgrade", name, namespace, chart_path, dict(values)))
            self._raise_if_scheduled("upgrade")
            history = self._history(name, namespace)
            previous = history[-1]
            history[-1] = previous.model_copy(update={"status": ReleaseStatus.SUPERSEDED})
            release = self._revision(
                name, namespace, chart_path, previous.revision + 1, "Upgrade complete", values
            )
            history.append(release)
            return release

    async def delete(
        self,
        name: str,
        *,
        namespace: str,
        purge: bool = True,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        _ = timeout
        async with self._lock:
            self.calls.append(RecordedCall("delete", name, namespace))
            self._raise_if_scheduled("delete")
            history = self._history(name, namespace)
            deleted = history[-1].model_copy(
                update={"status": ReleaseStatus.DELETED, "description": "Deletion complete"}
            )
            if purge:
                del self._releases[(namespace, name)]
            else:
                history[-1] = deleted
            return deleted

    async def status(self, name: str, *, namespace: str) -> Release:
        async with self._lock:
            self.calls.append(RecordedCall("status", name, namespace))
            self._raise_if_scheduled("status")
            return self._history(name, namespace)[-1]

    async def history(
        self,
        name: str,
        *,
        namespace: str,
        max_entries: int = 1,
    ) -> Sequence[Release]:
        async with self._lock:
            self.calls.append(RecordedCall("history", name, namespace))
            self._raise_if_scheduled("history")
            history = self._history(name, namespace)
            return list(reversed(history))[:max_entries]


__all__ = ["InMemoryReleaseManager", "RecordedCall"]
