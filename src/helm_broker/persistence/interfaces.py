"""Instance registry abstractions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from helm_broker.domain import InstanceId, ServiceInstance


class PutOutcome(StrEnum):
    """Result of inserting an instance that may already be registered."""

    CREATED = "created"
    IDENTICAL = "identical"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True)
class PutResult:
    """The outcome of :meth:`InstanceRegistry.put` and the record now stored."""

    outcome: PutOutcome
    instance: ServiceInstance


class InstanceRegistry(Protocol):
    """Concurrency-safe mapping from instance id to service instance.

    Implementations own a single lock; every operation, including the
    comparison :meth:`put` makes against an existing record, runs under it.
    """

    async def get(self, instance_id: InstanceId) -> ServiceInstance | None: ...

    async def put(self, instance: ServiceInstance) -> PutResult: ...

    async def replace(self, instance: ServiceInstance) -> None: ...

    async def delete(self, instance_id: InstanceId) -> ServiceInstance | None: ...

    async def list_all(self) -> Sequence[ServiceInstance]: ...


def compare_for_put(existing: ServiceInstance | None, candidate: ServiceInstance) -> PutResult:
    """Decide the put outcome; callers hold the registry lock."""

    if existing is None:
        return PutResult(PutOutcome.CREATED, candidate)
    if existing.matches(candidate):
        return PutResult(PutOutcome.IDENTICAL, existing)
    return PutResult(PutOutcome.CONFLICT, existing)


__all__ = ["InstanceRegistry", "PutOutcome", "PutResult", "compare_for_put"]
