"""In-memory instance registry."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from copy import deepcopy
from dataclasses import dataclass, field
from typing import TypeVar

from helm_broker.domain import InstanceId, ServiceInstance
from helm_broker.exceptions import NotFoundError

from .interfaces import InstanceRegistry, PutOutcome, PutResult, compare_for_put

T = TypeVar("T")


def _copy(value: T) -> T:
    return deepcopy(value)


@dataclass
class InMemoryInstanceRegistry(InstanceRegistry):
    _instances: dict[InstanceId, ServiceInstance] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def get(self, instance_id: InstanceId) -> ServiceInstance | None:
        async with self._lock:
            return _copy(self._instances.get(instance_id))

    async def put(self, instance: ServiceInstance) -> PutResult:
        async with self._lock:
            result = compare_for_put(self._instances.get(instance.instance_id), instance)
            if result.outcome is PutOutcome.CREATED:
                self._instances[instance.instance_id] = _copy(instance)
            return PutResult(result.outcome, _copy(result.instance))

    async def replace(self, instance: ServiceInstance) -> None:
        async with self._lock:
            if instance.instance_id not in self._instances:
                msg = f"Instance {instance.instance_id} not found"
                raise NotFoundError(msg)
            self._instances[instance.instance_id] = _copy(instance)

    async def delete(self, instance_id: InstanceId) -> ServiceInstance | None:
        async with self._lock:
            return self._instances.pop(instance_id, None)

    async def list_all(self) -> Sequence[ServiceInstance]:
        async with self._lock:
            return [_copy(instance) for instance in self._instances.values()]


__all__ = ["InMemoryInstanceRegistry"]
