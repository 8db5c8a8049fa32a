"""Async SQLite instance registry."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from helm_broker.domain import InstanceId, ServiceInstance
from helm_broker.exceptions import NotFoundError
from helm_broker.persistence.interfaces import (
    InstanceRegistry,
    PutOutcome,
    PutResult,
    compare_for_put,
)
from helm_broker.utils import ensure_utc

from .migrations import apply_migrations
from .models import ServiceInstanceRecord


def _to_record(instance: ServiceInstance) -> ServiceInstanceRecord:
    return ServiceInstanceRecord(
        instance_id=instance.instance_id,
        service_id=instance.service_id,
        plan_id=instance.plan_id,
        namespace=instance.namespace,
        release_name=instance.release_name,
        created_at=instance.created_at,
        payload=instance.model_dump(mode="json"),
    )


def _from_record(record: ServiceInstanceRecord) -> ServiceInstance:
    instance = ServiceInstance.model_validate(record.payload)
    return instance.evolve(created_at=ensure_utc(instance.created_at))


class SQLiteInstanceRegistry(InstanceRegistry):
    """Durable registry; state survives broker restarts."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        self._lock = asyncio.Lock()
        self._migrated = False

    @classmethod
    def from_url(cls, database_url: str) -> SQLiteInstanceRegistry:
        return cls(create_async_engine(database_url, future=True))

    async def _session(self) -> AsyncSession:
        if not self._migrated:
            await apply_migrations(self._engine)
            self._migrated = True
        return self._session_factory()

    async def get(self, instance_id: InstanceId) -> ServiceInstance | None:
        async with self._lock:
            async with await self._session() as session:
                record = await session.get(ServiceInstanceRecord, str(instance_id))
                return _from_record(record) if record is not None else None

    async def put(self, instance: ServiceInstance) -> PutResult:
        async with self._lock:
            async with await self._session() as session:
                record = await session.get(ServiceInstanceRecord, str(instance.instance_id))
                existing = _from_record(record) if record is not None else None
                result = compare_for_put(existing, instance)
                if result.outcome is PutOutcome.CREATED:
                    session.add(_to_record(instance))
                    await session.commit()
                return result

    async def replace(self, instance: ServiceInstance) -> None:
        async with self._lock:
            async with await self._session() as session:
                record = await session.get(ServiceInstanceRecord, str(instance.instance_id))
                if record is None:
                    msg = f"Instance {instance.instance_id} not found"
                    raise NotFoundError(msg)
                updated = _to_record(instance)
                record.service_id = updated.service_id
                record.plan_id = updated.plan_id
                record.namespace = updated.namespace
                record.release_name = updated.release_name
                record.payload = updated.payload
                await session.commit()

    async def delete(self, instance_id: InstanceId) -> ServiceInstance | None:
        async with self._lock:
            async with await self._session() as session:
                record = await session.get(ServiceInstanceRecord, str(instance_id))
                if record is None:
                    return None
                removed = _from_record(record)
                await session.delete(record)
                await session.commit()
                return removed

    async def list_all(self) -> Sequence[ServiceInstance]:
        async with self._lock:
            async with await self._session() as session:
                result = await session.execute(
                    select(ServiceInstanceRecord).order_by(ServiceInstanceRecord.created_at)
                )
                return [_from_record(record) for record in result.scalars()]

    async def dispose(self) -> None:
        await self._engine.dispose()


__all__ = ["SQLiteInstanceRegistry"]
