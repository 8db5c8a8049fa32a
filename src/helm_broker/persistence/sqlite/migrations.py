"""Versioned schema migrations for the SQLite instance registry.

Each migration runs once, in order, inside the same transaction that records
its version in ``broker_schema_migrations``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from .models import Base

Migration = Callable[[AsyncConnection], Awaitable[None]]


async def _create_instances(conn: AsyncConnection) -> None:
    await conn.run_sync(Base.metadata.create_all)


async def _index_releases(conn: AsyncConnection) -> None:
    # last-operation and deprovision look instances up by their release
    await conn.execute(
        text(
            "CREATE INDEX IF NOT EXISTS ix_service_instances_release "
            "ON service_instances (namespace, release_name)"
        )
    )


MIGRATIONS: tuple[tuple[int, Migration], ...] = (
    (1, _create_instances),
    (2, _index_releases),
)


async def current_version(conn: AsyncConnection) -> int:
    result = await conn.execute(text("SELECT MAX(version) FROM broker_schema_migrations"))
    return int(result.scalar() or 0)


async def apply_migrations(engine: AsyncEngine) -> int:
    """Bring the schema up to date and return the resulting version."""

    async with engine.begin() as conn:
        await conn.execute(
            text(
                "CREATE TABLE IF NOT EXISTS broker_schema_migrations "
                "(version INTEGER PRIMARY KEY)"
            )
        )
        version = await current_version(conn)
        for target, migration in MIGRATIONS:
            if target <= version:
                continue
            await migration(conn)
            await conn.execute(
                text("INSERT INTO broker_schema_migrations (version) VALUES (:version)"),
                {"version": target},
            )
            version = target
    return version


__all__ = ["MIGRATIONS", "apply_migrations", "current_version"]
