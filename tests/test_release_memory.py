from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from helm_broker.domain import ReleaseStatus
from helm_broker.release import (
    InMemoryReleaseManager,
    ReleaseManager,
    ReleaseManagerError,
    ReleaseNotFoundError,
    release_name_for,
)

CHART = Path("/charts/app-1.0.tgz")


def test_install_upgrade_history() -> None:
    manager = InMemoryReleaseManager()
    assert isinstance(manager, ReleaseManager)

    async def _run() -> None:
        await manager.install(CHART, name="i1", namespace="ns1", values={"a": 1})
        upgraded = await manager.upgrade("i1", CHART, namespace="ns1", values={"a": 2})
        assert upgraded.revision == 2
        history = await manager.history("i1", namespace="ns1", max_entries=5)
        assert [release.revision for release in history] == [2, 1]
        assert history[1].status is ReleaseStatus.SUPERSEDED

    asyncio.run(_run())
    assert manager.count("install") == 1
    assert manager.calls[1].values == {"a": 2}


def test_releases_are_scoped_by_namespace() -> None:
    manager = InMemoryReleaseManager()

    async def _run() -> None:
        await manager.install(CHART, name="i1", namespace="ns1", values={})
        await manager.install(CHART, name="i1", namespace="ns2", values={})
        with pytest.raises(ReleaseManagerError):
            await manager.install(CHART, name="i1", namespace="ns1", values={})

    asyncio.run(_run())


def test_purged_release_is_gone() -> None:
    manager = InMemoryReleaseManager()

    async def _run() -> None:
        await manager.install(CHART, name="i1", namespace="ns1", values={})
        deleted = await manager.delete("i1", namespace="ns1")
        assert deleted.status is ReleaseStatus.DELETED
        with pytest.raises(ReleaseNotFoundError):
            await manager.status("i1", namespace="ns1")
        with pytest.raises(ReleaseNotFoundError):
            await manager.delete("i1", namespace="ns1")

    asyncio.run(_run())


def test_kept_history_reports_deleted() -> None:
    manager = InMemoryReleaseManager()

    async def _run() -> None:
        await manager.install(CHART, name="i1", namespace="ns1", values={})
        await manager.delete("i1", namespace="ns1", purge=False)
        status = await manager.status("i1", namespace="ns1")
        assert status.status is ReleaseStatus.DELETED
        await manager.install(CHART, name="i1", namespace="ns1", values={})

    asyncio.run(_run())


def test_scheduled_failure_and_status_override() -> None:
    manager = InMemoryReleaseManager(initial_status=ReleaseStatus.PENDING_INSTALL)
    manager.failures["upgrade"] = ReleaseManagerError("boom")

    async def _run() -> None:
        await manager.install(CHART, name="i1", namespace="ns1", values={})
        assert (await manager.status("i1", namespace="ns1")).status is ReleaseStatus.PENDING_INSTALL
        manager.set_status("i1", ReleaseStatus.FAILED, namespace="ns1")
        assert (await manager.status("i1", namespace="ns1")).status is ReleaseStatus.FAILED
        with pytest.raises(ReleaseManagerError, match="boom"):
            await manager.upgrade("i1", CHART, namespace="ns1", values={})
        await manager.upgrade("i1", CHART, namespace="ns1", values={})

    asyncio.run(_run())


@pytest.mark.parametrize(
    ("instance_id", "expected"),
    [
        ("i1", "i1"),
        ("2f1c7a0e-4d1b-4c55-9d0e-3b7a5d9c1e42", "2f1c7a0e-4d1b-4c55-9d0e-3b7a5d9c1e42"),
    ],
)
def test_release_names_keep_valid_ids(instance_id: str, expected: str) -> None:
    assert release_name_for(instance_id) == expected


def test_release_names_are_sanitised_and_distinct() -> None:
    upper = release_name_for("Team_Instance")
    lower = release_name_for("team-instance")
    long_name = release_name_for("x" * 80)

    assert upper != lower
    assert upper.startswith("team-instance-")
    assert len(long_name) <= 53
    assert release_name_for("___").startswith("release-")
    assert release_name_for("i1", prefix="osb-") == "osb-i1"
