from __future__ import annotations

import pytest

from helm_broker.broker import map_release_status
from helm_broker.domain import OperationState, ReleaseStatus

EXPECTED = {
    ReleaseStatus.DELETING: OperationState.IN_PROGRESS,
    ReleaseStatus.PENDING_INSTALL: OperationState.IN_PROGRESS,
    ReleaseStatus.PENDING_UPGRADE: OperationState.IN_PROGRESS,
    ReleaseStatus.PENDING_ROLLBACK: OperationState.IN_PROGRESS,
    ReleaseStatus.DEPLOYED: OperationState.SUCCEEDED,
    ReleaseStatus.DELETED: OperationState.SUCCEEDED,
    ReleaseStatus.UNKNOWN: OperationState.FAILED,
    ReleaseStatus.SUPERSEDED: OperationState.FAILED,
    ReleaseStatus.FAILED: OperationState.FAILED,
}


def test_every_release_status_is_mapped() -> None:
    assert set(EXPECTED) == set(ReleaseStatus)


@pytest.mark.parametrize(("status", "state"), list(EXPECTED.items()))
def test_status_mapping(status: ReleaseStatus, state: OperationState) -> None:
    assert map_release_status(status) is state


@pytest.mark.parametrize(
    ("raw", "state"),
    [
        ("PENDING_INSTALL", OperationState.IN_PROGRESS),
        ("uninstalling", OperationState.IN_PROGRESS),
        ("uninstalled", OperationState.SUCCEEDED),
        ("DEPLOYED", OperationState.SUCCEEDED),
        ("exploded", OperationState.FAILED),
        ("", OperationState.FAILED),
        (None, OperationState.FAILED),
    ],
)
def test_raw_status_strings(raw: str | None, state: OperationState) -> None:
    assert map_release_status(raw) is state
