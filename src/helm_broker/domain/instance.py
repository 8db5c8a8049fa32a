"""Service instance records tracked by the broker."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Annotated, Any

from pydantic import Field

from helm_broker.utils import utc_now

from .base import DomainModel
from .types import InstanceId, PlanId, ServiceId


def same_value(left: Any, right: Any) -> bool:
    """Deep equality that keeps booleans apart from numbers.

    ``True == 1`` holds in Python, but ``{"replicas": true}`` and
    ``{"replicas": 1}`` are different provision requests. Integers and floats
    still compare numerically, since JSON does not distinguish them.
    """

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(
            same_value(value, right[key]) for key, value in left.items()
        )
    if isinstance(left, str) or isinstance(right, str):
        return type(left) is type(right) and left == right
    if isinstance(left, Sequence) and isinstance(right, Sequence):
        return len(left) == len(right) and all(
            same_value(a, b) for a, b in zip(left, right, strict=True)
        )
    if isinstance(left, Mapping | Sequence) or isinstance(right, Mapping | Sequence):
        return False
    return bool(left == right)


class ServiceInstance(DomainModel):
    """A provisioned instance and the release that backs it."""

    instance_id: InstanceId
    service_id: ServiceId
    plan_id: PlanId
    parameters: dict[str, Any] = Field(default_factory=dict)
    namespace: Annotated[str, Field(min_length=1)]
    release_name: Annotated[str, Field(min_length=1)]
    created_at: datetime = Field(default_factory=utc_now)

    def matches(self, other: ServiceInstance) -> bool:
        """Return whether ``other`` describes the same provision request.

        Only the fields a client controls take part; the instance id is the key
        and the namespace, release name and timestamps are derived.
        """

        return (
            self.service_id == other.service_id
            and self.plan_id == other.plan_id
            and same_value(self.parameters, other.parameters)
        )
