"""Shared type aliases for the domain layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NewType

InstanceId = NewType("InstanceId", str)
ServiceId = NewType("ServiceId", str)
PlanId = NewType("PlanId", str)
PackageReference = NewType("PackageReference", str)
JsonMapping = Mapping[str, Any]

__all__ = [
    "InstanceId",
    "JsonMapping",
    "PackageReference",
    "PlanId",
    "ServiceId",
]
