"""Domain layer public exports."""

from .base import DomainModel
from .catalog import CatalogEntry, Plan
from .enums import IdentifierStrategy, OperationState, ReleaseStatus
from .instance import ServiceInstance
from .release import Release
from .types import InstanceId, JsonMapping, PackageReference, PlanId, ServiceId

__all__ = [
    "CatalogEntry",
    "DomainModel",
    "IdentifierStrategy",
    "InstanceId",
    "JsonMapping",
    "OperationState",
    "PackageReference",
    "Plan",
    "PlanId",
    "Release",
    "ReleaseStatus",
    "ServiceId",
    "ServiceInstance",
]
