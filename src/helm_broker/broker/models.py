"""Request and response payloads of the broker lifecycle operations."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from helm_broker.domain import (
    CatalogEntry,
    DomainModel,
    InstanceId,
    OperationState,
    PlanId,
    ServiceId,
)


class BrokerMessage(DomainModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def to_osb(self) -> dict[str, Any]:
        """Render the payload with Open Service Broker field names."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProvisionRequest(BrokerMessage):
    instance_id: InstanceId
    service_id: ServiceId
    plan_id: PlanId
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    accepts_incomplete: bool = False


class ProvisionResponse(BrokerMessage):
    dashboard_url: str | None = None
    async_: bool = Field(default=False, alias="async")
    exists: bool = False


class DeprovisionRequest(BrokerMessage):
    instance_id: InstanceId
    service_id: ServiceId | None = None
    plan_id: PlanId | None = None
    accepts_incomplete: bool = False


class DeprovisionResponse(BrokerMessage):
    async_: bool = Field(default=False, alias="async")


class UpdateInstanceRequest(BrokerMessage):
    """An update; omitted fields keep the values recorded at provision time."""

    instance_id: InstanceId
    service_id: ServiceId | None = None
    plan_id: PlanId | None = None
    parameters: dict[str, Any] | None = None
    accepts_incomplete: bool = False


class UpdateInstanceResponse(BrokerMessage):
    async_: bool = Field(default=False, alias="async")


class LastOperationRequest(BrokerMessage):
    instance_id: InstanceId
    service_id: ServiceId | None = None
    plan_id: PlanId | None = None


class LastOperationResponse(BrokerMessage):
    state: OperationState
    description: str | None = None


class BindRequest(BrokerMessage):
    instance_id: InstanceId
    binding_id: str
    service_id: ServiceId | None = None
    plan_id: PlanId | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class BindResponse(BrokerMessage):
    credentials: dict[str, Any] = Field(default_factory=dict)


class UnbindRequest(BrokerMessage):
    instance_id: InstanceId
    binding_id: str
    service_id: ServiceId | None = None
    plan_id: PlanId | None = None


class UnbindResponse(BrokerMessage):
    pass


class CatalogResponse(BrokerMessage):
    services: tuple[CatalogEntry, ...] = ()

    def to_osb(self) -> dict[str, Any]:
        return {"services": [service.to_osb() for service in self.services]}


__all__ = [
    "BindRequest",
    "BindResponse",
    "BrokerMessage",
    "CatalogResponse",
    "DeprovisionRequest",
    "DeprovisionResponse",
    "LastOperationRequest",
    "LastOperationResponse",
    "ProvisionRequest",
    "ProvisionResponse",
    "UnbindRequest",
    "UnbindResponse",
    "UpdateInstanceRequest",
    "UpdateInstanceResponse",
]
