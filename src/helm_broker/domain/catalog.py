"""Catalog domain models exposed to broker clients."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from .base import DomainModel
from .types import PlanId, ServiceId


class Plan(DomainModel):
    """A service plan; charts expose exactly one default plan."""

    plan_id: PlanId
    name: Annotated[str, Field(min_length=1)]
    description: str
    free: bool = True
    schemas: dict[str, Any] = Field(default_factory=dict)


class CatalogEntry(DomainModel):
    """A catalog service projected from a single chart version."""

    service_id: ServiceId
    service_name: Annotated[str, Field(min_length=1)]
    description: str
    bindable: bool = False
    plans: tuple[Plan, ...]
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_osb(self) -> dict[str, Any]:
        """Render the entry in Open Service Broker catalog wire format."""

        return {
            "id": self.service_id,
            "name": self.service_name,
            "description": self.description,
            "bindable": self.bindable,
            "plans": [
                {
                    "id": plan.plan_id,
                    "name": plan.name,
                    "description": plan.description,
                    "free": plan.free,
                    "schemas": plan.schemas,
                }
                for plan in self.plans
            ],
            "metadata": self.metadata,
        }
