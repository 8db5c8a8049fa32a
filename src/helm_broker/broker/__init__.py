"""Broker lifecycle controller, catalog and protocol payloads."""

from .catalog import CatalogBuilder, default_plan_schemas
from .controller import DEFAULT_API_VERSION, HelmBroker
from .models import (
    BindRequest,
    BindResponse,
    BrokerMessage,
    CatalogResponse,
    DeprovisionRequest,
    DeprovisionResponse,
    LastOperationRequest,
    LastOperationResponse,
    ProvisionRequest,
    ProvisionResponse,
    UnbindRequest,
    UnbindResponse,
    UpdateInstanceRequest,
    UpdateInstanceResponse,
)
from .status import map_release_status

__all__ = [
    "DEFAULT_API_VERSION",
    "BindRequest",
    "BindResponse",
    "BrokerMessage",
    "CatalogBuilder",
    "CatalogResponse",
    "DeprovisionRequest",
    "DeprovisionResponse",
    "HelmBroker",
    "LastOperationRequest",
    "LastOperationResponse",
    "ProvisionRequest",
    "ProvisionResponse",
    "UnbindRequest",
    "UnbindResponse",
    "UpdateInstanceRequest",
    "UpdateInstanceResponse",
    "default_plan_schemas",
    "map_release_status",
]
