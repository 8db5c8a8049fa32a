"""Open Service Broker lifecycle operations backed by Helm releases."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from helm_broker.charts import PackageResolver
from helm_broker.domain import InstanceId, PlanId, ServiceInstance
from helm_broker.exceptions import (
    ConflictError,
    MissingNamespaceError,
    NotFoundError,
    UnsupportedVersionError,
    UpstreamFailureError,
)
from helm_broker.persistence import InstanceRegistry, PutOutcome
from helm_broker.release import (
    DEFAULT_OPERATION_TIMEOUT,
    ReleaseManager,
    ReleaseManagerError,
    ReleaseNotFoundError,
    release_name_for,
)

from .catalog import CatalogBuilder
from .models import (
    BindRequest,
    BindResponse,
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

DEFAULT_API_VERSION = "2.13"

logger = logging.getLogger(__name__)


class HelmBroker:
    """Drives provision, update and deprovision of instances as Helm releases.

    Each instance is one release named after the instance id and installed in
    the namespace supplied by the provisioning context. The registry is the
    only shared state; the release manager is queried live for operation
    state and never mirrored locally.
    """

    def __init__(
        self,
        *,
        catalog: CatalogBuilder,
        resolver: PackageResolver,
        releases: ReleaseManager,
        registry: InstanceRegistry,
        async_mode: bool = False,
        operation_timeout: float = DEFAULT_OPERATION_TIMEOUT,
        api_version: str = DEFAULT_API_VERSION,
        release_prefix: str = "",
    ) -> None:
        self._catalog = catalog
        self._codec = catalog.codec
        self._resolver = resolver
        self._releases = releases
        self._registry = registry
        self._async_mode = async_mode
        self._timeout = operation_timeout
        self._api_version = api_version
        self._release_prefix = release_prefix
        self._in_flight: set[InstanceId] = set()

    @property
    def registry(self) -> InstanceRegistry:
        return self._registry

    def _is_async(self, accepts_incomplete: bool) -> bool:
        return accepts_incomplete and self._async_mode

    async def _require(self, instance_id: InstanceId) -> ServiceInstance:
        instance = await self._registry.get(instance_id)
        if instance is None:
            msg = f"Instance {instance_id} not found"
            raise NotFoundError(msg)
        return instance

    def validate_api_version(self, version: str | None) -> None:
        """Reject clients whose major API version differs from the broker's."""

        supported_major = self._api_version.split(".", 1)[0]
        requested = (version or "").strip()
        if not requested or requested.split(".", 1)[0] != supported_major:
            msg = (
                f"Broker API version {requested or '(none)'} is not supported; "
                f"expected {supported_major}.x"
            )
            raise UnsupportedVersionError(msg)

    async def get_catalog(self) -> CatalogResponse:
        return CatalogResponse(services=tuple(await self._catalog.build_catalog()))

    async def provision(self, request: ProvisionRequest) -> ProvisionResponse:
        reference = await self._codec.package_reference(request.service_id)
        namespace = str(request.context.get("namespace") or "").strip()
        if not namespace:
            msg = f"Provision of instance {request.instance_id} requires a namespace in context"
            raise MissingNamespaceError(msg)

        candidate = ServiceInstance(
            instance_id=request.instance_id,
            service_id=request.service_id,
            plan_id=request.plan_id,
            parameters=dict(request.parameters),
            namespace=namespace,
            release_name=release_name_for(request.instance_id, prefix=self._release_prefix),
        )
        result = await self._registry.put(candidate)
        if result.outcome is PutOutcome.IDENTICAL:
            if request.instance_id in self._in_flight:
                logger.info("instance %s is still being provisioned", request.instance_id)
                return ProvisionResponse(async_=True)
            logger.info("instance %s already provisioned", request.instance_id)
            return ProvisionResponse(exists=True)
        if result.outcome is PutOutcome.CONFLICT:
            msg = f"Instance {request.instance_id} already exists with different attributes"
            raise ConflictError(msg)

        self._in_flight.add(candidate.instance_id)
        try:
            chart_path = await self._resolver.resolve(reference)
            release = await self._releases.install(
                chart_path,
                name=candidate.release_name,
                namespace=namespace,
                values=candidate.parameters,
                timeout=self._timeout,
            )
        except Exception:
            await self._registry.delete(candidate.instance_id)
            raise
        finally:
            self._in_flight.discard(candidate.instance_id)

        logger.info(
            "provisioned instance %s as release %s/%s (%s)",
            request.instance_id,
            namespace,
            release.name,
            release.status,
        )
        return ProvisionResponse(async_=self._is_async(request.accepts_incomplete))

    async def deprovision(self, request: DeprovisionRequest) -> DeprovisionResponse:
        instance = await self._registry.get(request.instance_id)
        if instance is None:
            logger.info("instance %s is unknown; treating as deprovisioned", request.instance_id)
            return DeprovisionResponse()

        try:
            await self._releases.delete(
                instance.release_name,
                namespace=instance.namespace,
                purge=True,
                timeout=self._timeout,
            )
        except ReleaseNotFoundError:
            logger.info(
                "release %s for instance %s was already removed",
                instance.release_name,
                instance.instance_id,
            )

        await self._registry.delete(instance.instance_id)
        logger.info("deprovisioned instance %s", instance.instance_id)
        return DeprovisionResponse(async_=self._is_async(request.accepts_incomplete))

    async def update(self, request: UpdateInstanceRequest) -> UpdateInstanceResponse:
        instance = await self._require(request.instance_id)
        service_id = request.service_id or instance.service_id
        if request.plan_id is not None:
            plan_id = request.plan_id
        elif service_id == instance.service_id:
            plan_id = instance.plan_id
        else:
            plan_id = PlanId(service_id)
        parameters = (
            dict(request.parameters) if request.parameters is not None else instance.parameters
        )

        reference = await self._codec.package_reference(service_id)
        chart_path = await self._resolver.resolve(reference)

        try:
            await self._releases.history(
                instance.release_name, namespace=instance.namespace, max_entries=1
            )
        except ReleaseNotFoundError as exc:
            msg = f"Release {instance.release_name} for instance {instance.instance_id} not found"
            raise NotFoundError(msg) from exc

        try:
            await self._releases.upgrade(
                instance.release_name,
                chart_path,
                namespace=instance.namespace,
                values=parameters,
                timeout=self._timeout,
            )
        except ReleaseManagerError as exc:
            raise UpstreamFailureError(f"upgrade failed: {exc}") from exc

        updated = instance.evolve(service_id=service_id, plan_id=plan_id, parameters=parameters)
        await self._registry.replace(updated)
        logger.info("updated instance %s to %s", instance.instance_id, reference)
        return UpdateInstanceResponse(async_=self._is_async(request.accepts_incomplete))

    async def last_operation(self, request: LastOperationRequest) -> LastOperationResponse:
        instance = await self._require(request.instance_id)
        try:
            release = await self._releases.status(
                instance.release_name, namespace=instance.namespace
            )
        except ReleaseNotFoundError as exc:
            msg = f"Release {instance.release_name} for instance {instance.instance_id} not found"
            raise NotFoundError(msg) from exc
        state = map_release_status(release.status)
        description = release.description or f"release {release.name} is {release.status}"
        return LastOperationResponse(state=state, description=description)

    async def bind(self, request: BindRequest) -> BindResponse:
        instance = await self._require(request.instance_id)
        return BindResponse(credentials=dict(instance.parameters))

    async def unbind(self, request: UnbindRequest) -> UnbindResponse:
        logger.debug("unbind %s from instance %s", request.binding_id, request.instance_id)
        return UnbindResponse()

    async def instances(self) -> Sequence[ServiceInstance]:
        return await self._registry.list_all()


__all__ = ["DEFAULT_API_VERSION", "HelmBroker"]
