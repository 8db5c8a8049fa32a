"""Service container wiring application components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from helm_broker.broker import CatalogBuilder, HelmBroker
from helm_broker.charts import (
    ChartDownloader,
    HelmHome,
    PackageResolver,
    ProvenanceVerifier,
    RepositoryManager,
)
from helm_broker.config import AppSettings
from helm_broker.identifiers import IdentifierCodec
from helm_broker.persistence import InMemoryInstanceRegistry, InstanceRegistry
from helm_broker.persistence.sqlite import SQLiteInstanceRegistry
from helm_broker.release import HelmCliReleaseManager, ReleaseManager

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContainer:
    """Aggregates the broker and its collaborators with shared configuration."""

    settings: AppSettings
    helm_home: HelmHome
    repositories: RepositoryManager
    resolver: PackageResolver
    release_manager: ReleaseManager
    registry: InstanceRegistry
    catalog: CatalogBuilder
    broker: HelmBroker

    @property
    def codec(self) -> IdentifierCodec:
        return self.catalog.codec


def _ensure_sqlite_directory(database_url: str) -> None:
    if not database_url.startswith("sqlite"):
        return
    try:
        _, path = database_url.split(":///", maxsplit=1)
    except ValueError:
        return
    db_path = Path(path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_registry(settings: AppSettings) -> InstanceRegistry:
    if settings.uses_memory_registry:
        logger.info("using in-memory instance registry; state is lost on restart")
        return InMemoryInstanceRegistry()
    _ensure_sqlite_directory(settings.database_url)
    return SQLiteInstanceRegistry.from_url(settings.database_url)


def build_container(
    settings: AppSettings | None = None,
    *,
    release_manager: ReleaseManager | None = None,
) -> ServiceContainer:
    """Construct the primary service container."""

    resolved_settings = settings or AppSettings.from_env()
    helm_home = HelmHome.at(resolved_settings.helm_home.expanduser())

    repositories = RepositoryManager(helm_home)
    verifier = ProvenanceVerifier(gpg_command=resolved_settings.gpg_command)
    downloader = ChartDownloader(
        repositories,
        verifier=verifier,
        timeout=resolved_settings.download_timeout,
    )
    resolver = PackageResolver(helm_home, downloader, verifier=verifier)
    releases = release_manager or HelmCliReleaseManager(
        helm_command=resolved_settings.helm_command,
        kube_context=resolved_settings.kube_context,
        kubeconfig=resolved_settings.kubeconfig,
    )
    registry = _build_registry(resolved_settings)
    catalog = CatalogBuilder(
        repositories,
        strategy=resolved_settings.identifier_strategy,
        bindable=resolved_settings.bindable,
    )
    broker = HelmBroker(
        catalog=catalog,
        resolver=resolver,
        releases=releases,
        registry=registry,
        async_mode=resolved_settings.async_mode,
        operation_timeout=resolved_settings.operation_timeout,
        api_version=resolved_settings.api_version,
        release_prefix=resolved_settings.release_prefix,
    )

    return ServiceContainer(
        settings=resolved_settings,
        helm_home=helm_home,
        repositories=repositories,
        resolver=resolver,
        release_manager=releases,
        registry=registry,
        catalog=catalog,
        broker=broker,
    )


__all__ = ["ServiceContainer", "build_container"]
