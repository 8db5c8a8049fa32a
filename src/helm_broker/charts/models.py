"""Models for Helm repository files and chart index entries."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from packaging.version import InvalidVersion, Version
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class _HelmDocument(BaseModel):
    """Lenient base for documents written by Helm; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, value: Any) -> Any:
        # Helm writes empty lists and maps as explicit nulls.
        if isinstance(value, dict):
            return {key: item for key, item in value.items() if item is not None}
        return value


class Maintainer(_HelmDocument):
    name: str
    email: str | None = None
    url: str | None = None


class ChartVersion(_HelmDocument):
    """A single chart version as listed in a repository ``index.yaml``."""

    name: str
    version: str
    description: str = ""
    home: str | None = None
    sources: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    maintainers: tuple[Maintainer, ...] = ()
    engine: str | None = None
    icon: str | None = None
    api_version: str | None = Field(default=None, alias="apiVersion")
    condition: str | None = None
    tags: str | None = None
    app_version: str | None = Field(default=None, alias="appVersion")
    deprecated: bool = False
    tiller_version: str | None = Field(default=None, alias="tillerVersion")
    annotations: dict[str, str] = Field(default_factory=dict)
    kube_version: str | None = Field(default=None, alias="kubeVersion")
    urls: tuple[str, ...] = ()
    created: datetime | None = None
    removed: bool = False
    digest: str | None = None

    @field_validator("version", "app_version", "kube_version", "tiller_version", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> Any:
        # Unquoted versions such as 1.0 arrive from YAML as floats.
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    def parsed_version(self) -> Version | None:
        try:
            return Version(self.version)
        except InvalidVersion:
            return None

    def metadata(self) -> dict[str, Any]:
        """Chart fields in the camelCase layout of ``Chart.yaml``."""

        return {
            "name": self.name,
            "home": self.home,
            "sources": list(self.sources),
            "version": self.version,
            "description": self.description,
            "keywords": list(self.keywords),
            "maintainers": [
                maintainer.model_dump(exclude_none=True) for maintainer in self.maintainers
            ],
            "engine": self.engine,
            "icon": self.icon,
            "apiVersion": self.api_version,
            "condition": self.condition,
            "tags": self.tags,
            "appVersion": self.app_version,
            "deprecated": self.deprecated,
            "tillerVersion": self.tiller_version,
            "annotations": dict(self.annotations),
            "kubeVersion": self.kube_version,
            "urls": list(self.urls),
            "created": self.created.isoformat() if self.created else None,
            "removed": self.removed,
            "digest": self.digest,
        }


def version_sort_key(chart: ChartVersion) -> tuple[int, Version | str]:
    """Sort key placing unparseable versions below every valid one."""

    parsed = chart.parsed_version()
    if parsed is None:
        return (0, chart.version)
    return (1, parsed)


class IndexFile(_HelmDocument):
    """A repository index: chart name to the versions it publishes."""

    api_version: str = Field(default="", alias="apiVersion")
    entries: dict[str, tuple[ChartVersion, ...]] = Field(default_factory=dict)
    generated: datetime | None = None

    def get(self, name: str, version: str | None = None) -> ChartVersion | None:
        """Return the requested version, or the newest one when unpinned."""

        versions = self.entries.get(name)
        if not versions:
            return None
        if version:
            for chart in versions:
                if chart.version == version:
                    return chart
            return None
        return max(versions, key=version_sort_key)


class RepositoryEntry(_HelmDocument):
    """A configured chart repository from ``repositories.yaml``."""

    name: str
    url: str
    cache: str | None = None
    username: str | None = None
    password: str | None = None
    cert_file: str | None = Field(
        default=None, validation_alias=AliasChoices("certFile", "cert_file")
    )
    key_file: str | None = Field(default=None, validation_alias=AliasChoices("keyFile", "key_file"))
    ca_file: str | None = Field(default=None, validation_alias=AliasChoices("caFile", "ca_file"))


class RepositoriesFile(_HelmDocument):
    api_version: str = Field(default="v1", alias="apiVersion")
    repositories: tuple[RepositoryEntry, ...] = ()

    def get(self, name: str) -> RepositoryEntry | None:
        for entry in self.repositories:
            if entry.name == name:
                return entry
        return None


__all__ = [
    "ChartVersion",
    "IndexFile",
    "Maintainer",
    "RepositoriesFile",
    "RepositoryEntry",
    "version_sort_key",
]
