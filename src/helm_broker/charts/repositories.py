"""Loading repository configuration and cached repository indexes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import RepositoryIndexError
from .home import HelmHome
from .models import IndexFile, RepositoriesFile

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise RepositoryIndexError(f"unable to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RepositoryIndexError(f"malformed YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RepositoryIndexError(f"{path} does not contain a mapping")
    return data


def parse_index(data: dict[str, Any], *, source: str = "<memory>") -> IndexFile:
    """Validate a decoded ``index.yaml`` document."""

    try:
        index = IndexFile.model_validate(data)
    except ValidationError as exc:
        raise RepositoryIndexError(f"invalid chart index {source}: {exc}") from exc
    if not index.api_version:
        raise RepositoryIndexError(f"chart index {source} has no apiVersion")
    return index


def parse_index_bytes(content: bytes, *, source: str) -> IndexFile:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise RepositoryIndexError(f"malformed YAML in {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise RepositoryIndexError(f"chart index {source} does not contain a mapping")
    return parse_index(data, source=source)


def load_index_file(path: Path) -> IndexFile:
    return parse_index(_load_yaml(path), source=str(path))


def load_repositories_file(path: Path) -> RepositoriesFile:
    if not path.exists():
        raise RepositoryIndexError(
            f"repositories file {path} not found; add a chart repository first"
        )
    try:
        return RepositoriesFile.model_validate(_load_yaml(path))
    except ValidationError as exc:
        raise RepositoryIndexError(f"invalid repositories file {path}: {exc}") from exc


class RepositoryManager:
    """Read access to the repositories configured in a Helm home."""

    def __init__(self, home: HelmHome) -> None:
        self._home = home

    @property
    def home(self) -> HelmHome:
        return self._home

    def repositories(self) -> RepositoriesFile:
        return load_repositories_file(self._home.repository_file())

    def load_indexes(self) -> list[tuple[str, IndexFile]]:
        """Load every configured repository's cached index.

        A missing or corrupt index is logged and skipped so that one bad
        repository does not hide the charts of the others.
        """

        loaded: list[tuple[str, IndexFile]] = []
        for entry in self.repositories().repositories:
            path = self._home.cache_index(entry.name)
            try:
                index = load_index_file(path)
            except RepositoryIndexError as exc:
                logger.warning("repository %r is corrupt or missing: %s", entry.name, exc)
                continue
            loaded.append((entry.name, index))
        return loaded

    def load_index(self, repo_name: str) -> IndexFile:
        return load_index_file(self._home.cache_index(repo_name))


__all__ = [
    "RepositoryManager",
    "load_index_file",
    "load_repositories_file",
    "parse_index",
    "parse_index_bytes",
]
