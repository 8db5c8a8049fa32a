"""Layout of a Helm home directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class HelmHome:
    """Resolves the well-known files below ``$HELM_HOME``."""

    root: Path

    @classmethod
    def at(cls, path: str | Path) -> HelmHome:
        return cls(Path(path).expanduser())

    def repository(self) -> Path:
        return self.root / "repository"

    def repository_file(self) -> Path:
        return self.repository() / "repositories.yaml"

    def cache(self) -> Path:
        return self.repository() / "cache"

    def cache_index(self, repo_name: str) -> Path:
        return self.cache() / f"{repo_name}-index.yaml"

    def archive(self) -> Path:
        return self.root / "cache" / "archive"


__all__ = ["HelmHome"]
