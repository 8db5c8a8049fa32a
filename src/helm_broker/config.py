"""Lightweight application configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from helm_broker.domain import IdentifierStrategy

MEMORY_DATABASE_URL = "memory://"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_command(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return tuple(raw.split())


@dataclass(frozen=True)
class AppSettings:
    """Immutable configuration sourced from environment variables."""

    environment: str = "development"
    helm_home: Path = Path("~/.helm")
    helm_command: tuple[str, ...] = ("helm",)
    gpg_command: tuple[str, ...] = ("gpg",)
    kube_context: str | None = None
    kubeconfig: str | None = None
    async_mode: bool = False
    identifier_strategy: IdentifierStrategy = IdentifierStrategy.NAME
    operation_timeout: float = 300.0
    download_timeout: float = 30.0
    database_url: str = "sqlite+aiosqlite:///helm_broker.db"
    bindable: bool = True
    api_version: str = "2.13"
    release_prefix: str = ""
    log_level: str = "INFO"

    @property
    def uses_memory_registry(self) -> bool:
        return self.database_url == MEMORY_DATABASE_URL

    @classmethod
    def from_env(cls) -> AppSettings:
        strategy = os.getenv("HELM_BROKER_IDENTIFIER_STRATEGY", cls.identifier_strategy.value)
        return cls(
            environment=os.getenv("HELM_BROKER_ENV", cls.environment),
            helm_home=Path(os.getenv("HELM_HOME", str(cls.helm_home))),
            helm_command=_env_command("HELM_BROKER_HELM_BINARY", cls.helm_command),
            gpg_command=_env_command("HELM_BROKER_GPG_BINARY", cls.gpg_command),
            kube_context=os.getenv("HELM_BROKER_KUBE_CONTEXT") or None,
            kubeconfig=os.getenv("KUBECONFIG") or None,
            async_mode=_env_bool("HELM_BROKER_ASYNC", cls.async_mode),
            identifier_strategy=IdentifierStrategy(strategy.strip().lower()),
            operation_timeout=_env_float(
                "HELM_BROKER_OPERATION_TIMEOUT", cls.operation_timeout
            ),
            download_timeout=_env_float("HELM_BROKER_DOWNLOAD_TIMEOUT", cls.download_timeout),
            database_url=os.getenv("HELM_BROKER_DATABASE_URL", cls.database_url),
            bindable=_env_bool("HELM_BROKER_BINDABLE", cls.bindable),
            api_version=os.getenv("HELM_BROKER_API_VERSION", cls.api_version),
            release_prefix=os.getenv("HELM_BROKER_RELEASE_PREFIX", cls.release_prefix),
            log_level=os.getenv("HELM_BROKER_LOG_LEVEL", cls.log_level).upper(),
        )


__all__ = ["MEMORY_DATABASE_URL", "AppSettings"]
