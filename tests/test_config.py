from __future__ import annotations

from pathlib import Path

import pytest

from helm_broker.config import AppSettings
from helm_broker.domain import IdentifierStrategy

ENV_VARS = (
    "HELM_HOME",
    "HELM_BROKER_ENV",
    "HELM_BROKER_HELM_BINARY",
    "HELM_BROKER_ASYNC",
    "HELM_BROKER_IDENTIFIER_STRATEGY",
    "HELM_BROKER_OPERATION_TIMEOUT",
    "HELM_BROKER_DATABASE_URL",
    "HELM_BROKER_BINDABLE",
    "HELM_BROKER_LOG_LEVEL",
)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings.from_env()

    assert settings.helm_home == Path("~/.helm")
    assert settings.helm_command == ("helm",)
    assert settings.identifier_strategy is IdentifierStrategy.NAME
    assert settings.operation_timeout == 300.0
    assert settings.async_mode is False
    assert settings.bindable is True
    assert settings.api_version == "2.13"
    assert settings.uses_memory_registry is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HELM_HOME", "/srv/helm")
    monkeypatch.setenv("HELM_BROKER_HELM_BINARY", "/usr/local/bin/helm3 --debug")
    monkeypatch.setenv("HELM_BROKER_ASYNC", "yes")
    monkeypatch.setenv("HELM_BROKER_IDENTIFIER_STRATEGY", "DIGEST")
    monkeypatch.setenv("HELM_BROKER_OPERATION_TIMEOUT", "600")
    monkeypatch.setenv("HELM_BROKER_DATABASE_URL", "memory://")
    monkeypatch.setenv("HELM_BROKER_BINDABLE", "false")
    monkeypatch.setenv("HELM_BROKER_LOG_LEVEL", "debug")

    settings = AppSettings.from_env()

    assert settings.helm_home == Path("/srv/helm")
    assert settings.helm_command == ("/usr/local/bin/helm3", "--debug")
    assert settings.async_mode is True
    assert settings.identifier_strategy is IdentifierStrategy.DIGEST
    assert settings.operation_timeout == 600.0
    assert settings.uses_memory_registry is True
    assert settings.bindable is False
    assert settings.log_level == "DEBUG"


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HELM_BROKER_OPERATION_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        AppSettings.from_env()

    monkeypatch.setenv("HELM_BROKER_OPERATION_TIMEOUT", "300")
    monkeypatch.setenv("HELM_BROKER_IDENTIFIER_STRATEGY", "sha")
    with pytest.raises(ValueError):
        AppSettings.from_env()
