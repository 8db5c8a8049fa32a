from __future__ import annotations

import logging
from pathlib import Path

import pytest

from helm_broker.charts import HelmHome, RepositoryIndexError, RepositoryManager
from helm_broker.charts.repositories import load_repositories_file, parse_index


def test_helm_home_layout(tmp_path: Path) -> None:
    home = HelmHome.at(tmp_path)

    assert home.repository_file() == tmp_path / "repository" / "repositories.yaml"
    assert home.cache_index("stable") == tmp_path / "repository" / "cache" / "stable-index.yaml"
    assert home.archive() == tmp_path / "cache" / "archive"


def test_load_indexes_skips_corrupt_repository(
    helm_home: HelmHome, caplog: pytest.LogCaptureFixture
) -> None:
    manager = RepositoryManager(helm_home)

    with caplog.at_level(logging.WARNING):
        indexes = manager.load_indexes()

    assert [name for name, _ in indexes] == ["team"]
    assert "broken" in caplog.text


def test_index_versions_are_strings_and_newest_wins(helm_home: HelmHome) -> None:
    index = RepositoryManager(helm_home).load_index("team")

    newest = index.get("app")
    assert newest is not None
    assert newest.version == "1.0"
    assert newest.app_version == "2.4.1"
    pinned = index.get("app", "0.9.0")
    assert pinned is not None and pinned.digest.startswith("aaaa")
    assert index.get("app", "3.0.0") is None
    assert index.get("missing") is None


def test_repositories_file_entries(helm_home: HelmHome) -> None:
    repositories = RepositoryManager(helm_home).repositories()

    entry = repositories.get("team")
    assert entry is not None
    assert entry.url == "https://charts.example.com/team"
    assert repositories.get("unknown") is None


def test_missing_repositories_file(tmp_path: Path) -> None:
    with pytest.raises(RepositoryIndexError):
        load_repositories_file(tmp_path / "repositories.yaml")


def test_index_without_api_version_is_rejected() -> None:
    with pytest.raises(RepositoryIndexError):
        parse_index({"entries": {}})


def test_repository_tls_fields_accept_helm_spelling(tmp_path: Path) -> None:
    path = tmp_path / "repositories.yaml"
    path.write_text(
        "apiVersion: v1\n"
        "repositories:\n"
        "  - name: secure\n"
        "    url: https://secure.example.com\n"
        "    certFile: /etc/certs/client.crt\n"
        "    keyFile: /etc/certs/client.key\n"
        "    caFile: null\n",
        encoding="utf-8",
    )

    entry = load_repositories_file(path).get("secure")
    assert entry is not None
    assert entry.cert_file == "/etc/certs/client.crt"
    assert entry.key_file == "/etc/certs/client.key"
    assert entry.ca_file is None
