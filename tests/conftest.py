from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the src/ directory is importable when tests run without an install.
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from helm_broker.charts import HelmHome  # noqa: E402

REPOSITORIES_YAML = """\
apiVersion: v1
repositories:
  - name: team
    url: https://charts.example.com/team
    cache: team-index.yaml
  - name: broken
    url: https://broken.example.com
    cache: broken-index.yaml
"""

TEAM_INDEX_YAML = """\
apiVersion: v1
entries:
  app:
    - name: app
      version: 1.0
      appVersion: 2.4.1
      description: Team application
      keywords: [web, frontend]
      maintainers:
        - name: Team Platform
          email: platform@example.com
      digest: 0123456789abcdef0123456789abcdef0123456789abcdef
      urls:
        - app-1.0.tgz
    - name: app
      version: 0.9.0
      description: Team application
      digest: aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa
      urls:
        - app-0.9.0.tgz
  db:
    - name: db
      version: 2.1.0
      description: Relational database for team services
      digest: fedcba9876543210fedcba9876543210fedcba9876543210
      urls:
        - https://mirror.example.com/db-2.1.0.tgz
generated: 2024-05-01T10:00:00Z
"""


def write_helm_home(root: Path) -> HelmHome:
    home = HelmHome.at(root)
    home.cache().mkdir(parents=True, exist_ok=True)
    home.repository_file().write_text(REPOSITORIES_YAML, encoding="utf-8")
    home.cache_index("team").write_text(TEAM_INDEX_YAML, encoding="utf-8")
    home.cache_index("broken").write_text("entries: [unclosed", encoding="utf-8")
    return home


@pytest.fixture
def helm_home(tmp_path: Path) -> HelmHome:
    return write_helm_home(tmp_path / "helm")
