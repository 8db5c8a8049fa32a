"""Run the operator CLI with ``python -m helm_broker.cli``."""

from __future__ import annotations

from .app import app


def main() -> None:  # pragma: no cover - thin wrapper
    app(prog_name="helm-broker")


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
