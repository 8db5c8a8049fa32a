"""Release manager backed by the ``helm`` command-line client."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from helm_broker.domain import Release, ReleaseStatus
from helm_broker.utils import parse_timestamp

from .base import DEFAULT_OPERATION_TIMEOUT
from .exceptions import ReleaseManagerError, ReleaseNotFoundError, is_release_not_found

logger = logging.getLogger(__name__)

# Extra wall-clock allowance on top of helm's own --timeout.
_PROCESS_GRACE_SECONDS = 30.0


@dataclass(slots=True)
class HelmResult:
    exit_code: int
    stdout: str
    stderr: str

    def error_text(self) -> str:
        text = self.stderr.strip() or self.stdout.strip()
        return text.removeprefix("Error: ")


def release_from_json(payload: Mapping[str, Any], *, namespace: str | None = None) -> Release:
    """Build a :class:`Release` from ``helm ... --output json`` release output."""

    info = payload.get("info") or {}
    metadata = (payload.get("chart") or {}).get("metadata") or {}
    chart = None
    if metadata.get("name"):
        chart = f"{metadata['name']}-{metadata.get('version', '')}".rstrip("-")
    return Release(
        name=str(payload.get("name", "")),
        namespace=payload.get("namespace") or namespace,
        revision=int(payload.get("version") or 1),
        status=ReleaseStatus.parse(info.get("status")),
        chart=chart,
        app_version=metadata.get("appVersion"),
        description=info.get("description"),
        updated_at=parse_timestamp(info.get("last_deployed")),
    )


def release_from_history(name: str, namespace: str, entry: Mapping[str, Any]) -> Release:
    return Release(
        name=name,
        namespace=namespace,
        revision=int(entry.get("revision") or 1),
        status=ReleaseStatus.parse(entry.get("status")),
        chart=entry.get("chart"),
        app_version=entry.get("app_version"),
        description=entry.get("description"),
        updated_at=parse_timestamp(entry.get("updated")),
    )


def _timeout_flag(timeout: float) -> str:
    return f"{int(timeout)}s"


@dataclass(slots=True)
class HelmCliReleaseManager:
    """Drive releases through ``helm install/upgrade/uninstall/status/history``."""

    helm_command: Sequence[str] = ("helm",)
    kube_context: str | None = None
    kubeconfig: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)

    def _global_flags(self) -> list[str]:
        flags: list[str] = []
        if self.kube_context:
            flags += ["--kube-context", self.kube_context]
        if self.kubeconfig:
            flags += ["--kubeconfig", self.kubeconfig]
        return flags

    async def _run(
        self,
        args: Sequence[str],
        *,
        timeout: float,
        stdin: bytes | None = None,
    ) -> HelmResult:
        command = [*self.helm_command, *args, *self._global_flags()]
        env = os.environ.copy()
        env.update(self.env)
        logger.debug("running %s", " ".join(command))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL if stdin is None else asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            raise ReleaseManagerError(f"unable to run {command[0]}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(stdin),
                timeout + _PROCESS_GRACE_SECONDS,
            )
        except TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ReleaseManagerError(
                f"{' '.join(args[:2])} did not finish within {timeout:.0f}s"
            ) from exc

        return HelmResult(
            exit_code=process.returncode if process.returncode is not None else 0,
            stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
            stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        )

    def _check(self, result: HelmResult, name: str) -> None:
        if result.exit_code == 0:
            return
        message = result.error_text()
        if is_release_not_found(name, message):
            raise ReleaseNotFoundError(f"release {name!r} not found")
        raise ReleaseManagerError(message or f"helm exited with status {result.exit_code}")

    @staticmethod
    def _json(result: HelmResult) -> Any:
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ReleaseManagerError(f"unexpected output from helm: {exc}") from exc

    @staticmethod
    def _values(values: Mapping[str, Any]) -> bytes:
        return yaml.safe_dump(dict(values), default_flow_style=False).encode("utf-8")

    async def install(
        self,
        chart_path: Path,
        *,
        name: str,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        result = await self._run(
            [
                "install",
                name,
                str(chart_path),
                "--namespace",
                namespace,
                "--values",
                "-",
                "--timeout",
                _timeout_flag(timeout),
                "--output",
                "json",
            ],
            timeout=timeout,
            stdin=self._values(values),
        )
        self._check(result, name)
        return release_from_json(self._json(result), namespace=namespace)

    async def upgrade(
        self,
        name: str,
        chart_path: Path,
        *,
        namespace: str,
        values: Mapping[str, Any],
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        result = await self._run(
            [
                "upgrade",
                name,
                str(chart_path),
                "--namespace",
                namespace,
                "--values",
                "-",
                "--timeout",
                _timeout_flag(timeout),
                "--output",
                "json",
            ],
            timeout=timeout,
            stdin=self._values(values),
        )
        self._check(result, name)
        return release_from_json(self._json(result), namespace=namespace)

    async def delete(
        self,
        name: str,
        *,
        namespace: str,
        purge: bool = True,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ) -> Release:
        args = ["uninstall", name, "--namespace", namespace, "--timeout", _timeout_flag(timeout)]
        if not purge:
            args.append("--keep-history")
        result = await self._run(args, timeout=timeout)
        self._check(result, name)
        return Release(
            name=name,
            namespace=namespace,
            status=ReleaseStatus.DELETED,
            description=result.stdout.strip() or None,
        )

    async def status(self, name: str, *, namespace: str) -> Release:
        result = await self._run(
            ["status", name, "--namespace", namespace, "--output", "json"],
            timeout=DEFAULT_OPERATION_TIMEOUT,
        )
        self._check(result, name)
        return release_from_json(self._json(result), namespace=namespace)

    async def history(
        self,
        name: str,
        *,
        namespace: str,
        max_entries: int = 1,
    ) -> Sequence[Release]:
        result = await self._run(
            [
                "history",
                name,
                "--namespace",
                namespace,
                "--max",
                str(max_entries),
                "--output",
                "json",
            ],
            timeout=DEFAULT_OPERATION_TIMEOUT,
        )
        self._check(result, name)
        entries = self._json(result) or []
        if not isinstance(entries, list):
            raise ReleaseManagerError("unexpected history output from helm")
        return [release_from_history(name, namespace, entry) for entry in entries]


__all__ = [
    "HelmCliReleaseManager",
    "HelmResult",
    "release_from_history",
    "release_from_json",
]
