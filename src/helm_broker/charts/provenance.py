"""Chart provenance verification.

A provenance file (``<chart>.tgz.prov``) is a clear-signed PGP message whose
body holds the chart metadata followed by a ``files:`` mapping of archive
names to ``sha256:<hex>`` digests. Verification checks the signature with
``gpg`` against a keyring and then compares the archive's digest.
"""

from __future__ import annotations

import asyncio
import hashlib
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .exceptions import VerificationFailedError

_SIGNED_HEADER = "-----BEGIN PGP SIGNED MESSAGE-----"
_SIGNATURE_HEADER = "-----BEGIN PGP SIGNATURE-----"
_GOOD_SIGNATURE = re.compile(r'Good signature from "(?P<signer>[^"]+)"')


@dataclass(frozen=True, slots=True)
class Provenance:
    """The signed body of a provenance file."""

    metadata: dict[str, object]
    files: dict[str, str]


@dataclass(frozen=True, slots=True)
class Verification:
    """Outcome of a successful provenance check."""

    file_name: str
    file_hash: str
    signed_by: str | None = None


def sha256_digest(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for block in iter(lambda: handle.read(65536), b""):
            digest.update(block)
    return digest.hexdigest()


def parse_provenance(text: str) -> Provenance:
    """Extract metadata and file digests from a clear-signed provenance body."""

    lines = text.replace("\r\n", "\n").split("\n")
    try:
        start = lines.index(_SIGNED_HEADER)
        end = lines.index(_SIGNATURE_HEADER)
    except ValueError as exc:
        raise VerificationFailedError("provenance file is not a clear-signed message") from exc

    # Armor headers ("Hash: SHA512") run until the first blank line.
    body_start = start + 1
    while body_start < end and lines[body_start].strip():
        body_start += 1
    body = [
        line[2:] if line.startswith("- ") else line for line in lines[body_start + 1 : end]
    ]
    sections = "\n".join(body).split("\n...\n")
    if len(sections) < 2:
        raise VerificationFailedError("provenance file has no files section")

    try:
        metadata = yaml.safe_load(sections[0]) or {}
        files_doc = yaml.safe_load(sections[1]) or {}
    except yaml.YAMLError as exc:
        raise VerificationFailedError(f"malformed provenance body: {exc}") from exc
    files = files_doc.get("files") if isinstance(files_doc, dict) else None
    if not isinstance(metadata, dict) or not isinstance(files, dict):
        raise VerificationFailedError("provenance file is missing chart metadata or files")
    return Provenance(
        metadata=metadata,
        files={str(name): str(value) for name, value in files.items()},
    )


@dataclass(slots=True)
class ProvenanceVerifier:
    """Verify chart archives with ``gpg`` and the provenance digest."""

    gpg_command: Sequence[str] = ("gpg",)
    timeout: float = 60.0
    extra_args: Sequence[str] = field(default_factory=tuple)

    async def verify(self, archive: Path, keyring: str | Path | None) -> Verification:
        if archive.is_dir():
            raise VerificationFailedError("cannot verify a directory")
        if not archive.is_file():
            raise VerificationFailedError(f"chart archive {archive} does not exist")
        if not keyring:
            raise VerificationFailedError("a keyring is required to verify charts")

        prov_path = archive.with_name(archive.name + ".prov")
        if not prov_path.is_file():
            raise VerificationFailedError(f"could not find provenance file {prov_path}")

        provenance = parse_provenance(prov_path.read_text(encoding="utf-8"))
        signer = await self._check_signature(prov_path, Path(keyring))

        expected = provenance.files.get(archive.name)
        if expected is None:
            raise VerificationFailedError(
                f"provenance file does not list {archive.name}"
            )
        actual = f"sha256:{sha256_digest(archive)}"
        if expected != actual:
            raise VerificationFailedError(
                f"sha256 sum does not match for {archive.name}: {expected} != {actual}"
            )
        return Verification(file_name=archive.name, file_hash=actual, signed_by=signer)

    async def _check_signature(self, prov_path: Path, keyring: Path) -> str | None:
        command = [
            *self.gpg_command,
            "--batch",
            "--no-default-keyring",
            "--keyring",
            str(keyring),
            *self.extra_args,
            "--verify",
            str(prov_path),
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise VerificationFailedError(f"unable to run {command[0]}: {exc}") from exc
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except TimeoutError as exc:
            process.kill()
            await process.wait()
            raise VerificationFailedError("signature verification timed out") from exc

        output = (stdout + stderr).decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise VerificationFailedError(
                f"signature verification failed for {prov_path.name}: {output.strip()}"
            )
        match = _GOOD_SIGNATURE.search(output)
        return match.group("signer") if match else None


__all__ = [
    "Provenance",
    "ProvenanceVerifier",
    "Verification",
    "parse_provenance",
    "sha256_digest",
]
