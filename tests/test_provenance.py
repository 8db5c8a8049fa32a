from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from helm_broker.charts import ProvenanceVerifier, VerificationFailedError
from helm_broker.charts.provenance import parse_provenance, sha256_digest


def _provenance(archive_name: str, digest: str) -> str:
    return (
        "-----BEGIN PGP SIGNED MESSAGE-----\n"
        "Hash: SHA512\n"
        "\n"
        "apiVersion: v1\n"
        "description: Team application\n"
        "name: app\n"
        "version: 1.0.0\n"
        "\n"
        "...\n"
        "files:\n"
        f"  {archive_name}: sha256:{digest}\n"
        "-----BEGIN PGP SIGNATURE-----\n"
        "\n"
        "wsBcBAEBCgAQBQJZzRvXCRCEO7+YH8GHYgAAfTsIAAnhuYvX\n"
        "-----END PGP SIGNATURE-----\n"
    )


def _create_mock_gpg(tmp_path: Path, *, succeed: bool) -> Path:
    script = tmp_path / "mock_gpg.py"
    if succeed:
        body = (
            "sys.stderr.write('gpg: Good signature from \"Chart Signer <signer@example.com>\"\\n')\n"
            "sys.exit(0)\n"
        )
    else:
        body = "sys.stderr.write('gpg: BAD signature from \"Mallory\"\\n')\nsys.exit(1)\n"
    script.write_text("#!/usr/bin/env python3\nimport sys\n" + body, encoding="utf-8")
    script.chmod(0o755)
    return script


def _signed_archive(tmp_path: Path, *, tamper: bool = False) -> Path:
    archive = tmp_path / "app-1.0.0.tgz"
    archive.write_bytes(b"chart-archive")
    digest = sha256_digest(archive)
    if tamper:
        archive.write_bytes(b"tampered")
    archive.with_name(archive.name + ".prov").write_text(
        _provenance(archive.name, digest), encoding="utf-8"
    )
    return archive


def test_parse_provenance_reads_metadata_and_files() -> None:
    provenance = parse_provenance(_provenance("app-1.0.0.tgz", "abc123"))

    assert provenance.metadata["name"] == "app"
    assert provenance.files == {"app-1.0.0.tgz": "sha256:abc123"}


def test_parse_provenance_rejects_unsigned_text() -> None:
    with pytest.raises(VerificationFailedError):
        parse_provenance("name: app\n...\nfiles: {}\n")


def test_verify_accepts_signed_archive(tmp_path: Path) -> None:
    archive = _signed_archive(tmp_path)
    gpg = _create_mock_gpg(tmp_path, succeed=True)
    verifier = ProvenanceVerifier(gpg_command=(sys.executable, str(gpg)))

    verification = asyncio.run(verifier.verify(archive, tmp_path / "pubring.gpg"))

    assert verification.file_name == "app-1.0.0.tgz"
    assert verification.file_hash == f"sha256:{sha256_digest(archive)}"
    assert verification.signed_by == "Chart Signer <signer@example.com>"


def test_verify_rejects_digest_mismatch(tmp_path: Path) -> None:
    archive = _signed_archive(tmp_path, tamper=True)
    gpg = _create_mock_gpg(tmp_path, succeed=True)
    verifier = ProvenanceVerifier(gpg_command=(sys.executable, str(gpg)))

    with pytest.raises(VerificationFailedError, match="sha256 sum does not match"):
        asyncio.run(verifier.verify(archive, tmp_path / "pubring.gpg"))


def test_verify_rejects_bad_signature(tmp_path: Path) -> None:
    archive = _signed_archive(tmp_path)
    gpg = _create_mock_gpg(tmp_path, succeed=False)
    verifier = ProvenanceVerifier(gpg_command=(sys.executable, str(gpg)))

    with pytest.raises(VerificationFailedError, match="signature verification failed"):
        asyncio.run(verifier.verify(archive, tmp_path / "pubring.gpg"))


def test_verify_requires_keyring_and_provenance(tmp_path: Path) -> None:
    archive = tmp_path / "app-1.0.0.tgz"
    archive.write_bytes(b"chart-archive")
    verifier = ProvenanceVerifier(gpg_command=("false",))

    with pytest.raises(VerificationFailedError, match="keyring"):
        asyncio.run(verifier.verify(archive, None))
    with pytest.raises(VerificationFailedError, match="provenance file"):
        asyncio.run(verifier.verify(archive, tmp_path / "pubring.gpg"))


def test_verify_rejects_directory(tmp_path: Path) -> None:
    verifier = ProvenanceVerifier()

    with pytest.raises(VerificationFailedError, match="cannot verify a directory"):
        asyncio.run(verifier.verify(tmp_path, tmp_path / "pubring.gpg"))
