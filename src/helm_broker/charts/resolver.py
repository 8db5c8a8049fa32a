"""Resolve a chart reference to a concrete chart artifact on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from .downloader import ChartDownloader, Credentials
from .exceptions import ChartNotFoundError, VerificationFailedError
from .home import HelmHome
from .provenance import ProvenanceVerifier

logger = logging.getLogger(__name__)


class PackageResolver:
    """Locates a chart by local path, repository cache, or download.

    The first matching rule wins:

    1. an existing path (verified in place when requested);
    2. a path-shaped reference (absolute or starting with ``.``) that does not
       exist is an error, never a repository lookup;
    3. an entry already present under ``<home>/repository``;
    4. a repository download into ``<home>/cache/archive``.
    """

    def __init__(
        self,
        home: HelmHome,
        downloader: ChartDownloader,
        *,
        verifier: ProvenanceVerifier | None = None,
    ) -> None:
        self._home = home
        self._downloader = downloader
        self._verifier = verifier or ProvenanceVerifier()

    async def resolve(
        self,
        reference: str,
        *,
        repo_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        version: str | None = None,
        verify: bool = False,
        keyring: str | Path | None = None,
    ) -> Path:
        name = reference.strip()
        version = version.strip() if version else None
        if not name:
            raise ChartNotFoundError("empty chart reference")

        local = Path(name).expanduser()
        if local.exists():
            absolute = local.resolve()
            if verify:
                if absolute.is_dir():
                    raise VerificationFailedError("cannot verify a directory")
                await self._verifier.verify(absolute, keyring)
            return absolute
        if local.is_absolute() or name.startswith("."):
            raise ChartNotFoundError(f"path {name!r} not found")

        cached = self._home.repository() / name
        if cached.exists():
            return cached.resolve()

        credentials: Credentials | None = None
        if username is not None or password is not None:
            credentials = Credentials(username=username, password=password)
        if repo_url:
            name = await self._downloader.find_chart_in_repo_url(
                repo_url, name, version, credentials
            )

        downloaded = await self._downloader.download_to(
            name,
            self._home.archive(),
            version=version,
            credentials=credentials,
            verify=verify,
            keyring=keyring,
        )
        logger.debug("resolved chart %s to %s", reference, downloaded.path)
        return downloaded.path


__all__ = ["PackageResolver"]
