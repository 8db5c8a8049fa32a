"""HTTP download of charts and repository indexes."""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin, urlparse

import httpx

from helm_broker.exceptions import BrokerError

from .exceptions import (
    ChartNotFoundError,
    DownloadFailedError,
    RepositoryIndexError,
    VerificationFailedError,
)
from .models import IndexFile, RepositoryEntry
from .provenance import ProvenanceVerifier, Verification
from .repositories import RepositoryManager, parse_index_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Credentials:
    """Basic auth and TLS material for a chart repository."""

    username: str | None = None
    password: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    ca_file: str | None = None

    @classmethod
    def for_repository(cls, entry: RepositoryEntry) -> Credentials:
        return cls(
            username=entry.username,
            password=entry.password,
            cert_file=entry.cert_file,
            key_file=entry.key_file,
            ca_file=entry.ca_file,
        )

    def auth(self) -> httpx.BasicAuth | None:
        if self.username is None and self.password is None:
            return None
        return httpx.BasicAuth(self.username or "", self.password or "")

    def ssl_context(self) -> ssl.SSLContext | bool:
        if not (self.ca_file or self.cert_file):
            return True
        context = ssl.create_default_context(cafile=self.ca_file)
        if self.cert_file:
            context.load_cert_chain(self.cert_file, self.key_file)
        return context


@dataclass(frozen=True, slots=True)
class DownloadedChart:
    path: Path
    url: str
    verification: Verification | None = None


def is_url(reference: str) -> bool:
    return urlparse(reference).scheme in {"http", "https"}


def _absolute_chart_url(repo_url: str, chart_url: str) -> str:
    if is_url(chart_url):
        return chart_url
    return urljoin(repo_url.rstrip("/") + "/", chart_url)


class ChartDownloader:
    """Fetches chart archives into the local archive cache."""

    def __init__(
        self,
        repositories: RepositoryManager,
        *,
        verifier: ProvenanceVerifier | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._repositories = repositories
        self._verifier = verifier or ProvenanceVerifier()
        self._timeout = timeout
        self._transport = transport

    def _client(self, credentials: Credentials) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=credentials.auth(),
            verify=credentials.ssl_context(),
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get(self, url: str, credentials: Credentials) -> bytes:
        try:
            async with self._client(credentials) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                raise ChartNotFoundError(f"{url} not found") from exc
            raise DownloadFailedError(
                f"failed to fetch {url}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DownloadFailedError(f"failed to fetch {url}: {exc}") from exc

    async def fetch_index(
        self,
        repo_url: str,
        credentials: Credentials | None = None,
    ) -> IndexFile:
        index_url = _absolute_chart_url(repo_url, "index.yaml")
        content = await self._get(index_url, credentials or Credentials())
        try:
            return parse_index_bytes(content, source=index_url)
        except RepositoryIndexError as exc:
            raise DownloadFailedError(f"repository {repo_url} returned a bad index: {exc}") from exc

    async def find_chart_in_repo_url(
        self,
        repo_url: str,
        name: str,
        version: str | None = None,
        credentials: Credentials | None = None,
    ) -> str:
        """Resolve a chart in an ad-hoc repository to its absolute download URL."""

        index = await self.fetch_index(repo_url, credentials)
        chart = index.get(name, version)
        if chart is None:
            pinned = f" version {version}" if version else ""
            raise ChartNotFoundError(f"chart {name!r}{pinned} not found in {repo_url} repository")
        if not chart.urls:
            raise ChartNotFoundError(f"chart {name!r} in {repo_url} has no downloadable URLs")
        return _absolute_chart_url(repo_url, chart.urls[0])

    def resolve_chart_url(
        self,
        reference: str,
        version: str | None = None,
    ) -> tuple[str, Credentials]:
        """Resolve ``repo/chart`` against the configured repositories' cached indexes."""

        if is_url(reference):
            return reference, Credentials()

        repo_name, _, chart_name = reference.partition("/")
        if not chart_name:
            raise ChartNotFoundError(
                f"chart reference {reference!r} should be in the form repo_name/chart_name"
            )
        entry = self._repositories.repositories().get(repo_name)
        if entry is None:
            raise ChartNotFoundError(f"no repository definition for {repo_name!r}")
        try:
            index = self._repositories.load_index(repo_name)
        except RepositoryIndexError as exc:
            raise ChartNotFoundError(
                f"no cached index for repository {repo_name!r}: {exc}"
            ) from exc
        chart = index.get(chart_name, version)
        if chart is None or not chart.urls:
            pinned = f" version {version}" if version else ""
            raise ChartNotFoundError(f"chart {chart_name!r}{pinned} not found in {repo_name}")
        return _absolute_chart_url(entry.url, chart.urls[0]), Credentials.for_repository(entry)

    async def _fetch_and_verify(
        self,
        url: str,
        target: Path,
        credentials: Credentials,
        keyring: str | Path | None,
    ) -> Verification:
        try:
            prov_content = await self._get(url + ".prov", credentials)
        except ChartNotFoundError as exc:
            raise VerificationFailedError(f"no provenance file published for {url}") from exc
        target.with_name(target.name + ".prov").write_bytes(prov_content)
        return await self._verifier.verify(target, keyring)

    async def download_to(
        self,
        reference: str,
        destination: Path,
        *,
        version: str | None = None,
        credentials: Credentials | None = None,
        verify: bool = False,
        keyring: str | Path | None = None,
    ) -> DownloadedChart:
        url, repo_credentials = self.resolve_chart_url(reference, version)
        effective = credentials or repo_credentials

        destination.mkdir(parents=True, exist_ok=True)
        filename = Path(urlparse(url).path).name
        if not filename:
            raise DownloadFailedError(f"cannot derive a file name from {url}")
        target = destination / filename

        content = await self._get(url, effective)
        target.write_bytes(content)
        logger.info("downloaded chart %s to %s", url, target)

        verification: Verification | None = None
        if verify:
            try:
                verification = await self._fetch_and_verify(url, target, effective, keyring)
            except BrokerError:
                # only verified archives stay in the cache
                target.unlink(missing_ok=True)
                target.with_name(filename + ".prov").unlink(missing_ok=True)
                raise
        return DownloadedChart(path=target.resolve(), url=url, verification=verification)


__all__ = [
    "ChartDownloader",
    "Credentials",
    "DownloadedChart",
    "is_url",
]
