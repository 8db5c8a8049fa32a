"""Chart repository access, search, download and verification."""

from .downloader import ChartDownloader, Credentials, DownloadedChart
from .exceptions import (
    ChartError,
    ChartNotFoundError,
    DownloadFailedError,
    InvalidSearchError,
    RepositoryIndexError,
    VerificationFailedError,
)
from .home import HelmHome
from .models import ChartVersion, IndexFile, Maintainer, RepositoriesFile, RepositoryEntry
from .provenance import ProvenanceVerifier, Verification
from .repositories import RepositoryManager
from .resolver import PackageResolver
from .search import SearchIndex, SearchResult, build_index, sort_by_score

__all__ = [
    "ChartDownloader",
    "ChartError",
    "ChartNotFoundError",
    "ChartVersion",
    "Credentials",
    "DownloadFailedError",
    "DownloadedChart",
    "HelmHome",
    "IndexFile",
    "InvalidSearchError",
    "Maintainer",
    "PackageResolver",
    "ProvenanceVerifier",
    "RepositoriesFile",
    "RepositoryEntry",
    "RepositoryIndexError",
    "RepositoryManager",
    "SearchIndex",
    "SearchResult",
    "Verification",
    "VerificationFailedError",
    "build_index",
    "sort_by_score",
]
