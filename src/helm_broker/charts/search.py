"""Searchable index over the charts of one or more repositories."""

from __future__ import annotations

import re
from dataclasses import dataclass

from packaging.version import Version

from .exceptions import InvalidSearchError
from .models import ChartVersion, IndexFile, version_sort_key

_SEP = "\v"
_VERSION_SEP = " "
DEFAULT_THRESHOLD = 25


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A chart matched in the index; lower scores rank higher."""

    name: str
    chart: ChartVersion
    score: int = 0


def _index_line(repo_name: str, chart: ChartVersion) -> str:
    line = _SEP.join(
        (chart.name, f"{repo_name}/{chart.name}", chart.description, " ".join(chart.keywords))
    )
    return line.lower()


def _score(position: int, line: str) -> int:
    """Score a match by the field it landed in: name 0, qualified name 1, ..."""

    field = 0
    for offset, char in enumerate(line):
        if char != _SEP:
            continue
        if position <= offset:
            return field
        field += 1
    return field


class SearchIndex:
    """Merged view of repository indexes keyed by ``repo/chart``."""

    def __init__(self) -> None:
        self._lines: dict[str, str] = {}
        self._charts: dict[str, ChartVersion] = {}

    def __len__(self) -> int:
        return len(self._charts)

    def add_repo(self, repo_name: str, index: IndexFile, *, all_versions: bool = False) -> None:
        for name, versions in index.entries.items():
            if not versions:
                continue
            ordered = sorted(versions, key=version_sort_key, reverse=True)
            qualified = f"{repo_name}/{name}"
            if not all_versions:
                self._lines[qualified] = _index_line(repo_name, ordered[0])
                self._charts[qualified] = ordered[0]
                continue
            for chart in ordered:
                key = f"{qualified}{_VERSION_SEP}{chart.version}"
                self._lines[key] = _index_line(repo_name, chart)
                self._charts[key] = chart

    def all(self) -> list[SearchResult]:
        return [
            SearchResult(name=key.split(_VERSION_SEP, 1)[0], chart=chart)
            for key, chart in self._charts.items()
        ]

    def search(
        self,
        term: str,
        *,
        threshold: int = DEFAULT_THRESHOLD,
        regexp: bool = False,
    ) -> list[SearchResult]:
        if regexp:
            try:
                pattern = re.compile(term)
            except re.error as exc:
                raise InvalidSearchError(f"invalid search expression {term!r}: {exc}") from exc
        else:
            pattern = re.compile(re.escape(term.lower()))

        results: list[SearchResult] = []
        for key, line in self._lines.items():
            match = pattern.search(line)
            if match is None:
                continue
            score = _score(match.start(), line)
            if score >= threshold:
                continue
            results.append(
                SearchResult(
                    name=key.split(_VERSION_SEP, 1)[0],
                    chart=self._charts[key],
                    score=score,
                )
            )
        return results


def _descending_version(result: SearchResult) -> tuple[int, Version | str]:
    return version_sort_key(result.chart)


def sort_by_score(results: list[SearchResult]) -> list[SearchResult]:
    """Order by score, then name, then newest version first."""

    by_version = sorted(results, key=_descending_version, reverse=True)
    return sorted(by_version, key=lambda result: (result.score, result.name))


def build_index(
    indexes: list[tuple[str, IndexFile]],
    *,
    all_versions: bool = False,
) -> SearchIndex:
    index = SearchIndex()
    for repo_name, repo_index in indexes:
        index.add_repo(repo_name, repo_index, all_versions=all_versions)
    return index


__all__ = [
    "DEFAULT_THRESHOLD",
    "SearchIndex",
    "SearchResult",
    "build_index",
    "sort_by_score",
]
