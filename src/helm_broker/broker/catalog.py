"""Projection of repository charts into broker catalog entries."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from helm_broker.charts import (
    RepositoryManager,
    SearchIndex,
    SearchResult,
    build_index,
    sort_by_score,
)
from helm_broker.domain import CatalogEntry, IdentifierStrategy, Plan, PlanId
from helm_broker.exceptions import InvalidFormatError
from helm_broker.identifiers import IdentifierCodec, build_codec

logger = logging.getLogger(__name__)

_PARAMETERS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "additionalProperties": True,
}


def default_plan_schemas() -> dict[str, Any]:
    """Accept any object as instance parameters; charts validate their own values."""

    return {
        "service_instance": {
            "create": {"parameters": dict(_PARAMETERS_SCHEMA)},
            "update": {"parameters": dict(_PARAMETERS_SCHEMA)},
        }
    }


class CatalogBuilder:
    """Builds the catalog from the cached indexes of every configured repository.

    Nothing is cached between calls; each catalog reflects the repository
    state on disk at request time.
    """

    def __init__(
        self,
        repositories: RepositoryManager,
        *,
        strategy: IdentifierStrategy = IdentifierStrategy.NAME,
        bindable: bool = True,
    ) -> None:
        self._repositories = repositories
        self._bindable = bindable
        self._codec = build_codec(strategy, self.search_results)

    @property
    def codec(self) -> IdentifierCodec:
        return self._codec

    async def _index(self) -> SearchIndex:
        indexes = await asyncio.to_thread(self._repositories.load_indexes)
        return build_index(indexes)

    async def search_results(self) -> list[SearchResult]:
        """Every chart, newest version only, in score order."""

        index = await self._index()
        return sort_by_score(index.all())

    async def search(self, term: str, *, regexp: bool = False) -> list[SearchResult]:
        index = await self._index()
        return sort_by_score(index.search(term, regexp=regexp))

    def project(self, result: SearchResult) -> CatalogEntry:
        service_id = self._codec.service_id(result)
        service_name = self._codec.service_name(result)
        plan = Plan(
            plan_id=PlanId(service_id),
            name=service_name,
            description=f"A default plan for {service_name}",
            free=True,
            schemas=default_plan_schemas(),
        )
        return CatalogEntry(
            service_id=service_id,
            service_name=service_name,
            description=result.chart.description,
            bindable=self._bindable,
            plans=(plan,),
            metadata=result.chart.metadata(),
        )

    async def build_catalog(self) -> list[CatalogEntry]:
        entries: list[CatalogEntry] = []
        for result in await self.search_results():
            try:
                entries.append(self.project(result))
            except InvalidFormatError as exc:
                logger.error("skipping chart %s: %s", result.name, exc)
        logger.debug("catalog built with %d services", len(entries))
        return entries


__all__ = ["CatalogBuilder", "default_plan_schemas"]
