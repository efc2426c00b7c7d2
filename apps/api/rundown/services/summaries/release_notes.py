"""
Release notes as shown on the dashboard.

Stored notes for the day are served when there are any; otherwise (or when the
store cannot be read) the whole pipeline runs: catalog -> group by system ->
today's commit facts -> AI summaries -> store.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

import httpx
from loguru import logger
from pymongo.errors import PyMongoError

from rundown.db.summaries import SummaryStore
from rundown.schemas.summaries import SummaryPerRepo
from rundown.services.catalog.client import CatalogAPIError, CatalogClient
from rundown.services.catalog.grouping import get_repos_by_system
from rundown.services.summaries.aggregator import FactSource, get_commit_messages_by_system
from rundown.services.summaries.generator import AIClient, generate_summaries

FAILED_TO_GENERATE = "Failed to generate AI summaries. Please try again."
ALL_SYSTEMS = "All"

SummariesBySystem = Dict[str, List[SummaryPerRepo]]


class ReleaseNotesError(Exception):
    pass


class ReleaseNotesService:
    def __init__(
        self,
        store: SummaryStore,
        catalog: CatalogClient,
        fact_source: FactSource,
        ai: Optional[AIClient],
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.fact_source = fact_source
        self.ai = ai

    async def load(self, today: str) -> SummariesBySystem:
        try:
            data = await self.store.get_all_summaries_for_date(today)
        except PyMongoError as e:
            logger.error("Failed to fetch summaries, generating new ones: {}", e)
            return await self.refresh(today)

        if not any(data.values()):
            logger.info("No stored summaries for {}, generating", today)
            return await self.refresh(today)

        return await self._with_all_systems(data)

    async def refresh(self, today: str) -> SummariesBySystem:
        try:
            result = await self._generate(today)
        except (ReleaseNotesError, CatalogAPIError, httpx.HTTPError, PyMongoError) as e:
            logger.error("Release notes generation failed: {}", e)
            raise ReleaseNotesError(FAILED_TO_GENERATE) from e
        return await self._with_all_systems(result)

    async def _generate(self, today: str) -> SummariesBySystem:
        if self.ai is None:
            raise ReleaseNotesError("Gemini token not configured")

        entities = await self.catalog.get_entities("Component")
        system_to_entity_refs = get_repos_by_system(entities)
        commit_messages = await get_commit_messages_by_system(self.fact_source, system_to_entity_refs)
        result = await generate_summaries(self.ai, commit_messages)

        for system, summaries in result.items():
            await self.store.save_summaries(system, today, summaries)
        return result

    async def _with_all_systems(self, data: SummariesBySystem) -> SummariesBySystem:
        # systems without releases still get listed
        merged = dict(data)
        try:
            systems = await self.catalog.get_entities("System")
        except (CatalogAPIError, httpx.HTTPError) as e:
            logger.warning("Could not list catalog systems: {}", e)
            return merged
        for entity in systems:
            merged.setdefault(entity.metadata.name, [])
        return merged


def filter_summaries(
    data: Mapping[str, Sequence[SummaryPerRepo]],
    system: str = ALL_SYSTEMS,
    repo_search: str = "",
) -> SummariesBySystem:
    needle = repo_search.lower()
    result: SummariesBySystem = {}
    for name in sorted(data):
        if system != ALL_SYSTEMS and name != system:
            continue
        result[name] = [r for r in data[name] if needle in r.repo_name.lower()]
    return result


def export_system(data: Mapping[str, Sequence[SummaryPerRepo]], system: str) -> str:
    return "".join(f"{r.repo_name}:\n{r.summary}\n\n" for r in data.get(system, []))


def export_filename(system: str) -> str:
    return f"{system}-summaries.txt"
