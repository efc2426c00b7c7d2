from __future__ import annotations

from typing import Dict, List, Protocol, Sequence

import httpx
from loguru import logger

from rundown.db.facts import FactStore
from rundown.schemas.catalog import Entity
from rundown.schemas.facts import EntityFacts
from rundown.services.catalog.client import CatalogAPIError, CatalogClient


class FactRetriever(Protocol):
    id: str

    async def handler(self, entities: Sequence[Entity]) -> List[EntityFacts]: ...


class FactRunner:
    """
    One collection pass:
    - fetch Component entities from the catalog
    - run every retriever over them
    - persist each retriever's output (latest run wins)
    """

    def __init__(self, catalog: CatalogClient, fact_store: FactStore, retrievers: Sequence[FactRetriever]) -> None:
        self.catalog = catalog
        self.fact_store = fact_store
        self.retrievers = list(retrievers)

    async def run(self) -> Dict[str, int]:
        try:
            entities = await self.catalog.get_entities("Component")
        except (CatalogAPIError, httpx.HTTPError) as e:
            logger.error("Failed to fetch entities from catalog: {}", e)
            return {}
        logger.info("Fetched {} component entities from catalog", len(entities))

        counts: Dict[str, int] = {}
        for retriever in self.retrievers:
            facts = await retriever.handler(entities)
            counts[retriever.id] = await self.fact_store.save_facts(retriever.id, facts)
            logger.info("Retriever {} stored facts for {} entities", retriever.id, counts[retriever.id])
        return counts
