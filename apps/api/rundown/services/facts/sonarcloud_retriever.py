from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import httpx
from loguru import logger

from rundown.schemas.catalog import Entity
from rundown.schemas.facts import EntityFacts, SonarCloudFacts
from rundown.schemas.sonarcloud import SonarCloudMeasure
from rundown.services.facts.sonarcloud_client import SonarCloudAPIError, SonarCloudClient

SONARCLOUD_RETRIEVER_ID = "sonarcloud-fact-retriever"
ENABLED_ANNOTATION = "sonarcloud.io/enabled"
PROJECT_KEY_ANNOTATION = "sonarcloud.io/project-key"


def _metric_value(measures: Sequence[SonarCloudMeasure], metric: str) -> Optional[str]:
    for m in measures:
        if m.metric == metric:
            return m.value
    return None


def _to_int(v: Optional[str]) -> int:
    try:
        return int(v) if v is not None else 0
    except ValueError:
        return 0


def _to_float(v: Optional[str]) -> float:
    try:
        return float(v) if v is not None else 0.0
    except ValueError:
        return 0.0


def build_sonarcloud_facts(measures: Sequence[SonarCloudMeasure], quality_gate: str) -> SonarCloudFacts:
    return SonarCloudFacts(
        bugs=_to_int(_metric_value(measures, "bugs")),
        code_smells=_to_int(_metric_value(measures, "code_smells")),
        vulnerabilities=_to_int(_metric_value(measures, "vulnerabilities")),
        code_coverage=_to_float(_metric_value(measures, "coverage")),
        quality_gate=quality_gate,
    )


def is_sonarcloud_enabled(entity: Entity) -> bool:
    return entity.annotation(ENABLED_ANNOTATION) == "true" and bool(entity.annotation(PROJECT_KEY_ANNOTATION))


class SonarCloudRetriever:
    id = SONARCLOUD_RETRIEVER_ID

    def __init__(
        self,
        token: Optional[str],
        base_url: str = "https://sonarcloud.io",
        concurrency: int = 5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url
        self.concurrency = max(1, concurrency)
        self.timeout = timeout
        self.transport = transport

    async def handler(self, entities: Sequence[Entity]) -> List[EntityFacts]:
        if not self.token:
            logger.error("SonarCloud token is not defined. Please check your configuration.")
            return []

        client = SonarCloudClient(self.token, base_url=self.base_url, timeout=self.timeout, transport=self.transport)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def collect(entity: Entity) -> Optional[EntityFacts]:
            project_key = entity.annotation(PROJECT_KEY_ANNOTATION)
            async with semaphore:
                try:
                    measures = await client.get_measures(project_key)
                    quality_gate = await client.get_quality_gate_status(project_key)
                except (SonarCloudAPIError, httpx.HTTPError) as e:
                    logger.error("Error retrieving SonarCloud facts for {}: {}", entity.metadata.name, e)
                    return None
            facts = build_sonarcloud_facts(measures, quality_gate)
            return EntityFacts(entity=entity.ref(), facts=facts.model_dump())

        enabled = [e for e in entities if e.kind.lower() == "component" and is_sonarcloud_enabled(e)]
        results = await asyncio.gather(*(collect(e) for e in enabled))
        return [r for r in results if r is not None]
