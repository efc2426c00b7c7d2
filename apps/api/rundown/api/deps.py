from __future__ import annotations

from typing import Optional
from fastapi import Depends, Request

from rundown.core.config import Settings
from rundown.db.facts import FactStore
from rundown.db.mongo import get_db
from rundown.db.summaries import SummaryStore
from rundown.services.catalog.client import CatalogClient
from rundown.services.checks.sonarcloud_checks import SonarThresholds
from rundown.services.facts.commit_retriever import CommitMessageRetriever
from rundown.services.facts.runner import FactRunner
from rundown.services.facts.sonarcloud_retriever import SonarCloudRetriever
from rundown.services.llm.gemini_chat import GeminiChatLLM
from rundown.services.llm.gemini_rest import GeminiRestClient
from rundown.services.summaries.generator import AIClient
from rundown.services.summaries.release_notes import ReleaseNotesService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_summary_store() -> SummaryStore:
    return SummaryStore(get_db())


def get_fact_store() -> FactStore:
    return FactStore(get_db())


def get_catalog_client(settings: Settings = Depends(get_settings)) -> CatalogClient:
    return CatalogClient(
        settings.CATALOG_BASE_URL,
        token=settings.CATALOG_TOKEN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def get_ai_client(settings: Settings = Depends(get_settings)) -> Optional[AIClient]:
    if not settings.GEMINI_API_KEY:
        return None
    return GeminiChatLLM(api_key=settings.GEMINI_API_KEY, model=settings.GEMINI_CHAT_MODEL)


def get_gemini_rest_client(settings: Settings = Depends(get_settings)) -> Optional[GeminiRestClient]:
    if not settings.GEMINI_API_KEY:
        return None
    return GeminiRestClient(
        settings.GEMINI_API_KEY,
        model=settings.GEMINI_CHAT_MODEL,
        base_url=settings.GEMINI_BASE_URL,
    )


def get_release_notes_service(
    store: SummaryStore = Depends(get_summary_store),
    catalog: CatalogClient = Depends(get_catalog_client),
    fact_store: FactStore = Depends(get_fact_store),
    ai: Optional[AIClient] = Depends(get_ai_client),
) -> ReleaseNotesService:
    return ReleaseNotesService(store=store, catalog=catalog, fact_source=fact_store, ai=ai)


def get_fact_runner(
    settings: Settings = Depends(get_settings),
    catalog: CatalogClient = Depends(get_catalog_client),
    fact_store: FactStore = Depends(get_fact_store),
) -> FactRunner:
    retrievers = [
        CommitMessageRetriever(
            settings.GITHUB_TOKEN,
            base_url=settings.GITHUB_BASE_URL,
            concurrency=settings.FACT_CONCURRENCY,
            window_days=settings.COMMIT_WINDOW_DAYS,
            per_page=settings.PR_PAGE_SIZE,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ),
        SonarCloudRetriever(
            settings.SONARCLOUD_TOKEN,
            base_url=settings.SONARCLOUD_BASE_URL,
            concurrency=settings.FACT_CONCURRENCY,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ),
    ]
    return FactRunner(catalog=catalog, fact_store=fact_store, retrievers=retrievers)


def get_sonar_thresholds(settings: Settings = Depends(get_settings)) -> SonarThresholds:
    return SonarThresholds(
        max_bugs=settings.SONAR_MAX_BUGS,
        max_code_smells=settings.SONAR_MAX_CODE_SMELLS,
        max_vulnerabilities=settings.SONAR_MAX_VULNERABILITIES,
        min_coverage=settings.SONAR_MIN_COVERAGE,
    )
