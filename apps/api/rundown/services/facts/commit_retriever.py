"""
GitHub commit message fact retriever.

For every catalog component carrying a ``github.com/project-slug`` annotation,
look at the last few closed pull requests, keep the ones merged in the trailing
window that are not dependency bumps, and record one-line commit messages.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import httpx
from loguru import logger

from rundown.schemas.catalog import Entity
from rundown.schemas.facts import CommitFacts, EntityFacts
from rundown.schemas.github import GitHubPR
from rundown.services.facts.github_client import GitHubAPIError, GitHubClient
from rundown.utils.repo_slug import parse_project_slug

COMMIT_RETRIEVER_ID = "github-commit-message-retriever"
SLUG_ANNOTATION = "github.com/project-slug"


def resolve_github_token(token: Optional[str]) -> Optional[str]:
    if not isinstance(token, str) or not token.strip():
        logger.error("GitHub token is not defined. Please check your configuration.")
        return None
    return token.strip()


def is_recent_pr(pr: GitHubPR, now: datetime, window_days: int = 7) -> bool:
    if pr.merged_at is None:
        return False
    if pr.title.strip().lower().startswith("bump"):
        return False
    return pr.merged_at >= now - timedelta(days=window_days)


async def collect_commit_facts(
    gh: GitHubClient,
    slug: str,
    now: Optional[datetime] = None,
    window_days: int = 7,
    per_page: int = 5,
) -> Optional[CommitFacts]:
    """Commit facts for one repository, or None when nothing was merged in the window."""
    now = now or datetime.now(timezone.utc)
    owner, repo = parse_project_slug(slug)

    prs = await gh.list_closed_pulls(owner, repo, per_page=per_page)
    logger.info("Fetched {} PRs for {}/{}", len(prs), owner, repo)

    recent = [pr for pr in prs if is_recent_pr(pr, now, window_days)]
    if not recent:
        return None
    recent.sort(key=lambda pr: pr.merged_at, reverse=True)
    logger.info("Found {} recent PRs for {}/{}", len(recent), owner, repo)

    messages: List[str] = []
    commit_count = 0
    for pr in recent:
        if not pr.commits_url:
            continue
        commits = await gh.get_pull_commits(pr.commits_url)
        commit_count += len(commits)
        messages.extend(c.short_message for c in commits)

    return CommitFacts(
        last_commit_message=recent[0].title,
        recent_commit_messages="\n".join(messages),
        commit_count_last_week=commit_count,
    )


class CommitMessageRetriever:
    id = COMMIT_RETRIEVER_ID

    def __init__(
        self,
        token: Optional[str],
        base_url: str = "https://api.github.com",
        concurrency: int = 5,
        window_days: int = 7,
        per_page: int = 5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url
        self.concurrency = max(1, concurrency)
        self.window_days = window_days
        self.per_page = per_page
        self.timeout = timeout
        self.transport = transport

    async def handler(self, entities: Sequence[Entity], now: Optional[datetime] = None) -> List[EntityFacts]:
        token = resolve_github_token(self.token)
        if not token:
            return []

        gh = GitHubClient(token, base_url=self.base_url, timeout=self.timeout, transport=self.transport)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def collect(entity: Entity) -> Optional[EntityFacts]:
            slug = entity.annotation(SLUG_ANNOTATION)
            if not slug:
                logger.warning("No GitHub slug annotation found for entity: {}", entity.metadata.name)
                return None

            async with semaphore:
                try:
                    facts = await collect_commit_facts(
                        gh, slug, now=now, window_days=self.window_days, per_page=self.per_page
                    )
                except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
                    logger.error("Error retrieving commit messages for {}: {}", entity.metadata.name, e)
                    return None

            if facts is None:
                return None
            return EntityFacts(entity=entity.ref(), facts=facts.model_dump())

        components = [e for e in entities if e.kind.lower() == "component"]
        results = await asyncio.gather(*(collect(e) for e in components))
        return [r for r in results if r is not None]
