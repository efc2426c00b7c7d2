from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import httpx

from rundown.schemas.github import GitHubCommit, GitHubPR


class GitHubAPIError(Exception):
    pass


@dataclass
class GitHubRateLimit:
    remaining: Optional[int]
    reset_epoch: Optional[int]


class GitHubClient:
    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "ai-rundown-bot/0.1",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _rate_limit(self, resp: httpx.Response) -> GitHubRateLimit:
        def _to_int(v: Optional[str]) -> Optional[int]:
            try:
                return int(v) if v is not None else None
            except ValueError:
                return None

        remaining = _to_int(resp.headers.get("x-ratelimit-remaining"))
        reset = _to_int(resp.headers.get("x-ratelimit-reset"))
        return GitHubRateLimit(remaining=remaining, reset_epoch=reset)

    async def _get_url(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(url, headers=self._headers(), params=params)

        if resp.status_code in (403, 429):
            rl = self._rate_limit(resp)
            # no retries: a rate limited component is skipped for this run
            raise GitHubAPIError(
                f"GitHub rate limit or forbidden. status={resp.status_code} "
                f"remaining={rl.remaining} reset={rl.reset_epoch} body={resp.text[:200]}"
            )

        if resp.status_code >= 400:
            raise GitHubAPIError(f"GitHub API error status={resp.status_code} body={resp.text[:300]}")

        return resp.json()

    async def list_closed_pulls(self, owner: str, repo: str, per_page: int = 5) -> List[GitHubPR]:
        data = await self._get_url(
            f"{self.base}/repos/{owner}/{repo}/pulls",
            params={"state": "closed", "sort": "updated", "direction": "desc", "per_page": per_page},
        )
        if not isinstance(data, list):
            raise GitHubAPIError(f"Unexpected pulls payload for {owner}/{repo}: {type(data).__name__}")
        return [GitHubPR.model_validate(item) for item in data if isinstance(item, dict)]

    async def get_pull_commits(self, commits_url: str) -> List[GitHubCommit]:
        # commits_url is like: https://api.github.com/repos/{owner}/{repo}/pulls/{number}/commits
        data = await self._get_url(commits_url)
        if not isinstance(data, list):
            raise GitHubAPIError(f"Unexpected commits payload from {commits_url}: {type(data).__name__}")
        return [GitHubCommit.model_validate(item) for item in data if isinstance(item, dict)]
