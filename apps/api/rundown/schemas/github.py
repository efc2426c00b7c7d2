from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _parse_timestamp(v) -> Optional[datetime]:
    if isinstance(v, datetime):
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)
    if not isinstance(v, str) or not v:
        return None
    try:
        parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _str_or_none(v) -> Optional[str]:
    return v if isinstance(v, str) and v else None


class GitHubPR(BaseModel):
    """One item of GET /repos/{owner}/{repo}/pulls. Malformed fields are treated as absent."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    number: Optional[int] = None
    commits_url: Optional[str] = None
    html_url: Optional[str] = None
    merged_at: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator("number", mode="before")
    @classmethod
    def _number(cls, v):
        return v if isinstance(v, int) and not isinstance(v, bool) else None

    @field_validator("commits_url", "html_url", mode="before")
    @classmethod
    def _urls(cls, v):
        return _str_or_none(v)

    @field_validator("merged_at", mode="before")
    @classmethod
    def _merged_at(cls, v):
        return _parse_timestamp(v)


class GitHubCommitAuthor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return _str_or_none(v)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        return _parse_timestamp(v)


class GitHubCommitDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    author: Optional[GitHubCommitAuthor] = None

    @field_validator("message", mode="before")
    @classmethod
    def _message(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator("author", mode="before")
    @classmethod
    def _author(cls, v):
        return v if isinstance(v, dict) else None


class GitHubCommit(BaseModel):
    """One item of GET {pull.commits_url}."""

    model_config = ConfigDict(extra="ignore")

    sha: Optional[str] = None
    html_url: Optional[str] = None
    commit: GitHubCommitDetail = Field(default_factory=GitHubCommitDetail)

    @field_validator("sha", "html_url", mode="before")
    @classmethod
    def _strings(cls, v):
        return _str_or_none(v)

    @field_validator("commit", mode="before")
    @classmethod
    def _commit(cls, v):
        return v if isinstance(v, dict) else {}

    @property
    def short_message(self) -> str:
        return self.commit.message.split("\n")[0]
