from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List


class CommitsPerRepo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repo_name: str = Field(..., alias="repoName")
    commit_messages: str = Field(..., alias="commitMessages")


class SummaryPerRepo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repo_name: str = Field(..., alias="repoName")
    summary: str


class SaveSummariesRequest(BaseModel):
    """
    Only system, date and the summaries array are required. Entries without a
    repo name or a string summary are dropped, not rejected.
    """

    system: str
    date: str
    summaries: List[Any]

    @field_validator("system", "date", mode="before")
    @classmethod
    def _required(cls, v):
        if not v:
            raise ValueError("must not be empty")
        return v if isinstance(v, str) else str(v)

    def valid_summaries(self) -> List[SummaryPerRepo]:
        rows: List[SummaryPerRepo] = []
        for item in self.summaries:
            if not isinstance(item, dict):
                continue
            repo_name = item.get("repoName", item.get("repo_name"))
            summary = item.get("summary")
            if isinstance(repo_name, str) and repo_name and isinstance(summary, str):
                rows.append(SummaryPerRepo(repo_name=repo_name, summary=summary))
        return rows


class ReleaseNotesResponse(BaseModel):
    date: str
    systems: Dict[str, List[SummaryPerRepo]]
