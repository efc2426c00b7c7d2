from __future__ import annotations

from typing import Any, Dict
from pydantic import BaseModel, Field

from rundown.schemas.catalog import CompoundEntityRef


class CommitFacts(BaseModel):
    last_commit_message: str
    recent_commit_messages: str
    commit_count_last_week: int


class SonarCloudFacts(BaseModel):
    bugs: int = 0
    code_smells: int = 0
    vulnerabilities: int = 0
    code_coverage: float = 0.0
    quality_gate: str = "NONE"


class EntityFacts(BaseModel):
    """What a retriever emits for one entity."""

    entity: CompoundEntityRef
    facts: Dict[str, Any] = Field(default_factory=dict)


class FactRecord(BaseModel):
    """Latest stored fact set for one (entity, retriever)."""

    entity_ref: str
    retriever_id: str
    facts: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str
