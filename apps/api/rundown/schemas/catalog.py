from __future__ import annotations

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompoundEntityRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    namespace: str = "default"
    name: str

    def ref_string(self) -> str:
        # catalog convention: kind:namespace/name, kind lowercased
        return f"{self.kind.lower()}:{self.namespace}/{self.name}"


class EntityMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    namespace: Optional[str] = None
    annotations: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("annotations", mode="before")
    @classmethod
    def _annotations(cls, v):
        return v if isinstance(v, dict) else {}


class Entity(BaseModel):
    """A catalog entity as returned by the catalog REST API (only the fields we read)."""

    model_config = ConfigDict(extra="ignore")

    kind: str = "Component"
    metadata: EntityMetadata = Field(default_factory=EntityMetadata)
    spec: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v):
        return v if isinstance(v, (dict, EntityMetadata)) else {}

    @field_validator("spec", mode="before")
    @classmethod
    def _spec(cls, v):
        return v if isinstance(v, dict) else {}

    @property
    def system(self) -> Optional[str]:
        value = self.spec.get("system")
        if isinstance(value, str) and value:
            return value
        return None

    def annotation(self, key: str) -> Optional[str]:
        value = self.metadata.annotations.get(key)
        return value if isinstance(value, str) and value else None

    def ref(self) -> CompoundEntityRef:
        return CompoundEntityRef(
            kind=self.kind,
            namespace=self.metadata.namespace or "default",
            name=self.metadata.name,
        )
