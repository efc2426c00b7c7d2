from __future__ import annotations

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator


class SonarCloudMeasure(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metric: str = ""
    value: Optional[str] = None
    bestValue: Optional[bool] = None

    @field_validator("metric", mode="before")
    @classmethod
    def _metric(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, v):
        if isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return str(v)
        return v if isinstance(v, str) else None

    @field_validator("bestValue", mode="before")
    @classmethod
    def _best(cls, v):
        return v if isinstance(v, bool) else None


def parse_measures(payload: Any) -> List[SonarCloudMeasure]:
    """Extract component.measures from /api/measures/component; anything malformed yields []."""
    if not isinstance(payload, dict):
        return []
    component = payload.get("component")
    if not isinstance(component, dict):
        return []
    measures = component.get("measures")
    if not isinstance(measures, list):
        return []
    return [SonarCloudMeasure.model_validate(m) for m in measures if isinstance(m, dict)]


def parse_quality_gate_status(payload: Any) -> str:
    """projectStatus.status from /api/qualitygates/project_status, or NONE."""
    if isinstance(payload, dict):
        status = payload.get("projectStatus")
        if isinstance(status, dict) and isinstance(status.get("status"), str):
            return status["status"]
    return "NONE"
