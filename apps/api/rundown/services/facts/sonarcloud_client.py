from __future__ import annotations

from typing import Any, Dict, List, Optional
import httpx

from rundown.schemas.sonarcloud import SonarCloudMeasure, parse_measures, parse_quality_gate_status

METRIC_KEYS = "bugs,code_smells,vulnerabilities,coverage"


class SonarCloudAPIError(Exception):
    pass


class SonarCloudClient:
    def __init__(
        self,
        token: str,
        base_url: str = "https://sonarcloud.io",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        # token as username with an empty password
        self.auth = httpx.BasicAuth(token, "")
        self.timeout = timeout
        self.transport = transport

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport, auth=self.auth) as client:
            resp = await client.get(f"{self.base}{path}", params=params)

        if resp.status_code >= 400:
            raise SonarCloudAPIError(f"SonarCloud API error status={resp.status_code} body={resp.text[:300]}")
        return resp.json()

    async def get_measures(self, project_key: str) -> List[SonarCloudMeasure]:
        data = await self._get(
            "/api/measures/component",
            {"component": project_key, "metricKeys": METRIC_KEYS},
        )
        return parse_measures(data)

    async def get_quality_gate_status(self, project_key: str) -> str:
        data = await self._get("/api/qualitygates/project_status", {"projectKey": project_key})
        return parse_quality_gate_status(data)
