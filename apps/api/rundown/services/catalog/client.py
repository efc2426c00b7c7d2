from __future__ import annotations

from typing import Any, Dict, List, Optional
import httpx
from loguru import logger
from pydantic import ValidationError

from rundown.schemas.catalog import Entity


class CatalogAPIError(Exception):
    pass


class CatalogClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.get(f"{self.base}{path}", headers=self._headers(), params=params)

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            raise CatalogAPIError(f"Catalog API error status={resp.status_code} body={resp.text[:300]}")
        try:
            return resp.json()
        except ValueError as e:
            raise CatalogAPIError(f"Catalog returned a non-JSON body: {resp.text[:200]}") from e

    async def get_entities(self, kind: str) -> List[Entity]:
        resp = await self._get("/entities", params={"filter": f"kind={kind.lower()}"})
        data: Any = self._json(resp)
        # /entities returns a bare list, /entities/by-query wraps it in {"items": [...]}
        if isinstance(data, dict):
            data = data.get("items") or []
        if not isinstance(data, list):
            raise CatalogAPIError(f"Unexpected catalog payload: {type(data).__name__}")

        entities: List[Entity] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                entities.append(Entity.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed catalog entity {}: {}", item.get("metadata"), e.errors()[:1])
        return entities

    async def get_entity_by_ref(self, kind: str, namespace: str, name: str) -> Optional[Entity]:
        resp = await self._get(f"/entities/by-name/{kind.lower()}/{namespace}/{name}")
        if resp.status_code == 404:
            return None
        data = self._json(resp)
        if not isinstance(data, dict):
            raise CatalogAPIError(f"Unexpected catalog payload: {type(data).__name__}")
        try:
            return Entity.model_validate(data)
        except ValidationError as e:
            raise CatalogAPIError(f"Malformed catalog entity {kind}:{namespace}/{name}") from e
