from __future__ import annotations

from typing import Any, Dict, Optional
import httpx


class GeminiAPIError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:300] or resp.reason_phrase
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
        if isinstance(body.get("message"), str):
            return body["message"]
    return resp.reason_phrase


class GeminiRestClient:
    """Raw generateContent call; the JSON response is handed back untouched."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self.timeout = timeout
        self.transport = transport

    async def generate_content(self, prompt: str) -> Dict[str, Any]:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(self.url, params={"key": self.api_key}, json=payload)

        if resp.status_code >= 400:
            raise GeminiAPIError(_error_message(resp), resp.status_code)
        return resp.json()
