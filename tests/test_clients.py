from types import SimpleNamespace

import httpx
import pytest
from google.genai.errors import ClientError

from rundown.services.catalog.client import CatalogAPIError, CatalogClient
from rundown.services.llm.gemini_chat import GeminiChatLLM, LLMRateLimitError
from rundown.services.llm.gemini_rest import GeminiAPIError, GeminiRestClient

BASE = "http://catalog.test/api/catalog"


def catalog_client(handler, token="catalog-token"):
    return CatalogClient(BASE, token=token, transport=httpx.MockTransport(handler))


async def test_catalog_lists_entities_of_kind():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"kind": "Component", "metadata": {"name": "checkout"}, "spec": {"system": "payments"}},
                "garbage",
            ],
        )

    entities = await catalog_client(handler).get_entities("Component")

    assert [(e.metadata.name, e.system) for e in entities] == [("checkout", "payments")]
    assert seen[0].url.path == "/api/catalog/entities"
    assert seen[0].url.params["filter"] == "kind=component"
    assert seen[0].headers["Authorization"] == "Bearer catalog-token"


async def test_catalog_accepts_wrapped_items():
    def handler(request):
        return httpx.Response(200, json={"items": [{"kind": "System", "metadata": {"name": "payments"}}]})

    entities = await catalog_client(handler, token=None).get_entities("System")

    assert [e.metadata.name for e in entities] == ["payments"]


async def test_catalog_error_status():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    with pytest.raises(CatalogAPIError):
        await catalog_client(handler).get_entities("Component")


async def test_gemini_rest_error_without_json_body():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    client = GeminiRestClient("key", transport=httpx.MockTransport(handler))

    with pytest.raises(GeminiAPIError) as exc:
        await client.generate_content("x")
    assert exc.value.status_code == 502
    assert exc.value.message == "bad gateway"


def test_gemini_chat_requires_api_key():
    with pytest.raises(RuntimeError):
        GeminiChatLLM(api_key=None)


async def test_catalog_skips_malformed_entities():
    def handler(request):
        return httpx.Response(
            200,
            json=[
                {"kind": "Component", "metadata": {"name": 123}, "spec": {"system": "s"}},
                {"kind": None, "metadata": {"name": "no-kind"}},
                {"kind": "Component", "metadata": {"name": "ok"}, "spec": {"system": "s"}},
            ],
        )

    entities = await catalog_client(handler).get_entities("Component")

    assert [e.metadata.name for e in entities] == ["ok"]


async def test_catalog_non_json_body():
    def handler(request):
        return httpx.Response(200, text="<html>sign in</html>")

    with pytest.raises(CatalogAPIError):
        await catalog_client(handler).get_entities("Component")


async def test_catalog_entity_by_ref():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json={"kind": "System", "metadata": {"name": "payments"}})

    client = catalog_client(handler)

    entity = await client.get_entity_by_ref("System", "default", "payments")
    assert entity.metadata.name == "payments"
    assert seen[0] == "/api/catalog/entities/by-name/system/default/payments"
    assert await client.get_entity_by_ref("System", "default", "missing") is None


def chat_llm(generate_content):
    llm = GeminiChatLLM(api_key="key")
    llm.client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    return llm


async def test_gemini_chat_returns_text():
    calls = []

    async def generate_content(model, contents):
        calls.append((model, contents))
        return SimpleNamespace(text="New functionality\n* Login")

    assert await chat_llm(generate_content).generate("prompt") == "New functionality\n* Login"
    assert calls == [("gemini-2.0-flash", "prompt")]


async def test_gemini_chat_empty_reply():
    async def generate_content(model, contents):
        return SimpleNamespace(text=None)

    assert await chat_llm(generate_content).generate("prompt") is None


async def test_gemini_chat_rate_limit():
    async def generate_content(model, contents):
        raise ClientError(429, {"error": {"code": 429, "message": "quota exceeded", "status": "RESOURCE_EXHAUSTED"}})

    with pytest.raises(LLMRateLimitError):
        await chat_llm(generate_content).generate("prompt")


async def test_gemini_chat_other_client_errors_propagate():
    async def generate_content(model, contents):
        raise ClientError(400, {"error": {"code": 400, "message": "bad request", "status": "INVALID_ARGUMENT"}})

    with pytest.raises(ClientError):
        await chat_llm(generate_content).generate("prompt")
