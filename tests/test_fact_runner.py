import httpx

from fakes import FakeCatalog, component
from rundown.schemas.catalog import CompoundEntityRef
from rundown.schemas.facts import EntityFacts
from rundown.services.catalog.client import CatalogAPIError
from rundown.services.facts.runner import FactRunner


class StaticRetriever:
    def __init__(self, retriever_id, facts_for):
        self.id = retriever_id
        self.facts_for = facts_for
        self.seen = []

    async def handler(self, entities):
        self.seen = [e.metadata.name for e in entities]
        return [EntityFacts(entity=e.ref(), facts=self.facts_for) for e in entities]


async def test_runs_every_retriever_and_stores_output(fact_store):
    catalog = FakeCatalog(components=[component("a"), component("b")])
    first = StaticRetriever("first", {"x": 1})
    second = StaticRetriever("second", {"y": 2})

    counts = await FactRunner(catalog, fact_store, [first, second]).run()

    assert counts == {"first": 2, "second": 2}
    assert catalog.calls == ["Component"]
    assert first.seen == ["a", "b"]
    stored = await fact_store.get_facts(CompoundEntityRef(kind="Component", name="a"), ["first", "second"])
    assert stored["first"].facts == {"x": 1}
    assert stored["second"].facts == {"y": 2}


async def test_catalog_failure_returns_no_counts(fact_store, fake_db):
    catalog = FakeCatalog(error=CatalogAPIError("catalog down"))
    retriever = StaticRetriever("first", {})

    assert await FactRunner(catalog, fact_store, [retriever]).run() == {}
    assert retriever.seen == []


async def test_catalog_transport_error_returns_no_counts(fact_store):
    catalog = FakeCatalog(error=httpx.ConnectError("refused"))
    assert await FactRunner(catalog, fact_store, [StaticRetriever("first", {})]).run() == {}
