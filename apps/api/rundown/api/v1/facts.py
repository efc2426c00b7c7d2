from fastapi import APIRouter, Depends

from rundown.api.deps import get_fact_runner, get_fact_store
from rundown.db.facts import FactStore
from rundown.schemas.catalog import CompoundEntityRef
from rundown.services.facts.commit_retriever import COMMIT_RETRIEVER_ID
from rundown.services.facts.runner import FactRunner
from rundown.services.facts.sonarcloud_retriever import SONARCLOUD_RETRIEVER_ID

router = APIRouter(tags=["facts"])

RETRIEVER_IDS = [COMMIT_RETRIEVER_ID, SONARCLOUD_RETRIEVER_ID]


@router.post("/facts/collect")
async def collect_facts(runner: FactRunner = Depends(get_fact_runner)):
    counts = await runner.run()
    return {"collected": counts}


@router.get("/facts/{kind}/{namespace}/{name}")
async def entity_facts(kind: str, namespace: str, name: str, store: FactStore = Depends(get_fact_store)):
    ref = CompoundEntityRef(kind=kind, namespace=namespace, name=name)
    records = await store.get_facts(ref, RETRIEVER_IDS)
    return {
        "entity": ref.ref_string(),
        "facts": {rid: r.model_dump() for rid, r in records.items()},
    }
