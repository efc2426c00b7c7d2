from dataclasses import asdict
from fastapi import APIRouter, Depends

from rundown.api.deps import get_catalog_client, get_fact_store, get_sonar_thresholds
from rundown.db.facts import FactStore
from rundown.schemas.catalog import CompoundEntityRef
from rundown.services.catalog.client import CatalogClient
from rundown.services.checks.sonarcloud_checks import (
    SonarThresholds,
    apply_system_overrides,
    build_sonarcloud_checks,
    evaluate_checks,
    load_system_annotations,
    traffic_light,
)
from rundown.services.facts.sonarcloud_retriever import SONARCLOUD_RETRIEVER_ID

router = APIRouter(tags=["traffic-lights"])


@router.get("/traffic-lights/sonarcloud/{kind}/{namespace}/{name}")
async def sonarcloud_traffic_light(
    kind: str,
    namespace: str,
    name: str,
    store: FactStore = Depends(get_fact_store),
    catalog: CatalogClient = Depends(get_catalog_client),
    thresholds: SonarThresholds = Depends(get_sonar_thresholds),
):
    ref = CompoundEntityRef(kind=kind, namespace=namespace, name=name)
    records = await store.get_facts(ref, [SONARCLOUD_RETRIEVER_ID])
    record = records.get(SONARCLOUD_RETRIEVER_ID)
    if record is None:
        return {"entity": ref.ref_string(), "status": "gray", "timestamp": None, "checks": []}

    annotations = await load_system_annotations(catalog, ref)
    checks = apply_system_overrides(build_sonarcloud_checks(thresholds), annotations)
    results = evaluate_checks(checks, record.facts)
    return {
        "entity": ref.ref_string(),
        "status": traffic_light(results),
        "timestamp": record.timestamp,
        "checks": [asdict(r) for r in results],
    }
