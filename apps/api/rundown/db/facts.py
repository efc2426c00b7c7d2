from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pymongo import ASCENDING, UpdateOne

from rundown.schemas.catalog import CompoundEntityRef
from rundown.schemas.facts import EntityFacts, FactRecord

FACTS = "facts"


class FactStore:
    """Latest facts per (entity_ref, retriever_id); each run overwrites the previous one."""

    def __init__(self, db) -> None:
        self.collection = db[FACTS]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("entity_ref", ASCENDING), ("retriever_id", ASCENDING)],
            unique=True,
        )

    async def save_facts(
        self,
        retriever_id: str,
        entity_facts: Sequence[EntityFacts],
        timestamp: Optional[datetime] = None,
    ) -> int:
        if not entity_facts:
            return 0

        ts = (timestamp or datetime.now(timezone.utc)).astimezone(timezone.utc).isoformat()
        ops = [
            UpdateOne(
                {"entity_ref": ef.entity.ref_string(), "retriever_id": retriever_id},
                {
                    "$set": {
                        "entity": ef.entity.model_dump(),
                        "facts": ef.facts,
                        "timestamp": ts,
                    }
                },
                upsert=True,
            )
            for ef in entity_facts
        ]
        await self.collection.bulk_write(ops, ordered=False)
        return len(ops)

    async def get_facts(self, entity: CompoundEntityRef, retriever_ids: List[str]) -> Dict[str, FactRecord]:
        cursor = self.collection.find(
            {"entity_ref": entity.ref_string(), "retriever_id": {"$in": list(retriever_ids)}},
            projection={"_id": 0, "entity_ref": 1, "retriever_id": 1, "facts": 1, "timestamp": 1},
        )
        rows = await cursor.to_list(length=None)
        return {r["retriever_id"]: FactRecord(**r) for r in rows}
