from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Sequence

from loguru import logger
from pymongo import ASCENDING, UpdateOne
from pymongo.errors import PyMongoError

from rundown.schemas.summaries import SummaryPerRepo

AI_SUMMARIES = "ai_summaries"


class SummaryStore:
    """
    Release notes keyed by (system, repo_name, date).
    Writes are upserts on that key: saving the same key twice leaves one
    document holding the latest summary.
    """

    def __init__(self, db) -> None:
        self.collection = db[AI_SUMMARIES]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("system", ASCENDING), ("repo_name", ASCENDING), ("date", ASCENDING)],
            unique=True,
        )
        await self.collection.create_index("date")

    async def get_summaries_for_today(self, system: str, date: str) -> List[SummaryPerRepo]:
        cursor = self.collection.find(
            {"system": system, "date": date},
            projection={"repo_name": 1, "summary": 1, "_id": 0},
        )
        rows = await cursor.to_list(length=None)
        return [SummaryPerRepo(repo_name=r["repo_name"], summary=r["summary"]) for r in rows]

    async def get_all_summaries_for_date(self, date: str) -> Dict[str, List[SummaryPerRepo]]:
        cursor = self.collection.find(
            {"date": date},
            projection={"system": 1, "repo_name": 1, "summary": 1, "_id": 0},
        )
        rows = await cursor.to_list(length=None)

        result: Dict[str, List[SummaryPerRepo]] = {}
        for r in rows:
            result.setdefault(r["system"], []).append(
                SummaryPerRepo(repo_name=r["repo_name"], summary=r["summary"])
            )
        return result

    async def save_summaries(self, system: str, date: str, summaries: Sequence[SummaryPerRepo]) -> None:
        rows = [s for s in summaries if s.summary and s.summary.strip()]
        if not rows:
            logger.debug("No non-empty summaries to save for system={} date={}", system, date)
            return

        now = datetime.now(timezone.utc)
        ops = [
            UpdateOne(
                {"system": system, "repo_name": s.repo_name, "date": date},
                {
                    "$set": {"summary": s.summary, "updated_at": now},
                    "$setOnInsert": {"created_at": now},
                },
                upsert=True,
            )
            for s in rows
        ]

        try:
            await self.collection.bulk_write(ops, ordered=False)
        except PyMongoError as e:
            logger.error("Failed to upsert summaries for system={} date={}: {}", system, date, e)
            raise
