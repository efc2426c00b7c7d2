from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from loguru import logger

from rundown.schemas.catalog import CompoundEntityRef
from rundown.schemas.facts import FactRecord
from rundown.schemas.summaries import CommitsPerRepo
from rundown.services.facts.commit_retriever import COMMIT_RETRIEVER_ID
from rundown.utils.dates import is_same_utc_day, today_iso


class FactSource(Protocol):
    async def get_facts(
        self, entity: CompoundEntityRef, retriever_ids: List[str]
    ) -> Optional[Mapping[str, FactRecord]]: ...


async def get_commit_messages_by_system(
    fact_source: FactSource,
    system_to_entity_refs: Mapping[str, Sequence[CompoundEntityRef]],
    now: Optional[datetime] = None,
) -> Dict[str, List[CommitsPerRepo]]:
    """
    Collect today's stored commit messages for every component, grouped by system.
    A component is left out when it has no commit facts, the messages are not a
    string, or the facts were not refreshed today (UTC). A failing lookup only
    drops that component.
    """
    today = today_iso(now)
    result: Dict[str, List[CommitsPerRepo]] = {}

    for system, entity_refs in system_to_entity_refs.items():
        all_commit_messages: List[CommitsPerRepo] = []

        for ref in entity_refs:
            try:
                facts = await fact_source.get_facts(ref, [COMMIT_RETRIEVER_ID])
            except Exception as e:
                logger.error("Failed to retrieve facts for {}: {}", ref.name, e)
                continue

            record = (facts or {}).get(COMMIT_RETRIEVER_ID)
            if record is None:
                logger.debug("No commit facts stored for {}", ref.name)
                continue

            messages = record.facts.get("recent_commit_messages")
            if not isinstance(messages, str):
                logger.debug("No commit messages found for {}", ref.name)
                continue

            if not is_same_utc_day(record.timestamp, today):
                logger.debug("Commit facts for {} are stale (timestamp={})", ref.name, record.timestamp)
                continue

            all_commit_messages.append(CommitsPerRepo(repo_name=ref.name, commit_messages=messages))

        result[system] = all_commit_messages

    return result
