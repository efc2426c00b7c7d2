from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from loguru import logger

from rundown.schemas.summaries import CommitsPerRepo, SummaryPerRepo

NO_SUMMARY = "No summary returned."


class AIClient(Protocol):
    async def generate(self, prompt: str) -> Optional[str]: ...


def build_prompt(commit_messages: str) -> str:
    return f"""Summarize the following git commit messages:

{commit_messages}

Your response MUST follow the format:
New functionality
* Functionality 1
* Functionality 2
Improvements
* Improvement 1
* Improvement 2
Bug fixes
* Bug fix 1
* Bug fix 2
Breaking changes
* Breaking change 1
* Breaking change 2
Write N/A if not applicable.
Write in a concise and clear manner.
Write in a list format.
You must not add empty lines.
Only use stars for the content of each section, not the section name itself.
Write in a professional tone. Write just the summary. You must follow the format exactly. Do not add any other information.
Do not write the commit messages again. I want the summary only.
"""


async def generate_summaries(
    ai: AIClient,
    commit_messages_by_system: Mapping[str, Sequence[CommitsPerRepo]],
) -> Dict[str, List[SummaryPerRepo]]:
    """One release note per repository; calls are made one at a time."""
    summaries: Dict[str, List[SummaryPerRepo]] = {}

    for system, repos in commit_messages_by_system.items():
        summarized: List[SummaryPerRepo] = []

        for repo in repos:
            prompt = build_prompt(repo.commit_messages)
            try:
                text = await ai.generate(prompt)
            except Exception as e:
                logger.error("Error summarizing {} in {}: {}", repo.repo_name, system, e)
                continue

            summary = text if isinstance(text, str) and text.strip() else NO_SUMMARY
            summarized.append(SummaryPerRepo(repo_name=repo.repo_name, summary=summary))

        summaries[system] = summarized

    return summaries
