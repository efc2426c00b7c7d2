import pytest
from pymongo.errors import PyMongoError

from rundown.db.summaries import AI_SUMMARIES
from rundown.schemas.summaries import SummaryPerRepo


def s(repo, summary):
    return SummaryPerRepo(repo_name=repo, summary=summary)


async def test_upsert_keeps_one_row_with_latest_summary(summary_store, fake_db):
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "first")])
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "second")])

    rows = fake_db[AI_SUMMARIES].docs
    assert len(rows) == 1
    assert rows[0]["summary"] == "second"
    assert "created_at" in rows[0]


async def test_blank_summaries_are_not_written(summary_store, fake_db):
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "   "), s("repo2", "")])

    assert fake_db[AI_SUMMARIES].bulk_calls == 0
    assert fake_db[AI_SUMMARIES].docs == []


async def test_blank_entries_are_dropped_from_mixed_batch(summary_store, fake_db):
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "\n"), s("repo2", "ok")])

    assert fake_db[AI_SUMMARIES].bulk_calls == 1
    assert [r["repo_name"] for r in fake_db[AI_SUMMARIES].docs] == ["repo2"]


async def test_all_summaries_grouped_in_storage_order(summary_store):
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "a1")])
    await summary_store.save_summaries("sysB", "2024-05-10", [s("repo2", "b2")])
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo3", "a3")])
    await summary_store.save_summaries("sysA", "2024-05-09", [s("repo4", "yesterday")])

    result = await summary_store.get_all_summaries_for_date("2024-05-10")

    assert {k: [r.repo_name for r in v] for k, v in result.items()} == {
        "sysA": ["repo1", "repo3"],
        "sysB": ["repo2"],
    }


async def test_summaries_for_one_system(summary_store):
    await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "a1"), s("repo2", "a2")])
    await summary_store.save_summaries("sysB", "2024-05-10", [s("repo3", "b3")])

    rows = await summary_store.get_summaries_for_today("sysA", "2024-05-10")

    assert [(r.repo_name, r.summary) for r in rows] == [("repo1", "a1"), ("repo2", "a2")]


async def test_no_rows_for_unknown_date(summary_store):
    assert await summary_store.get_all_summaries_for_date("1999-01-01") == {}


async def test_write_failure_is_raised(summary_store, fake_db):
    fake_db[AI_SUMMARIES].fail_with = PyMongoError("connection refused")

    with pytest.raises(PyMongoError):
        await summary_store.save_summaries("sysA", "2024-05-10", [s("repo1", "x")])


async def test_unique_index_on_key(summary_store, fake_db):
    await summary_store.ensure_indexes()

    keys, kwargs = fake_db[AI_SUMMARIES].indexes[0]
    assert [k for k, _ in keys] == ["system", "repo_name", "date"]
    assert kwargs["unique"] is True
