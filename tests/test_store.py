"""Tests for coursecal.store."""

import json

import pytest

from coursecal.store import DocumentStore, MemoryDocumentStore


def test_memory_store_satisfies_protocol():
    assert isinstance(MemoryDocumentStore(), DocumentStore)


@pytest.mark.asyncio
async def test_fetch_all_unknown_kind_is_empty():
    assert await MemoryDocumentStore().fetch_all("courses") == []


@pytest.mark.asyncio
async def test_records_without_id_get_one():
    store = MemoryDocumentStore({"holidays": [{"holidayName": "X"}]})
    records = await store.fetch_all("holidays")
    assert records == [{"holidayName": "X", "id": "holidays-0"}]


@pytest.mark.asyncio
async def test_fetch_by_id():
    store = MemoryDocumentStore({"courses": [{"id": "CS101", "courseName": "Intro"}]})
    assert (await store.fetch_by_id("courses", "CS101"))["courseName"] == "Intro"
    assert await store.fetch_by_id("courses", "NOPE") is None


@pytest.mark.asyncio
async def test_reads_are_copies():
    store = MemoryDocumentStore({"courses": [{"id": "CS101", "hours": []}]})
    record = await store.fetch_by_id("courses", "CS101")
    record["hours"].append({"day": "Mon"})
    assert (await store.fetch_by_id("courses", "CS101"))["hours"] == []


@pytest.mark.asyncio
async def test_bulk_upsert_overwrites_whole_record():
    store = MemoryDocumentStore({"coursesMeetings": [{"id": "M1", "title": "Old", "notes": "keep?"}]})
    await store.bulk_upsert("coursesMeetings", {"M1": {"title": "New"}, "M2": {"title": "Other"}})

    assert await store.fetch_by_id("coursesMeetings", "M1") == {"id": "M1", "title": "New"}
    assert len(await store.fetch_all("coursesMeetings")) == 2


@pytest.mark.asyncio
async def test_bulk_delete_where():
    store = MemoryDocumentStore(
        {
            "coursesMeetings": [
                {"id": "M1", "courseCode": "CS101"},
                {"id": "M2", "courseCode": "CS101"},
                {"id": "M3", "courseCode": "MA200"},
            ]
        }
    )
    assert await store.bulk_delete_where("coursesMeetings", "courseCode", "CS101") == 2
    assert [r["id"] for r in await store.fetch_all("coursesMeetings")] == ["M3"]
    assert await store.bulk_delete_where("coursesMeetings", "courseCode", "CS101") == 0


@pytest.mark.asyncio
async def test_fetch_where_filters_and_copies():
    store = MemoryDocumentStore(
        {
            "courses": [
                {"id": "CS101", "semesterCode": "S2025A"},
                {"id": "MA200", "semesterCode": "S2024B"},
                {"id": "CS102", "semesterCode": "S2025A"},
            ]
        }
    )

    records = await store.fetch_where("courses", "semesterCode", "S2025A")

    assert [r["id"] for r in records] == ["CS101", "CS102"]
    records[0]["semesterCode"] = "changed"
    assert (await store.fetch_by_id("courses", "CS101"))["semesterCode"] == "S2025A"
    assert await store.fetch_where("holidays", "id", "H1") == []


@pytest.mark.asyncio
async def test_bulk_delete_ignores_missing_ids():
    store = MemoryDocumentStore({"coursesMeetings": [{"id": "M1"}, {"id": "M2"}]})
    await store.bulk_delete("coursesMeetings", ["M1", "GONE"])
    assert [r["id"] for r in await store.fetch_all("coursesMeetings")] == ["M2"]


@pytest.mark.asyncio
async def test_json_file_round_trip(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"courses": [{"id": "CS101", "courseName": "Intro"}]}))

    store = MemoryDocumentStore.from_json_file(path)
    await store.bulk_upsert("coursesMeetings", {"M1": {"courseCode": "CS101"}})
    store.save_json_file(path)

    saved = json.loads(path.read_text())
    assert saved["coursesMeetings"] == [{"courseCode": "CS101", "id": "M1"}]
    assert saved["courses"] == [{"id": "CS101", "courseName": "Intro"}]


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_from_json_file_rejects_bad_content(tmp_path, content):
    path = tmp_path / "data.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        MemoryDocumentStore.from_json_file(path)


def test_from_json_file_missing(tmp_path):
    with pytest.raises(ValueError):
        MemoryDocumentStore.from_json_file(tmp_path / "missing.json")
