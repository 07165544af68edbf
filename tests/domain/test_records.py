from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from presalewatch.adapters.memory import InMemoryTabularStore
from presalewatch.domain.model import FieldName, FieldValues, ProjectRecord
from presalewatch.domain.records import RecordStore
from presalewatch.domain.tables import COL_RAISED, PROJECT_HEADER, PROJECTS_TABLE

CREATED = datetime(2025, 1, 1, tzinfo=UTC)
LATER = datetime(2025, 1, 2, tzinfo=UTC)
URL = "https://presale.example"


def test_upsert_appends_new_record_with_next_id(
    records: RecordStore, memory_store: InMemoryTabularStore
) -> None:
    memory_store.tables[PROJECTS_TABLE].append(["5", "https://old.example"])

    stored = asyncio.run(records.upsert(ProjectRecord(url="https://new.example")))

    assert stored.project_id == "6"
    assert memory_store.tables[PROJECTS_TABLE][-1][:2] == ["6", "https://new.example"]


def test_upsert_updates_in_place_and_keeps_identity(
    records: RecordStore, memory_store: InMemoryTabularStore
) -> None:
    first = asyncio.run(
        records.upsert(ProjectRecord(url="https://presale.example", created_at=CREATED))
    )
    later = ProjectRecord(
        url="https://presale.example",
        values=FieldValues(current_price="0.02"),
        created_at=datetime(2030, 1, 1, tzinfo=UTC),
    )

    stored = asyncio.run(records.upsert(later))

    assert stored.project_id == first.project_id
    assert stored.created_at == CREATED
    assert len(memory_store.tables[PROJECTS_TABLE]) == 2
    fetched = asyncio.run(records.get("https://presale.example"))
    assert fetched is not None
    assert fetched.values.current_price == "0.02"


def test_get_unknown_url_returns_none(records: RecordStore) -> None:
    assert asyncio.run(records.get("https://missing.example")) is None


def test_all_records_skips_rows_without_url() -> None:
    store = InMemoryTabularStore(
        {
            PROJECTS_TABLE: [
                list(PROJECT_HEADER),
                ["1", "https://a.example"],
                ["2", ""],
                ["3", "https://b.example"],
            ]
        }
    )

    urls = [record.url for record in asyncio.run(RecordStore(store).all_records())]

    assert urls == ["https://a.example", "https://b.example"]


def test_concurrent_upserts_of_new_urls_get_distinct_ids(records: RecordStore) -> None:
    async def scenario() -> list[ProjectRecord]:
        return list(
            await asyncio.gather(
                *(records.upsert(ProjectRecord(url=f"https://p{n}.example")) for n in range(5))
            )
        )

    stored = asyncio.run(scenario())

    assert sorted(int(record.project_id or 0) for record in stored) == [1, 2, 3, 4, 5]
    assert len(records.locks) == 0


def test_ensure_table_writes_header() -> None:
    store = InMemoryTabularStore()

    asyncio.run(RecordStore(store).ensure_table())

    assert store.tables[PROJECTS_TABLE] == [list(PROJECT_HEADER)]


def test_row_with_blank_id_draws_from_the_append_sequence(
    records: RecordStore, memory_store: InMemoryTabularStore
) -> None:
    memory_store.tables[PROJECTS_TABLE].extend([["3", "https://a.example"], ["", URL]])

    async def scenario() -> list[ProjectRecord]:
        return list(
            await asyncio.gather(
                records.upsert(ProjectRecord(url=URL)),
                records.upsert(ProjectRecord(url="https://new.example")),
            )
        )

    stored = asyncio.run(scenario())

    assert sorted(record.project_id or "" for record in stored) == ["4", "5"]
    ids = [row[0] for row in memory_store.tables[PROJECTS_TABLE][1:]]
    assert ids == ["3", stored[0].project_id, stored[1].project_id]


def test_apply_keeps_values_edited_since_the_record_was_derived(
    records: RecordStore, memory_store: InMemoryTabularStore
) -> None:
    first = asyncio.run(
        records.upsert(
            ProjectRecord(
                url=URL,
                values=FieldValues(current_price="0.01", raised="1000.00"),
                override_flags=frozenset({FieldName.NEXT_PRICE}),
            )
        )
    )
    memory_store.tables[PROJECTS_TABLE][1][COL_RAISED] = "2000.00"
    derived = first.evolve(
        values=first.values.with_value(FieldName.CURRENT_PRICE, "0.02"),
        override_flags=frozenset(),
        last_automation_run_at=LATER,
    )

    stored = asyncio.run(
        records.apply_locked(
            derived,
            changed_fields=frozenset({FieldName.CURRENT_PRICE}),
            newly_flagged=frozenset({FieldName.RAISED}),
            consumed_flags=frozenset({FieldName.NEXT_PRICE}),
        )
    )

    assert stored.values == FieldValues(current_price="0.02", raised="2000.00")
    assert stored.override_flags == {FieldName.RAISED}
    assert stored.last_automation_run_at == LATER
    fetched = asyncio.run(records.get(URL))
    assert fetched is not None
    assert fetched.values == stored.values
    assert fetched.override_flags == {FieldName.RAISED}
