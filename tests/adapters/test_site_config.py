from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import pytest

from presalewatch.adapters.memory import InMemoryTabularStore
from presalewatch.adapters.site_config import (
    dump_site_row,
    import_into_store,
    load_from_file,
    load_from_store,
    parse_site_row,
)
from presalewatch.domain.errors import ProjectConfigError
from presalewatch.domain.model import AuxiliaryKind, FieldName, SourceKind
from presalewatch.domain.tables import SITES_HEADER, SITES_TABLE

if TYPE_CHECKING:
    from pathlib import Path

JSON_API_CELL = json.dumps(
    {
        "endpoint": "https://api.example/stats",
        "method": "post",
        "body": {"id": 1},
        "dataMapping": {"currentPrice": "data.price", "raised": "", "bogus": "x"},
    }
)


_COLUMNS = (
    "id",
    "url",
    "selector",
    "selectors",
    "skip",
    "source",
    "json_api",
    "custom",
    "wallet",
    "notes",
)


def _row(**cells: str) -> list[str]:
    assert len(_COLUMNS) == len(SITES_HEADER)
    return [cells.get(name, "") for name in _COLUMNS]


def test_single_selector_row() -> None:
    config = parse_site_row(_row(id="3", url="https://a.example", selector="#price", wallet="TRUE"))

    assert config is not None
    assert config.source is SourceKind.SCREENSHOT
    assert config.regions == ("#price",)
    assert config.config_id == "3"
    assert config.wallet
    assert not config.skip


def test_selectors_json_wins_over_single_selector() -> None:
    config = parse_site_row(
        _row(url="https://a.example", selector="#ignored", selectors='["#a", "#b"]', skip="1")
    )

    assert config is not None
    assert config.regions == ("#a", "#b")
    assert config.skip


def test_json_api_row() -> None:
    config = parse_site_row(_row(url="https://a.example", source="json", json_api=JSON_API_CELL))

    assert config is not None
    assert config.json_api is not None
    assert config.json_api.method == "POST"
    assert config.json_api.body == {"id": 1}
    assert config.json_api.data_mapping == {FieldName.CURRENT_PRICE: "data.price"}


def test_text_row_reads_text_from_notes() -> None:
    config = parse_site_row(_row(url="https://a.example", source="text", notes="Price $0.01"))

    assert config is not None
    assert config.static_text == "Price $0.01"


def test_custom_data_cell() -> None:
    custom = json.dumps(
        [
            {"source": "selector", "label": "Stage", "selector": ".stage"},
            {"source": "text", "label": "Vesting", "text": "6 months"},
        ]
    )

    config = parse_site_row(_row(url="https://a.example", custom=custom))

    assert config is not None
    assert [source.kind for source in config.auxiliary] == [
        AuxiliaryKind.SELECTOR,
        AuxiliaryKind.TEXT,
    ]


@pytest.mark.parametrize(
    "cells",
    [
        {"selectors": "[broken"},
        {"json_api": "{}"},
        {"custom": '[{"source": "carrier-pigeon", "label": "x"}]'},
        {"source": "rss"},
        {"source": "json"},
    ],
)
def test_malformed_rows_raise(cells: dict[str, str]) -> None:
    with pytest.raises(ProjectConfigError):
        parse_site_row(_row(url="https://a.example", **cells))


def test_row_without_url_is_ignored() -> None:
    assert parse_site_row(_row(id="9", selector="#x")) is None


def test_dump_site_row_round_trips() -> None:
    original = _row(
        id="4",
        url="https://a.example",
        selectors='["#a", "#b"]',
        source="json",
        json_api=JSON_API_CELL,
        wallet="true",
    )
    config = parse_site_row(original)
    assert config is not None

    assert parse_site_row(dump_site_row(config)) == config


def test_load_from_store_rejects_bad_rows_individually() -> None:
    store = InMemoryTabularStore(
        {
            SITES_TABLE: [
                list(SITES_HEADER),
                _row(url="https://good.example"),
                _row(url="https://bad.example", source="rss"),
                _row(),
            ]
        }
    )

    loaded = asyncio.run(load_from_store(store))

    assert [config.url for config in loaded.configs] == ["https://good.example"]
    assert [url for url, _ in loaded.rejected] == ["https://bad.example"]


def test_load_from_file(tmp_path: Path) -> None:
    path = tmp_path / "sites.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "url": "https://a.example", "selector": "#price"},
                {
                    "url": "https://b.example",
                    "dataSource": "json",
                    "jsonApi": {"endpoint": "https://api.example", "dataMapping": {"raised": "r"}},
                    "customData": [{"source": "text", "label": "Note", "text": "hi"}],
                },
                {"url": "https://c.example", "dataSource": "text"},
                {"selector": "#orphan"},
            ]
        )
    )

    loaded = load_from_file(path)

    assert [config.url for config in loaded.configs] == ["https://a.example", "https://b.example"]
    assert loaded.configs[0].config_id == "1"
    assert loaded.configs[1].auxiliary[0].text == "hi"
    assert [url for url, _ in loaded.rejected] == ["https://c.example"]
    assert [config.url for config in loaded.only(["https://b.example"]).configs] == [
        "https://b.example"
    ]


def test_unreadable_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "sites.json"
    path.write_text("{not json")

    with pytest.raises(ProjectConfigError):
        load_from_file(path)
    with pytest.raises(ProjectConfigError):
        load_from_file(tmp_path / "missing.json")


def test_import_into_store_replaces_by_url_and_allocates_ids(tmp_path: Path) -> None:
    store = InMemoryTabularStore(
        {SITES_TABLE: [list(SITES_HEADER), _row(id="7", url="https://a.example", selector="#old")]}
    )
    path = tmp_path / "sites.json"
    path.write_text(
        json.dumps(
            [
                {"url": "https://a.example", "selector": "#new"},
                {"url": "https://b.example"},
            ]
        )
    )

    imported = asyncio.run(import_into_store(store, load_from_file(path).configs))

    rows = store.tables[SITES_TABLE]
    assert imported == 2
    assert [row[:3] for row in rows[1:]] == [
        ["7", "https://a.example", "#new"],
        ["8", "https://b.example", ""],
    ]
