"""Column layouts of the project, history and site tables and their row codecs."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from presalewatch.domain.model import (
    AuxiliaryFact,
    FieldValues,
    HistorySnapshot,
    ProjectRecord,
    coerce_value,
    parse_field_name,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from presalewatch.domain.model import FieldName

log = getLogger(__name__)

PROJECTS_TABLE: Final[str] = "CryptoProjects"
HISTORY_TABLE: Final[str] = "PriceHistory"
SITES_TABLE: Final[str] = "SitesConfig"

PROJECT_HEADER: Final[tuple[str, ...]] = (
    "ID",
    "URL",
    "Current Price",
    "Next Price",
    "Listing Price",
    "Raised",
    "Custom Data",
    "Created At",
    "Updated At",
    "Manual Overrides",
    "Last Manager Edit",
    "Last Bot Run",
)
HISTORY_HEADER: Final[tuple[str, ...]] = (
    "ID",
    "Project ID",
    "URL",
    "Current Price",
    "Raised",
    "Created At",
)
SITES_HEADER: Final[tuple[str, ...]] = (
    "ID",
    "URL",
    "Selector",
    "Selectors (JSON)",
    "Skip",
    "Data Source",
    "JSON API Config (JSON)",
    "Custom Data (JSON)",
    "Wallet",
    "Notes",
)

# CryptoProjects columns
COL_ID, COL_URL = 0, 1
COL_CURRENT_PRICE, COL_NEXT_PRICE, COL_LISTING_PRICE, COL_RAISED = 2, 3, 4, 5
COL_FACTS, COL_CREATED_AT, COL_UPDATED_AT = 6, 7, 8
COL_OVERRIDES, COL_MANUAL_EDIT_AT, COL_AUTOMATION_RUN_AT = 9, 10, 11

# PriceHistory columns
HCOL_ID, HCOL_PROJECT_ID, HCOL_URL, HCOL_CURRENT_PRICE, HCOL_RAISED, HCOL_CAPTURED_AT = range(6)


def cell(row: Sequence[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index]).strip()
    return ""


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        log.warning("Ignoring unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def next_id(rows: Sequence[Sequence[str]]) -> str:
    """Return max(id) + 1 over the data rows; non-numeric ids count as 0."""

    highest = 0
    for row in rows[1:]:
        try:
            highest = max(highest, int(cell(row, 0)))
        except ValueError:
            continue
    return str(highest + 1)


def encode_flags(flags: Iterable[FieldName]) -> str:
    ordered = sorted(str(name) for name in flags)
    if not ordered:
        return ""
    return json.dumps(dict.fromkeys(ordered, True))


def decode_flags(raw: str, *, url: str = "") -> frozenset[FieldName]:
    """Decode ``{"raised": true}`` (or ``["raised"]``); unreadable cells mean no flags."""

    if not raw.strip():
        return frozenset()
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        log.warning("Ignoring unreadable override flags for %s: %r", url, raw)
        return frozenset()

    if isinstance(payload, dict):
        names = [key for key, enabled in payload.items() if enabled is True]
    elif isinstance(payload, list):
        names = [item for item in payload if isinstance(item, str)]
    else:
        log.warning("Ignoring override flags of unexpected shape for %s: %r", url, raw)
        return frozenset()

    flags: set[FieldName] = set()
    for name in names:
        field_name = parse_field_name(name)
        if field_name is None:
            log.warning("Ignoring unknown override field %r for %s", name, url)
            continue
        flags.add(field_name)
    return frozenset(flags)


def encode_facts(facts: Sequence[AuxiliaryFact]) -> str:
    if not facts:
        return ""
    payload = [
        {"label": fact.label, "data": fact.text, "success": fact.success}
        | ({"error": fact.error} if fact.error else {})
        for fact in facts
    ]
    return json.dumps(payload, ensure_ascii=False)


def decode_facts(raw: str, *, url: str = "") -> tuple[AuxiliaryFact, ...]:
    if not raw.strip():
        return ()
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        log.warning("Ignoring unreadable auxiliary facts for %s", url)
        return ()
    if not isinstance(payload, list):
        log.warning("Ignoring auxiliary facts of unexpected shape for %s", url)
        return ()

    facts: list[AuxiliaryFact] = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("label"):
            continue
        error = item.get("error")
        facts.append(
            AuxiliaryFact(
                label=str(item["label"]),
                text=str(item.get("data", "")),
                success=bool(item.get("success", True)),
                error=str(error) if error else None,
            )
        )
    return tuple(facts)


def encode_record(record: ProjectRecord) -> list[str]:
    values = record.values
    return [
        record.project_id or "",
        record.url,
        values.current_price,
        values.next_price,
        values.listing_price,
        values.raised,
        encode_facts(record.auxiliary_facts),
        format_timestamp(record.created_at),
        format_timestamp(record.updated_at),
        encode_flags(record.override_flags),
        format_timestamp(record.last_manual_edit_at),
        format_timestamp(record.last_automation_run_at),
    ]


def decode_record(row: Sequence[str]) -> ProjectRecord | None:
    url = cell(row, COL_URL)
    if not url:
        return None
    return ProjectRecord(
        project_id=cell(row, COL_ID) or None,
        url=url,
        values=FieldValues(
            current_price=coerce_value(cell(row, COL_CURRENT_PRICE)),
            next_price=coerce_value(cell(row, COL_NEXT_PRICE)),
            listing_price=coerce_value(cell(row, COL_LISTING_PRICE)),
            raised=coerce_value(cell(row, COL_RAISED)),
        ),
        auxiliary_facts=decode_facts(cell(row, COL_FACTS), url=url),
        created_at=parse_timestamp(cell(row, COL_CREATED_AT)),
        updated_at=parse_timestamp(cell(row, COL_UPDATED_AT)),
        override_flags=decode_flags(cell(row, COL_OVERRIDES), url=url),
        last_manual_edit_at=parse_timestamp(cell(row, COL_MANUAL_EDIT_AT)),
        last_automation_run_at=parse_timestamp(cell(row, COL_AUTOMATION_RUN_AT)),
    )


def encode_snapshot(snapshot: HistorySnapshot) -> list[str]:
    return [
        snapshot.history_id,
        snapshot.project_id,
        snapshot.url,
        snapshot.current_price,
        snapshot.raised,
        format_timestamp(snapshot.captured_at),
    ]


def decode_snapshot(row: Sequence[str]) -> HistorySnapshot | None:
    project_id = cell(row, HCOL_PROJECT_ID)
    captured_at = parse_timestamp(cell(row, HCOL_CAPTURED_AT))
    if not project_id:
        return None
    return HistorySnapshot(
        history_id=cell(row, HCOL_ID),
        project_id=project_id,
        url=cell(row, HCOL_URL),
        current_price=cell(row, HCOL_CURRENT_PRICE),
        raised=cell(row, HCOL_RAISED),
        captured_at=captured_at or datetime.fromtimestamp(0, UTC),
    )
