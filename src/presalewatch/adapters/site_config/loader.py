"""Load project configurations from the ``SitesConfig`` table or a local file."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from presalewatch.domain.errors import ProjectConfigError
from presalewatch.domain.tables import SITES_HEADER, SITES_TABLE, cell, next_id

from .schema import SiteFileEntry
from .translator import dump_site_row, parse_site_row, translate_file_entry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from presalewatch.domain.model import ProjectConfig
    from presalewatch.domain.ports import TabularStore

log = getLogger(__name__)

_FILE_ENTRIES = TypeAdapter(list[dict[str, object]])


@dataclass(slots=True)
class LoadedConfigs:
    """Valid project configs plus ``(source, reason)`` pairs for rejected ones."""

    configs: list[ProjectConfig] = field(default_factory=list["ProjectConfig"])
    rejected: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])

    def only(self, urls: Sequence[str]) -> LoadedConfigs:
        wanted = set(urls)
        return LoadedConfigs(
            configs=[config for config in self.configs if config.url in wanted],
            rejected=list(self.rejected),
        )


async def load_from_store(store: TabularStore) -> LoadedConfigs:
    rows = await store.read_rows(SITES_TABLE)
    loaded = LoadedConfigs()
    for number, row in enumerate(rows[1:], start=2):
        try:
            config = parse_site_row(row)
        except ProjectConfigError as exc:
            log.error("Skipping %s row %d: %s", SITES_TABLE, number, exc)  # noqa: TRY400
            loaded.rejected.append((cell(row, 1) or f"row {number}", str(exc)))
            continue
        if config is not None:
            loaded.configs.append(config)
    log.info("Loaded %d project config(s) from %s", len(loaded.configs), SITES_TABLE)
    return loaded


def load_from_file(path: Path) -> LoadedConfigs:
    """Read a JSON list of site objects; each invalid entry is rejected on its own."""

    try:
        entries = _FILE_ENTRIES.validate_json(path.read_bytes())
    except (OSError, ValidationError) as exc:
        raise ProjectConfigError(f"Cannot read sites file {path}: {exc}") from exc

    loaded = LoadedConfigs()
    for position, raw in enumerate(entries):
        label = str(raw.get("url") or f"entry {position}")
        try:
            config = translate_file_entry(SiteFileEntry.model_validate(raw))
        except (ValidationError, ProjectConfigError) as exc:
            log.error("Skipping %s in %s: %s", label, path, exc)  # noqa: TRY400
            loaded.rejected.append((label, str(exc)))
            continue
        if config is not None:
            loaded.configs.append(config)
    log.info("Loaded %d project config(s) from %s", len(loaded.configs), path)
    return loaded


async def import_into_store(store: TabularStore, configs: Sequence[ProjectConfig]) -> int:
    """Write ``configs`` into the ``SitesConfig`` table, replacing rows with the same URL."""

    await store.ensure_table(SITES_TABLE, SITES_HEADER)
    rows = await store.read_rows(SITES_TABLE)
    index_by_url = {cell(row, 1): index for index, row in enumerate(rows) if index > 0}
    next_number = int(next_id(rows))
    appended: list[list[str]] = []
    for config in configs:
        row = dump_site_row(config)
        index = index_by_url.get(config.url)
        if index is not None:
            row[0] = row[0] or cell(rows[index], 0)
            await store.write_rows(SITES_TABLE, index, [row])
            continue
        row[0] = row[0] or str(next_number)
        next_number += 1
        appended.append(row)
    if appended:
        await store.append_rows(SITES_TABLE, appended)
    log.info("Imported %d site config(s) into %s", len(configs), SITES_TABLE)
    return len(configs)
