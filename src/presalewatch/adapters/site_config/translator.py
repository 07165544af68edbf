"""Translate site configuration rows and payloads into domain project configs."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from presalewatch.domain.errors import ProjectConfigError
from presalewatch.domain.model import (
    AuxiliaryKind,
    AuxiliarySource,
    JsonEndpoint,
    ProjectConfig,
    SourceKind,
    parse_field_name,
)
from presalewatch.domain.tables import cell

from .schema import CustomDataPayload, JsonApiPayload, SiteFileEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from presalewatch.domain.model import FieldName

log = getLogger(__name__)

# SitesConfig columns
COL_ID, COL_URL, COL_SELECTOR, COL_SELECTORS, COL_SKIP, COL_SOURCE = range(6)
COL_JSON_API, COL_CUSTOM_DATA, COL_WALLET, COL_NOTES = 6, 7, 8, 9

_SELECTORS = TypeAdapter(list[str])
_CUSTOM_DATA = TypeAdapter(list[CustomDataPayload])


def _truthy(raw: str) -> bool:
    return raw.strip().lower() in {"true", "1"}


def _source_kind(raw: str | None, url: str) -> SourceKind:
    if not raw or not raw.strip():
        return SourceKind.SCREENSHOT
    try:
        return SourceKind(raw.strip().lower())
    except ValueError as exc:
        raise ProjectConfigError(f"{url}: unknown data source {raw!r}") from exc


def translate_endpoint(payload: JsonApiPayload) -> JsonEndpoint:
    mapping: dict[FieldName, str] = {}
    for key, path in payload.data_mapping.items():
        name = parse_field_name(key)
        if name is None:
            log.debug("Ignoring mapping for unknown field %r", key)
            continue
        mapping[name] = path
    return JsonEndpoint(
        endpoint=payload.endpoint,
        method=payload.method,
        headers=dict(payload.headers),
        body=payload.body,
        data_mapping=mapping,
    )


def translate_custom_data(payload: CustomDataPayload) -> AuxiliarySource:
    return AuxiliarySource(
        kind=AuxiliaryKind(payload.source),
        label=payload.label,
        selector=payload.selector,
        json_api=translate_endpoint(payload.json_api) if payload.json_api else None,
        text=payload.text,
        url=payload.url,
    )


def parse_site_row(row: Sequence[str]) -> ProjectConfig | None:
    """Translate one ``SitesConfig`` row; rows without URL yield ``None``.

    Malformed JSON cells raise ``ProjectConfigError``.
    """

    url = cell(row, COL_URL)
    if not url:
        return None

    regions: list[str] = []
    if raw := cell(row, COL_SELECTORS):
        try:
            regions = _SELECTORS.validate_json(raw)
        except ValidationError as exc:
            raise ProjectConfigError(f"{url}: malformed selectors JSON") from exc
    elif selector := cell(row, COL_SELECTOR):
        regions = [selector]

    json_api: JsonEndpoint | None = None
    if raw := cell(row, COL_JSON_API):
        try:
            json_api = translate_endpoint(JsonApiPayload.model_validate_json(raw))
        except ValidationError as exc:
            raise ProjectConfigError(f"{url}: malformed JSON API config") from exc

    auxiliary: list[AuxiliarySource] = []
    if raw := cell(row, COL_CUSTOM_DATA):
        try:
            auxiliary = [translate_custom_data(item) for item in _CUSTOM_DATA.validate_json(raw)]
        except ValidationError as exc:
            raise ProjectConfigError(f"{url}: malformed custom data JSON") from exc

    source = _source_kind(cell(row, COL_SOURCE), url)
    notes = cell(row, COL_NOTES) or None
    return ProjectConfig(
        url=url,
        source=source,
        regions=tuple(regions),
        json_api=json_api,
        # text sources read their text from the notes column
        static_text=notes if source is SourceKind.TEXT else None,
        auxiliary=tuple(auxiliary),
        skip=_truthy(cell(row, COL_SKIP)),
        config_id=cell(row, COL_ID) or None,
        wallet=_truthy(cell(row, COL_WALLET)),
        notes=notes,
    )


def translate_file_entry(entry: SiteFileEntry) -> ProjectConfig | None:
    if not entry.url or not entry.url.strip():
        return None
    url = entry.url.strip()
    regions = entry.selectors or ([entry.selector] if entry.selector else [])
    return ProjectConfig(
        url=url,
        source=_source_kind(entry.data_source, url),
        regions=tuple(regions),
        json_api=translate_endpoint(entry.json_api) if entry.json_api else None,
        static_text=entry.text,
        auxiliary=tuple(translate_custom_data(item) for item in entry.custom_data),
        skip=entry.skip,
        config_id=entry.id,
        wallet=entry.wallet,
        notes=entry.notes,
    )


def dump_site_row(config: ProjectConfig) -> list[str]:
    """Inverse of ``parse_site_row`` used when importing a sites file into the table."""

    json_api = ""
    if config.json_api is not None:
        json_api = json.dumps(_endpoint_payload(config.json_api), ensure_ascii=False)
    custom_data = ""
    if config.auxiliary:
        custom_data = json.dumps(
            [_auxiliary_payload(source) for source in config.auxiliary],
            ensure_ascii=False,
        )
    notes = config.static_text if config.source is SourceKind.TEXT else config.notes
    return [
        config.config_id or "",
        config.url,
        config.regions[0] if len(config.regions) == 1 else "",
        json.dumps(list(config.regions)) if len(config.regions) > 1 else "",
        "true" if config.skip else "",
        str(config.source),
        json_api,
        custom_data,
        "true" if config.wallet else "",
        notes or "",
    ]


def _endpoint_payload(endpoint: JsonEndpoint) -> dict[str, object]:
    return {
        "endpoint": endpoint.endpoint,
        "method": endpoint.method,
        "headers": dict(endpoint.headers),
        "body": endpoint.body,
        "dataMapping": {str(name): path for name, path in endpoint.data_mapping.items()},
    }


def _auxiliary_payload(source: AuxiliarySource) -> dict[str, object]:
    payload: dict[str, object] = {"source": str(source.kind), "label": source.label}
    if source.selector:
        payload["selector"] = source.selector
    if source.json_api:
        payload["jsonApi"] = _endpoint_payload(source.json_api)
    if source.text:
        payload["text"] = source.text
    if source.url:
        payload["url"] = source.url
    return payload
