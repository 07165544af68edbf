"""Collection of auxiliary facts that give the extractor extra context."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.errors import FetchError, RenderError
from presalewatch.domain.model import AuxiliaryFact, AuxiliaryKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from presalewatch.domain.model import AuxiliarySource
    from presalewatch.domain.ports import JsonFetcher, Renderer

log = getLogger(__name__)

_PROMPT_HEADER = "Additional information:"


def format_document(document: object) -> str:
    if isinstance(document, dict | list):
        return json.dumps(document, indent=2, ensure_ascii=False)
    return str(document)


async def collect_auxiliary_facts(
    url: str,
    sources: Sequence[AuxiliarySource],
    *,
    renderer: Renderer | None,
    fetcher: JsonFetcher | None,
) -> tuple[AuxiliaryFact, ...]:
    """Collect every auxiliary source in order; failures become unsuccessful facts."""

    facts: list[AuxiliaryFact] = []
    for source in sources:
        log.debug("Collecting auxiliary fact %r (%s) for %s", source.label, source.kind, url)
        try:
            text = await _collect_one(url, source, renderer=renderer, fetcher=fetcher)
        except (RenderError, FetchError, ValueError) as exc:
            log.warning("Auxiliary fact %r for %s failed: %s", source.label, url, exc)
            facts.append(AuxiliaryFact(label=source.label, success=False, error=str(exc)))
            continue
        facts.append(AuxiliaryFact(label=source.label, text=text.strip()))
    return tuple(facts)


async def _collect_one(
    url: str,
    source: AuxiliarySource,
    *,
    renderer: Renderer | None,
    fetcher: JsonFetcher | None,
) -> str:
    target = source.url or url
    match source.kind:
        case AuxiliaryKind.SELECTOR:
            if not source.selector:
                raise ValueError("selector source requires a selector")
            if renderer is None:
                raise ValueError("no renderer available for selector source")
            return await renderer.extract_text(target, source.selector)
        case AuxiliaryKind.JSON:
            if source.json_api is None:
                raise ValueError("json source requires an endpoint")
            if fetcher is None:
                raise ValueError("no JSON fetcher available for json source")
            return format_document(await fetcher.fetch(source.json_api))
        case AuxiliaryKind.TEXT:
            if not source.text or not source.text.strip():
                raise ValueError("text source requires text")
            return source.text


def format_facts_for_prompt(facts: Sequence[AuxiliaryFact]) -> str | None:
    """Render successful, non-empty facts as labelled context; ``None`` when there are none."""

    usable = [fact for fact in facts if fact.success and fact.text.strip()]
    if not usable:
        return None
    blocks = [f"{fact.label}:\n{fact.text.strip()}" for fact in usable]
    return "\n\n".join([_PROMPT_HEADER, *blocks])


__all__ = ["collect_auxiliary_facts", "format_document", "format_facts_for_prompt"]
