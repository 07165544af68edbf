"""Candidate collection for one project across the three extraction strategies."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.errors import (
    ExtractionError,
    FetchError,
    ProjectConfigError,
    RenderError,
)
from presalewatch.domain.model import Candidate, SourceKind

from .auxiliary import collect_auxiliary_facts, format_document, format_facts_for_prompt
from .normalize import normalize_values
from .projection import project

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from presalewatch.domain.errors import PresaleWatchError
    from presalewatch.domain.model import AuxiliaryFact, JsonEndpoint, ProjectConfig
    from presalewatch.domain.ports import JsonFetcher, Renderer, TextExtractor, VisionExtractor

log = getLogger(__name__)

FULL_PAGE_ORIGIN = "full-page"
STATIC_TEXT_ORIGIN = "static-text"


@dataclass(slots=True)
class CandidateCollector:
    """Produce zero or more candidates for a project.

    Collaborators are optional so that a run can be wired with only the
    adapters it needs; a project whose source needs a missing collaborator
    fails with ``ProjectConfigError``.
    """

    renderer: Renderer | None = None
    vision: VisionExtractor | None = None
    text_extractor: TextExtractor | None = None
    fetcher: JsonFetcher | None = None
    call_timeout: float | None = None
    refine_json: bool = True

    async def collect(self, config: ProjectConfig) -> list[Candidate]:
        facts = await collect_auxiliary_facts(
            config.url,
            config.auxiliary,
            renderer=self.renderer,
            fetcher=self.fetcher,
        )
        auxiliary_text = format_facts_for_prompt(facts)

        match config.source:
            case SourceKind.SCREENSHOT:
                candidates = await self._collect_regions(config, facts, auxiliary_text)
            case SourceKind.JSON:
                candidates = await self._collect_json(config, facts, auxiliary_text)
            case SourceKind.TEXT:
                candidates = await self._collect_text(config, facts, auxiliary_text)

        log.info("Collected %d candidate(s) for %s", len(candidates), config.url)
        return candidates

    async def _collect_regions(
        self,
        config: ProjectConfig,
        facts: tuple[AuxiliaryFact, ...],
        auxiliary_text: str | None,
    ) -> list[Candidate]:
        if self.renderer is None or self.vision is None:
            raise ProjectConfigError(f"{config.url}: screenshot source needs renderer and vision")
        regions: tuple[str | None, ...] = config.regions or (None,)
        candidates: list[Candidate] = []
        for region in regions:
            origin = region or FULL_PAGE_ORIGIN
            try:
                image = await self._bounded(self.renderer.render(config.url, region), RenderError)
                values = await self._bounded(
                    self.vision.infer(image, auxiliary_text),
                    ExtractionError,
                )
            except (RenderError, ExtractionError) as exc:
                log.warning("Dropping candidate %s for %s: %s", origin, config.url, exc)
                continue
            candidates.append(
                Candidate(
                    values=values,
                    source=SourceKind.SCREENSHOT,
                    origin=origin,
                    facts=facts,
                    image=image,
                )
            )
        return candidates

    async def _collect_json(
        self,
        config: ProjectConfig,
        facts: tuple[AuxiliaryFact, ...],
        auxiliary_text: str | None,
    ) -> list[Candidate]:
        endpoint: JsonEndpoint | None = config.json_api
        if self.fetcher is None or endpoint is None:
            raise ProjectConfigError(f"{config.url}: json source needs an endpoint and a fetcher")
        try:
            document = await self._bounded(self.fetcher.fetch(endpoint), FetchError)
        except FetchError as exc:
            log.warning("JSON fetch for %s failed: %s", config.url, exc)
            return []

        values = project(document, endpoint.data_mapping)
        if self.refine_json and self.text_extractor is not None:
            try:
                refined = await self._bounded(
                    self.text_extractor.normalize(format_document(document), auxiliary_text),
                    ExtractionError,
                )
            except ExtractionError as exc:
                log.warning("Keeping projected values for %s, refine failed: %s", config.url, exc)
            else:
                values = values.overlay(normalize_values(refined))

        return [
            Candidate(values=values, source=SourceKind.JSON, origin=endpoint.endpoint, facts=facts)
        ]

    async def _collect_text(
        self,
        config: ProjectConfig,
        facts: tuple[AuxiliaryFact, ...],
        auxiliary_text: str | None,
    ) -> list[Candidate]:
        if self.text_extractor is None:
            raise ProjectConfigError(f"{config.url}: text source needs a text extractor")
        try:
            values = await self._bounded(
                self.text_extractor.normalize(config.static_text or "", auxiliary_text),
                ExtractionError,
            )
        except ExtractionError as exc:
            log.warning("Static text extraction for %s failed: %s", config.url, exc)
            return []
        return [
            Candidate(values=values, source=SourceKind.TEXT, origin=STATIC_TEXT_ORIGIN, facts=facts)
        ]

    async def _bounded[T](
        self,
        awaitable: Awaitable[T],
        error_type: type[PresaleWatchError],
    ) -> T:
        if self.call_timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self.call_timeout)
        except TimeoutError as exc:
            raise error_type(f"timed out after {self.call_timeout}s") from exc


__all__ = ["FULL_PAGE_ORIGIN", "STATIC_TEXT_ORIGIN", "CandidateCollector"]
