"""Bounded batch execution of project pipelines."""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.domain.errors import ProjectConfigError

from .pipeline import OutcomeStatus, ProjectOutcome

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from .model import ProjectConfig
    from .pipeline import ProjectPipeline

log = getLogger(__name__)

type OutcomeHook = Callable[[ProjectOutcome], Awaitable[None]]


@dataclass(slots=True)
class BatchResult:
    outcomes: list[ProjectOutcome] = field(default_factory=list[ProjectOutcome])
    cancelled: bool = False
    elapsed_seconds: float = 0.0

    def counts(self) -> Counter[OutcomeStatus]:
        return Counter(outcome.status for outcome in self.outcomes)

    @property
    def failed(self) -> list[ProjectOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]


def chunked[T](items: Sequence[T], size: int) -> list[Sequence[T]]:
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [items[start : start + size] for start in range(0, len(items), size)]


async def run_batch(
    configs: Sequence[ProjectConfig],
    pipeline: ProjectPipeline,
    *,
    workers: int = 3,
    inter_batch_delay: float = 2.0,
    cancel_event: asyncio.Event | None = None,
    on_outcome: OutcomeHook | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> BatchResult:
    """Run ``configs`` in consecutive batches of ``workers`` concurrent projects.

    A failure in one project becomes that project's outcome and never cancels
    its siblings. ``cancel_event`` is checked between batches: projects already
    started run to completion, later batches never start.
    """

    started = time.perf_counter()
    result = BatchResult()
    batches = chunked(configs, workers)
    for number, batch in enumerate(batches, start=1):
        if cancel_event is not None and cancel_event.is_set():
            log.info("Cancelled before batch %d/%d", number, len(batches))
            result.cancelled = True
            break
        log.info("Running batch %d/%d (%d project(s))", number, len(batches), len(batch))
        outcomes = await asyncio.gather(
            *(_run_isolated(pipeline, config, on_outcome) for config in batch)
        )
        result.outcomes.extend(outcomes)
        if number < len(batches) and inter_batch_delay > 0:
            await sleep(inter_batch_delay)

    result.elapsed_seconds = time.perf_counter() - started
    counts = result.counts()
    log.info(
        "Batch run finished in %.1fs: %s",
        result.elapsed_seconds,
        ", ".join(f"{status}={counts[status]}" for status in OutcomeStatus) or "nothing to do",
    )
    return result


async def _run_isolated(
    pipeline: ProjectPipeline,
    config: ProjectConfig,
    on_outcome: OutcomeHook | None,
) -> ProjectOutcome:
    try:
        outcome = await pipeline.run(config)
    except ProjectConfigError as exc:
        log.error("Skipping %s: %s", config.url, exc)  # noqa: TRY400
        outcome = ProjectOutcome(url=config.url, status=OutcomeStatus.SKIPPED, error=str(exc))
    except Exception as exc:
        log.exception("Project %s failed", config.url)
        outcome = ProjectOutcome(url=config.url, status=OutcomeStatus.FAILED, error=str(exc))
    if on_outcome is not None:
        try:
            await on_outcome(outcome)
        except Exception:
            log.exception("Outcome hook failed for %s", config.url)
    return outcome


__all__ = ["BatchResult", "OutcomeHook", "chunked", "run_batch"]
