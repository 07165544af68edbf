"""HTML reports for the notifier."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from logging import getLogger
from typing import TYPE_CHECKING

from .pipeline import OutcomeStatus

if TYPE_CHECKING:
    from .batch import BatchResult
    from .pipeline import ProjectOutcome
    from .ports import Notifier

log = getLogger(__name__)

# Telegram caps photo captions at 1024 characters
CAPTION_LIMIT = 1024


def format_project_report(outcome: ProjectOutcome) -> str:
    record = outcome.record
    url = escape(outcome.url)
    lines = [
        "<b>Presale update</b>",
        "",
        f'<b>URL:</b> <a href="{url}">{url}</a>',
        f"<b>Status:</b> {outcome.status}",
    ]
    if record is not None:
        values = record.values
        lines += [
            "",
            f"<b>Current price:</b> {escape(values.current_price)}",
            f"<b>Next price:</b> {escape(values.next_price)}",
            f"<b>Listing price:</b> {escape(values.listing_price)}",
            f"<b>Raised:</b> {escape(values.raised)}",
        ]
        if record.override_flags:
            flagged = ", ".join(sorted(record.override_flags))
            lines.append(f"<b>Manual overrides:</b> {escape(flagged)}")
    if outcome.error:
        lines.append(f"<b>Warning:</b> {escape(outcome.error)}")
    return "\n".join(lines)


def format_failure_report(outcome: ProjectOutcome) -> str:
    return "\n".join(
        [
            "<b>Presale check failed</b>",
            "",
            f"<b>URL:</b> {escape(outcome.url)}",
            f"<b>Error:</b> {escape(outcome.error or 'unknown error')}",
        ]
    )


def format_summary(result: BatchResult) -> str:
    counts = result.counts()
    lines = ["<b>Run summary</b>", ""]
    lines += [f"{status}: {counts[status]}" for status in OutcomeStatus if counts[status]]
    if result.cancelled:
        lines.append("cancelled before completion")
    lines.append(f"elapsed: {result.elapsed_seconds:.1f}s")
    return "\n".join(lines)


@dataclass(slots=True)
class Reporter:
    """Push per-project and summary reports; never raises on delivery problems."""

    notifier: Notifier
    channel: str

    async def report_outcome(self, outcome: ProjectOutcome) -> bool:
        if outcome.status is OutcomeStatus.FAILED:
            return await self.notifier.send_text(self.channel, format_failure_report(outcome))
        if not outcome.succeeded:
            return False
        text = format_project_report(outcome)
        if outcome.image is not None and len(text) <= CAPTION_LIMIT:
            if await self.notifier.send_image(self.channel, outcome.image, caption=text):
                return True
            log.warning("Image report for %s not delivered, sending text only", outcome.url)
        return await self.notifier.send_text(self.channel, text)

    async def report_summary(self, result: BatchResult) -> bool:
        return await self.notifier.send_text(self.channel, format_summary(result))


__all__ = [
    "Reporter",
    "format_failure_report",
    "format_project_report",
    "format_summary",
]
