"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import signal
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from presalewatch.adapters.http_resilience import ResilientClient
from presalewatch.adapters.json_api import HttpJsonFetcher
from presalewatch.adapters.memory import InMemoryTabularStore
from presalewatch.adapters.openai import OpenAIExtractor
from presalewatch.adapters.playwright import PlaywrightRenderer
from presalewatch.adapters.sheets import (
    GoogleSheetsTabularStore,
    ServiceAccountTokenProvider,
    load_credentials,
)
from presalewatch.adapters.site_config import (
    LoadedConfigs,
    import_into_store,
    load_from_file,
    load_from_store,
)
from presalewatch.adapters.sqlalchemy import SqlAlchemyTabularStore
from presalewatch.adapters.telegram import TelegramNotifier
from presalewatch.config import (
    get_batch_config,
    get_browser_config,
    get_database_config,
    get_json_api_resilience,
    get_openai_config,
    get_sheets_config,
    get_telegram_config,
)
from presalewatch.domain.batch import BatchResult, run_batch
from presalewatch.domain.collection import CandidateCollector
from presalewatch.domain.history import HistoryLedger
from presalewatch.domain.pipeline import ProjectPipeline, detect_all_overrides
from presalewatch.domain.records import RecordStore
from presalewatch.domain.reporting import Reporter
from presalewatch.domain.tables import SITES_HEADER, SITES_TABLE

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

    from presalewatch.domain.model import FieldName
    from presalewatch.domain.ports import TabularStore

log = getLogger(__name__)


class StoreKind(StrEnum):
    SHEETS = "sheets"
    SQLITE = "sqlite"
    MEMORY = "memory"


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class RunContext:
    """Run-scoped handles; everything here is released when the context exits."""

    store: TabularStore
    records: RecordStore
    ledger: HistoryLedger
    collector: CandidateCollector | None = None
    reporter: Reporter | None = None
    clock: Callable[[], datetime] = field(default=utcnow)

    def pipeline(self) -> ProjectPipeline:
        if self.collector is None:
            raise RuntimeError("Run context opened without collectors")
        return ProjectPipeline(
            records=self.records,
            ledger=self.ledger,
            collector=self.collector,
            clock=self.clock,
        )


async def _open_store(kind: StoreKind, stack: AsyncExitStack) -> TabularStore:
    match kind:
        case StoreKind.SHEETS:
            config = get_sheets_config()
            client = await stack.enter_async_context(ResilientClient(config.resilience))
            return GoogleSheetsTabularStore(
                client,
                spreadsheet_id=config.spreadsheet_id,
                tokens=ServiceAccountTokenProvider(load_credentials(config)),
            )
        case StoreKind.SQLITE:
            store = SqlAlchemyTabularStore.from_uri(get_database_config().uri)
            stack.callback(store.dispose)
            return store
        case StoreKind.MEMORY:
            return InMemoryTabularStore()


async def _open_collector(stack: AsyncExitStack, *, call_timeout: float) -> CandidateCollector:
    renderer = PlaywrightRenderer(get_browser_config())
    stack.push_async_callback(renderer.aclose)
    extractor = OpenAIExtractor(get_openai_config())
    stack.push_async_callback(extractor.aclose)
    json_client = await stack.enter_async_context(ResilientClient(get_json_api_resilience()))
    return CandidateCollector(
        renderer=renderer,
        vision=extractor,
        text_extractor=extractor,
        fetcher=HttpJsonFetcher(json_client),
        call_timeout=call_timeout,
    )


async def _open_reporter(stack: AsyncExitStack) -> Reporter | None:
    config = get_telegram_config()
    if config is None:
        log.info("Telegram not configured, reports disabled")
        return None
    client = await stack.enter_async_context(ResilientClient(config.resilience))
    return Reporter(TelegramNotifier(client, bot_token=config.bot_token), config.chat_id)


@asynccontextmanager
async def open_run_context(
    store_kind: StoreKind,
    *,
    collect: bool = False,
    notify: bool = False,
    call_timeout: float = 120.0,
    store: TabularStore | None = None,
) -> AsyncIterator[RunContext]:
    """Acquire the store (and optionally collectors and the notifier) for one run."""

    async with AsyncExitStack() as stack:
        tabular = store or await _open_store(store_kind, stack)
        context = RunContext(
            store=tabular,
            records=RecordStore(tabular),
            ledger=HistoryLedger(tabular, clock=utcnow),
            collector=await _open_collector(stack, call_timeout=call_timeout) if collect else None,
            reporter=await _open_reporter(stack) if notify else None,
        )
        await context.records.ensure_table()
        await context.ledger.ensure_table()
        yield context


@dataclass(frozen=True, slots=True)
class RunOptions:
    store: StoreKind = StoreKind.SHEETS
    sites_file: Path | None = None
    workers: int | None = None
    inter_batch_delay: float | None = None
    only: tuple[str, ...] = ()
    notify: bool = True


async def load_project_configs(context: RunContext, options: RunOptions) -> LoadedConfigs:
    if options.sites_file is not None:
        loaded = load_from_file(options.sites_file)
    else:
        loaded = await load_from_store(context.store)
    return loaded.only(options.only) if options.only else loaded


def _install_cancel_handler(cancel_event: asyncio.Event) -> None:
    def cancel() -> None:
        if not cancel_event.is_set():
            log.info("Interrupt received, finishing the current batch")
        cancel_event.set()

    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel)
    except (NotImplementedError, RuntimeError):
        log.debug("Signal handlers unsupported here, Ctrl+C aborts immediately")


async def run_collection_async(
    options: RunOptions,
    *,
    cancel_event: asyncio.Event | None = None,
    handle_sigint: bool = False,
) -> BatchResult:
    batch = get_batch_config(workers=options.workers, inter_batch_delay=options.inter_batch_delay)
    cancel_event = cancel_event or asyncio.Event()
    if handle_sigint:
        _install_cancel_handler(cancel_event)

    async with open_run_context(
        options.store,
        collect=True,
        notify=options.notify,
        call_timeout=batch.call_timeout,
    ) as context:
        loaded = await load_project_configs(context, options)
        log.info(
            "Starting run: projects=%d, rejected=%d, workers=%d, delay=%.1fs",
            len(loaded.configs),
            len(loaded.rejected),
            batch.workers,
            batch.inter_batch_delay,
        )
        reporter = context.reporter
        result = await run_batch(
            loaded.configs,
            context.pipeline(),
            workers=batch.workers,
            inter_batch_delay=batch.inter_batch_delay,
            cancel_event=cancel_event,
            on_outcome=reporter.report_outcome if reporter else None,
        )
        if reporter is not None:
            await reporter.report_summary(result)
    return result


def run_collection(options: RunOptions, *, handle_sigint: bool = False) -> BatchResult:
    """Collect and reconcile every configured project once."""

    return asyncio.run(run_collection_async(options, handle_sigint=handle_sigint))


async def detect_overrides_async(store_kind: StoreKind) -> list[tuple[str, frozenset[FieldName]]]:
    async with open_run_context(store_kind) as context:
        return await detect_all_overrides(context.records, context.ledger, clock=context.clock)


def detect_overrides(store_kind: StoreKind) -> list[tuple[str, frozenset[FieldName]]]:
    """Flag manual edits in the stored records without collecting anything."""

    return asyncio.run(detect_overrides_async(store_kind))


async def init_store_async(store_kind: StoreKind) -> None:
    async with open_run_context(store_kind) as context:
        await context.store.ensure_table(SITES_TABLE, SITES_HEADER)
    log.info("Store %s initialised", store_kind)


def init_store(store_kind: StoreKind) -> None:
    asyncio.run(init_store_async(store_kind))


async def import_sites_async(store_kind: StoreKind, sites_file: Path) -> int:
    loaded = load_from_file(sites_file)
    async with open_run_context(store_kind) as context:
        return await import_into_store(context.store, loaded.configs)


def import_sites(store_kind: StoreKind, sites_file: Path) -> int:
    """Copy a local sites file into the ``SitesConfig`` table."""

    return asyncio.run(import_sites_async(store_kind, sites_file))


__all__ = [
    "RunContext",
    "RunOptions",
    "StoreKind",
    "detect_overrides",
    "import_sites",
    "init_store",
    "open_run_context",
    "run_collection",
]
