"""Test doubles for the domain ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from presalewatch.adapters.memory import InMemoryTabularStore
from presalewatch.domain.errors import ExtractionError, FetchError, RenderError, StoreError
from presalewatch.domain.model import FieldValues

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from presalewatch.domain.model import JsonEndpoint

def values(**kwargs: str) -> FieldValues:
    """Build ``FieldValues`` from wire names: ``values(currentPrice="0.01")``."""
    return FieldValues.from_mapping(kwargs)


@dataclass
class FakeClock:
    now: datetime = field(default_factory=lambda: datetime(2025, 1, 1, 12, tzinfo=UTC))
    step: timedelta = timedelta(0)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@dataclass
class FakeRenderer:
    """Returns ``region`` encoded as image bytes; listed regions fail."""

    failing: set[str | None] = field(default_factory=set[str | None])
    texts: dict[str, str] = field(default_factory=dict[str, str])
    calls: list[tuple[str, str | None]] = field(default_factory=list[tuple[str, str | None]])

    async def render(self, url: str, region: str | None = None) -> bytes:
        self.calls.append((url, region))
        if region in self.failing:
            raise RenderError(f"cannot capture {region}")
        return (region or "full-page").encode()

    async def extract_text(self, url: str, selector: str) -> str:
        if selector not in self.texts:
            raise RenderError(f"no element {selector}")
        return self.texts[selector]


@dataclass
class FakeVision:
    """Maps image bytes (the region name) to canned values."""

    results: dict[bytes, FieldValues] = field(default_factory=dict[bytes, FieldValues])
    auxiliary_seen: list[str | None] = field(default_factory=list[str | None])

    async def infer(self, image: bytes, auxiliary_text: str | None = None) -> FieldValues:
        self.auxiliary_seen.append(auxiliary_text)
        if image not in self.results:
            raise ExtractionError("malformed output")
        return self.results[image]


@dataclass
class FakeTextExtractor:
    result: FieldValues | None = None
    documents: list[str] = field(default_factory=list[str])

    async def normalize(self, document: str, auxiliary_text: str | None = None) -> FieldValues:
        self.documents.append(document)
        if self.result is None:
            raise ExtractionError("model unavailable")
        return self.result


@dataclass
class FakeFetcher:
    documents: dict[str, object] = field(default_factory=dict[str, object])

    async def fetch(self, endpoint: JsonEndpoint) -> object:
        if endpoint.endpoint not in self.documents:
            raise FetchError(f"{endpoint.endpoint}: HTTP 503")
        return self.documents[endpoint.endpoint]


@dataclass
class RecordingNotifier:
    deliver: bool = True
    texts: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])
    images: list[tuple[str, bytes, str | None]] = field(
        default_factory=list[tuple[str, bytes, str | None]]
    )

    async def send_text(self, channel: str, text: str) -> bool:
        self.texts.append((channel, text))
        return self.deliver

    async def send_image(self, channel: str, image: bytes, caption: str | None = None) -> bool:
        self.images.append((channel, image, caption))
        return self.deliver


class FlakyStore(InMemoryTabularStore):
    """In-memory store whose writes raise ``StoreError``.

    Every write to ``failing_tables`` fails, as does any write of a row that
    mentions one of ``failing_urls``.
    """

    def __init__(
        self,
        tables: Mapping[str, Sequence[Sequence[str]]] | None = None,
        *,
        failing_tables: set[str] | None = None,
        failing_urls: set[str] | None = None,
    ) -> None:
        super().__init__(tables)
        self.failing_tables = failing_tables or set()
        self.failing_urls = failing_urls or set()

    def _check(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        if table in self.failing_tables:
            raise StoreError(f"{table}: quota exceeded")
        if any(url in row for row in rows for url in self.failing_urls):
            raise StoreError(f"{table}: protected range")

    async def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        self._check(table, rows)
        await super().append_rows(table, rows)

    async def write_rows(self, table: str, start_index: int, rows: Sequence[Sequence[str]]) -> None:
        self._check(table, rows)
        await super().write_rows(table, start_index, rows)
