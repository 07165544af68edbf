from __future__ import annotations

import pytest

from presalewatch.adapters.memory import InMemoryTabularStore
from presalewatch.domain.history import HistoryLedger
from presalewatch.domain.records import RecordStore
from presalewatch.domain.tables import (
    HISTORY_HEADER,
    HISTORY_TABLE,
    PROJECT_HEADER,
    PROJECTS_TABLE,
)
from tests.helpers.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryTabularStore:
    return InMemoryTabularStore(
        {PROJECTS_TABLE: [list(PROJECT_HEADER)], HISTORY_TABLE: [list(HISTORY_HEADER)]}
    )


@pytest.fixture
def records(memory_store: InMemoryTabularStore) -> RecordStore:
    return RecordStore(memory_store)


@pytest.fixture
def ledger(memory_store: InMemoryTabularStore, clock: FakeClock) -> HistoryLedger:
    return HistoryLedger(memory_store, clock=clock)
