"""Batch runner configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int

DEFAULT_WORKERS = 3
DEFAULT_INTER_BATCH_DELAY_SECONDS = 2.0
DEFAULT_CALL_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class BatchConfig:
    """Worker width and pacing for one run over all configured projects."""

    workers: int = DEFAULT_WORKERS
    inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY_SECONDS
    call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS


def get_batch_config(
    *,
    workers: int | None = None,
    inter_batch_delay: float | None = None,
) -> BatchConfig:
    return BatchConfig(
        workers=workers
        if workers is not None
        else env_int("MAX_CONCURRENT_REQUESTS", default=DEFAULT_WORKERS, minimum=1),
        inter_batch_delay=inter_batch_delay
        if inter_batch_delay is not None
        else env_float(
            "INTER_BATCH_DELAY_SECONDS",
            default=DEFAULT_INTER_BATCH_DELAY_SECONDS,
            minimum=0.0,
        ),
        call_timeout=env_float(
            "CALL_TIMEOUT_SECONDS",
            default=DEFAULT_CALL_TIMEOUT_SECONDS,
            minimum=1.0,
        ),
    )
