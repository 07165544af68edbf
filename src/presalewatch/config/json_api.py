"""Resilience defaults for polling project JSON APIs."""

from __future__ import annotations

from .http_resilience import RateLimit, ResilienceConfig, ResponseCache

JSON_API_TIMEOUT_SECONDS = 20.0
JSON_API_CACHE_TTL_SECONDS = 30.0


def get_json_api_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="json-api",
        timeout_seconds=JSON_API_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5),
        cache=ResponseCache(ttl_seconds=JSON_API_CACHE_TTL_SECONDS),
        headers={"Accept": "application/json"},
    )
