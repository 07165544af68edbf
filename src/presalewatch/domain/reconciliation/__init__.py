"""Merge, override detection and per-field reconciliation."""

from __future__ import annotations

from .engine import ReconciliationResult, reconcile
from .merge import merge_candidates
from .overrides import OverrideDetection, StoredState, detect_overrides

__all__ = [
    "OverrideDetection",
    "ReconciliationResult",
    "StoredState",
    "detect_overrides",
    "merge_candidates",
    "reconcile",
]
