"""Candidate collection: projection, normalisation and the collector."""

from __future__ import annotations

from .auxiliary import collect_auxiliary_facts, format_facts_for_prompt
from .collector import CandidateCollector
from .normalize import format_amount, format_price, normalize_values
from .projection import project, resolve_path

__all__ = [
    "CandidateCollector",
    "collect_auxiliary_facts",
    "format_amount",
    "format_facts_for_prompt",
    "format_price",
    "normalize_values",
    "project",
    "resolve_path",
]
