"""First-found merge of candidates into one value per field."""

from __future__ import annotations

from typing import TYPE_CHECKING

from presalewatch.domain.model import (
    TRACKED_FIELDS,
    FieldValues,
    MergedCandidate,
    is_present,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from presalewatch.domain.model import AuxiliaryFact, Candidate


def merge_candidates(candidates: Sequence[Candidate]) -> MergedCandidate:
    """Merge candidates in declared order; the first present value per field wins.

    Facts of all candidates are concatenated in order with exact repeats
    dropped, so the facts shared by candidates of one project appear once.
    """

    values = FieldValues()
    for name in TRACKED_FIELDS:
        for candidate in candidates:
            value = candidate.values.get(name)
            if is_present(value):
                values = values.with_value(name, value)
                break

    facts: list[AuxiliaryFact] = []
    for candidate in candidates:
        facts.extend(fact for fact in candidate.facts if fact not in facts)

    image = next((c.image for c in candidates if c.image is not None), None)
    return MergedCandidate(values=values, facts=tuple(facts), image=image)


__all__ = ["merge_candidates"]
