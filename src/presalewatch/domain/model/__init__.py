"""Public domain model surface."""

from __future__ import annotations

from presalewatch.domain.model.fields import (
    AMOUNT_FIELDS,
    DETECTABLE_FIELDS,
    NOT_AVAILABLE,
    PRICE_FIELDS,
    TRACKED_FIELDS,
    FieldName,
    FieldValues,
    coerce_value,
    is_present,
    parse_field_name,
)
from presalewatch.domain.model.project import (
    AuxiliaryFact,
    Candidate,
    HistorySnapshot,
    MergedCandidate,
    ProjectRecord,
    SourceKind,
)
from presalewatch.domain.model.site_config import (
    AuxiliaryKind,
    AuxiliarySource,
    HttpMethod,
    JsonEndpoint,
    ProjectConfig,
)

__all__ = [  # noqa: RUF022
    # fields
    "NOT_AVAILABLE",
    "FieldName",
    "FieldValues",
    "TRACKED_FIELDS",
    "PRICE_FIELDS",
    "AMOUNT_FIELDS",
    "DETECTABLE_FIELDS",
    "coerce_value",
    "is_present",
    "parse_field_name",
    # records
    "AuxiliaryFact",
    "Candidate",
    "MergedCandidate",
    "ProjectRecord",
    "HistorySnapshot",
    "SourceKind",
    # configuration
    "AuxiliaryKind",
    "AuxiliarySource",
    "HttpMethod",
    "JsonEndpoint",
    "ProjectConfig",
]
