"""Per-project collection settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

from presalewatch.domain.errors import ProjectConfigError

from .project import SourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .fields import FieldName

type HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

_METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})


class AuxiliaryKind(StrEnum):
    SELECTOR = "selector"
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class JsonEndpoint:
    endpoint: str
    method: HttpMethod = "GET"
    headers: Mapping[str, str] = field(default_factory=dict[str, str])
    body: object | None = None
    data_mapping: Mapping[FieldName, str] = field(default_factory=dict["FieldName", str])

    def __post_init__(self) -> None:
        if not self.endpoint or not self.endpoint.strip():
            raise ProjectConfigError("JSON API source requires an endpoint")
        if self.method not in _METHODS:
            raise ProjectConfigError(f"Unsupported HTTP method: {self.method}")


@dataclass(frozen=True, slots=True)
class AuxiliarySource:
    """Extra context source; problems surface as unsuccessful facts at collection."""

    kind: AuxiliaryKind
    label: str
    selector: str | None = None
    json_api: JsonEndpoint | None = None
    text: str | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Everything the collector needs to know about one project."""

    url: str
    source: SourceKind = SourceKind.SCREENSHOT
    regions: tuple[str, ...] = ()
    json_api: JsonEndpoint | None = None
    static_text: str | None = None
    auxiliary: tuple[AuxiliarySource, ...] = ()
    skip: bool = False
    config_id: str | None = None
    wallet: bool = False
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ProjectConfigError("Project config requires a URL")
        if self.source is SourceKind.JSON and self.json_api is None:
            raise ProjectConfigError(f"{self.url}: json source without endpoint")
        if self.source is SourceKind.TEXT and not (self.static_text and self.static_text.strip()):
            raise ProjectConfigError(f"{self.url}: text source without text")


__all__ = [
    "AuxiliaryKind",
    "AuxiliarySource",
    "HttpMethod",
    "JsonEndpoint",
    "ProjectConfig",
]
