"""Pydantic models for site configuration cells and files."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SiteConfigBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class JsonApiPayload(SiteConfigBaseModel):
    endpoint: str
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    headers: dict[str, str] = Field(default_factory=dict[str, str])
    body: object | None = None
    data_mapping: dict[str, str] = Field(default_factory=dict[str, str], alias="dataMapping")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("data_mapping", mode="before")
    @classmethod
    def _drop_empty_paths(cls, value: object) -> object:
        if isinstance(value, dict):
            return {key: path for key, path in value.items() if path}
        return value


class CustomDataPayload(SiteConfigBaseModel):
    source: Literal["selector", "json", "text"]
    label: str
    selector: str | None = None
    json_api: JsonApiPayload | None = Field(default=None, alias="jsonApi")
    text: str | None = None
    url: str | None = None


class SiteFileEntry(SiteConfigBaseModel):
    """One project in a local sites file; keys use the camelCase of the sheet cells."""

    id: str | None = None
    url: str | None = None
    selector: str | None = None
    selectors: list[str] = Field(default_factory=list[str])
    skip: bool = False
    data_source: str | None = Field(default=None, alias="dataSource")
    json_api: JsonApiPayload | None = Field(default=None, alias="jsonApi")
    custom_data: list[CustomDataPayload] = Field(
        default_factory=list[CustomDataPayload],
        alias="customData",
    )
    text: str | None = None
    wallet: bool = False
    notes: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value
