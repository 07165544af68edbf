"""Pydantic models describing the Google Sheets v4 payloads we use."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SheetsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ValueRange(SheetsBaseModel):
    range: str | None = None
    major_dimension: str = Field(default="ROWS", alias="majorDimension")
    values: list[list[str]] = Field(default_factory=list[list[str]])

    @field_validator("values", mode="before")
    @classmethod
    def _stringify_cells(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        return [
            ["" if cell is None else str(cell) for cell in row] if isinstance(row, list) else []
            for row in value
        ]


class SheetProperties(SheetsBaseModel):
    sheet_id: int = Field(alias="sheetId")
    title: str


class SheetEntry(SheetsBaseModel):
    properties: SheetProperties


class SpreadsheetPayload(SheetsBaseModel):
    spreadsheet_id: str | None = Field(default=None, alias="spreadsheetId")
    sheets: list[SheetEntry] = Field(default_factory=list[SheetEntry])


class ErrorDetail(SheetsBaseModel):
    code: int
    message: str
    status: str | None = None


class ErrorResponse(SheetsBaseModel):
    error: ErrorDetail
