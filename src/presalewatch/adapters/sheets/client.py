"""Google Sheets implementation of the tabular store port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from presalewatch.domain.errors import StoreError

from .schema import ErrorResponse, SpreadsheetPayload, ValueRange

if TYPE_CHECKING:
    from collections.abc import Sequence

    from presalewatch.adapters.http_resilience import RequestOptions, ResilientClient
    from presalewatch.domain.ports import Row

log = getLogger(__name__)

_VALUE_INPUT = {"valueInputOption": "RAW"}


class TokenProvider(Protocol):
    async def token(self) -> str: ...


def a1_range(table: str, cells: str | None = None) -> str:
    quoted = "'" + table.replace("'", "''") + "'"
    return f"{quoted}!{cells}" if cells else quoted


class GoogleSheetsTabularStore:
    """Rows of a spreadsheet's sheets through the v4 values API.

    Row index ``n`` maps to spreadsheet row ``n + 1``; sheet titles are the
    table names.
    """

    def __init__(
        self,
        client: ResilientClient,
        *,
        spreadsheet_id: str,
        tokens: TokenProvider,
    ) -> None:
        self._client = client
        self._spreadsheet_id = spreadsheet_id
        self._tokens = tokens
        self._sheet_ids: dict[str, int] | None = None

    async def read_rows(self, table: str) -> list[Row]:
        if table not in await self._sheets():
            return []
        payload = await self._call("GET", self._values_path(a1_range(table)))
        return _parse(ValueRange, payload).values

    async def write_rows(self, table: str, start_index: int, rows: Sequence[Sequence[str]]) -> None:
        if not rows:
            return
        target = a1_range(table, f"A{start_index + 1}")
        await self._call(
            "PUT",
            self._values_path(target),
            params=_VALUE_INPUT,
            json={"range": target, "majorDimension": "ROWS", "values": _rows(rows)},
        )

    async def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        if not rows:
            return
        await self._call(
            "POST",
            self._values_path(a1_range(table, "A:A")) + ":append",
            params={**_VALUE_INPUT, "insertDataOption": "INSERT_ROWS"},
            json={"majorDimension": "ROWS", "values": _rows(rows)},
        )

    async def delete_rows(self, table: str, indices: Sequence[int]) -> None:
        sheets = await self._sheets()
        if table not in sheets or not indices:
            return
        # bottom-up so earlier deletions do not shift later indices
        requests = [
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheets[table],
                        "dimension": "ROWS",
                        "startIndex": index,
                        "endIndex": index + 1,
                    }
                }
            }
            for index in sorted(set(indices), reverse=True)
        ]
        await self._batch_update(requests)

    async def ensure_table(self, table: str, header: Sequence[str]) -> None:
        if table not in await self._sheets():
            await self._batch_update(
                [
                    {
                        "addSheet": {
                            "properties": {
                                "title": table,
                                "gridProperties": {"rowCount": 1000, "columnCount": len(header)},
                            }
                        }
                    }
                ]
            )
            self._sheet_ids = None
            log.info("Created sheet %s", table)
        await self.write_rows(table, 0, [list(header)])

    async def _sheets(self) -> dict[str, int]:
        if self._sheet_ids is None:
            payload = await self._call(
                "GET",
                f"spreadsheets/{self._spreadsheet_id}",
                params={"fields": "sheets.properties(sheetId,title)"},
            )
            spreadsheet = _parse(SpreadsheetPayload, payload)
            self._sheet_ids = {
                entry.properties.title: entry.properties.sheet_id for entry in spreadsheet.sheets
            }
        return self._sheet_ids

    async def _batch_update(self, requests: list[dict[str, object]]) -> None:
        await self._call(
            "POST",
            f"spreadsheets/{self._spreadsheet_id}:batchUpdate",
            json={"requests": requests},
        )

    def _values_path(self, a1: str) -> str:
        return f"spreadsheets/{self._spreadsheet_id}/values/{quote(a1, safe='')}"

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> object:
        options: RequestOptions = {
            "headers": {"Authorization": f"Bearer {await self._tokens.token()}"},
        }
        if params is not None:
            options["params"] = params
        if json is not None:
            options["json"] = json
        try:
            response = await self._client.request(method, path, **options)
        except httpx.HTTPError as exc:
            raise StoreError(f"Google Sheets request failed: {exc}") from exc

        if not response.is_success:
            message = response.reason_phrase
            try:
                message = ErrorResponse.model_validate(response.json()).error.message
            except (ValueError, ValidationError):
                pass
            log.error("Google Sheets %s %s -> %s: %s", method, path, response.status_code, message)
            raise StoreError(f"Google Sheets error {response.status_code}: {message}")
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError("Google Sheets returned a non-JSON response") from exc


def _rows(rows: Sequence[Sequence[str]]) -> list[list[str]]:
    return [list(row) for row in rows]


def _parse[M: (ValueRange, SpreadsheetPayload)](model: type[M], payload: object) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise StoreError(f"Unexpected Google Sheets payload: {exc}") from exc
