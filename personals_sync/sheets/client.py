"""Read-only Google Sheets REST client and table fetcher."""

from __future__ import annotations

from urllib.parse import quote

from google.auth.credentials import Credentials
from google.auth.transport.requests import AuthorizedSession

from personals_sync.common.constants import SHEETS_API_BASE
from personals_sync.common.errors import ApiError, NoDataError
from personals_sync.common.http import HttpClient, RetryConfig, TimeoutConfig


def a1_range(sheet_name: str, cell_range: str) -> str:
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'!{cell_range}"


class SheetsClient:
    def __init__(self, spreadsheet_id: str, http_client: HttpClient) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.http = http_client

    @classmethod
    def from_credentials(
        cls,
        spreadsheet_id: str,
        credentials: Credentials,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
    ) -> "SheetsClient":
        session = AuthorizedSession(credentials)
        return cls(spreadsheet_id, HttpClient(session=session, timeout=timeout, retry=retry))

    def close(self) -> None:
        self.http.close()

    def _url(self, suffix: str = "") -> str:
        return f"{SHEETS_API_BASE}/{quote(self.spreadsheet_id, safe='')}{suffix}"

    def get_values(self, range_a1: str) -> list[list[str]]:
        payload = self.http.get_json(
            self._url(f"/values/{quote(range_a1, safe='')}"),
            params={"valueRenderOption": "FORMATTED_VALUE", "majorDimension": "ROWS"},
        )
        values = payload.get("values") or []
        if not isinstance(values, list):
            raise ApiError(f"Unexpected values payload for range {range_a1}")
        return [["" if cell is None else str(cell) for cell in row] for row in values]

    def get_title(self) -> str:
        payload = self.http.get_json(
            self._url(),
            params={"includeGridData": "false", "fields": "properties.title"},
        )
        return str((payload.get("properties") or {}).get("title", ""))


def fetch_headers(client: SheetsClient, table_cfg: dict) -> list[str]:
    rows = client.get_values(a1_range(table_cfg["name"], table_cfg["header_range"]))
    if not rows:
        raise NoDataError(f"No header row found in {table_cfg['name']} tab")
    return rows[0]


def fetch_table(client: SheetsClient, table_cfg: dict) -> list[list[str]]:
    rows = client.get_values(a1_range(table_cfg["name"], table_cfg["range"]))
    if not rows:
        raise NoDataError(f"No data found in {table_cfg['name']} tab")
    return rows
