"""
Google Sheets ledger client.

Provides OAuth2 and Service Account authentication, snapshot reads of the
ledger range and the two write operations of the upsert engine: single-cell
update and row append.
"""

import logging
from itertools import zip_longest
from pathlib import Path
from typing import Any

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google.oauth2.service_account import Credentials as ServiceAccountCredentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from cat_weight_ledger.domain.series import RawCell
from cat_weight_ledger.utils.exceptions import AuthenticationError, StoreIOError
from cat_weight_ledger.utils.parameters import SheetsConfig

logger = logging.getLogger(__name__)


def column_letter(column_index: int) -> str:
    """
    Convert a zero-based column index into A1 column letters.

    Args:
        column_index: Zero-based index (0 -> "A", 26 -> "AA").

    Returns:
        Column letters.
    """
    if column_index < 0:
        raise ValueError(f"Column index must be non-negative: {column_index}")

    letters = ""
    index = column_index + 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


class SheetsLedgerClient:
    """
    Google Sheets client for the weight ledger.

    Supports OAuth2 and Service Account authentication. Every API failure is
    raised as StoreIOError so callers own the retry policy.
    """

    def __init__(self, config: SheetsConfig, service: Any = None) -> None:
        """
        Initialize Sheets client.

        Args:
            config: Sheets configuration.
            service: Prebuilt Sheets API resource. Built from credentials when None.

        Raises:
            AuthenticationError: If authentication fails.
        """
        self.config = config
        self.service: Any = service

        if self.service is None:
            self._authenticate()

    def _authenticate(self) -> None:
        """
        Authenticate with Google Sheets API.

        Raises:
            AuthenticationError: If authentication fails.
        """
        try:
            if self.config.auth_method == "oauth2":
                creds: Credentials | ServiceAccountCredentials = self._authenticate_oauth2()
            elif self.config.auth_method == "service_account":
                creds = self._authenticate_service_account()
            else:
                raise AuthenticationError(f"Unknown auth method: {self.config.auth_method}")

            self.service = build("sheets", "v4", credentials=creds)
            logger.info(f"Authenticated with Google Sheets using {self.config.auth_method}")

        except Exception as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

    def _authenticate_oauth2(self) -> Credentials:
        """
        Authenticate using OAuth2 installed app flow.

        Returns:
            Valid credentials.
        """
        if self.config.oauth2 is None:
            raise AuthenticationError("oauth2 auth method selected but not configured")

        creds: Credentials | None = None
        token_path = Path(self.config.oauth2.token_path)

        if token_path.exists():
            creds = Credentials.from_authorized_user_file(
                str(token_path), self.config.oauth2.scopes
            )

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                flow = InstalledAppFlow.from_client_secrets_file(
                    self.config.oauth2.credentials_path, self.config.oauth2.scopes
                )
                creds = flow.run_local_server(port=0)

            token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(token_path, "w") as token:
                token.write(creds.to_json())

        return creds

    def _authenticate_service_account(self) -> ServiceAccountCredentials:
        """
        Authenticate using Service Account.

        Returns:
            Service account credentials.
        """
        if self.config.service_account is None:
            raise AuthenticationError("service_account auth method selected but not configured")

        creds = ServiceAccountCredentials.from_service_account_file(
            self.config.service_account.credentials_path,
            scopes=self.config.service_account.scopes,
        )
        return creds  # type: ignore[no-any-return]

    def _get_values(self, render_option: str) -> list[list[Any]]:
        result = (
            self.service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self.config.spreadsheet_id,
                range=self.config.data_range,
                valueRenderOption=render_option,
            )
            .execute()
        )
        values: list[list[Any]] = result.get("values", [])
        return values

    def read_rows(self) -> list[list[Any]]:
        """
        Read the ledger snapshot as displayed in the sheet.

        Returns:
            Rows in sheet order, header included. Trailing empty cells are
            omitted by the API, so rows may be shorter than the range.

        Raises:
            StoreIOError: If the read fails.
        """
        try:
            rows = self._get_values("FORMATTED_VALUE")
        except Exception as e:
            raise StoreIOError(f"Failed to read spreadsheet: {e}") from e

        logger.info(f"Read {len(rows)} rows from {self.config.data_range}")
        return rows

    def read_raw_table(self) -> list[list[RawCell]]:
        """
        Read the ledger with both raw and formatted cell representations.

        Raises:
            StoreIOError: If either read fails.
        """
        try:
            formatted_rows = self._get_values("FORMATTED_VALUE")
            raw_rows = self._get_values("UNFORMATTED_VALUE")
        except Exception as e:
            raise StoreIOError(f"Failed to read spreadsheet: {e}") from e

        table: list[list[RawCell]] = []
        for formatted_row, raw_row in zip_longest(formatted_rows, raw_rows, fillvalue=[]):
            table.append(
                [
                    RawCell(
                        value=raw,
                        formatted=None if formatted is None else str(formatted),
                    )
                    for formatted, raw in zip_longest(formatted_row, raw_row)
                ]
            )

        logger.info(f"Read {len(table)} raw rows from {self.config.data_range}")
        return table

    def update_cell(self, row_index: int, column_index: int, value: Any) -> None:
        """
        Overwrite one cell.

        Args:
            row_index: Zero-based row position in the snapshot.
            column_index: Zero-based column position relative to the date column.
            value: New cell value.

        Raises:
            StoreIOError: If the update fails.
        """
        offset = ord(self.config.first_column) - ord("A")
        cell = (
            f"{self.config.quoted_sheet_name}!"
            f"{column_letter(column_index + offset)}{row_index + 1}"
        )
        try:
            self.service.spreadsheets().values().update(
                spreadsheetId=self.config.spreadsheet_id,
                range=cell,
                valueInputOption="RAW",
                body={"values": [[value]]},
            ).execute()
        except Exception as e:
            raise StoreIOError(f"Failed to update cell {cell}: {e}") from e

        logger.info(f"Updated {cell} = {value}")

    def append_row(self, row: list[Any]) -> None:
        """
        Append a full row at the end of the ledger.

        Raises:
            StoreIOError: If the append fails.
        """
        try:
            self.service.spreadsheets().values().append(
                spreadsheetId=self.config.spreadsheet_id,
                range=self.config.data_range,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [row]},
            ).execute()
        except Exception as e:
            raise StoreIOError(f"Failed to append row: {e}") from e

        logger.info(f"Appended row {row}")
