"""Unit tests for the Google Sheets ledger client."""

from unittest.mock import MagicMock

import pytest

from cat_weight_ledger.domain.series import RawCell
from cat_weight_ledger.infrastructure.sheets_client.client import SheetsLedgerClient, column_letter
from cat_weight_ledger.utils.exceptions import StoreIOError
from cat_weight_ledger.utils.parameters import SheetsConfig


def _client() -> tuple[SheetsLedgerClient, MagicMock]:
    service = MagicMock()
    config = SheetsConfig(spreadsheet_id="sheet-123", sheet_name="Hoja 1")
    return SheetsLedgerClient(config, service=service), service


def test_column_letter() -> None:
    """Test A1 column letters."""
    expected = {0: "A", 4: "E", 25: "Z", 26: "AA", 27: "AB"}
    for index, letters in expected.items():
        if column_letter(index) != letters:
            raise AssertionError(f"Expected {letters} for {index}, got {column_letter(index)}")


def test_read_rows_uses_configured_range() -> None:
    """Test the snapshot read."""
    client, service = _client()
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.return_value = {"values": [["Fecha"], ["01/01/2025", "3"]]}

    rows = client.read_rows()

    if rows != [["Fecha"], ["01/01/2025", "3"]]:
        raise AssertionError(f"Unexpected rows {rows}")
    kwargs = values.get.call_args.kwargs
    if kwargs["spreadsheetId"] != "sheet-123" or kwargs["range"] != "'Hoja 1'!A:E":
        raise AssertionError(f"Unexpected request {kwargs}")


def test_read_rows_of_empty_sheet() -> None:
    """Test that a sheet without values reads as no rows."""
    client, service = _client()
    service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {}

    if client.read_rows() != []:
        raise AssertionError("Expected no rows")


def test_read_raw_table_zips_both_renderings() -> None:
    """Test formatted and unformatted values are combined per cell."""
    client, service = _client()
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.side_effect = [
        {"values": [["05/01/2025", "3,2"]]},
        {"values": [["05/01/2025", 3.2, 4.1]]},
    ]

    table = client.read_raw_table()

    expected = [[
        RawCell(value="05/01/2025", formatted="05/01/2025"),
        RawCell(value=3.2, formatted="3,2"),
        RawCell(value=4.1, formatted=None),
    ]]
    if table != expected:
        raise AssertionError(f"Unexpected table {table}")


def test_update_cell_addresses_one_cell() -> None:
    """Test the single-cell write address."""
    client, service = _client()
    values = service.spreadsheets.return_value.values.return_value

    client.update_cell(row_index=3, column_index=2, value=4.2)

    kwargs = values.update.call_args.kwargs
    if kwargs["range"] != "'Hoja 1'!C4":
        raise AssertionError(f"Unexpected range {kwargs['range']}")
    if kwargs["body"] != {"values": [[4.2]]} or kwargs["valueInputOption"] != "RAW":
        raise AssertionError(f"Unexpected body {kwargs}")


def test_append_row_inserts_rows() -> None:
    """Test the append write."""
    client, service = _client()
    values = service.spreadsheets.return_value.values.return_value

    client.append_row(["01/01/2025", "", 4.2, "", ""])

    kwargs = values.append.call_args.kwargs
    if kwargs["insertDataOption"] != "INSERT_ROWS":
        raise AssertionError(f"Unexpected insert option {kwargs}")
    if kwargs["body"] != {"values": [["01/01/2025", "", 4.2, "", ""]]}:
        raise AssertionError(f"Unexpected body {kwargs['body']}")


def test_api_failures_become_store_errors() -> None:
    """Test error translation for reads and writes."""
    client, service = _client()
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.side_effect = RuntimeError("503 backend error")
    values.append.return_value.execute.side_effect = RuntimeError("403 forbidden")

    with pytest.raises(StoreIOError):
        client.read_rows()
    with pytest.raises(StoreIOError):
        client.append_row(["01/01/2025"])
