"""
Google visualization query reader.

Reads a published ledger sheet without credentials through the ``gviz/tq``
endpoint. The answer is JSON wrapped in a ``setResponse(...)`` callback.
"""

import json
import logging
import re
from typing import Any

import requests

from cat_weight_ledger.domain.series import RawCell
from cat_weight_ledger.utils.exceptions import StoreIOError
from cat_weight_ledger.utils.parameters import SheetsConfig

logger = logging.getLogger(__name__)

_RESPONSE_WRAPPER = re.compile(r"setResponse\((.*)\)\s*;?\s*$", re.DOTALL)


def unwrap_response(text: str) -> dict[str, Any]:
    """
    Extract the JSON payload from a gviz JSONP answer.

    Args:
        text: Response body, e.g. ``/*O_o*/ google.visualization.Query.setResponse({...});``

    Returns:
        Decoded payload.

    Raises:
        StoreIOError: If the body is not a gviz answer.
    """
    match = _RESPONSE_WRAPPER.search(text)
    if not match:
        raise StoreIOError("Visualization query returned an unexpected response")

    try:
        payload = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise StoreIOError(f"Visualization query returned invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise StoreIOError("Visualization query returned an unexpected response")
    return payload


class GvizSheetReader:
    """
    Read-only ledger access through the visualization query endpoint.

    Each table cell comes back as ``{"v": raw, "f": formatted}`` or null;
    dates arrive as ``Date(y,m,d)`` literals with a zero-based month.
    """

    def __init__(self, config: SheetsConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def read_raw_table(self) -> list[list[RawCell]]:
        """
        Read the sheet as rows of raw/formatted cells.

        Returns:
            Data rows in sheet order. The header row is usually absent because
            the endpoint turns it into column labels.

        Raises:
            StoreIOError: If the request fails or the query reports an error.
        """
        try:
            response = self.session.get(
                self.config.gviz_endpoint,
                params={"tqx": "out:json", "sheet": self.config.sheet_name},
                timeout=self.config.gviz_timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreIOError(f"Visualization query failed: {e}") from e

        payload = unwrap_response(response.text)

        if payload.get("status") == "error":
            messages = "; ".join(
                error.get("detailed_message") or error.get("message") or error.get("reason", "")
                for error in payload.get("errors", [])
            )
            raise StoreIOError(f"Visualization query error: {messages or 'unknown error'}")

        table = payload.get("table")
        if not isinstance(table, dict):
            raise StoreIOError("Visualization query response has no table")

        rows: list[list[RawCell]] = []
        for row in table.get("rows") or []:
            cells = (row or {}).get("c") or []
            rows.append(
                [
                    RawCell()
                    if cell is None
                    else RawCell(
                        value=cell.get("v"),
                        formatted=cell.get("f") if isinstance(cell.get("f"), str) else None,
                    )
                    for cell in cells
                ]
            )

        logger.info(f"Read {len(rows)} rows from sheet {self.config.sheet_name} via gviz")
        return rows
