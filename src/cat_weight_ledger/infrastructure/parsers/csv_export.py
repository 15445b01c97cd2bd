"""
Ledger CSV export reader.

Reads a CSV download of the ledger sheet into a raw table suitable for series
reconstruction, with encoding and delimiter detection.
"""

import logging
from pathlib import Path

import pandas as pd

from cat_weight_ledger.utils.exceptions import ParsingError
from cat_weight_ledger.utils.parameters import CSVConfig

logger = logging.getLogger(__name__)


class CSVExportReader:
    """
    Reader for CSV exports of the ledger.

    Cells are kept as text; numeric coercion and date parsing happen during
    reconstruction so malformed rows are skipped rather than rejected here.
    """

    def __init__(self, csv_config: CSVConfig) -> None:
        """
        Initialize CSV export reader.

        Args:
            csv_config: CSV parsing configuration.
        """
        self.csv_config = csv_config

    def _detect_encoding(self, file_path: Path) -> str:
        """
        Detect file encoding.

        Args:
            file_path: Path to CSV file.

        Returns:
            First configured encoding that decodes the whole file.
        """
        for encoding in self.csv_config.encodings:
            try:
                with open(file_path, encoding=encoding) as f:
                    f.read()
                logger.debug(f"Detected encoding: {encoding}")
                return encoding
            except (UnicodeDecodeError, LookupError):
                continue

        logger.warning("Encoding detection failed, using utf-8")
        return "utf-8"

    def _detect_delimiter(self, file_path: Path, encoding: str) -> str:
        """
        Detect CSV delimiter from the first line.

        Args:
            file_path: Path to CSV file.
            encoding: File encoding.

        Returns:
            Detected delimiter.
        """
        with open(file_path, encoding=encoding) as f:
            first_line = f.readline()

        for delimiter in self.csv_config.delimiters:
            if delimiter in first_line:
                logger.debug(f"Detected delimiter: {repr(delimiter)}")
                return delimiter

        logger.warning("Delimiter detection failed, using comma")
        return ","

    def read(self, file_path: Path) -> list[list[str]]:
        """
        Read a ledger export into rows of text cells.

        Args:
            file_path: Path to CSV file.

        Returns:
            Rows in file order, header row included. Empty cells are "".

        Raises:
            ParsingError: If the file cannot be read.
        """
        try:
            encoding = self._detect_encoding(file_path)
            delimiter = self._detect_delimiter(file_path, encoding)

            df = pd.read_csv(
                file_path,
                encoding=encoding,
                sep=delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            logger.warning(f"{file_path.name} is empty")
            return []
        except Exception as e:
            raise ParsingError(f"Failed to read CSV export {file_path}: {e}") from e

        rows = [[str(cell) for cell in row] for row in df.itertuples(index=False, name=None)]
        logger.info(f"Read {len(rows)} rows from {file_path.name}")
        return rows
