"""
Output service for writing the reconstructed series and its statistics.

Handles CSV and Parquet series output plus JSON summaries.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from cat_weight_ledger.domain.series import SubjectSummary, TimeSeries
from cat_weight_ledger.domain.weight import Subject
from cat_weight_ledger.utils.parameters import OutputConfig

logger = logging.getLogger(__name__)


class OutputService:
    """
    Service for writing data to output files.

    Handles multiple output formats for the series and JSON for summaries.
    """

    def __init__(self, config: OutputConfig) -> None:
        """
        Initialize output service.

        Args:
            config: Output configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def series_to_dataframe(series: TimeSeries) -> pd.DataFrame:
        """One row per date, one float column per cat (NaN when not weighed)."""
        columns = ["date", "parsed_date"] + [subject.value for subject in Subject]
        df = pd.DataFrame(series.to_records(), columns=columns)
        df["parsed_date"] = pd.to_datetime(df["parsed_date"])
        for subject in Subject:
            df[subject.value] = df[subject.value].astype("float64")
        return df

    def write_series(self, series: TimeSeries) -> list[Path]:
        """
        Write the series to CSV and/or Parquet.

        Args:
            series: Reconstructed (possibly windowed) series.

        Returns:
            Paths written.
        """
        if not len(series):
            logger.warning("No series points to write")
            return []

        df = self.series_to_dataframe(series)
        written: list[Path] = []

        if "csv" in self.config.formats:
            csv_path = self.output_dir / self.config.files.series_csv
            df.to_csv(csv_path, index=False)
            logger.info(f"Wrote series CSV: {csv_path}")
            written.append(csv_path)

        if "parquet" in self.config.formats:
            parquet_path = self.output_dir / self.config.files.series_parquet
            df.to_parquet(
                parquet_path,
                engine=self.config.parquet.engine,
                compression=self.config.parquet.compression,
                index=False,
            )
            logger.info(f"Wrote series Parquet: {parquet_path}")
            written.append(parquet_path)

        return written

    def write_summary(self, summaries: list[SubjectSummary], window: str) -> Path:
        """
        Write per-cat statistics to JSON.

        Args:
            summaries: Per-cat summaries.
            window: Window the statistics were computed over.

        Returns:
            Path written.
        """
        summary_path = self.output_dir / self.config.files.summary
        payload: dict[str, Any] = {
            "window": window,
            "subjects": [summary.model_dump(mode="json") for summary in summaries],
        }

        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

        logger.info(f"Wrote summary: {summary_path}")
        return summary_path

    def write_skipped_rows(self, series: TimeSeries) -> Path | None:
        """
        Write the malformed rows dropped during reconstruction to JSON.

        Returns:
            Path written, None when no row was skipped.
        """
        if not series.skipped:
            logger.info("No skipped rows to write")
            return None

        skipped_path = self.output_dir / self.config.files.skipped_rows
        with open(skipped_path, "w", encoding="utf-8") as f:
            json.dump(
                [row.model_dump() for row in series.skipped], f, indent=2, ensure_ascii=False
            )

        logger.info(f"Wrote {len(series.skipped)} skipped rows to {skipped_path}")
        return skipped_path
