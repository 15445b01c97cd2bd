"""Unit tests for the output service."""

import json
from pathlib import Path

import pandas as pd

from cat_weight_ledger.services.output import OutputService
from cat_weight_ledger.services.series import SeriesService
from cat_weight_ledger.utils.parameters import OutputConfig


def test_write_series_csv(tmp_path: Path, series_service: SeriesService) -> None:
    """Test the series CSV has one column per cat."""
    series = series_service.reconstruct([["02/01/2025", 3.1, ""], ["01/01/2025", 3.0, 4.0]])
    service = OutputService(OutputConfig(dir=str(tmp_path), formats=["csv"]))

    written = service.write_series(series)

    if written != [tmp_path / "weight_series.csv"]:
        raise AssertionError(f"Unexpected files {written}")
    df = pd.read_csv(written[0])
    if list(df.columns) != ["date", "parsed_date", "Gaudí", "Maite", "Benito", "Cleopatra"]:
        raise AssertionError(f"Unexpected columns {list(df.columns)}")
    if list(df["date"]) != ["01/01/2025", "02/01/2025"]:
        raise AssertionError(f"Unexpected dates {list(df['date'])}")
    if not pd.isna(df.loc[1, "Maite"]):
        raise AssertionError("Expected missing Maite weight to be NaN")


def test_write_series_skips_empty(tmp_path: Path, series_service: SeriesService) -> None:
    """Test that an empty series writes nothing."""
    service = OutputService(OutputConfig(dir=str(tmp_path)))

    if service.write_series(series_service.reconstruct([])) != []:
        raise AssertionError("Expected no files for an empty series")


def test_write_summary_and_skipped_rows(tmp_path: Path, series_service: SeriesService) -> None:
    """Test JSON outputs."""
    series = series_service.reconstruct(
        [["01/01/2025", 3.0], ["31/02/2025", 3.2], ["03/01/2025", 3.3]]
    )
    service = OutputService(OutputConfig(dir=str(tmp_path)))

    summary_path = service.write_summary(series_service.summarize(series), "all")
    skipped_path = service.write_skipped_rows(series)

    with open(summary_path, encoding="utf-8") as f:
        summary = json.load(f)
    gaudi = summary["subjects"][0]
    if summary["window"] != "all" or gaudi["subject"] != "Gaudí":
        raise AssertionError(f"Unexpected summary {summary}")
    if gaudi["latest"]["date_key"] != "03/01/2025" or gaudi["change"]["change"] != 0.3:
        raise AssertionError(f"Unexpected Gaudí summary {gaudi}")

    if skipped_path is None:
        raise AssertionError("Expected a skipped rows file")
    with open(skipped_path, encoding="utf-8") as f:
        skipped = json.load(f)
    if [row["raw_date"] for row in skipped] != ["31/02/2025"]:
        raise AssertionError(f"Unexpected skipped rows {skipped}")
