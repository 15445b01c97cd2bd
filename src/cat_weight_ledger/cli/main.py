"""
Command-line interface for Cat Weight Ledger.

Provides commands for recording weights and summarizing or exporting the
reconstructed weight series.
"""

from pathlib import Path

import typer

from cat_weight_ledger.domain.series import SeriesWindow, SubjectSummary, TimeSeries
from cat_weight_ledger.domain.weight import Measurement, UpdateCell
from cat_weight_ledger.infrastructure.gviz_client.client import GvizSheetReader
from cat_weight_ledger.infrastructure.parsers.csv_export import CSVExportReader
from cat_weight_ledger.infrastructure.proxy_client.client import ProxyClient
from cat_weight_ledger.infrastructure.sheets_client.client import SheetsLedgerClient
from cat_weight_ledger.services.output import OutputService
from cat_weight_ledger.services.recorder import WeightRecorder
from cat_weight_ledger.services.series import SeriesService
from cat_weight_ledger.services.upsert import LedgerUpsertService
from cat_weight_ledger.utils.date_parsing import format_date_key, today_in_timezone
from cat_weight_ledger.utils.exceptions import CatWeightLedgerError
from cat_weight_ledger.utils.logging_config import get_logger, setup_logging
from cat_weight_ledger.utils.parameters import ParameterLoader

app = typer.Typer(help="Cat Weight Ledger - Record and review the cats' weights")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "cat_weight_ledger")
    return param_loader


def fail(action: str, error: CatWeightLedgerError) -> typer.Exit:
    """Report a ledger error and build the exit to raise."""
    logger.error(f"{action} failed: {error}")
    typer.echo(f"Error ({error.kind}): {error}", err=True)
    return typer.Exit(code=1)


def load_series(
    param_loader: ParameterLoader, csv_file: str | None, source: str = "sheets"
) -> TimeSeries:
    """
    Reconstruct the series from a CSV export or from the live sheet.

    The sheet is read through the Sheets API (``sheets``) or the public
    visualization query endpoint (``gviz``).
    """
    if csv_file:
        raw_table = CSVExportReader(param_loader.get_csv_config()).read(Path(csv_file))
    elif source == "gviz":
        raw_table = GvizSheetReader(param_loader.get_sheets_config()).read_raw_table()
    elif source == "sheets":
        raw_table = SheetsLedgerClient(param_loader.get_sheets_config()).read_raw_table()
    else:
        raise typer.BadParameter(f"Unknown read path: {source}", param_hint="--source")

    return SeriesService(param_loader.get_ledger_config()).reconstruct(raw_table)


def format_summary(summary: SubjectSummary) -> str:
    if summary.latest is None:
        return f"{summary.subject}: no measurements"

    line = f"{summary.subject}: {summary.latest.value:.2f} kg ({summary.latest.date_key})"
    if summary.change is not None:
        sign = "+" if summary.change.change > 0 else ""
        percent = (
            "n/a"
            if summary.change.percent_change is None
            else f"{sign}{summary.change.percent_change:.1f}%"
        )
        line += f"  {sign}{summary.change.change:.2f} kg ({percent})"
    return line


@app.command()
def add(
    cat: str = typer.Option(..., help="Cat name: Gaudí, Maite, Benito or Cleopatra"),
    weight: float = typer.Option(..., help="Weight in kilograms"),
    date: str | None = typer.Option(None, help="Date as DD/MM/YYYY (defaults to today)"),
    via: str = typer.Option("sheets", help="Write path: sheets or proxy"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Record a weight measurement.

    Updates the cat's cell on the date's row, or appends a new row when the
    date is not in the ledger yet.
    """
    try:
        param_loader = init_config(config_path)
        ledger_config = param_loader.get_ledger_config()
        date_key = date or format_date_key(today_in_timezone(ledger_config.timezone))

        measurement = Measurement.create(date_key, cat, weight)

        if via == "proxy":
            ProxyClient(param_loader.get_proxy_config()).submit(measurement)
            typer.echo(
                f"Sent {measurement.subject.value} = {measurement.weight} kg on "
                f"{measurement.date_key} through the proxy"
            )
            return
        if via != "sheets":
            raise typer.BadParameter(f"Unknown write path: {via}", param_hint="--via")

        recorder = WeightRecorder(
            SheetsLedgerClient(param_loader.get_sheets_config()),
            LedgerUpsertService(ledger_config),
        )
        instruction = recorder.record_measurement(measurement)

        action = "Updated" if isinstance(instruction, UpdateCell) else "Added"
        typer.echo(
            f"{action} {measurement.subject.value} = {measurement.weight} kg on "
            f"{measurement.date_key}"
        )

    except CatWeightLedgerError as e:
        raise fail("Add", e) from e


@app.command()
def summary(
    window: SeriesWindow = typer.Option(SeriesWindow.ALL, help="Time window: 1m, 3m, 6m, 1y, all"),
    csv_file: str | None = typer.Option(None, help="Read a CSV export instead of the sheet"),
    source: str = typer.Option(
        "sheets", help="Sheet read path: sheets (API) or gviz (published sheet)"
    ),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Show each cat's latest weight and last change.
    """
    try:
        param_loader = init_config(config_path)
        series_service = SeriesService(param_loader.get_ledger_config())

        series = series_service.filter_range(load_series(param_loader, csv_file, source), window)

        typer.echo(f"{len(series)} measurement dates in window {window.value}")
        for subject_summary in series_service.summarize(series):
            typer.echo(f"  {format_summary(subject_summary)}")

        if series.skipped:
            typer.echo(f"Skipped {len(series.skipped)} malformed rows")

    except CatWeightLedgerError as e:
        raise fail("Summary", e) from e


@app.command()
def export(
    window: SeriesWindow = typer.Option(SeriesWindow.ALL, help="Time window: 1m, 3m, 6m, 1y, all"),
    csv_file: str | None = typer.Option(None, help="Read a CSV export instead of the sheet"),
    source: str = typer.Option(
        "sheets", help="Sheet read path: sheets (API) or gviz (published sheet)"
    ),
    output_format: str | None = typer.Option(None, help="Output format: csv, parquet, or both"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Write the reconstructed series, per-cat summary and skipped rows to files.
    """
    try:
        param_loader = init_config(config_path)
        output_config = param_loader.get_output_config()
        series_service = SeriesService(param_loader.get_ledger_config())

        if output_format:
            if output_format == "both":
                output_config.formats = ["csv", "parquet"]
            else:
                output_config.formats = [output_format]

        series = series_service.filter_range(load_series(param_loader, csv_file, source), window)

        output_service = OutputService(output_config)
        written = output_service.write_series(series)
        written.append(output_service.write_summary(series_service.summarize(series), window.value))
        skipped_path = output_service.write_skipped_rows(series)
        if skipped_path:
            written.append(skipped_path)

        typer.echo(f"Exported {len(series)} measurement dates")
        for path in written:
            typer.echo(f"  - {path}")

    except CatWeightLedgerError as e:
        raise fail("Export", e) from e


if __name__ == "__main__":
    app()
