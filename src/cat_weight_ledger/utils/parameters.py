"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cat_weight_ledger.utils.exceptions import ConfigurationError

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class OAuth2Config(BaseModel):
    """OAuth2 authentication configuration."""

    credentials_path: str
    token_path: str
    scopes: list[str] = Field(default_factory=lambda: list(SHEETS_SCOPES))


class ServiceAccountConfig(BaseModel):
    """Service account authentication configuration."""

    credentials_path: str
    scopes: list[str] = Field(default_factory=lambda: list(SHEETS_SCOPES))


class SheetsConfig(BaseModel):
    """Google Sheets ledger location and authentication."""

    spreadsheet_id: str
    sheet_name: str = "Hoja 1"
    first_column: str = Field("A", pattern="^[A-Z]$")
    last_column: str = Field("E", pattern="^[A-Z]$")
    auth_method: str = Field("service_account", pattern="^(oauth2|service_account)$")
    oauth2: OAuth2Config | None = None
    service_account: ServiceAccountConfig | None = None
    gviz_url: str = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq"
    gviz_timeout_seconds: float = Field(10.0, gt=0)

    @property
    def data_range(self) -> str:
        """A1 range covering the date column and every subject column."""
        return f"{self.quoted_sheet_name}!{self.first_column}:{self.last_column}"

    @property
    def gviz_endpoint(self) -> str:
        """Visualization query endpoint of the spreadsheet (public read access)."""
        return self.gviz_url.format(spreadsheet_id=self.spreadsheet_id)

    @property
    def quoted_sheet_name(self) -> str:
        return "'" + self.sheet_name.replace("'", "''") + "'"


class LedgerConfig(BaseModel):
    """Ledger layout conventions shared by the upsert engine and the reconstructor."""

    header_sentinel: str = "Fecha"
    empty_value: str = ""
    timezone: str = "Europe/Madrid"


class ProxyConfig(BaseModel):
    """HTTP write proxy configuration."""

    url: str | None = None
    timeout_seconds: float = Field(10.0, gt=0)


class OutputFilesConfig(BaseModel):
    """Output file names configuration."""

    series_csv: str = "weight_series.csv"
    series_parquet: str = "weight_series.parquet"
    summary: str = "weight_summary.json"
    skipped_rows: str = "skipped_rows.json"


class ParquetConfig(BaseModel):
    """Parquet output configuration."""

    compression: str = "snappy"
    engine: str = "pyarrow"


class OutputConfig(BaseModel):
    """Output configuration."""

    dir: str = "output"
    files: OutputFilesConfig = Field(default_factory=OutputFilesConfig)
    formats: list[str] = Field(default_factory=lambda: ["csv"])
    parquet: ParquetConfig = Field(default_factory=ParquetConfig)


class CSVConfig(BaseModel):
    """Ledger CSV export parsing configuration."""

    encodings: list[str] = Field(default_factory=lambda: ["utf-8-sig", "utf-8", "latin-1"])
    delimiters: list[str] = Field(default_factory=lambda: [",", ";", "\t"])


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True
    max_bytes: int = Field(5_000_000, gt=0)
    backup_count: int = Field(3, ge=0)
    # third-party loggers held at WARNING so INFO output stays about the ledger
    quiet_loggers: list[str] = Field(
        default_factory=lambda: ["googleapiclient.discovery_cache", "urllib3"]
    )


class AppConfig(BaseSettings):
    """Main application configuration."""

    sheets: SheetsConfig
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    csv: CSVConfig = Field(default_factory=CSVConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="CWL_", case_sensitive=False)


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_sheets_config(self) -> SheetsConfig:
        """Get Google Sheets configuration."""
        return self.config.sheets

    def get_ledger_config(self) -> LedgerConfig:
        """Get ledger layout configuration."""
        return self.config.ledger

    def get_proxy_config(self) -> ProxyConfig:
        """Get write proxy configuration."""
        return self.config.proxy

    def get_csv_config(self) -> CSVConfig:
        """Get CSV export parsing configuration."""
        return self.config.csv

    def get_output_config(self) -> OutputConfig:
        """Get output configuration."""
        return self.config.output

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
