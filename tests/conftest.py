"""Shared fixtures for the cat weight ledger tests."""

import pytest

from cat_weight_ledger.services.series import SeriesService
from cat_weight_ledger.services.upsert import LedgerUpsertService
from cat_weight_ledger.utils.parameters import LedgerConfig


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(header_sentinel="Fecha", empty_value="", timezone="Europe/Madrid")


@pytest.fixture
def upsert_service(ledger_config: LedgerConfig) -> LedgerUpsertService:
    return LedgerUpsertService(ledger_config)


@pytest.fixture
def series_service(ledger_config: LedgerConfig) -> SeriesService:
    return SeriesService(ledger_config)
