"""
HTTP write proxy client.

Submits measurements to an intermediary endpoint that owns the spreadsheet
credentials. Transport failures are translated into ledger errors.
"""

import logging
from typing import Any

import requests

from cat_weight_ledger.domain.weight import Measurement
from cat_weight_ledger.utils.exceptions import ConfigurationError, StoreIOError, ValidationError
from cat_weight_ledger.utils.parameters import ProxyConfig

logger = logging.getLogger(__name__)


class ProxyClient:
    """
    Client for the ``{date, cat, weight}`` JSON write endpoint.

    The endpoint answers ``{"success": bool, "error": str}``. Client errors
    (HTTP 4xx) become ValidationError, everything else StoreIOError.
    """

    def __init__(self, config: ProxyConfig, session: requests.Session | None = None) -> None:
        """
        Initialize proxy client.

        Args:
            config: Proxy configuration.
            session: Optional requests session (connection reuse, testing).

        Raises:
            ConfigurationError: If no proxy URL is configured.
        """
        if not config.url:
            raise ConfigurationError("Proxy URL is not configured")

        self.config = config
        self.session = session or requests.Session()

    @staticmethod
    def _payload(measurement: Measurement) -> dict[str, Any]:
        return {
            "date": measurement.date_key,
            "cat": measurement.subject.value,
            "weight": measurement.weight,
        }

    @staticmethod
    def _error_message(body: Any, default: str) -> str:
        if isinstance(body, dict):
            message = body.get("error") or default
            details = body.get("details")
            return f"{message}: {details}" if details else str(message)
        return default

    def submit(self, measurement: Measurement) -> dict[str, Any]:
        """
        Send a validated measurement through the proxy.

        Args:
            measurement: Measurement to record.

        Returns:
            Decoded success response body.

        Raises:
            ValidationError: If the proxy rejects the measurement.
            StoreIOError: If the proxy is unreachable or the write failed.
        """
        payload = self._payload(measurement)
        logger.info(f"Submitting {payload} to proxy")

        try:
            response = self.session.post(
                self.config.url, json=payload, timeout=self.config.timeout_seconds
            )
        except requests.RequestException as e:
            raise StoreIOError(f"Proxy request failed: {e}") from e

        try:
            body: Any = response.json()
        except ValueError:
            body = None

        if 400 <= response.status_code < 500:
            raise ValidationError(
                self._error_message(body, f"Proxy rejected measurement (HTTP {response.status_code})")
            )

        if not response.ok:
            raise StoreIOError(
                self._error_message(body, f"Proxy write failed (HTTP {response.status_code})")
            )

        if not isinstance(body, dict):
            raise StoreIOError("Proxy returned an undecodable response")

        if not body.get("success"):
            raise StoreIOError(self._error_message(body, "Proxy reported an unsuccessful write"))

        logger.info(f"Proxy recorded {payload}")
        return body
