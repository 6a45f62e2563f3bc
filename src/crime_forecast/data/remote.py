"""Client for the remote statistical forecasting service."""

import logging
import os
from typing import Optional

import httpx

from ..api.schemas import RemoteForecastRequest, RemoteForecastResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class RemoteForecastError(Exception):
    """Raised when the remote forecaster fails or returns an unusable response."""


class RemoteForecastClient:
    """Async client posting cluster data to a remote forecasting endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch_forecast(self, request: RemoteForecastRequest) -> RemoteForecastResponse:
        """Request a forecast and validate the response shape.

        Raises:
            RemoteForecastError: On transport errors, non-2xx responses,
                invalid JSON or a response that does not match the schema.
        """
        payload = request.model_dump(mode="json", by_alias=True)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise RemoteForecastError(f"Remote forecaster request failed: {e}") from e
        except ValueError as e:
            raise RemoteForecastError(f"Remote forecaster returned invalid JSON: {e}") from e

        try:
            return RemoteForecastResponse.model_validate(body)
        except ValueError as e:
            raise RemoteForecastError(f"Remote forecaster returned an invalid response: {e}") from e


_remote_client: Optional[RemoteForecastClient] = None


def get_remote_client() -> Optional[RemoteForecastClient]:
    """Return the shared remote client, or None when no endpoint is configured."""
    global _remote_client
    url = os.getenv("FORECAST_SERVICE_URL")
    if not url:
        return None
    if _remote_client is None or _remote_client.url != url:
        timeout = float(os.getenv("FORECAST_SERVICE_TIMEOUT", str(DEFAULT_TIMEOUT)))
        _remote_client = RemoteForecastClient(url, timeout=timeout)
        logger.info(f"Remote forecaster configured at {url}")
    return _remote_client
