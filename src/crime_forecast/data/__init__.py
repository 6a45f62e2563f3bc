"""External data sources."""

from .remote import RemoteForecastClient, RemoteForecastError, get_remote_client

__all__ = [
    "RemoteForecastClient",
    "RemoteForecastError",
    "get_remote_client",
]
