"""Crime forecasting from clustered incident data."""

__version__ = "0.1.0"
