"""
Exception types raised by the data access and configuration layers.
"""


class DashboardError(Exception):
    """Base class for dashboard errors."""


class ConfigurationError(DashboardError):
    """Store settings are missing or invalid."""


class FetchError(DashboardError):
    """The listing store could not be reached or rejected a query."""
