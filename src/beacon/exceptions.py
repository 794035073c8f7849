"""Custom exception hierarchy for Beacon.

Search failures (empty query, nothing matched) are ordinary response values;
these exceptions cover configuration, dataset loading and programming errors.
"""

from __future__ import annotations


class BeaconError(Exception):
    """Base class for all Beacon exceptions."""


class ConfigError(BeaconError):
    """Raised when configuration loading or validation fails."""


class DatasetError(BeaconError):
    """Raised when a record file cannot be read or has an unexpected shape."""


class SearchError(BeaconError):
    """Raised when the searcher is handed items it cannot index."""
