"""Exception types raised across the scan pipeline."""

from __future__ import annotations


class FullsetError(Exception):
    """Base class for fullset-arb errors."""


class CatalogError(FullsetError):
    """Market listing could not be fetched or had an unexpected shape. Aborts the cycle."""


class StorageError(FullsetError):
    """Storage could not be opened or initialized. Fatal at startup."""
