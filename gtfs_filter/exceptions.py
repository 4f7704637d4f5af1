"""Exceptions raised by gtfs-filter."""


class GtfsFilterError(Exception):
    """Base class for gtfs-filter errors."""


class UnsupportedOperationError(GtfsFilterError, NotImplementedError):
    """A single-entity lookup was requested; only bulk collections are managed."""
