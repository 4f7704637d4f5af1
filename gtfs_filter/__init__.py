"""GTFS Filter - Reduce GTFS feeds to a referentially consistent subset."""

from gtfs_filter.api import check_feed, filter_feed
from gtfs_filter.version import VERSION

__version__ = VERSION
__all__ = ["VERSION", "check_feed", "filter_feed"]
