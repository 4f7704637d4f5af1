"""Selection filters and the cascade that follows them."""

import logging
from collections.abc import Iterable
from datetime import date

from gtfs_filter.filter.graph import GtfsModel
from gtfs_filter.filter.tracking import SizeChange
from gtfs_filter.gtfs.models import Box

logger = logging.getLogger(__name__)


def retain_agencies(model: GtfsModel, names: Iterable[str]) -> list[SizeChange]:
    """
    Keep only the named agencies.

    Cascades removal: Agency > Route > Trip > StopTime.
    """
    include = _name_set(names)
    logger.info(f"Remove all agencies except: {sorted(include)}")
    model.agencies.remove_if(lambda agency: agency.name not in include)
    cascade_agencies_deleted(model)
    return model.summary()


def retain_routes(model: GtfsModel, short_names: Iterable[str]) -> list[SizeChange]:
    """
    Keep only the routes with the given short names.

    Cascades removal: Route > Trip > StopTime. Agencies are not re-checked.
    """
    include = _name_set(short_names)
    logger.info(f"Remove all routes except: {sorted(include)}")
    model.routes.remove_if(lambda route: route.short_name not in include)
    cascade_routes_deleted(model)
    return model.summary()


def retain_stops(model: GtfsModel, box: Box) -> list[SizeChange]:
    """Keep only the stops within the box. Dependents are left to cleanup."""
    logger.info(f"Remove stops outside box: {box}")
    model.stops.remove_if(box.outside)
    return model.summary()


def set_service_end_date(model: GtfsModel, year: int, month: int, day: int) -> None:
    """Set the end date of every calendar service."""
    logger.info(f"Set service end date to {year}-{month}-{day}")
    end_date = date(year, month, day)
    for calendar in model.calendars:
        calendar.end_date = end_date


def _name_set(names: Iterable[str]) -> set[str]:
    if isinstance(names, str):
        raise TypeError(f"Expected a collection of names, got the string {names!r}")
    return set(names)


def cascade_agencies_deleted(model: GtfsModel) -> None:
    model.routes.remove_if(lambda route: route.agency not in model.agencies)
    cascade_routes_deleted(model)


def cascade_routes_deleted(model: GtfsModel) -> None:
    model.trips.remove_if(lambda trip: trip.route not in model.routes)
    cascade_trips_deleted(model)


def cascade_trips_deleted(model: GtfsModel) -> None:
    model.stop_times.remove_if(lambda stop_time: stop_time.trip not in model.trips)
