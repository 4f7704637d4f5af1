"""In-memory entity graph the filters and cleanup operate on."""

import logging
from collections.abc import Collection, Iterable
from dataclasses import replace
from typing import Any, Protocol

from gtfs_filter.exceptions import UnsupportedOperationError
from gtfs_filter.filter.tracking import SizeChange, TrackedSet
from gtfs_filter.gtfs.models import (
    Agency,
    FeedInfo,
    Route,
    ServiceCalendar,
    ServiceCalendarDate,
    Stop,
    StopTime,
    Transfer,
    Trip,
)

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Anything exposing the bulk accessors of a loaded feed."""

    def get_all_feed_infos(self) -> Iterable[FeedInfo]: ...
    def get_all_agencies(self) -> Iterable[Agency]: ...
    def get_all_calendars(self) -> Iterable[ServiceCalendar]: ...
    def get_all_calendar_dates(self) -> Iterable[ServiceCalendarDate]: ...
    def get_all_routes(self) -> Iterable[Route]: ...
    def get_all_trips(self) -> Iterable[Trip]: ...
    def get_all_stop_times(self) -> Iterable[StopTime]: ...
    def get_all_stops(self) -> Iterable[Stop]: ...
    def get_all_transfers(self) -> Iterable[Transfer]: ...


class _BulkAccess:
    """Bulk accessors shared by the live graph and its snapshots."""

    _collections: dict[type, Collection[Any]]

    def get_all_entities_for_type(self, entity_type: type) -> Collection[Any]:
        """Return the collection for a managed type, empty for anything else."""
        return self._collections.get(entity_type, ())

    def get_all_feed_infos(self) -> Collection[FeedInfo]:
        return self._collections[FeedInfo]

    def get_all_agencies(self) -> Collection[Agency]:
        return self._collections[Agency]

    def get_all_calendars(self) -> Collection[ServiceCalendar]:
        return self._collections[ServiceCalendar]

    def get_all_calendar_dates(self) -> Collection[ServiceCalendarDate]:
        return self._collections[ServiceCalendarDate]

    def get_all_routes(self) -> Collection[Route]:
        return self._collections[Route]

    def get_all_trips(self) -> Collection[Trip]:
        return self._collections[Trip]

    def get_all_stop_times(self) -> Collection[StopTime]:
        return self._collections[StopTime]

    def get_all_stops(self) -> Collection[Stop]:
        return self._collections[Stop]

    def get_all_transfers(self) -> Collection[Transfer]:
        return self._collections[Transfer]

    # Fares, frequencies, pathways and shapes are not managed.
    def get_all_fare_attributes(self) -> Collection[Any]:
        return ()

    def get_all_fare_rules(self) -> Collection[Any]:
        return ()

    def get_all_frequencies(self) -> Collection[Any]:
        return ()

    def get_all_pathways(self) -> Collection[Any]:
        return ()

    def get_all_shape_points(self) -> Collection[Any]:
        return ()

    def get_entity_for_id(self, entity_type: type, entity_id: Any) -> Any:
        raise UnsupportedOperationError(
            f"Lookup of {entity_type.__name__} by id is not supported: {entity_id}"
        )

    def get_agency_for_id(self, agency_id: str) -> Agency:
        return self.get_entity_for_id(Agency, agency_id)

    def get_route_for_id(self, route_id: Any) -> Route:
        return self.get_entity_for_id(Route, route_id)

    def get_trip_for_id(self, trip_id: Any) -> Trip:
        return self.get_entity_for_id(Trip, trip_id)

    def get_stop_for_id(self, stop_id: Any) -> Stop:
        return self.get_entity_for_id(Stop, stop_id)

    def get_stop_time_for_id(self, stop_time_id: Any) -> StopTime:
        return self.get_entity_for_id(StopTime, stop_time_id)

    def get_calendar_for_id(self, calendar_id: Any) -> ServiceCalendar:
        return self.get_entity_for_id(ServiceCalendar, calendar_id)

    def get_calendar_date_for_id(self, calendar_date_id: Any) -> ServiceCalendarDate:
        return self.get_entity_for_id(ServiceCalendarDate, calendar_date_id)

    def get_transfer_for_id(self, transfer_id: Any) -> Transfer:
        return self.get_entity_for_id(Transfer, transfer_id)

    def get_feed_info_for_id(self, feed_info_id: Any) -> FeedInfo:
        return self.get_entity_for_id(FeedInfo, feed_info_id)


class FeedSnapshot(_BulkAccess):
    """Read-only copy of the graph handed to the feed writer."""

    def __init__(self, collections: dict[type, Collection[Any]]) -> None:
        self._collections = {
            entity_type: frozenset(entities) for entity_type, entities in collections.items()
        }
        # Calendars are mutable, copy them so later end date changes stay out.
        self._collections[ServiceCalendar] = frozenset(
            replace(calendar) for calendar in collections[ServiceCalendar]
        )


class GtfsModel(_BulkAccess):
    """The nine entity collections of a feed, each tracked for size changes."""

    def __init__(self, source: FeedSource) -> None:
        """Copy every collection out of the source, which is left untouched."""
        self.feed_infos: TrackedSet[FeedInfo] = TrackedSet("feedInfos", source.get_all_feed_infos())
        self.agencies: TrackedSet[Agency] = TrackedSet("agencies", source.get_all_agencies())
        self.calendars: TrackedSet[ServiceCalendar] = TrackedSet(
            "calendars", (replace(calendar) for calendar in source.get_all_calendars())
        )
        self.calendar_dates: TrackedSet[ServiceCalendarDate] = TrackedSet(
            "calendarDates", source.get_all_calendar_dates()
        )
        self.routes: TrackedSet[Route] = TrackedSet("routes", source.get_all_routes())
        self.trips: TrackedSet[Trip] = TrackedSet("trips", source.get_all_trips())
        self.stop_times: TrackedSet[StopTime] = TrackedSet(
            "stopTimes", source.get_all_stop_times()
        )
        self.stops: TrackedSet[Stop] = TrackedSet("stops", source.get_all_stops())
        self.transfers: TrackedSet[Transfer] = TrackedSet("transfers", source.get_all_transfers())

        self.sets: list[TrackedSet[Any]] = [
            self.feed_infos,
            self.agencies,
            self.calendars,
            self.calendar_dates,
            self.routes,
            self.trips,
            self.stop_times,
            self.stops,
            self.transfers,
        ]
        self._collections = {
            FeedInfo: self.feed_infos,
            Agency: self.agencies,
            ServiceCalendar: self.calendars,
            ServiceCalendarDate: self.calendar_dates,
            Route: self.routes,
            Trip: self.trips,
            StopTime: self.stop_times,
            Stop: self.stops,
            Transfer: self.transfers,
        }
        for tracked in self.sets:
            tracked.reset_change_tracking()

    def summary(self) -> list[SizeChange]:
        """Checkpoint every collection and log the ones that shrank."""
        changes = [change for change in (s.checkpoint() for s in self.sets) if change]
        for change in changes:
            logger.info(str(change))
        return changes

    def stats(self) -> dict[str, int]:
        return {tracked.name: len(tracked) for tracked in self.sets}

    def total_size(self) -> int:
        return sum(len(tracked) for tracked in self.sets)

    def snapshot(self) -> FeedSnapshot:
        """Freeze the current state for the writer."""
        return FeedSnapshot(self._collections)
