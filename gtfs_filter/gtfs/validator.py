"""Referential integrity checks for a loaded or filtered feed."""

import logging
from collections import Counter
from typing import Any

from gtfs_filter.filter.graph import FeedSource
from gtfs_filter.gtfs.models import ValidationReport

logger = logging.getLogger(__name__)


class GraphValidator:
    """Check that no entity refers to one that is missing from the feed."""

    def __init__(self, source: FeedSource) -> None:
        """Initialize validator with any source exposing the bulk accessors."""
        self.agencies = set(source.get_all_agencies())
        self.routes = set(source.get_all_routes())
        self.trips = set(source.get_all_trips())
        self.stop_times = set(source.get_all_stop_times())
        self.stops = set(source.get_all_stops())
        self.calendars = set(source.get_all_calendars())
        self.calendar_dates = set(source.get_all_calendar_dates())
        self.transfers = set(source.get_all_transfers())
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self) -> ValidationReport:
        """Run all integrity checks."""
        logger.info("Checking referential integrity")

        self._validate_stop_times()
        self._validate_trips()
        self._validate_routes()
        self._validate_services()
        self._validate_stops()
        self._validate_transfers()

        valid = len(self.errors) == 0

        stats = {
            "agencies": len(self.agencies),
            "routes": len(self.routes),
            "trips": len(self.trips),
            "stop_times": len(self.stop_times),
            "stops": len(self.stops),
            "calendars": len(self.calendars),
            "calendar_dates": len(self.calendar_dates),
            "transfers": len(self.transfers),
        }

        report = ValidationReport(
            valid=valid,
            errors=self.errors.copy(),
            warnings=self.warnings.copy(),
            stats=stats,
        )

        if not valid:
            logger.error(f"Integrity check failed with {len(self.errors)} errors")
        elif self.warnings:
            logger.warning(f"Integrity check passed with {len(self.warnings)} warnings")
        else:
            logger.info("Integrity check passed")

        return report

    def _validate_stop_times(self) -> None:
        """Stop times must reference existing trips and stops."""
        for st in self.stop_times:
            if st.trip not in self.trips:
                self.errors.append(
                    f"Stop time {st.stop_sequence} references non-existent trip {st.trip.id}"
                )
            if st.stop not in self.stops:
                self.errors.append(
                    f"Stop time {st.stop_sequence} of trip {st.trip.id} "
                    f"references non-existent stop {st.stop.id}"
                )

    def _validate_trips(self) -> None:
        """Trips need an existing route and at least two stop times."""
        stop_time_count = Counter(st.trip for st in self.stop_times)
        for trip in self.trips:
            if trip.route not in self.routes:
                self.errors.append(f"Trip {trip.id} references non-existent route {trip.route.id}")
            if stop_time_count[trip] < 2:
                self.errors.append(f"Trip {trip.id} has {stop_time_count[trip]} stop times")

    def _validate_routes(self) -> None:
        """Routes need a trip; a missing agency is only reported as a warning."""
        routes_in_trips = {trip.route for trip in self.trips}
        for route in self.routes:
            if route not in routes_in_trips:
                self.errors.append(f"Route {route.id} has no trips")
            if route.agency not in self.agencies:
                self.warnings.append(
                    f"Route {route.id} references agency {route.agency.agency_id} "
                    f"which is not in the feed"
                )

    def _validate_services(self) -> None:
        """Calendars and calendar dates must be used by a trip."""
        service_ids = {trip.service_id for trip in self.trips}
        for calendar in self.calendars:
            if calendar.service_id not in service_ids:
                self.errors.append(f"Calendar {calendar.service_id} is not used by any trip")
        for calendar_date in self.calendar_dates:
            if calendar_date.service_id not in service_ids:
                self.errors.append(
                    f"Calendar date {calendar_date.service_id}/{calendar_date.date} "
                    f"is not used by any trip"
                )

    def _validate_stops(self) -> None:
        """Quays need a stop time and a resolvable parent; stations need a quay."""
        station_ids = {stop.id.id for stop in self.stops if stop.is_station}
        stops_in_trips = {st.stop for st in self.stop_times}
        parent_refs = {stop.parent_station for stop in self.stops if stop.is_quay}

        for stop in self.stops:
            if stop.is_quay:
                if stop.parent_station and stop.parent_station not in station_ids:
                    self.errors.append(
                        f"Stop {stop.id} references non-existent parent station "
                        f"{stop.parent_station}"
                    )
                if stop not in stops_in_trips:
                    self.errors.append(f"Stop {stop.id} has no stop times")
            elif stop.is_station and stop.id.id not in parent_refs:
                self.errors.append(f"Station {stop.id} has no quays")

    def _validate_transfers(self) -> None:
        """Every endpoint a transfer sets must exist."""
        for transfer in self.transfers:
            endpoints: list[tuple[str, Any, set[Any]]] = [
                ("from_stop", transfer.from_stop, self.stops),
                ("to_stop", transfer.to_stop, self.stops),
                ("from_route", transfer.from_route, self.routes),
                ("to_route", transfer.to_route, self.routes),
                ("from_trip", transfer.from_trip, self.trips),
                ("to_trip", transfer.to_trip, self.trips),
            ]
            for name, entity, entities in endpoints:
                if entity is not None and entity not in entities:
                    self.errors.append(f"Transfer references non-existent {name} {entity.id}")
