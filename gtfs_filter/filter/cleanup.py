"""Fixed-point cleanup of orphaned entities."""

import logging
from collections import Counter
from collections.abc import Collection
from dataclasses import dataclass, field

from gtfs_filter.filter.graph import GtfsModel
from gtfs_filter.filter.selection import cascade_trips_deleted
from gtfs_filter.filter.tracking import SizeChange
from gtfs_filter.gtfs.models import Stop, Transfer

logger = logging.getLogger(__name__)


@dataclass
class CleanupPass:
    """Size changes recorded during one pass over the cleanup steps."""

    number: int
    size_before: int
    size_after: int = 0
    changes: list[SizeChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.size_after != self.size_before


@dataclass
class CleanupReport:
    """All passes run until the graph stopped changing."""

    passes: list[CleanupPass] = field(default_factory=list)

    @property
    def pass_count(self) -> int:
        return len(self.passes)

    @property
    def removed(self) -> dict[str, int]:
        """Entities removed per collection over the whole run."""
        totals: Counter[str] = Counter()
        for cleanup_pass in self.passes:
            for change in cleanup_pass.changes:
                totals[change.name] += change.removed
        return dict(totals)


def cleanup_all(model: GtfsModel) -> CleanupReport:
    """
    Remove orphaned entities until no collection changes in a full pass.

    Each pass, in order:
    - Remove StopTimes whose Stop is gone
    - Remove Trips with 0 or 1 StopTime (cascade to StopTimes)
    - Remove Routes without Trips
    - Remove Services (Calendar and Dates) without Trips
    - Remove quay Stops with a missing parent station
    - Remove quay Stops without StopTimes, then stations without quays
    - Remove StopTimes without Trip
    - Remove Transfers with a missing Stop, Route or Trip

    Returns:
        CleanupReport with one entry per pass; the last pass has no changes.
    """
    report = CleanupReport()
    while True:
        cleanup_pass = _run_pass(model, len(report.passes) + 1)
        report.passes.append(cleanup_pass)
        if not cleanup_pass.changed:
            break

    logger.info(f"Cleanup reached a fixed point after {report.pass_count} passes")
    return report


def _run_pass(model: GtfsModel, number: int) -> CleanupPass:
    logger.debug(f"Cleanup pass {number}")
    cleanup_pass = CleanupPass(number, size_before=model.total_size())

    logger.info("Remove all StopTimes where there is no Stops")
    model.stop_times.remove_if(lambda st: st.stop not in model.stops)
    cleanup_pass.changes += model.summary()

    logger.info("Remove all Trips with 0 or 1 StopTime (cascade to StopTimes)")
    trip_count = Counter(st.trip for st in model.stop_times)
    model.trips.remove_if(lambda trip: trip_count[trip] < 2)
    cascade_trips_deleted(model)
    cleanup_pass.changes += model.summary()

    logger.info("Remove all Routes without Trips")
    routes_in_trips = {trip.route for trip in model.trips}
    model.routes.remove_if(lambda route: route not in routes_in_trips)
    cleanup_pass.changes += model.summary()

    logger.info("Remove all Services without Trips")
    service_ids_in_trips = {trip.service_id for trip in model.trips}
    model.calendars.remove_if(lambda c: c.service_id not in service_ids_in_trips)
    model.calendar_dates.remove_if(lambda c: c.service_id not in service_ids_in_trips)
    cleanup_pass.changes += model.summary()

    logger.info("Remove all Stops with missing ParentStation")
    station_ids = {stop.id.id for stop in model.stops if stop.is_station}
    model.stops.remove_if(lambda stop: _parent_station_missing(stop, station_ids))
    cleanup_pass.changes += model.summary()

    logger.info("Remove all Stops without StopTimes")
    stops_in_trips = {st.stop for st in model.stop_times}
    model.stops.remove_if(lambda stop: stop.is_quay and stop not in stops_in_trips)
    parent_station_refs = {stop.parent_station for stop in model.stops if stop.is_quay}
    model.stops.remove_if(lambda stop: stop.is_station and stop.id.id not in parent_station_refs)
    cleanup_pass.changes += model.summary()

    logger.info("Remove StopTimes without Trip")
    model.stop_times.remove_if(lambda st: st.trip not in model.trips)
    cleanup_pass.changes += model.summary()

    logger.info("Remove Transfers without Stop, Route or Trip")
    model.transfers.remove_if(lambda transfer: _transfer_ref_missing(model, transfer))
    cleanup_pass.changes += model.summary()

    cleanup_pass.size_after = model.total_size()
    return cleanup_pass


def _parent_station_missing(stop: Stop, station_ids: set[str]) -> bool:
    # Only quays with a parent station set are checked.
    if not stop.is_quay or not stop.parent_station:
        return False
    return stop.parent_station not in station_ids


def _transfer_ref_missing(model: GtfsModel, transfer: Transfer) -> bool:
    return (
        _opt_ref_missing(transfer.from_stop, model.stops)
        or _opt_ref_missing(transfer.to_stop, model.stops)
        or _opt_ref_missing(transfer.from_route, model.routes)
        or _opt_ref_missing(transfer.to_route, model.routes)
        or _opt_ref_missing(transfer.from_trip, model.trips)
        or _opt_ref_missing(transfer.to_trip, model.trips)
    )


def _opt_ref_missing(entity: object | None, entities: Collection[object]) -> bool:
    return entity is not None and entity not in entities
