"""GTFS feed writer: serializes entity collections back to GTFS text files."""

import csv
import logging
from collections.abc import Callable, Collection
from datetime import date
from pathlib import Path
from typing import Any, Protocol

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


class EntitySource(Protocol):
    def get_all_entities_for_type(self, entity_type: type) -> Collection[Any]: ...


def format_time(seconds: int | None) -> str:
    """Format seconds since midnight as HH:MM:SS, allowing hours past 24."""
    if seconds is None:
        return ""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_date(value: date | None) -> str:
    return value.strftime("%Y%m%d") if value else ""


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _ref(entity: Stop | Route | Trip | None) -> str:
    return entity.id.id if entity is not None else ""


def _agency_row(agency: Agency) -> dict[str, str]:
    return {
        "agency_id": agency.agency_id,
        "agency_name": agency.name,
        "agency_url": agency.url,
        "agency_timezone": agency.timezone,
        "agency_lang": agency.lang,
        "agency_phone": agency.phone,
    }


def _stop_row(stop: Stop) -> dict[str, str]:
    return {
        "stop_id": stop.id.id,
        "stop_code": stop.code,
        "stop_name": stop.name,
        "stop_desc": stop.desc,
        "stop_lat": repr(stop.lat),
        "stop_lon": repr(stop.lon),
        "zone_id": stop.zone_id,
        "location_type": str(stop.location_type),
        "parent_station": stop.parent_station,
        "platform_code": stop.platform_code,
    }


def _route_row(route: Route) -> dict[str, str]:
    return {
        "route_id": route.id.id,
        "agency_id": route.agency.agency_id,
        "route_short_name": route.short_name,
        "route_long_name": route.long_name,
        "route_desc": route.desc,
        "route_type": str(route.route_type),
        "route_url": route.url,
        "route_color": route.color,
        "route_text_color": route.text_color,
    }


def _trip_row(trip: Trip) -> dict[str, str]:
    return {
        "route_id": trip.route.id.id,
        "service_id": trip.service_id,
        "trip_id": trip.id.id,
        "trip_headsign": trip.headsign,
        "trip_short_name": trip.short_name,
        "direction_id": trip.direction_id,
        "block_id": trip.block_id,
        "shape_id": trip.shape_id,
    }


def _stop_time_row(stop_time: StopTime) -> dict[str, str]:
    return {
        "trip_id": stop_time.trip.id.id,
        "arrival_time": format_time(stop_time.arrival_time),
        "departure_time": format_time(stop_time.departure_time),
        "stop_id": stop_time.stop.id.id,
        "stop_sequence": str(stop_time.stop_sequence),
        "stop_headsign": stop_time.stop_headsign,
        "pickup_type": stop_time.pickup_type,
        "drop_off_type": stop_time.drop_off_type,
    }


def _calendar_row(calendar: ServiceCalendar) -> dict[str, str]:
    return {
        "service_id": calendar.service_id,
        "monday": _flag(calendar.monday),
        "tuesday": _flag(calendar.tuesday),
        "wednesday": _flag(calendar.wednesday),
        "thursday": _flag(calendar.thursday),
        "friday": _flag(calendar.friday),
        "saturday": _flag(calendar.saturday),
        "sunday": _flag(calendar.sunday),
        "start_date": format_date(calendar.start_date),
        "end_date": format_date(calendar.end_date),
    }


def _calendar_date_row(calendar_date: ServiceCalendarDate) -> dict[str, str]:
    return {
        "service_id": calendar_date.service_id,
        "date": format_date(calendar_date.date),
        "exception_type": str(calendar_date.exception_type),
    }


def _transfer_row(transfer: Transfer) -> dict[str, str]:
    return {
        "from_stop_id": _ref(transfer.from_stop),
        "to_stop_id": _ref(transfer.to_stop),
        "from_route_id": _ref(transfer.from_route),
        "to_route_id": _ref(transfer.to_route),
        "from_trip_id": _ref(transfer.from_trip),
        "to_trip_id": _ref(transfer.to_trip),
        "transfer_type": str(transfer.transfer_type),
        "min_transfer_time": ""
        if transfer.min_transfer_time is None
        else str(transfer.min_transfer_time),
    }


def _feed_info_row(feed_info: FeedInfo) -> dict[str, str]:
    return {
        "feed_publisher_name": feed_info.publisher_name,
        "feed_publisher_url": feed_info.publisher_url,
        "feed_lang": feed_info.lang,
        "feed_start_date": format_date(feed_info.start_date),
        "feed_end_date": format_date(feed_info.end_date),
        "feed_version": feed_info.version,
    }


class _Table:
    """How one entity type maps to one GTFS file."""

    def __init__(
        self,
        file_name: str,
        entity_type: type,
        columns: list[str],
        to_row: Callable[[Any], dict[str, str]],
        sort_key: Callable[[Any], Any],
        required: bool = False,
    ) -> None:
        self.file_name = file_name
        self.entity_type = entity_type
        self.columns = columns
        self.to_row = to_row
        self.sort_key = sort_key
        self.required = required


TABLES = [
    _Table(
        "agency.txt",
        Agency,
        [
            "agency_id",
            "agency_name",
            "agency_url",
            "agency_timezone",
            "agency_lang",
            "agency_phone",
        ],
        _agency_row,
        lambda a: a.agency_id,
        required=True,
    ),
    _Table(
        "stops.txt",
        Stop,
        [
            "stop_id",
            "stop_code",
            "stop_name",
            "stop_desc",
            "stop_lat",
            "stop_lon",
            "zone_id",
            "location_type",
            "parent_station",
            "platform_code",
        ],
        _stop_row,
        lambda s: s.id.id,
        required=True,
    ),
    _Table(
        "routes.txt",
        Route,
        [
            "route_id",
            "agency_id",
            "route_short_name",
            "route_long_name",
            "route_desc",
            "route_type",
            "route_url",
            "route_color",
            "route_text_color",
        ],
        _route_row,
        lambda r: r.id.id,
        required=True,
    ),
    _Table(
        "trips.txt",
        Trip,
        [
            "route_id",
            "service_id",
            "trip_id",
            "trip_headsign",
            "trip_short_name",
            "direction_id",
            "block_id",
            "shape_id",
        ],
        _trip_row,
        lambda t: t.id.id,
        required=True,
    ),
    _Table(
        "stop_times.txt",
        StopTime,
        [
            "trip_id",
            "arrival_time",
            "departure_time",
            "stop_id",
            "stop_sequence",
            "stop_headsign",
            "pickup_type",
            "drop_off_type",
        ],
        _stop_time_row,
        lambda st: (st.trip.id.id, st.stop_sequence),
        required=True,
    ),
    _Table(
        "calendar.txt",
        ServiceCalendar,
        [
            "service_id",
            "monday",
            "tuesday",
            "wednesday",
            "thursday",
            "friday",
            "saturday",
            "sunday",
            "start_date",
            "end_date",
        ],
        _calendar_row,
        lambda c: c.service_id,
    ),
    _Table(
        "calendar_dates.txt",
        ServiceCalendarDate,
        ["service_id", "date", "exception_type"],
        _calendar_date_row,
        lambda c: (c.service_id, c.date),
    ),
    _Table(
        "transfers.txt",
        Transfer,
        [
            "from_stop_id",
            "to_stop_id",
            "from_route_id",
            "to_route_id",
            "from_trip_id",
            "to_trip_id",
            "transfer_type",
            "min_transfer_time",
        ],
        _transfer_row,
        lambda t: tuple(_transfer_row(t).values()),
    ),
    _Table(
        "feed_info.txt",
        FeedInfo,
        [
            "feed_publisher_name",
            "feed_publisher_url",
            "feed_lang",
            "feed_start_date",
            "feed_end_date",
            "feed_version",
        ],
        _feed_info_row,
        lambda f: tuple(_feed_info_row(f).values()),
    ),
]


class GTFSWriter:
    """Write entity collections to a GTFS directory."""

    def __init__(self, output_path: str | Path) -> None:
        self.output_path = Path(output_path)

    def run(self, source: EntitySource) -> dict[str, str]:
        """
        Write every non-empty collection, and the required files even if empty.

        Returns:
            Mapping of file name to written path
        """
        logger.info(f"Writing GTFS files to {self.output_path}")
        self.output_path.mkdir(parents=True, exist_ok=True)

        files_written: dict[str, str] = {}
        for table in TABLES:
            entities = source.get_all_entities_for_type(table.entity_type)
            if not entities and not table.required:
                logger.debug(f"No entities for {table.file_name}, skipping")
                continue

            rows = [table.to_row(entity) for entity in sorted(entities, key=table.sort_key)]
            path = self.output_path / table.file_name
            with open(path, "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=table.columns)
                writer.writeheader()
                writer.writerows(rows)

            files_written[table.file_name] = str(path)
            logger.info(f"Wrote {len(rows)} rows to {path}")

        return files_written
