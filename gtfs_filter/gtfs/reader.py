"""GTFS feed reader: loads a feed and resolves its cross-references."""

import csv
import io
import logging
import zipfile
from collections.abc import Iterator
from datetime import date, datetime
from pathlib import Path
from typing import Any

from gtfs_filter.gtfs.models import (
    QUAY_TYPE,
    Agency,
    AgencyAndId,
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


class GTFSReader:
    """Read a GTFS feed from a directory or a zip archive."""

    def __init__(self, gtfs_path: str) -> None:
        """Initialize reader with GTFS directory or zip path."""
        self.gtfs_path = Path(gtfs_path)
        if not self.gtfs_path.exists():
            raise ValueError(f"GTFS path not found: {gtfs_path}")
        if self.gtfs_path.is_file() and not zipfile.is_zipfile(self.gtfs_path):
            raise ValueError(f"GTFS path is neither a directory nor a zip archive: {gtfs_path}")

        # GTFS string id -> entity, used to resolve references
        self.agency_by_id: dict[str, Agency] = {}
        self.stop_by_id: dict[str, Stop] = {}
        self.route_by_id: dict[str, Route] = {}
        self.trip_by_id: dict[str, Trip] = {}

        # Data storage
        self.feed_infos: list[FeedInfo] = []
        self.agencies: list[Agency] = []
        self.stops: list[Stop] = []
        self.routes: list[Route] = []
        self.trips: list[Trip] = []
        self.stop_times: list[StopTime] = []
        self.calendar: list[ServiceCalendar] = []
        self.calendar_dates: list[ServiceCalendarDate] = []
        self.transfers: list[Transfer] = []

    @property
    def default_agency_id(self) -> str:
        """Agency id used to scope stops and services."""
        if not self.agencies:
            raise ValueError("No agency loaded, agency.txt must be read first")
        return self.agencies[0].agency_id

    def read_all(self) -> None:
        """Read all GTFS files."""
        logger.info(f"Reading GTFS data from {self.gtfs_path}")
        self.read_feed_info()
        self.read_agencies()
        self.read_stops()
        self.read_routes()
        self.read_calendar()
        self.read_calendar_dates()
        self.read_trips()
        self.read_stop_times()
        self.read_transfers()
        logger.info(
            f"Loaded {len(self.agencies)} agencies, {len(self.stops)} stops, "
            f"{len(self.routes)} routes, {len(self.trips)} trips, "
            f"{len(self.stop_times)} stop_times, {len(self.transfers)} transfers, "
            f"{len(self.calendar)} calendar entries, "
            f"{len(self.calendar_dates)} calendar date exceptions"
        )

    def read_feed_info(self) -> None:
        """Read feed_info.txt if present."""
        if not self._has_file("feed_info.txt"):
            logger.info("feed_info.txt not found, skipping")
            return

        for row in self._rows("feed_info.txt"):
            self.feed_infos.append(
                FeedInfo(
                    publisher_name=row["feed_publisher_name"],
                    publisher_url=row.get("feed_publisher_url", ""),
                    lang=row.get("feed_lang", ""),
                    start_date=self._parse_date(row["feed_start_date"])
                    if row.get("feed_start_date")
                    else None,
                    end_date=self._parse_date(row["feed_end_date"])
                    if row.get("feed_end_date")
                    else None,
                    version=row.get("feed_version", ""),
                )
            )

    def read_agencies(self) -> None:
        """Read agency.txt."""
        file_name = "agency.txt"
        if not self._has_file(file_name):
            # Try agencies.txt as fallback
            file_name = "agencies.txt"
            if not self._has_file(file_name):
                raise FileNotFoundError(f"Required file not found: agency.txt in {self.gtfs_path}")

        for row in self._rows(file_name):
            agency = Agency(
                agency_id=row.get("agency_id") or row["agency_name"],
                name=row["agency_name"],
                url=row.get("agency_url", ""),
                timezone=row.get("agency_timezone", ""),
                lang=row.get("agency_lang", ""),
                phone=row.get("agency_phone", ""),
            )
            self.agencies.append(agency)
            self.agency_by_id[agency.agency_id] = agency

    def read_stops(self) -> None:
        """Read stops.txt."""
        agency_id = self.default_agency_id
        for row in self._rows("stops.txt", required=True):
            stop_id = row["stop_id"]
            stop = Stop(
                id=AgencyAndId(agency_id, stop_id),
                name=row.get("stop_name", ""),
                lat=float(row["stop_lat"]),
                lon=float(row["stop_lon"]),
                location_type=int(row.get("location_type") or QUAY_TYPE),
                parent_station=row.get("parent_station", ""),
                code=row.get("stop_code", ""),
                desc=row.get("stop_desc", ""),
                zone_id=row.get("zone_id", ""),
                platform_code=row.get("platform_code", ""),
            )
            self.stops.append(stop)
            self.stop_by_id[stop_id] = stop

    def read_routes(self) -> None:
        """Read routes.txt, linking each route to its agency."""
        for row in self._rows("routes.txt", required=True):
            route_id = row["route_id"]
            agency = self._resolve(
                self.agency_by_id, row.get("agency_id") or self.default_agency_id, "routes.txt"
            )
            route = Route(
                id=AgencyAndId(agency.agency_id, route_id),
                agency=agency,
                short_name=row.get("route_short_name", ""),
                long_name=row.get("route_long_name", ""),
                route_type=int(row["route_type"]),
                desc=row.get("route_desc", ""),
                url=row.get("route_url", ""),
                color=row.get("route_color", ""),
                text_color=row.get("route_text_color", ""),
            )
            self.routes.append(route)
            self.route_by_id[route_id] = route

    def read_calendar(self) -> None:
        """Read calendar.txt."""
        if not self._has_file("calendar.txt"):
            logger.info("calendar.txt not found, skipping")
            return

        for row in self._rows("calendar.txt"):
            self.calendar.append(
                ServiceCalendar(
                    service_id=row["service_id"],
                    monday=row["monday"] == "1",
                    tuesday=row["tuesday"] == "1",
                    wednesday=row["wednesday"] == "1",
                    thursday=row["thursday"] == "1",
                    friday=row["friday"] == "1",
                    saturday=row["saturday"] == "1",
                    sunday=row["sunday"] == "1",
                    start_date=self._parse_date(row["start_date"]),
                    end_date=self._parse_date(row["end_date"]),
                )
            )

    def read_calendar_dates(self) -> None:
        """Read calendar_dates.txt."""
        if not self._has_file("calendar_dates.txt"):
            logger.info("calendar_dates.txt not found, skipping")
            return

        for row in self._rows("calendar_dates.txt"):
            self.calendar_dates.append(
                ServiceCalendarDate(
                    service_id=row["service_id"],
                    date=self._parse_date(row["date"]),
                    exception_type=int(row["exception_type"]),
                )
            )

    def read_trips(self) -> None:
        """Read trips.txt, linking each trip to its route."""
        for row in self._rows("trips.txt", required=True):
            trip_id = row["trip_id"]
            route = self._resolve(self.route_by_id, row["route_id"], "trips.txt")
            trip = Trip(
                id=AgencyAndId(route.agency.agency_id, trip_id),
                route=route,
                service_id=row["service_id"],
                headsign=row.get("trip_headsign", ""),
                short_name=row.get("trip_short_name", ""),
                direction_id=row.get("direction_id", ""),
                block_id=row.get("block_id", ""),
                shape_id=row.get("shape_id", ""),
            )
            self.trips.append(trip)
            self.trip_by_id[trip_id] = trip

    def read_stop_times(self) -> None:
        """Read stop_times.txt, linking each stop time to its trip and stop."""
        for row in self._rows("stop_times.txt", required=True):
            self.stop_times.append(
                StopTime(
                    trip=self._resolve(self.trip_by_id, row["trip_id"], "stop_times.txt"),
                    stop_sequence=int(row["stop_sequence"]),
                    stop=self._resolve(self.stop_by_id, row["stop_id"], "stop_times.txt"),
                    arrival_time=self._parse_time(row.get("arrival_time", "")),
                    departure_time=self._parse_time(row.get("departure_time", "")),
                    stop_headsign=row.get("stop_headsign", ""),
                    pickup_type=row.get("pickup_type", ""),
                    drop_off_type=row.get("drop_off_type", ""),
                )
            )

    def read_transfers(self) -> None:
        """Read transfers.txt if present. Every endpoint column is optional."""
        if not self._has_file("transfers.txt"):
            logger.info("transfers.txt not found, no explicit transfers")
            return

        columns = {
            "from_stop": ("from_stop_id", self.stop_by_id),
            "to_stop": ("to_stop_id", self.stop_by_id),
            "from_route": ("from_route_id", self.route_by_id),
            "to_route": ("to_route_id", self.route_by_id),
            "from_trip": ("from_trip_id", self.trip_by_id),
            "to_trip": ("to_trip_id", self.trip_by_id),
        }
        for row in self._rows("transfers.txt"):
            endpoints: dict[str, Any] = {}
            dangling: list[str] = []
            for name, (column, entities) in columns.items():
                entity_id = row.get(column, "")
                if not entity_id:
                    endpoints[name] = None
                elif entity_id in entities:
                    endpoints[name] = entities[entity_id]
                else:
                    dangling.append(f"{column}={entity_id}")

            # A dangling endpoint is never turned into an absent one.
            if dangling:
                logger.warning(f"Dropping transfer with unknown {', '.join(dangling)}")
                continue

            min_time = row.get("min_transfer_time", "")
            self.transfers.append(
                Transfer(
                    **endpoints,
                    transfer_type=int(row.get("transfer_type") or 0),
                    min_transfer_time=int(min_time) if min_time else None,
                )
            )

    # Accessors matching the entity graph's bulk interface

    def get_all_feed_infos(self) -> list[FeedInfo]:
        return self.feed_infos

    def get_all_agencies(self) -> list[Agency]:
        return self.agencies

    def get_all_calendars(self) -> list[ServiceCalendar]:
        return self.calendar

    def get_all_calendar_dates(self) -> list[ServiceCalendarDate]:
        return self.calendar_dates

    def get_all_routes(self) -> list[Route]:
        return self.routes

    def get_all_trips(self) -> list[Trip]:
        return self.trips

    def get_all_stop_times(self) -> list[StopTime]:
        return self.stop_times

    def get_all_stops(self) -> list[Stop]:
        return self.stops

    def get_all_transfers(self) -> list[Transfer]:
        return self.transfers

    def _has_file(self, file_name: str) -> bool:
        if self.gtfs_path.is_dir():
            return (self.gtfs_path / file_name).exists()
        with zipfile.ZipFile(self.gtfs_path) as archive:
            return file_name in archive.namelist()

    def _rows(self, file_name: str, required: bool = False) -> Iterator[dict[str, str]]:
        """Yield the rows of a feed file as dicts with stripped values."""
        if not self._has_file(file_name):
            if required:
                raise FileNotFoundError(f"Required file not found: {file_name} in {self.gtfs_path}")
            return

        if self.gtfs_path.is_dir():
            with open(self.gtfs_path / file_name, encoding="utf-8-sig", newline="") as f:
                yield from self._strip_rows(csv.DictReader(f))
        else:
            with zipfile.ZipFile(self.gtfs_path) as archive, archive.open(file_name) as raw:
                f = io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")
                yield from self._strip_rows(csv.DictReader(f))

    @staticmethod
    def _strip_rows(reader: csv.DictReader) -> Iterator[dict[str, str]]:
        for row in reader:
            yield {
                key.strip(): (value or "").strip() for key, value in row.items() if key is not None
            }

    @staticmethod
    def _resolve(entities: dict[str, Any], entity_id: str, file_name: str) -> Any:
        try:
            return entities[entity_id]
        except KeyError:
            raise ValueError(f"{file_name} references unknown id: {entity_id}") from None

    @staticmethod
    def _parse_time(time_str: str) -> int | None:
        """Parse HH:MM:SS to seconds since midnight, supporting >24h."""
        if not time_str.strip():
            return None

        parts = time_str.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid time format: {time_str}")

        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2])

        return hours * 3600 + minutes * 60 + seconds

    @staticmethod
    def _parse_date(date_str: str) -> date:
        """Parse a YYYYMMDD service date."""
        return datetime.strptime(date_str.strip(), "%Y%m%d").date()
