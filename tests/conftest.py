"""Pytest configuration and fixtures."""

import zipfile
from datetime import date
from pathlib import Path

import pytest

from gtfs_filter.filter.graph import GtfsModel
from gtfs_filter.gtfs.models import (
    QUAY_TYPE,
    STATION_TYPE,
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


class FeedBuilder:
    """Builds a small in-memory feed with resolved references."""

    def __init__(self) -> None:
        self.feed_infos: list[FeedInfo] = []
        self.agencies: list[Agency] = []
        self.calendars: list[ServiceCalendar] = []
        self.calendar_dates: list[ServiceCalendarDate] = []
        self.routes: list[Route] = []
        self.trips: list[Trip] = []
        self.stop_times: list[StopTime] = []
        self.stops: list[Stop] = []
        self.transfers: list[Transfer] = []

    def agency(self, name: str, agency_id: str | None = None) -> Agency:
        agency = Agency(agency_id=agency_id or name, name=name)
        self.agencies.append(agency)
        return agency

    def route(self, agency: Agency, short_name: str, route_id: str | None = None) -> Route:
        route = Route(
            id=AgencyAndId(agency.agency_id, route_id or f"R{short_name}"),
            agency=agency,
            short_name=short_name,
        )
        self.routes.append(route)
        return route

    def stop(
        self,
        stop_id: str,
        lat: float = 59.91,
        lon: float = 10.75,
        parent_station: str = "",
    ) -> Stop:
        stop = Stop(
            id=AgencyAndId("A", stop_id),
            name=stop_id,
            lat=lat,
            lon=lon,
            location_type=QUAY_TYPE,
            parent_station=parent_station,
        )
        self.stops.append(stop)
        return stop

    def station(self, stop_id: str, lat: float = 59.91, lon: float = 10.75) -> Stop:
        station = Stop(
            id=AgencyAndId("A", stop_id),
            name=stop_id,
            lat=lat,
            lon=lon,
            location_type=STATION_TYPE,
        )
        self.stops.append(station)
        return station

    def trip(
        self, route: Route, stops: list[Stop], service_id: str = "WK", trip_id: str = ""
    ) -> Trip:
        """Add a trip calling at the given stops, one stop time per stop."""
        trip = Trip(
            id=AgencyAndId(route.agency.agency_id, trip_id or f"T{len(self.trips) + 1}"),
            route=route,
            service_id=service_id,
        )
        self.trips.append(trip)
        for seq, stop in enumerate(stops, start=1):
            self.stop_times.append(
                StopTime(
                    trip=trip,
                    stop_sequence=seq,
                    stop=stop,
                    arrival_time=8 * 3600 + seq * 120,
                    departure_time=8 * 3600 + seq * 120,
                )
            )
        return trip

    def calendar(self, service_id: str) -> ServiceCalendar:
        calendar = ServiceCalendar(
            service_id=service_id,
            monday=True,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
        )
        self.calendars.append(calendar)
        return calendar

    def calendar_date(self, service_id: str, day: date) -> ServiceCalendarDate:
        calendar_date = ServiceCalendarDate(service_id=service_id, date=day, exception_type=2)
        self.calendar_dates.append(calendar_date)
        return calendar_date

    def transfer(self, **endpoints: object) -> Transfer:
        transfer = Transfer(**endpoints)  # type: ignore[arg-type]
        self.transfers.append(transfer)
        return transfer

    def get_all_feed_infos(self) -> list[FeedInfo]:
        return self.feed_infos

    def get_all_agencies(self) -> list[Agency]:
        return self.agencies

    def get_all_calendars(self) -> list[ServiceCalendar]:
        return self.calendars

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

    def model(self) -> GtfsModel:
        return GtfsModel(self)


@pytest.fixture
def feed() -> FeedBuilder:
    """Empty in-memory feed builder."""
    return FeedBuilder()


SAMPLE_FEED = {
    "agency.txt": """agency_id,agency_name,agency_url,agency_timezone
RUT,RuterBuss,https://ruter.no,Europe/Oslo
TRK,RuterTrikk,https://ruter.no,Europe/Oslo
NSB,Vy,https://vy.no,Europe/Oslo
""",
    "stops.txt": """stop_id,stop_name,stop_lat,stop_lon,location_type,parent_station
S1,Jernbanetorget,59.911,10.750,1,
Q1,Jernbanetorget A,59.9111,10.7501,0,S1
Q2,Stortinget,59.915,10.740,0,
Q3,Tøyen,59.92,10.76,0,
Q4,Lillestrøm,60.10,10.80,0,
Q5,Nationaltheatret,59.913,10.745,0,GONE
S2,Carl Berners plass,59.93,10.77,1,
""",
    "routes.txt": """route_id,agency_id,route_short_name,route_long_name,route_type
R11,RUT,11,Kjelsås - Majorstuen,3
R12,TRK,12,Majorstuen - Disen,0
R99,RUT,99,Night bus,3
RV,NSB,L1,Spikkestad - Lillestrøm,2
""",
    "trips.txt": """route_id,service_id,trip_id,trip_headsign,direction_id
R11,WK,T1,Kjelsås,0
R12,WK,T2,Disen,0
R99,SAT,T3,Night,1
RV,WK,T4,Lillestrøm,0
R11,SUN,T5,Majorstuen,1
""",
    "stop_times.txt": """trip_id,arrival_time,departure_time,stop_id,stop_sequence
T1,08:00:00,08:00:00,Q1,1
T1,08:05:00,08:06:00,Q2,2
T1,08:10:00,08:10:00,Q3,3
T2,09:00:00,09:00:00,Q3,1
T2,09:20:00,09:20:00,Q4,2
T3,25:00:00,25:00:00,Q1,1
T3,25:10:00,25:10:00,Q2,2
T4,10:00:00,10:00:00,Q2,1
T4,,,Q3,2
T5,11:00:00,11:00:00,Q5,1
T5,11:04:00,11:04:00,Q2,2
""",
    "calendar.txt": """service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date
WK,1,1,1,1,1,0,0,20240101,20241231
SAT,0,0,0,0,0,1,0,20240101,20241231
SUN,0,0,0,0,0,0,1,20240101,20241231
""",
    "calendar_dates.txt": """service_id,date,exception_type
WK,20240101,2
SAT,20240106,1
""",
    "transfers.txt": """from_stop_id,to_stop_id,transfer_type,min_transfer_time,from_route_id,to_route_id,from_trip_id,to_trip_id
Q1,Q2,2,120,,,,
Q3,Q4,2,300,,,,
,,1,,R12,R11,,
Q1,Q3,1,,,,T1,T1
""",
    "feed_info.txt": """feed_publisher_name,feed_publisher_url,feed_lang,feed_start_date,feed_end_date,feed_version
Entur,https://entur.no,no,20240101,20241231,42
""",
}


@pytest.fixture
def gtfs_sample(tmp_path: Path) -> Path:
    """Path to a small GTFS directory around central Oslo."""
    gtfs_dir = tmp_path / "gtfs_sample"
    gtfs_dir.mkdir()
    for file_name, content in SAMPLE_FEED.items():
        (gtfs_dir / file_name).write_text(content, encoding="utf-8")
    return gtfs_dir


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data folder holding the sample feed zipped as gtfs.zip."""
    root = tmp_path / "data"
    root.mkdir()
    with zipfile.ZipFile(root / "gtfs.zip", "w") as archive:
        for file_name, content in SAMPLE_FEED.items():
            archive.writestr(file_name, content)
    return root
