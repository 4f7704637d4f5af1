"""Data models for GTFS entities and filter configuration."""

from dataclasses import dataclass, field
from datetime import date

QUAY_TYPE = 0
STATION_TYPE = 1


@dataclass(frozen=True, order=True)
class AgencyAndId:
    """Compound id: an entity id scoped by the agency that owns it."""

    agency_id: str
    id: str

    def __str__(self) -> str:
        return f"{self.agency_id}_{self.id}"


@dataclass(frozen=True)
class Agency:
    """GTFS agency."""

    agency_id: str
    name: str = field(compare=False)
    url: str = field(default="", compare=False)
    timezone: str = field(default="", compare=False)
    lang: str = field(default="", compare=False)
    phone: str = field(default="", compare=False)


@dataclass(frozen=True)
class Route:
    """GTFS route."""

    id: AgencyAndId
    agency: Agency = field(compare=False)
    short_name: str = field(default="", compare=False)
    long_name: str = field(default="", compare=False)
    route_type: int = field(default=3, compare=False)
    desc: str = field(default="", compare=False)
    url: str = field(default="", compare=False)
    color: str = field(default="", compare=False)
    text_color: str = field(default="", compare=False)


@dataclass(frozen=True)
class Trip:
    """GTFS trip. The service is referenced by id only."""

    id: AgencyAndId
    route: Route = field(compare=False)
    service_id: str = field(compare=False)
    headsign: str = field(default="", compare=False)
    short_name: str = field(default="", compare=False)
    direction_id: str = field(default="", compare=False)
    block_id: str = field(default="", compare=False)
    shape_id: str = field(default="", compare=False)


@dataclass(frozen=True)
class Stop:
    """GTFS stop, either a quay (location type 0) or a station (1).

    The parent station is kept as a raw stop id string, never as an object.
    """

    id: AgencyAndId
    name: str = field(compare=False)
    lat: float = field(compare=False)
    lon: float = field(compare=False)
    location_type: int = field(default=QUAY_TYPE, compare=False)
    parent_station: str = field(default="", compare=False)
    code: str = field(default="", compare=False)
    desc: str = field(default="", compare=False)
    zone_id: str = field(default="", compare=False)
    platform_code: str = field(default="", compare=False)

    @property
    def is_quay(self) -> bool:
        return self.location_type == QUAY_TYPE

    @property
    def is_station(self) -> bool:
        return self.location_type == STATION_TYPE


@dataclass(frozen=True)
class StopTime:
    """GTFS stop time."""

    trip: Trip
    stop_sequence: int
    stop: Stop = field(compare=False)
    arrival_time: int | None = field(default=None, compare=False)  # seconds since midnight
    departure_time: int | None = field(default=None, compare=False)  # seconds since midnight
    stop_headsign: str = field(default="", compare=False)
    pickup_type: str = field(default="", compare=False)
    drop_off_type: str = field(default="", compare=False)


@dataclass(unsafe_hash=True)
class ServiceCalendar:
    """GTFS calendar entry.

    This is the only mutable entity: ``end_date`` may be overwritten while the
    calendar is a set member, so it is excluded from equality and hashing.
    """

    service_id: str
    monday: bool = field(default=False, compare=False)
    tuesday: bool = field(default=False, compare=False)
    wednesday: bool = field(default=False, compare=False)
    thursday: bool = field(default=False, compare=False)
    friday: bool = field(default=False, compare=False)
    saturday: bool = field(default=False, compare=False)
    sunday: bool = field(default=False, compare=False)
    start_date: date = field(default=date.min, compare=False)
    end_date: date = field(default=date.max, compare=False)


@dataclass(frozen=True)
class ServiceCalendarDate:
    """GTFS calendar date exception."""

    service_id: str
    date: date
    exception_type: int = field(default=1, compare=False)


@dataclass(frozen=True)
class Transfer:
    """GTFS transfer. Every endpoint is optional."""

    from_stop: Stop | None = None
    to_stop: Stop | None = None
    from_route: Route | None = None
    to_route: Route | None = None
    from_trip: Trip | None = None
    to_trip: Trip | None = None
    transfer_type: int = 0
    min_transfer_time: int | None = None  # seconds


@dataclass(frozen=True)
class FeedInfo:
    """GTFS feed info, passed through unchanged."""

    publisher_name: str
    publisher_url: str = ""
    lang: str = ""
    start_date: date | None = None
    end_date: date | None = None
    version: str = ""


@dataclass(frozen=True)
class Box:
    """Named geographic box, half-open on its max edges."""

    name: str
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def inside(self, stop: Stop) -> bool:
        return _between(stop.lat, self.min_lat, self.max_lat) and _between(
            stop.lon, self.min_lon, self.max_lon
        )

    def outside(self, stop: Stop) -> bool:
        return not self.inside(stop)

    def __str__(self) -> str:
        return (
            f"{self.name} [({self.min_lat:5.2f}, {self.min_lon:5.2f}), "
            f"({self.max_lat:5.2f}, {self.max_lon:5.2f})]"
        )


def _between(value: float, min_value: float, max_value: float) -> bool:
    return min_value <= value < max_value


OSLO_RING2 = Box("oslo-ring2", 59.90, 10.70, 59.94, 10.79)


@dataclass
class ValidationReport:
    """Report from the referential integrity check."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class FilterConfig:
    """Configuration for a filter run."""

    input_file: str = "gtfs.zip"
    output_dir: str = "out"
    agencies: list[str] | None = field(
        default_factory=lambda: ["RuterBuss", "RuterTrikk", "RuterTBane", "Tog"]
    )
    routes: list[str] | None = field(default_factory=lambda: ["11", "12", "13", "17", "4", "5"])
    box: Box | None = OSLO_RING2
    service_end_date: date | None = date(2049, 12, 31)


@dataclass
class FilterResult:
    """Outcome of a filter run."""

    archive_path: str
    files: dict[str, str]  # filename -> path
    stats: dict[str, int]
    removed: dict[str, int]
    cleanup_passes: int
    integrity: ValidationReport
