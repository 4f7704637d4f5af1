"""Tests for the referential integrity check."""

from pathlib import Path

from conftest import FeedBuilder

from gtfs_filter.gtfs.reader import GTFSReader
from gtfs_filter.gtfs.validator import GraphValidator


def test_validator_valid_data(feed: FeedBuilder) -> None:
    """Test validator passes on consistent data."""
    agency = feed.agency("A")
    station = feed.station("S1")
    quay = feed.stop("Q1", parent_station="S1")
    trip = feed.trip(feed.route(agency, "1"), [quay, feed.stop("Q2")])
    feed.calendar("WK")
    feed.transfer(from_stop=station, to_trip=trip)

    report = GraphValidator(feed).validate()

    assert report.valid
    assert report.errors == []
    assert report.stats["stops"] == 3
    assert report.stats["routes"] == 1


def test_validator_sample_feed(gtfs_sample: Path) -> None:
    """Test the unfiltered sample feed reports its orphans."""
    reader = GTFSReader(str(gtfs_sample))
    reader.read_all()

    report = GraphValidator(reader).validate()

    assert not report.valid
    assert any("parent station GONE" in err for err in report.errors)
    assert any("S2" in err and "no quays" in err for err in report.errors)


def test_validator_dangling_references(feed: FeedBuilder) -> None:
    """Test missing trips, stops and routes are reported."""
    agency = feed.agency("A")
    route = feed.route(agency, "1")
    quay = feed.stop("Q1")
    trip = feed.trip(route, [quay, feed.stop("Q2")])
    feed.transfer(from_route=route)
    feed.stops.remove(quay)
    feed.routes.remove(route)

    report = GraphValidator(feed).validate()

    assert not report.valid
    assert any("non-existent stop" in err for err in report.errors)
    assert any(f"Trip {trip.id} references non-existent route" in err for err in report.errors)
    assert any("non-existent from_route" in err for err in report.errors)


def test_validator_short_trip_and_unused_service(feed: FeedBuilder) -> None:
    """Test single-stop trips and unused calendars are reported."""
    agency = feed.agency("A")
    feed.trip(feed.route(agency, "1"), [feed.stop("Q1")], service_id="WK")
    feed.calendar("SAT")

    report = GraphValidator(feed).validate()

    assert any("has 1 stop times" in err for err in report.errors)
    assert any("Calendar SAT" in err for err in report.errors)


def test_validator_warns_on_missing_agency(feed: FeedBuilder) -> None:
    """Test a route whose agency is gone is only a warning."""
    agency = feed.agency("A")
    feed.trip(feed.route(agency, "1"), [feed.stop("Q1"), feed.stop("Q2")])
    feed.agencies.clear()

    report = GraphValidator(feed).validate()

    assert report.valid
    assert len(report.warnings) == 1
    assert "agency A" in report.warnings[0]
