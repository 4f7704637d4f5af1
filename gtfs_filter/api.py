"""Public API for gtfs-filter."""

import logging
from datetime import UTC, datetime
from pathlib import Path

from gtfs_filter.filter.cleanup import CleanupReport, cleanup_all
from gtfs_filter.filter.graph import GtfsModel
from gtfs_filter.filter.selection import (
    retain_agencies,
    retain_routes,
    retain_stops,
    set_service_end_date,
)
from gtfs_filter.gtfs.models import FilterConfig, FilterResult, ValidationReport
from gtfs_filter.gtfs.reader import GTFSReader
from gtfs_filter.gtfs.validator import GraphValidator
from gtfs_filter.gtfs.writer import GTFSWriter
from gtfs_filter.output.archive import compress, create_output_directory

logger = logging.getLogger(__name__)


def load_model(input_path: str) -> GtfsModel:
    """Read a GTFS feed and copy it into a new entity graph."""
    reader = GTFSReader(input_path)
    reader.read_all()
    return GtfsModel(reader)


def apply_filters(model: GtfsModel, config: FilterConfig) -> CleanupReport:
    """
    Run the configured selection filters, then cleanup, then the end date.

    Filters left as None in the config are skipped.
    """
    logger.info("FILTER [start]")
    if config.agencies is not None:
        retain_agencies(model, config.agencies)
    if config.routes is not None:
        retain_routes(model, config.routes)
    if config.box is not None:
        retain_stops(model, config.box)

    report = cleanup_all(model)

    if config.service_end_date is not None:
        end = config.service_end_date
        set_service_end_date(model, end.year, end.month, end.day)
    logger.info("FILTER [end]")
    return report


def filter_feed(root_dir: str, config: FilterConfig | None = None) -> FilterResult:
    """
    Filter the GTFS feed in root_dir and package the result.

    Args:
        root_dir: Directory holding the input feed; outputs are written here too
        config: Optional filter configuration

    Returns:
        FilterResult with the archive path and statistics
    """
    if config is None:
        config = FilterConfig()

    root = Path(root_dir)
    input_path = root / config.input_file
    output_dir = root / config.output_dir
    archive_name = f"gtfs-{config.box.name if config.box else 'filtered'}.zip"

    logger.info(f"Starting filter: {input_path} -> {root / archive_name}")
    start_time = datetime.now(UTC)

    model = load_model(str(input_path))
    report = apply_filters(model, config)
    integrity = GraphValidator(model).validate()

    create_output_directory(output_dir)
    files = GTFSWriter(output_dir).run(model.snapshot())
    archive_path = compress(output_dir, root / archive_name)

    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    logger.info(f"Filter completed in {elapsed:.2f}s")

    return FilterResult(
        archive_path=str(archive_path),
        files=files,
        stats=model.stats(),
        removed=report.removed,
        cleanup_passes=report.pass_count,
        integrity=integrity,
    )


def check_feed(input_path: str) -> ValidationReport:
    """
    Check referential integrity of an unfiltered GTFS feed.

    Args:
        input_path: Path to a GTFS directory or zip archive

    Returns:
        ValidationReport with results
    """
    logger.info(f"Checking feed: {input_path}")
    return GraphValidator(load_model(input_path)).validate()
