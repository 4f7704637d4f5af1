"""Command-line interface for gtfs-filter."""

import argparse
import logging
import sys
from datetime import date

from gtfs_filter.api import filter_feed
from gtfs_filter.gtfs.models import Box, FilterConfig
from gtfs_filter.version import VERSION


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_box(values: list[str]) -> Box:
    """Build a Box from NAME MIN_LAT MIN_LON MAX_LAT MAX_LON."""
    name, *coordinates = values
    try:
        min_lat, min_lon, max_lat, max_lon = (float(value) for value in coordinates)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid box coordinates: {coordinates}") from e
    return Box(name, min_lat, min_lon, max_lat, max_lon)


def build_config(args: argparse.Namespace) -> FilterConfig:
    """Build the filter configuration from parsed arguments."""
    config = FilterConfig(input_file=args.input_file, output_dir=args.output_dir)
    if args.agencies is not None:
        config.agencies = args.agencies or None
    if args.routes is not None:
        config.routes = args.routes or None
    if args.no_box:
        config.box = None
    elif args.box is not None:
        config.box = parse_box(args.box)
    if args.no_end_date:
        config.service_end_date = None
    elif args.end_date is not None:
        config.service_end_date = date.fromisoformat(args.end_date)
    return config


def cmd_filter(args: argparse.Namespace) -> int:
    """Execute the filter run."""
    setup_logging(args.verbose)

    try:
        config = build_config(args)
        result = filter_feed(args.root_dir, config)
        print("\nFilter successful!")
        print(f"Output: {result.archive_path}")
        print(f"Stats: {result.stats}")
        print(f"Cleanup passes: {result.cleanup_passes}")
        if result.integrity.warnings:
            print(f"Warnings ({len(result.integrity.warnings)}):")
            for warning in result.integrity.warnings:
                print(f"  - {warning}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Filter failed")
        return 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="gtfs-filter",
        description="Reduce a GTFS feed to the selected agencies, routes and area",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "root_dir",
        help="Input data folder holding the GTFS archive; outputs are written here",
    )
    parser.add_argument(
        "--input-file",
        default="gtfs.zip",
        help="GTFS archive or directory inside the data folder (default: gtfs.zip)",
    )
    parser.add_argument(
        "--output-dir",
        default="out",
        help="Directory inside the data folder for the filtered files (default: out)",
    )
    parser.add_argument(
        "--agencies",
        nargs="*",
        metavar="NAME",
        help="Agency names to keep; pass the flag alone to keep all agencies",
    )
    parser.add_argument(
        "--routes",
        nargs="*",
        metavar="SHORT_NAME",
        help="Route short names to keep; pass the flag alone to keep all routes",
    )
    box_group = parser.add_mutually_exclusive_group()
    box_group.add_argument(
        "--box",
        nargs=5,
        metavar=("NAME", "MIN_LAT", "MIN_LON", "MAX_LAT", "MAX_LON"),
        help="Keep only stops inside this box (default: oslo-ring2)",
    )
    box_group.add_argument("--no-box", action="store_true", help="Do not filter stops by area")
    end_date_group = parser.add_mutually_exclusive_group()
    end_date_group.add_argument(
        "--end-date",
        metavar="YYYY-MM-DD",
        help="Service end date written to every calendar (default: 2049-12-31)",
    )
    end_date_group.add_argument(
        "--no-end-date", action="store_true", help="Keep the calendar end dates unchanged"
    )

    # Parse and execute
    args = parser.parse_args()
    sys.exit(cmd_filter(args))


if __name__ == "__main__":
    main()
