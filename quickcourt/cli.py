import argparse
import logging
import sys

from quickcourt import run
from quickcourt.models import AddOns

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def _add_court_source(parser: argparse.ArgumentParser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--court-id", type=str, help="Court id to load from the QuickCourt API.")
    source.add_argument("--court-file", type=str, help="JSON file with the court document.")
    parser.add_argument(
        "--bookings-file", type=str, help="JSON file with existing bookings (only with --court-file)."
    )
    parser.add_argument("--date", type=str, required=True, help="Booking date in YYYY-MM-DD format.")


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Check court availability and price QuickCourt bookings.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    availability = subparsers.add_parser("availability", help="Show the hourly slot grid for a date.")
    _add_court_source(availability)

    quote = subparsers.add_parser("quote", help="Validate and price a booking request.")
    _add_court_source(quote)
    quote.add_argument("--start", type=str, required=True, help="Start time in HH:MM format.")
    quote.add_argument("--end", type=str, required=True, help="End time in HH:MM format.")
    for add_on in ("equipment", "lighting", "coaching", "cleaning"):
        quote.add_argument(f"--{add_on}", action="store_true", help=f"Add {add_on} to the booking.")

    transition = subparsers.add_parser("transition", help="Check whether a status change is allowed.")
    transition.add_argument("current", type=str, help="Current reservation status.")
    transition.add_argument("requested", type=str, help="Requested reservation status.")

    analytics = subparsers.add_parser("analytics", help="Summarize bookings from a JSON file.")
    analytics.add_argument("--bookings-file", type=str, required=True, help="JSON file with booking records.")
    analytics.add_argument("--period", type=int, default=30, help="Number of days to look back (default: 30).")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    if args.command == "availability":
        run.run_availability(
            args.date, court_id=args.court_id, court_file=args.court_file, bookings_file=args.bookings_file
        )
    elif args.command == "quote":
        add_ons = AddOns(
            equipment=args.equipment, lighting=args.lighting, coaching=args.coaching, cleaning=args.cleaning
        )
        quote = run.run_quote(
            args.date,
            args.start,
            args.end,
            add_ons=add_ons,
            court_id=args.court_id,
            court_file=args.court_file,
            bookings_file=args.bookings_file,
        )
        if quote is None:
            sys.exit(1)
    elif args.command == "transition":
        if not run.run_transition(args.current, args.requested):
            sys.exit(1)
    elif args.command == "analytics":
        run.run_analytics(args.bookings_file, period_days=args.period)


if __name__ == "__main__":
    main()
