# inkstudio/cli.py

import argparse
import asyncio
import logging
import sys
import time
from datetime import date, datetime

from inkstudio import slots
from inkstudio.config import settings
from inkstudio.db import engine, init_db
from inkstudio.errors import AvailabilityUnavailableError
from inkstudio.store import SqlRecordStore

# --- Logging Setup ---

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def log_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def setup_logging(verbose: bool):
    """Sends log records to stderr, stamped in local time."""
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    formatter.converter = time.localtime
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(level=log_level(verbose), handlers=[handler])


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Expected a positive number, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inkstudio", description="Tattoo studio booking service.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    sub.add_parser("init-db", help="Create the database tables.")

    slots_cmd = sub.add_parser("slots", help="List free slots of an artist on one date.")
    slots_cmd.add_argument("artist_id", type=int)
    slots_cmd.add_argument("date", type=parse_date)
    slots_cmd.add_argument("--duration", type=positive_int, required=True, help="Slot length in minutes.")
    slots_cmd.add_argument("--step", type=positive_int, default=None, help="Grid step in minutes.")

    counts = sub.add_parser("slot-counts", help="Count free slots per day over a date range.")
    counts.add_argument("artist_id", type=int)
    counts.add_argument("start", type=parse_date)
    counts.add_argument("end", type=parse_date)
    counts.add_argument("--duration", type=positive_int, required=True, help="Slot length in minutes.")

    disabled = sub.add_parser("disabled-dates", help="List dates the picker should grey out.")
    disabled.add_argument("artist_id", type=int)
    disabled.add_argument("--start", type=parse_date, default=None, help="Defaults to today.")
    disabled.add_argument("--days", type=positive_int, default=settings.BOOKING_HORIZON_DAYS)

    return parser


def parse_arguments(argv=None):
    """Parses command line arguments."""
    return build_parser().parse_args(argv)


def run_command(args) -> int:
    if args.command == "serve":
        import uvicorn

        uvicorn.run("inkstudio.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "init-db":
        init_db()
        logger.info(f"Tables created on {settings.DATABASE_URL}")
        return 0

    store = SqlRecordStore(engine)

    if args.command == "slots":
        found = asyncio.run(
            slots.compute_available_slots(store, args.artist_id, args.date, args.duration, args.step)
        )
        if not found:
            print(f"No free slots on {args.date}")
        for slot in found:
            print(f"{slot.start_time}-{slot.end_time}")
        return 0

    if args.command == "slot-counts":
        counts = asyncio.run(
            slots.compute_daily_slot_counts(store, args.artist_id, args.start, args.end, args.duration)
        )
        for row in counts:
            print(f"{row['date'].isoformat()} {row['slot_count']}")
        return 0

    if args.command == "disabled-dates":
        start = args.start or date.today()
        dates = asyncio.run(slots.compute_disabled_dates(store, args.artist_id, start, args.days))
        for day in dates:
            print(day.isoformat())
        return 0

    raise ValueError(f"Unknown command {args.command!r}")


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    try:
        code = run_command(args)
    except ValueError as e:
        logger.error(str(e))
        code = 2
    except AvailabilityUnavailableError as e:
        logger.error(str(e))
        code = 1
    sys.exit(code)
