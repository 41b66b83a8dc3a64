"""
Command-line entry point for querying slots and booking against a seed file.

Usage:
    python -m booking_engine.cli --seed sample_data/demo_clinic.json slots \\
        --organization org-demo --service svc-consult --date 2030-03-18
    python -m booking_engine.cli --seed sample_data/demo_clinic.json book \\
        --organization org-demo --service svc-consult --assignee member-ana \\
        --start 2030-03-18T09:00:00Z --email jo@example.com --name "Jo Doe" --phone "+34 600 000 000"
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Optional, Sequence

from booking_engine.availability.query import get_available_timeslots
from booking_engine.booking.orchestrator import book_appointment
from booking_engine.dependencies import Dependencies
from booking_engine.errors import BookingError
from booking_engine.seed import load_seed_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query availability and book appointments against seeded data."
    )
    parser.add_argument(
        "--seed",
        type=str,
        required=True,
        help="Path to a JSON seed file with organizations and their records.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    slots = subparsers.add_parser("slots", help="List open timeslots for a service on a date.")
    slots.add_argument("--organization", required=True, help="Organization ID.")
    slots.add_argument("--service", required=True, help="Service ID.")
    slots.add_argument("--date", required=True, help="Date as YYYY-MM-DD.")
    slots.add_argument(
        "--assignee",
        default=None,
        help="Query this member's calendar instead of the service owner's.",
    )

    book = subparsers.add_parser("book", help="Book an appointment.")
    book.add_argument("--organization", required=True, help="Organization ID.")
    book.add_argument("--service", required=True, help="Service ID.")
    book.add_argument("--assignee", required=True, help="Calendar owner to book with.")
    book.add_argument("--start", required=True, help="Start instant, ISO 8601 (UTC).")
    book.add_argument("--email", required=True, help="Customer email.")
    book.add_argument("--name", required=True, help="Customer name.")
    book.add_argument("--phone", required=True, help="Customer phone.")
    book.add_argument("--fee", type=float, default=None, help="Override the service price.")
    book.add_argument("--timezone", default=None, help="Customer IANA timezone.")

    return parser


async def _run(args: argparse.Namespace, deps: Dependencies) -> Any:
    request_id = uuid.uuid4().hex[:12]

    if args.command == "slots":
        payload = {
            "serviceId": args.service,
            "date": args.date,
            "organizationId": args.organization,
        }
        if args.assignee:
            payload["assigneeId"] = args.assignee
        slots = await get_available_timeslots(payload, deps, request_id=request_id)
        return [slot.model_dump(mode="json") for slot in slots]

    payload = {
        "serviceId": args.service,
        "organizationId": args.organization,
        "assigneeId": args.assignee,
        "startTime": args.start,
        "customerEmail": args.email,
        "customerName": args.name,
        "customerPhone": args.phone,
    }
    if args.fee is not None:
        payload["fee"] = args.fee
    if args.timezone:
        payload["timezone"] = args.timezone
    result = await book_appointment(payload, deps, request_id=request_id)
    await deps.background.drain()
    return result.model_dump(mode="json", by_alias=True)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    seed_path = Path(args.seed)
    if not seed_path.exists():
        logger.error("Seed file not found: %s", seed_path)
        sys.exit(1)

    deps = Dependencies(repositories=load_seed_file(seed_path))

    try:
        output = asyncio.run(_run(args, deps))
    except BookingError as exc:
        logger.error("%s failed: %s", args.command, exc.message)
        sys.stderr.write(json.dumps(exc.to_dict(), indent=2) + "\n")
        sys.exit(1)

    sys.stdout.write(json.dumps(output, indent=2) + "\n")


if __name__ == "__main__":
    main()
