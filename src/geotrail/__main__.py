"""Command-line access to a stored position history and its logs.

Usage
-----
Set environment variables and run::

    export GEOTRAIL_DATABASE_URL="https://example-default-rtdb.firebaseio.com"
    export GEOTRAIL_OBFUSCATION_KEY="shared-key"
    python -m geotrail history

Commands::

    history [--route] [--json]   List stored positions (newest first)
    record LAT LON               Save one position now
    purge                        Delete every stored position
    logs show|clear              Local log file
    logs push|pull|delete-remote Remote log snapshots
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime

from geotrail.client import TrailClient
from geotrail.config import TrailConfig
from geotrail.exceptions import ConfigError
from geotrail.history import newest_first, route, route_summary
from geotrail.logcapture import LogCaptureHandler
from geotrail.models import PositionFix, PositionRecord

_LOG = logging.getLogger("geotrail.cli")


def _format_record(record: PositionRecord) -> str:
    when = datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return f"{when}  {record.latitude:.6f}, {record.longitude:.6f}  ({record.id})"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geotrail", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    history = sub.add_parser("history", help="List stored positions")
    history.add_argument("--route", action="store_true", help="Chronological order with a route summary")
    history.add_argument("--json", action="store_true", help="Machine-readable output")

    record = sub.add_parser("record", help="Save one position")
    record.add_argument("latitude", type=float)
    record.add_argument("longitude", type=float)

    sub.add_parser("purge", help="Delete every stored position")

    logs = sub.add_parser("logs", help="Local and uploaded diagnostic logs")
    logs.add_argument("action", choices=["show", "clear", "push", "pull", "delete-remote"])
    return parser


async def _run(args: argparse.Namespace, config: TrailConfig) -> int:
    async with TrailClient(config) as client:
        handler = LogCaptureHandler(client.logs, level=logging.INFO)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logging.getLogger("geotrail").addHandler(handler)
        try:
            return await _dispatch(args, client)
        finally:
            logging.getLogger("geotrail").removeHandler(handler)


async def _dispatch(args: argparse.Namespace, client: TrailClient) -> int:
    if args.command == "history":
        records = await client.load_history()
        ordered = route(records) if args.route else newest_first(records)
        if args.json:
            print(json.dumps([r.to_document() for r in ordered], indent=2))
        else:
            for r in ordered:
                print(_format_record(r))
        if args.route and not args.json:
            summary = route_summary(ordered)
            print(f"{summary.points} point(s), {summary.total_distance_meters / 1000:.2f} km")
        return 0

    if args.command == "record":
        ok = await client.save_position(PositionFix(latitude=args.latitude, longitude=args.longitude))
        _LOG.info("Manual save %s", "succeeded" if ok else "failed")
        return 0 if ok else 1

    if args.command == "purge":
        ok = await client.delete_history()
        print("Deleted all positions" if ok else "Failed to delete positions")
        return 0 if ok else 1

    action = args.action
    if action == "show":
        print(client.logs.read_all())
        return 0
    if action == "clear":
        client.logs.clear()
        print("Logs cleared")
        return 0
    if action == "push":
        ok = await client.upload_logs()
        print("Logs uploaded" if ok else "Nothing uploaded")
        return 0 if ok else 1
    if action == "pull":
        text = await client.download_logs()
        print(text if text else "No uploaded logs found")
        return 0
    ok = await client.delete_remote_logs()
    print("Remote logs deleted" if ok else "Failed to delete remote logs")
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    # INFO still reaches the captured log file; the console shows warnings only.
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if args.verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.addHandler(console)
    logging.getLogger("geotrail").setLevel(logging.DEBUG if args.verbose else logging.INFO)
    try:
        try:
            config = TrailConfig.from_env()
        except ConfigError as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return 2
        return asyncio.run(_run(args, config))
    finally:
        root.removeHandler(console)


if __name__ == "__main__":
    raise SystemExit(main())
