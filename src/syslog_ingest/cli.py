"""Command-line entrypoint.

    syslog-ingest listen --listen :7531
    syslog-ingest send 127.0.0.1:7531 "myapp: hello" --severity 5

`listen` prints every decoded record as one JSON line on stdout; diagnostics
go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import socket
import sys
from collections.abc import Sequence
from datetime import datetime
from typing import Any, TextIO

from syslog_ingest.config import ListenerConfig, parse_address, resolve_listener_config
from syslog_ingest.core.errors import BindError
from syslog_ingest.core.formats import format_priority
from syslog_ingest.core.models import Facility, Severity
from syslog_ingest.server.listener import SyslogListener

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = os.getenv("SYSLOG_INGEST_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_config(args: argparse.Namespace) -> ListenerConfig:
    """Env-resolved config with explicit CLI flags applied on top."""
    cfg = resolve_listener_config()
    updates: dict[str, Any] = {}
    if args.listen is not None:
        updates["host"], updates["port"] = parse_address(args.listen)
    if args.queue_size is not None:
        updates["record_queue_size"] = args.queue_size
    if args.max_workers is not None:
        updates["max_workers"] = args.max_workers
    if args.overflow is not None:
        updates["overflow_policy"] = args.overflow
    if not updates:
        return cfg
    return ListenerConfig.model_validate({**cfg.model_dump(), **updates})


async def _print_records(listener: SyslogListener, out: TextIO) -> None:
    while True:
        record = await listener.records.get()
        out.write(json.dumps(record.to_dict()) + "\n")
        out.flush()
        listener.records.task_done()


async def _drain_errors(listener: SyslogListener) -> None:
    # The listener already logs each rejection; keep the queue from overflowing.
    while True:
        failure = await listener.errors.get()
        LOGGER.debug("Decode failure %s from %s", failure.reason.value, failure.peer)
        listener.errors.task_done()


async def serve(cfg: ListenerConfig, out: TextIO = sys.stdout) -> None:
    """Run a listener with a JSON-lines consumer until cancelled or stopped."""
    listener = SyslogListener(cfg)
    await listener.start()
    consumers = [
        asyncio.create_task(_print_records(listener, out)),
        asyncio.create_task(_drain_errors(listener)),
    ]
    try:
        await listener.run()
    finally:
        for task in consumers:
            task.cancel()
        await asyncio.gather(*consumers, return_exceptions=True)
        print(f"stats: {listener.stats}", file=sys.stderr)


def build_message(
    message: str,
    *,
    facility: int,
    severity: int,
    hostname: str,
    now: datetime | None = None,
) -> str:
    """Wrap MESSAGE in an RFC3164 header unless it already carries one."""
    if message.startswith("<"):
        return message
    now = now or datetime.now()
    timestamp = f"{now:%b} {now.day:2d} {now:%H:%M:%S}"
    return f"{format_priority(facility, severity)}{timestamp} {hostname} {message}"


def _send(args: argparse.Namespace) -> None:
    host, port = parse_address(args.address)
    payload = build_message(
        args.message,
        facility=args.facility,
        severity=args.severity,
        hostname=args.hostname,
    ).encode("utf-8")

    family, type_, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
    with socket.socket(family, type_, proto) as sock:
        sock.sendto(payload, sockaddr)
    LOGGER.info("Sent %d bytes to %s:%s", len(payload), host, port)


def _facility(s: str) -> int:
    try:
        return int(Facility(int(s)))
    except ValueError as e:
        raise argparse.ArgumentTypeError("facility must be an integer in [0, 23]") from e


def _severity(s: str) -> int:
    try:
        return int(Severity(int(s)))
    except ValueError as e:
        raise argparse.ArgumentTypeError("severity must be an integer in [0, 7]") from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="syslog-ingest", description="UDP syslog ingestion endpoint.")
    sub = p.add_subparsers(dest="command")

    listen = sub.add_parser("listen", help="Receive datagrams and print decoded records as JSON lines")
    listen.add_argument("--listen", default=None, help="HOST:PORT to bind (default :7531)")
    listen.add_argument("--queue-size", type=int, default=None, help="Record queue capacity")
    listen.add_argument("--max-workers", type=int, default=None, help="Decode threads")
    listen.add_argument("--overflow", choices=["drop_newest", "drop_oldest"], default=None)

    send = sub.add_parser("send", help="Send one syslog datagram")
    send.add_argument("address", help="HOST:PORT of the listener")
    send.add_argument("message", help="TAG: MSG, or a full datagram starting with '<'")
    send.add_argument("--facility", type=_facility, default=int(Facility.USER))
    send.add_argument("--severity", type=_severity, default=int(Severity.NOTICE))
    send.add_argument("--hostname", default=socket.gethostname())
    return p


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entrypoint."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0].startswith("-") and argv[0] not in ("-h", "--help")):
        argv = ["listen", *argv]

    args = build_parser().parse_args(argv)
    _configure_logging()

    try:
        if args.command == "send":
            _send(args)
            return
        asyncio.run(serve(build_config(args)))
    except KeyboardInterrupt:
        return
    except (BindError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
