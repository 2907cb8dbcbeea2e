"""Command line entry point: ``netchannel send`` and ``netchannel recv``."""

import argparse
import json
import sys
from typing import List, Optional

import anyio

from netchannel.channel import Channel
from netchannel.config import DEFAULT_ATTEMPTS, DEFAULT_DELAY, DEFAULT_HOST, DEFAULT_PORT
from netchannel.errors import AttemptsExhaustedError, ChannelError, ReceiveTimeoutError
from netchannel.message import render
from netchannel.outcome import ReceiveStatus
from netchannel.telemetry import configure_telemetry, get_telemetry

# Exit status for arguments the channel rejects, matching argparse usage errors
EXIT_USAGE = 2


async def cmd_send(args: argparse.Namespace) -> int:
    channel = Channel()
    try:
        if args.file:
            with open(args.file, "rb") as f:
                message = f.read()
        else:
            message = args.message
        await channel.send(
            message,
            args.port,
            host=args.host,
            attempts=args.attempts,
            delay=args.delay,
        )
    except AttemptsExhaustedError:
        return 1
    except (ChannelError, OSError) as e:
        _, logger = get_telemetry("netchannel.cli")
        logger.error("cli.send_rejected", error=str(e), error_type=type(e).__name__)
        return EXIT_USAGE
    return 0


async def cmd_recv(args: argparse.Namespace) -> int:
    channel = Channel(args.port)
    try:
        result = await channel.receive_result(timeout=args.timeout)
    except ReceiveTimeoutError:
        return 1

    if args.out:
        with open(args.out, "wb") as out:
            out.write(result.data)
    elif args.json:
        payload = {
            "status": result.status.value,
            "port": result.port,
            "bytes": len(result.data),
            "at_capacity": result.at_capacity,
            "error": str(result.error) if result.error else None,
        }
        print(json.dumps(payload, indent=2))
    else:
        render(result.data, sys.stdout)
        sys.stdout.flush()

    return 1 if result.status is ReceiveStatus.TRANSPORT_ERROR else 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="netchannel", description="One-shot TCP byte channel.")
    p.add_argument("--log-level", default="WARNING")
    sub = p.add_subparsers(dest="cmd", required=True)

    send = sub.add_parser("send")
    send.add_argument("--port", type=int, required=True)
    send.add_argument("--host", default=DEFAULT_HOST)
    send.add_argument("--attempts", type=int, default=DEFAULT_ATTEMPTS)
    send.add_argument("--delay", type=float, default=DEFAULT_DELAY)
    source = send.add_mutually_exclusive_group(required=True)
    source.add_argument("--message")
    source.add_argument("--file")
    send.set_defaults(func=cmd_send)

    recv = sub.add_parser("recv")
    recv.add_argument("--port", type=int, default=DEFAULT_PORT)
    recv.add_argument("--timeout", type=float, default=None)
    recv.add_argument("--out")
    recv.add_argument("--json", action="store_true")
    recv.set_defaults(func=cmd_recv)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_telemetry(service_name="netchannel", trace_enabled=False, log_level=args.log_level)
    return int(anyio.run(args.func, args))


if __name__ == "__main__":
    raise SystemExit(main())
