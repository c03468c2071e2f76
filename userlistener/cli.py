"""
Command-line interface for the user listener.
"""
import argparse
import asyncio
from typing import Optional

from . import __version__, get_logger
from .config import (
    DEFAULT_ADDRESS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    LOG_LEVELS,
    PROG_NAME,
)
from .server import BindError, UserListener


def port_number(val):
    """Port argument in the 0-65535 range."""
    try:
        port = int(val)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {val}") from None
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {val}")
    return port


def positive_float(val):
    try:
        num = float(val)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {val}") from None
    if num <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {val}")
    return num


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Listen for TCP connections carrying a JSON array of "
                    "users and print every user received.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-a", "--address", default=DEFAULT_ADDRESS,
                        help="Address to listen to")
    parser.add_argument("-p", "--port", default=DEFAULT_PORT,
                        type=port_number,
                        help="Port for this socket connection")
    parser.add_argument("-l", "--level", default=DEFAULT_LOG_LEVEL,
                        choices=LOG_LEVELS,
                        help="Set the log level (messages are sent to stderr)")
    parser.add_argument("--log-file", default=None,
                        help="Also write log messages to this file")
    parser.add_argument("--read-timeout", default=None, type=positive_float,
                        help="Drop a connection after this many seconds "
                             "without data (default: wait forever)")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return create_parser().parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    """Start the listener. Returns the process exit code."""
    args = parse_args(argv)
    log = get_logger(PROG_NAME, args.level, args.log_file)
    listener = UserListener(args.address, args.port, log=log,
                            read_timeout=args.read_timeout)
    try:
        asyncio.run(listener.serve_forever())
    except BindError as err:
        log.error(err)
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted...exiting...")
    return 0
