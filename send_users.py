#!/usr/bin/env python3
"""Send a JSON file of users to a running listener."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from userlistener.client import send_payload
from userlistener.config import DEFAULT_ADDRESS, DEFAULT_PORT

logging.basicConfig(level=logging.INFO)


if __name__ == '__main__':
    parser = argparse.ArgumentParser() # pylint: disable=invalid-name
    parser.add_argument("path", type=Path,
                        help="File holding a JSON array of users.")
    parser.add_argument("--host", default=DEFAULT_ADDRESS, type=str,
                        help="Name of the host to connect to.")
    parser.add_argument("--port", default=DEFAULT_PORT, type=int,
                        help="Port of the listener.")
    parser.add_argument("--chunk-size", default=0, type=int,
                        help="If set, send the file in chunks of this size.")
    parser.add_argument("--delay", default=0.0, type=float,
                        help="Seconds to wait between chunks.")
    args = parser.parse_args() # pylint: disable=invalid-name

    try:
        asyncio.run(send_payload(args.host, args.port, args.path.read_bytes(),
                                 chunk_size=args.chunk_size, delay=args.delay))
    except ConnectionError as err:
        logging.error(err)
        sys.exit(1)
