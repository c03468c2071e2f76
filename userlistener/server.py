"""
Listener methods.

Every accepted connection is read until the peer closes it, then the payload
is decoded as a batch of users and reported on stdout.
"""
import asyncio
import logging
from typing import Optional, Set, TextIO, Tuple

from . import TRACE
from .config import (
    CLOSE_GRACE,
    DEFAULT_ADDRESS,
    DEFAULT_PORT,
    READ_CHUNK,
    STREAM_LIMIT,
)
from .users import DecodeError, parse_users, report_users

LOG = logging.getLogger('userlistener.server')


class ReadError(Exception):
    """Raised when a connection fails before reaching end-of-stream."""


class BindError(OSError):
    """Raised when the listening socket cannot be bound."""


async def read_to_eof(reader: asyncio.StreamReader,
                      log: logging.Logger = LOG,
                      timeout: Optional[float] = None) -> bytes:
    """
    Read from a stream into a buffer until there is no more data.

    A zero-length read marks end-of-stream. Anything that stops the stream
    earlier raises ReadError and the partial buffer is dropped.

    With a timeout, the stream is read in chunks instead of lines so the
    timer restarts whenever any bytes arrive, newline or not.
    """
    data = bytearray()
    while True:
        try:
            if timeout is None:
                chunk = await reader.readline()
            else:
                chunk = await asyncio.wait_for(reader.read(READ_CHUNK),
                                              timeout)
        except asyncio.TimeoutError as err:
            raise ReadError(
                f"No data received for {timeout} seconds") from err
        # readline raises ValueError when a line overruns the stream limit.
        except (OSError, ValueError) as err:
            raise ReadError(
                f"Error while reading from stream! {err}") from err

        if not chunk:
            log.debug("Reached the end of stream")
            break
        log.log(TRACE, "Read %d bytes...", len(chunk))
        data.extend(chunk)

    log.debug("Done fetching the contents of the stream")
    return bytes(data)


class UserListener:
    """Accept connections and report the users each one sends."""

    def __init__(self,
                 host: str = DEFAULT_ADDRESS,
                 port: int = DEFAULT_PORT,
                 log: Optional[logging.Logger] = None,
                 out: Optional[TextIO] = None,
                 read_timeout: Optional[float] = None,
                 limit: int = STREAM_LIMIT):
        self.host = host
        self.port = port
        self.log = log if log is not None else LOG
        self.out = out
        self.read_timeout = read_timeout
        self.limit = limit
        self.server: Optional[asyncio.AbstractServer] = None
        self.handlers: Set[asyncio.Task] = set()
        self.stopped: Optional[asyncio.Future] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Address the listening socket is actually bound to."""
        if self.server is None or not self.server.sockets:
            raise RuntimeError("Listener is not bound!")
        return self.server.sockets[0].getsockname()[:2]

    async def start(self) -> asyncio.AbstractServer:
        """Bind the listening socket. Raises BindError on failure."""
        self.log.info("Binding to %s:%s", self.host, self.port)
        try:
            self.server = await asyncio.start_server(
                self.handle_connection, self.host, self.port,
                limit=self.limit)
        except OSError as err:
            raise BindError(
                f"Could not bind to {self.host}:{self.port}: {err}") from err
        self.log.info("Listening on %s:%s...", *self.address)
        return self.server

    async def serve_forever(self) -> None:
        """
        Accept connections until cancelled or closed.

        Accept failures reach the event loop's exception handler; they are
        logged here and the server keeps accepting.
        """
        if self.server is None:
            await self.start()
        loop = asyncio.get_running_loop()
        previous = loop.get_exception_handler()
        loop.set_exception_handler(self._log_loop_error)
        self.stopped = loop.create_future()
        try:
            # asyncio.start_server is already accepting; wait for close().
            await self.stopped
        finally:
            loop.set_exception_handler(previous)
            await self.close()

    async def close(self) -> None:
        """Stop accepting and stop every running connection handler."""
        if self.server is None:
            return
        self.log.debug("Closing listener with %d open connections...",
                       len(self.handlers))
        server, self.server = self.server, None
        if self.stopped is not None and not self.stopped.done():
            self.stopped.set_result(None)
        server.close()
        handlers = list(self.handlers)
        for task in handlers:
            task.cancel()
        if handlers:
            await asyncio.gather(*handlers, return_exceptions=True)
        await server.wait_closed()
        self.log.info("Listener closed...")

    async def handle_connection(self, reader: asyncio.StreamReader,
                                writer: asyncio.StreamWriter) -> None:
        """Read one connection to end-of-stream and report its users."""
        task = asyncio.current_task()
        self.handlers.add(task)
        peer = writer.get_extra_info('peername')
        self.log.debug("accepted connection from %s", peer)
        try:
            content = await read_to_eof(reader, self.log, self.read_timeout)
            users = parse_users(content)
            self.log.debug("Decoded %d users from %s", len(users), peer)
            report_users(users, self.out)
        except (ReadError, DecodeError) as err:
            self.log.error("an error occurred; error = %s", err)
        except asyncio.CancelledError:
            # Stopped by close(); finish normally so the stream callback
            # does not report a cancelled task.
            self.log.debug("Dropping connection from %s...", peer)
            await self._drain(reader, writer)
        finally:
            self.handlers.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionResetError, BrokenPipeError):
                pass

    async def _drain(self, reader: asyncio.StreamReader,
                     writer: asyncio.StreamWriter) -> None:
        """
        Half-close and discard pending input before the socket is closed.

        Closing with unread bytes in the kernel buffer sends the peer a
        reset instead of end-of-stream.
        """
        if writer.can_write_eof() and not writer.is_closing():
            writer.write_eof()
        try:
            await asyncio.wait_for(reader.read(), CLOSE_GRACE)
        except asyncio.TimeoutError:
            self.log.debug("Peer did not close within %s seconds...",
                           CLOSE_GRACE)
        except (OSError, ValueError) as err:
            self.log.debug("Error while draining connection: %s", err)

    def _log_loop_error(self, loop, context):
        err = context.get('exception')
        self.log.error("%s; error = %r", context.get('message'), err)
