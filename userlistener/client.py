"""Client helpers used to feed a running listener."""
import asyncio
import logging
from typing import Iterable, Union

import ujson as json

LOG = logging.getLogger('userlistener.client')


def encode_users(users: Iterable[dict]) -> bytes:
    """Serialize user dicts into the payload a listener expects."""
    return json.dumps(list(users)).encode('utf-8')


async def send_payload(host: str, port: int, payload: Union[bytes, str],
                       chunk_size: int = 0, delay: float = 0.0) -> None:
    """
    Send a payload and close the write side to mark end-of-input.

    With a chunk_size, the payload is trickled in pieces separated by delay
    seconds.
    """
    if isinstance(payload, str):
        payload = payload.encode('utf-8')
    reader, writer = await asyncio.open_connection(host, port)
    LOG.info('Connection opened to %s:%s...sending %d bytes...',
             host, port, len(payload))
    try:
        if chunk_size <= 0:
            writer.write(payload)
            await writer.drain()
        else:
            for i in range(0, len(payload), chunk_size):
                writer.write(payload[i:i + chunk_size])
                await writer.drain()
                if delay:
                    await asyncio.sleep(delay)
        if writer.can_write_eof():
            writer.write_eof()
        # The listener never answers; wait for it to close its side.
        await reader.read()
    finally:
        writer.close()
        await writer.wait_closed()
    LOG.info('Payload sent...connection closed...')
