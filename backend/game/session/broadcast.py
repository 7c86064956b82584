"""Shared broadcast utility for sending messages to player groups."""

import contextlib
from collections.abc import Iterable
from typing import Any

from game.messaging.protocol import ConnectionProtocol


async def broadcast_to_connections(
    connections: Iterable[ConnectionProtocol],
    message: dict[str, Any],
) -> None:
    """Send a message to every connection.

    The iterable is snapshotted first so a concurrent disconnect cannot
    mutate it while we yield on send_message. Send failures on one
    connection never stop delivery to the others.
    """
    for connection in list(connections):
        with contextlib.suppress(RuntimeError, OSError):
            await connection.send_message(message)
