from __future__ import annotations

import dataclasses
from collections.abc import Awaitable
from typing import Callable

from .connection import Connection, EventStream
from .exceptions import InvalidState
from .state import Guarded
from .typing import DataLike


__all__ = ["Channel"]


@dataclasses.dataclass
class ChannelState:
    connection: Connection | None = None


class Channel:
    """
    Connection established lazily by a builder.

    Build the connection with :meth:`ready`, then use the channel like the
    connection::

        channel = Channel(lambda: connect("wss://example.com/"))
        await channel.ready()
        channel.send("Hello world!")
        async for event in channel:
            ...

    Args:
        builder: Coroutine function returning a connection.

    """

    def __init__(self, builder: Callable[[], Awaitable[Connection]]) -> None:
        self.builder = builder
        self._state = Guarded(ChannelState())

    async def ready(self) -> None:
        """
        Build the connection.

        Exceptions raised by the builder propagate.

        """
        connection = await self.builder()

        def store(state: ChannelState) -> None:
            state.connection = connection

        self._state.mutate(store)

    @property
    def connection(self) -> Connection:
        """
        Connection built by :meth:`ready`.

        Raises:
            InvalidState: If :meth:`ready` didn't complete yet.

        """
        connection = self._state.value.connection
        if connection is None:
            raise InvalidState("channel isn't ready; call ready() first")
        return connection

    def send(self, message: DataLike) -> None:
        """Send a message. See :meth:`Connection.send`."""
        self.connection.send(message)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        """Close the connection. See :meth:`Connection.close`."""
        self.connection.close(code, reason)

    def __aiter__(self) -> EventStream:
        return self.connection.events()
