"""
In-memory connections for testing code built on
:class:`~wsbridge.connection.Connection` without a network.

"""

from __future__ import annotations

import dataclasses
import logging
import weakref

from .codes import CloseCode, check_close
from .connection import Connection, prepare_data
from .events import Close, Event
from .state import Guarded
from .typing import DataLike, LoggerLike


__all__ = ["FakeConnection", "fakes"]


@dataclasses.dataclass
class Record:
    sent: list[Event] = dataclasses.field(default_factory=list)
    received: list[Event] = dataclasses.field(default_factory=list)


class FakeConnection(Connection):
    """
    Connection that delivers messages synchronously to a peer in memory.

    Create connected pairs with :func:`fakes`.

    A fake references its peer without keeping it alive. Once the peer is
    discarded, the fake behaves as if the peer was closed.

    """

    def __init__(
        self,
        subprotocol: str = "",
        *,
        logger: LoggerLike | None = None,
    ) -> None:
        if logger is None:
            logger = logging.getLogger("wsbridge.fake")
        super().__init__(subprotocol, logger=logger)
        self._peer: weakref.ref[FakeConnection] | None = None
        self._record = Guarded(Record())

    @property
    def peer(self) -> FakeConnection | None:
        """Other end of the pair, or :obj:`None` if it was discarded."""
        return None if self._peer is None else self._peer()

    @property
    def sent(self) -> tuple[Event, ...]:
        """Events this connection produced, in order."""
        return self._record.mutate(lambda record: tuple(record.sent))

    @property
    def received(self) -> tuple[Event, ...]:
        """Events the peer delivered to this connection, in order."""
        return self._record.mutate(lambda record: tuple(record.received))

    def send(self, message: DataLike) -> None:
        event = prepare_data(message)
        state = self._state.value
        if state.closed or state.closing:
            return
        peer = self.peer
        if peer is None or peer.closed:
            return
        if self.debug:
            self.logger.debug("> %s", event)
        self._deliver(event)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        check_close(code, reason)
        if not self._request_close():
            return
        event = Close(
            CloseCode.NO_STATUS_RCVD if code is None else code,
            "" if reason is None else reason,
        )
        if self.debug:
            self.logger.debug("= connection is CLOSING")
            self.logger.debug("> %s", event)
        try:
            self._deliver(event)
        finally:
            # Close this side even if the peer's observer raised.
            self._trigger(event)

    def _deliver(self, event: Event) -> None:
        """Record an event and hand it to the peer, unless it's closed or gone."""
        self._record.mutate(lambda record: record.sent.append(event))
        peer = self.peer
        if peer is not None and peer._trigger(event):
            peer._record.mutate(lambda record: record.received.append(event))

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{self.__class__.__name__} {state} at {id(self):#x}>"


def fakes(
    subprotocol: str = "",
    *,
    logger: LoggerLike | None = None,
) -> tuple[FakeConnection, FakeConnection]:
    """
    Create a pair of fake connections connected to each other.

    Sending a message on one connection delivers it to the other::

        client, server = fakes()
        server.on_event = print
        client.send("ping")  # prints TEXT 'ping' [4 bytes]

    This is useful for testing code that uses a
    :class:`~wsbridge.connection.Connection` without a network.

    Args:
        subprotocol: Subprotocol reported by both connections.
        logger: Logger for both connections.

    """
    peer1 = FakeConnection(subprotocol, logger=logger)
    peer2 = FakeConnection(subprotocol, logger=logger)
    peer1._peer = weakref.ref(peer2)
    peer2._peer = weakref.ref(peer1)
    return peer1, peer2
