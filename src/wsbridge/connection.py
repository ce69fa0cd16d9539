from __future__ import annotations

import abc
import asyncio
import dataclasses
import logging
from types import TracebackType
from typing import Callable

from .codes import CloseCode
from .events import Binary, Close, Event, Text
from .state import Guarded
from .typing import BytesLike, DataLike, EventHandler, LoggerLike


__all__ = [
    "Connection",
    "EventStream",
    "ObservationToken",
    "prepare_data",
]


def prepare_data(message: DataLike) -> Text | Binary:
    """
    Convert a message to the event the peer will observe.

    Raises:
        TypeError: If ``message`` doesn't have a supported type.

    """
    if isinstance(message, str):
        return Text(message)
    elif isinstance(message, BytesLike):
        return Binary(bytes(message))
    else:
        raise TypeError("data must be str or bytes-like")


@dataclasses.dataclass
class ConnectionState:
    """Mutable state of a :class:`Connection`."""

    closed: bool = False
    close_code: int | None = None
    close_reason: str | None = None
    # Set when close() is called, before the connection is closed.
    closing: bool = False
    on_event: EventHandler | None = None
    # Events accepted but not handed to their observer yet, in order.
    pending: tuple[tuple[Event, EventHandler | None], ...] = ()
    # Set while a thread hands pending events to observers.
    delivering: bool = False


class ObservationToken:
    """
    Handle returned by :meth:`Connection.listen`.

    Call :meth:`cancel` to stop observing the connection.

    """

    def __init__(self, on_cancel: Callable[[], None]) -> None:
        self.on_cancel = on_cancel

    def cancel(self) -> None:
        """Detach the observer. Calling this method more than once is safe."""
        self.on_cancel()


class Connection(abc.ABC):
    """
    WebSocket connection, independent of the underlying transport.

    :class:`Connection` defines the operations provided by every
    implementation: :meth:`send`, :meth:`close` and the observation of
    incoming :data:`~wsbridge.events.Event`.

    Events are delivered to a single observer, :attr:`on_event`. The last
    event is always a :class:`~wsbridge.events.Close` event and it's
    delivered exactly once, whether the connection was closed by this side,
    by the peer, or by a failure of the transport. Then the observer is
    cleared and :attr:`closed` becomes :obj:`True`.

    :class:`Connection` supports asynchronous iteration to receive events::

        async for event in connection:
            process(event)

    The iterator exits after yielding the :class:`~wsbridge.events.Close`
    event.

    Subclasses implement :meth:`send` and :meth:`close` and report incoming
    events with :meth:`_trigger`.

    Args:
        subprotocol: Subprotocol negotiated during the opening handshake.
        logger: Logger for this connection.

    """

    def __init__(
        self,
        subprotocol: str = "",
        *,
        logger: LoggerLike | None = None,
    ) -> None:
        if logger is None:
            logger = logging.getLogger("wsbridge")

        self.logger: LoggerLike = logging.LoggerAdapter(logger, {"websocket": self})
        """Logger for this connection."""
        self.debug = logger.isEnabledFor(logging.DEBUG)

        self._subprotocol = subprotocol
        self._state = Guarded(ConnectionState())

    # Public attributes

    @property
    def subprotocol(self) -> str:
        """
        Subprotocol negotiated during the opening handshake.

        Empty string if no subprotocol was negotiated.

        """
        return self._subprotocol

    @property
    def closed(self) -> bool:
        """
        Whether the connection is closed.

        Once :obj:`True`, it never becomes :obj:`False` again.

        """
        return self._state.value.closed

    @property
    def close_code(self) -> int | None:
        """
        Code of the :class:`~wsbridge.events.Close` event.

        :obj:`None` until the connection is closed.

        """
        return self._state.value.close_code

    @property
    def close_reason(self) -> str | None:
        """
        Reason of the :class:`~wsbridge.events.Close` event.

        :obj:`None` until the connection is closed.

        """
        return self._state.value.close_reason

    @property
    def on_event(self) -> EventHandler | None:
        """
        Observer receiving incoming events.

        Setting a new observer replaces the previous one. There's no guarantee
        about events already being delivered to the previous observer.

        """
        return self._state.value.on_event

    @on_event.setter
    def on_event(self, handler: EventHandler | None) -> None:
        def update(state: ConnectionState) -> None:
            state.on_event = handler

        self._state.mutate(update)

    # Public methods

    @abc.abstractmethod
    def send(self, message: DataLike) -> None:
        """
        Send a message.

        A string (:class:`str`) is sent as a Text_ frame. A bytestring or
        bytes-like object (:class:`bytes`, :class:`bytearray`, or
        :class:`memoryview`) is sent as a Binary_ frame.

        .. _Text: https://datatracker.ietf.org/doc/html/rfc6455#section-5.6
        .. _Binary: https://datatracker.ietf.org/doc/html/rfc6455#section-5.6

        :meth:`send` doesn't wait until the message is delivered. It doesn't
        do anything once the connection is closed or closing.

        Raises:
            TypeError: If ``message`` doesn't have a supported type.

        """

    @abc.abstractmethod
    def close(self, code: int | None = None, reason: str | None = None) -> None:
        """
        Close the connection.

        If ``code`` isn't set, the peer observes a 1005 (no status received)
        code. If ``reason`` isn't set, the peer observes an empty reason. A
        reason may be given without a code.

        :meth:`close` is idempotent: only the first call has an effect.

        Raises:
            ValueError: If ``code`` isn't 1000 or in the 3000-4999 range or if
                ``reason`` is longer than 123 bytes once encoded to UTF-8.

        """

    def listen(self, handler: EventHandler) -> ObservationToken:
        """
        Install ``handler`` as the observer of this connection.

        Return a token that detaches ``handler`` when cancelled, provided it's
        still the current observer.

        """
        self.on_event = handler

        def detach(state: ConnectionState) -> None:
            if state.on_event is handler:
                state.on_event = None

        return ObservationToken(lambda: self._state.mutate(detach))

    def events(self) -> EventStream:
        """
        Return an asynchronous iterator of incoming events.

        The stream replaces the current observer. It must be created and
        consumed in a coroutine running on an event loop. See
        :class:`EventStream` for details.

        """
        return EventStream(self)

    def __aiter__(self) -> EventStream:
        return self.events()

    async def __aenter__(self) -> Connection:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close(CloseCode.NORMAL_CLOSURE)

    # Private methods

    def _request_close(self) -> bool:
        """
        Record that :meth:`close` was called.

        Return :obj:`False` if the connection is already closed or closing.

        """

        def request(state: ConnectionState) -> bool:
            if state.closed or state.closing:
                return False
            state.closing = True
            return True

        return self._state.mutate(request)

    def _trigger(self, event: Event) -> bool:
        """
        Deliver an event to the current observer.

        When ``event`` is a :class:`~wsbridge.events.Close` event, close the
        connection: set :attr:`close_code` and :attr:`close_reason` and clear
        the observer.

        Nothing is delivered once the connection is closed.

        Accepted events are queued and handed to observers one at a time, in
        order, by whichever thread finds the queue idle. No lock is held while
        an observer runs, so an observer may send on this connection or on
        another one. When another thread is already delivering events, this
        method returns before ``event`` reaches the observer.

        If an observer raises an exception, the remaining events are still
        delivered, then the first exception propagates.

        Return whether the event was accepted.

        """

        def accept(state: ConnectionState) -> tuple[bool, bool]:
            if state.closed:
                return False, False
            state.pending += ((event, state.on_event),)
            if isinstance(event, Close):
                state.closed = True
                state.close_code = event.code
                state.close_reason = event.reason
                state.on_event = None
            if state.delivering:
                return True, False
            state.delivering = True
            return True, True

        accepted, deliver = self._state.mutate(accept)
        if not accepted:
            if self.debug:
                self.logger.debug("< %s [dropped]", event)
            return False

        if self.debug:
            self.logger.debug("< %s", event)
            if isinstance(event, Close):
                self.logger.debug("= connection is CLOSED")

        if deliver:
            self._deliver_pending()
        return True

    def _deliver_pending(self) -> None:
        """Hand pending events to their observers until the queue is empty."""

        def next_pending(
            state: ConnectionState,
        ) -> tuple[Event, EventHandler | None] | None:
            if not state.pending:
                state.delivering = False
                return None
            item, state.pending = state.pending[0], state.pending[1:]
            return item

        error: Exception | None = None
        while True:
            item = self._state.mutate(next_pending)
            if item is None:
                break
            pending_event, handler = item
            if handler is None:
                continue
            try:
                handler(pending_event)
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error


class EventStream:
    """
    Asynchronous iterator of the events of a :class:`Connection`.

    Creating the stream installs an observer on the connection. Events are
    handed to the event loop running the consumer, so the thread delivering
    them is never blocked. The iterator ends after yielding the
    :class:`~wsbridge.events.Close` event. If the connection is already
    closed, it ends immediately.

    Call :meth:`cancel` or :meth:`aclose` to stop iterating before the
    connection closes. This detaches the observer without closing the
    connection and discards pending events.

    :class:`EventStream` is an asynchronous context manager that cancels the
    stream on exit::

        async with connection.events() as events:
            async for event in events:
                ...

    """

    def __init__(self, connection: Connection) -> None:
        self.loop = asyncio.get_running_loop()
        self.queue: asyncio.Queue[Event | None] = asyncio.Queue()
        self.finished = False
        self.token = connection.listen(self.put)
        if connection.closed:
            self.token.cancel()
            self.finished = True

    def put(self, event: Event) -> None:
        """Receive an event, possibly from another thread."""
        self.loop.call_soon_threadsafe(self.queue.put_nowait, event)

    def cancel(self) -> None:
        """Stop the stream. Events not consumed yet are discarded."""
        if self.finished:
            return
        self.finished = True
        self.token.cancel()
        # Unblock a pending __anext__.
        self.loop.call_soon_threadsafe(self.queue.put_nowait, None)

    async def aclose(self) -> None:
        self.cancel()

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> Event:
        if self.finished:
            raise StopAsyncIteration
        event = await self.queue.get()
        if event is None or self.finished:
            raise StopAsyncIteration
        if isinstance(event, Close):
            self.finished = True
        return event

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.cancel()
