from __future__ import annotations

import asyncio
import errno
import logging
from collections.abc import Awaitable, Mapping, Sequence
from typing import Any, Callable, Protocol

from websockets.asyncio.client import connect as websockets_connect
from websockets.exceptions import ConnectionClosed
from websockets.exceptions import ProtocolError as WebSocketsProtocolError

from ..codes import CloseCode, check_close
from ..connection import Connection, ConnectionState, prepare_data
from ..events import Binary, Close, Event, Text
from ..exceptions import ConnectionFailed
from ..typing import Data, DataLike, LoggerLike


__all__ = [
    "DEFAULT_ERROR_CODES",
    "ClientConnection",
    "Session",
    "connect",
]


class Session(Protocol):
    """
    Connection managed by a transport driver.

    :class:`websockets.asyncio.client.ClientConnection` provides this
    interface. The driver takes care of the opening handshake, of framing and
    of the closing handshake.

    """

    @property
    def subprotocol(self) -> str | None: ...

    async def recv(self) -> Data: ...

    async def send(self, message: Data) -> None: ...

    async def close(self, code: int | None = ..., reason: str = ...) -> None: ...


Driver = Callable[..., Awaitable[Session]]


DEFAULT_ERROR_CODES: Mapping[int, CloseCode | None] = {
    # Socket is not connected. The driver reports how the connection ended.
    errno.ENOTCONN: None,
    errno.EPROTO: CloseCode.PROTOCOL_ERROR,
}
"""
Default classification of transport errors by :data:`~errno` code.

:obj:`None` means that the error is ignored because the driver reports the
end of the connection by itself. Errors missing from the table close the
connection with code 1006 (abnormal closure).

"""


class ClientConnection(Connection):
    """
    :mod:`asyncio` implementation of a WebSocket client connection.

    :class:`ClientConnection` binds the :class:`~wsbridge.connection.Connection`
    interface to a :class:`Session` provided by a transport driver.

    It runs two tasks on the event loop where it's created: one receives
    messages, one at a time, and delivers them as events; the other sends
    messages queued by :meth:`send` and :meth:`close`, in order. Hence
    :meth:`send` and :meth:`close` never block and may be called from any
    thread.

    Regardless of whether the peer closes the connection, this side closes it,
    or the transport fails, a single :class:`~wsbridge.events.Close` event is
    delivered.

    Args:
        session: Open session of the transport driver.
        error_codes: Classification of transport errors.
            It defaults to :data:`DEFAULT_ERROR_CODES`.
        logger: Logger for this connection.
            It defaults to ``logging.getLogger("wsbridge.client")``.

    """

    def __init__(
        self,
        session: Session,
        *,
        error_codes: Mapping[int, CloseCode | None] | None = None,
        logger: LoggerLike | None = None,
    ) -> None:
        if logger is None:
            logger = logging.getLogger("wsbridge.client")
        super().__init__(session.subprotocol or "", logger=logger)
        self.session = session
        if error_codes is None:
            error_codes = DEFAULT_ERROR_CODES
        self.error_codes = error_codes

        # Event loop running this connection.
        self.loop = asyncio.get_running_loop()

        # Messages and close request waiting to be handed to the session.
        self.outgoing: asyncio.Queue[Data | Close] = asyncio.Queue()

        # Close request from this side, if any.
        self.close_sent: Close | None = None

        # Task releasing the session after a transport error, if any.
        self.abort_task: asyncio.Task[None] | None = None

        self.recv_task = self.loop.create_task(self.recv_messages())
        self.send_task = self.loop.create_task(self.send_messages())

    # Public methods

    def send(self, message: DataLike) -> None:
        data = prepare_data(message).data

        def enqueue(state: ConnectionState) -> None:
            if state.closed or state.closing:
                return
            self.loop.call_soon_threadsafe(self.outgoing.put_nowait, data)

        self._state.mutate(enqueue)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        check_close(code, reason)
        request = Close(code, "" if reason is None else reason)

        def enqueue(state: ConnectionState) -> None:
            if state.closed or state.closing:
                return
            state.closing = True
            self.close_sent = request
            self.loop.call_soon_threadsafe(self.outgoing.put_nowait, request)

        self._state.mutate(enqueue)

    async def wait_closed(self) -> None:
        """
        Wait until the connection is closed and the session is released.

        """
        tasks = [self.recv_task, self.send_task]
        if self.abort_task is not None:
            tasks.append(self.abort_task)
        await asyncio.gather(*tasks, return_exceptions=True)

    # Private methods

    async def recv_messages(self) -> None:
        """
        Receive messages from the session and deliver them as events.

        The session provides one message at a time. After delivering a
        message, wait for the next one.

        """
        try:
            while True:
                message = await self.session.recv()
                if isinstance(message, str):
                    self.deliver(Text(message))
                else:
                    self.deliver(Binary(bytes(message)))
        except ConnectionClosed as exc:
            self.deliver(self.closing_event(exc))
        except Exception as exc:
            if self.debug:
                self.logger.debug("! error while receiving data", exc_info=True)
            self.fail(exc)
            # fail() may defer to the driver. Since the driver is done
            # anyway, report an abnormal closure unless fail() closed.
            self.deliver(Close(CloseCode.ABNORMAL_CLOSURE, str(exc)))
        finally:
            # Let the closing handshake run to completion, if there's one.
            if self.close_sent is None:
                self.send_task.cancel()

    async def send_messages(self) -> None:
        """
        Hand queued messages and close request to the session, in order.

        """
        while True:
            item = await self.outgoing.get()
            try:
                if isinstance(item, Close):
                    if self.debug:
                        self.logger.debug("= connection is CLOSING")
                        self.logger.debug("> %s", item)
                    if item.code is None:
                        # A close frame can't carry a reason without a code.
                        await self.session.close(None, "")
                    else:
                        await self.session.close(item.code, item.reason)
                    return
                if self.debug:
                    self.logger.debug("> %s", prepare_data(item))
                await self.session.send(item)
            except ConnectionClosed:
                # recv_messages() reports how the connection was closed.
                return
            except Exception as exc:
                if self.debug:
                    self.logger.debug("! error while sending data", exc_info=True)
                self.fail(exc)
                return

    def closing_event(self, exc: ConnectionClosed) -> Close:
        """
        Determine the :class:`~wsbridge.events.Close` event after the session
        reports that the connection is closed.

        """
        # The peer sent a close frame, possibly in response to ours.
        if exc.rcvd is not None:
            # Reply to a close without a code, which couldn't carry the reason.
            if (
                exc.rcvd.code == CloseCode.NO_STATUS_RCVD
                and self.close_sent is not None
                and self.close_sent.code is None
            ):
                return Close(CloseCode.NO_STATUS_RCVD, self.close_sent.reason)
            return Close(exc.rcvd.code, exc.rcvd.reason)
        # This side initiated the closing handshake and it didn't complete.
        if self.close_sent is not None:
            code = self.close_sent.code
            return Close(
                CloseCode.NO_STATUS_RCVD if code is None else code,
                self.close_sent.reason,
            )
        # The connection dropped.
        cause = exc.__cause__
        return Close(
            CloseCode.ABNORMAL_CLOSURE,
            str(exc) if cause is None else str(cause),
        )

    def classify(self, exc: Exception) -> CloseCode | None:
        """
        Return the close code for a transport error.

        Return :obj:`None` if the driver reports the end of the connection by
        itself and the error must be ignored.

        """
        if isinstance(exc, ConnectionClosed):
            return None
        if isinstance(exc, WebSocketsProtocolError):
            return CloseCode.PROTOCOL_ERROR
        if isinstance(exc, OSError) and exc.errno in self.error_codes:
            return self.error_codes[exc.errno]
        return CloseCode.ABNORMAL_CLOSURE

    def fail(self, exc: Exception) -> None:
        """
        Close the connection after a transport error.

        """
        code = self.classify(exc)
        if code is None:
            if self.debug:
                self.logger.debug("! deferring to the driver after %r", exc)
            return
        if asyncio.current_task() is not self.recv_task:
            self.recv_task.cancel()
        self.deliver(Close(code, str(exc)))
        self.abort_task = self.loop.create_task(self.abort())

    async def abort(self) -> None:
        """Release the session after a transport error."""
        try:
            await self.session.close()
        except Exception:
            if self.debug:
                self.logger.debug("! error while closing session", exc_info=True)

    def deliver(self, event: Event) -> None:
        """
        Deliver an event to the observer.

        Errors raised by the observer are logged rather than interrupting
        the reception of messages.

        """
        try:
            self._trigger(event)
        except Exception:
            self.logger.error("error in event handler", exc_info=True)


async def connect(
    uri: str,
    protocols: Sequence[str] | None = None,
    *,
    driver: Driver | None = None,
    error_codes: Mapping[int, CloseCode | None] | None = None,
    logger: LoggerLike | None = None,
    **kwargs: Any,
) -> ClientConnection:
    """
    Connect to the WebSocket server at ``uri``.

    This coroutine returns a :class:`ClientConnection` once the opening
    handshake completes::

        from wsbridge.asyncio.client import connect

        connection = await connect("wss://example.com/")
        connection.on_event = print
        connection.send("Hello world!")

    Args:
        uri: URI of the WebSocket server.
        protocols: List of supported subprotocols, in order of decreasing
            preference.
        driver: Coroutine function opening a :class:`Session`. It's called
            with ``uri``, ``subprotocols=protocols``, and ``kwargs``.
            It defaults to :func:`websockets.asyncio.client.connect`.
        error_codes: Classification of transport errors.
            It defaults to :data:`DEFAULT_ERROR_CODES`.
        logger: Logger for this connection.
            It defaults to ``logging.getLogger("wsbridge.client")``.

    Any other keyword arguments configure the driver. For example, with the
    default driver, ``open_timeout``, ``close_timeout``, ``ping_interval``,
    ``max_size``, or ``ssl``.

    Raises:
        ConnectionFailed: If the driver fails to establish the connection.

    """
    if driver is None:
        driver = websockets_connect
    if logger is None:
        logger = logging.getLogger("wsbridge.client")

    subprotocols = None if protocols is None else list(protocols)
    try:
        session = await driver(uri, subprotocols=subprotocols, **kwargs)
    except Exception as exc:
        raise ConnectionFailed("connection ended unexpectedly", exc) from exc

    connection = ClientConnection(session, error_codes=error_codes, logger=logger)
    if connection.debug:
        connection.logger.debug("= connection is OPEN: %s", uri)
    return connection
