from __future__ import annotations

import typing

from .imports import lazy_import
from .version import version as __version__  # noqa: F401


__all__ = [
    # .asyncio.client
    "ClientConnection",
    "Session",
    "connect",
    # .channel
    "Channel",
    # .codes
    "CloseCode",
    "check_close",
    "format_close",
    # .connection
    "Connection",
    "EventStream",
    "ObservationToken",
    "prepare_data",
    # .events
    "Binary",
    "Close",
    "Event",
    "Text",
    # .exceptions
    "ConnectionFailed",
    "InvalidState",
    "WebSocketException",
    # .fake
    "FakeConnection",
    "fakes",
    # .state
    "Guarded",
    # .typing
    "Data",
    "EventHandler",
    "LoggerLike",
    "Subprotocol",
]

# When type checking, import eagerly. Else, import on demand, which avoids
# importing the transport driver unless the asyncio client is used.
if typing.TYPE_CHECKING:
    from .asyncio.client import ClientConnection, Session, connect
    from .channel import Channel
    from .codes import CloseCode, check_close, format_close
    from .connection import Connection, EventStream, ObservationToken, prepare_data
    from .events import Binary, Close, Event, Text
    from .exceptions import ConnectionFailed, InvalidState, WebSocketException
    from .fake import FakeConnection, fakes
    from .state import Guarded
    from .typing import Data, EventHandler, LoggerLike, Subprotocol
else:
    lazy_import(
        globals(),
        aliases={
            # .asyncio.client
            "ClientConnection": ".asyncio.client",
            "Session": ".asyncio.client",
            "connect": ".asyncio.client",
            # .channel
            "Channel": ".channel",
            # .codes
            "CloseCode": ".codes",
            "check_close": ".codes",
            "format_close": ".codes",
            # .connection
            "Connection": ".connection",
            "EventStream": ".connection",
            "ObservationToken": ".connection",
            "prepare_data": ".connection",
            # .events
            "Binary": ".events",
            "Close": ".events",
            "Event": ".events",
            "Text": ".events",
            # .exceptions
            "ConnectionFailed": ".exceptions",
            "InvalidState": ".exceptions",
            "WebSocketException": ".exceptions",
            # .fake
            "FakeConnection": ".fake",
            "fakes": ".fake",
            # .state
            "Guarded": ".state",
            # .typing
            "Data": ".typing",
            "EventHandler": ".typing",
            "LoggerLike": ".typing",
            "Subprotocol": ".typing",
        },
    )
