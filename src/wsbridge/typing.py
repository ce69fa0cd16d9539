from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, NewType


__all__ = [
    "Data",
    "EventHandler",
    "LoggerLike",
    "Subprotocol",
]


# Public types used in the signature of public APIs

Data = str | bytes
"""Types supported in a WebSocket message:
:class:`str` for a Text_ frame, :class:`bytes` for a Binary_ frame.

.. _Text: https://datatracker.ietf.org/doc/html/rfc6455#section-5.6
.. _Binary : https://datatracker.ietf.org/doc/html/rfc6455#section-5.6

"""

BytesLike = bytes | bytearray | memoryview
"""Types accepted where :class:`bytes` is expected."""

DataLike = str | bytes | bytearray | memoryview
"""Types accepted by :meth:`~wsbridge.connection.Connection.send`."""

if TYPE_CHECKING:
    LoggerLike = logging.Logger | logging.LoggerAdapter[Any]
    """Types accepted where a :class:`~logging.Logger` is expected."""
else:  # remove this branch when dropping support for Python < 3.11
    LoggerLike = logging.Logger | logging.LoggerAdapter
    """Types accepted where a :class:`~logging.Logger` is expected."""


Subprotocol = NewType("Subprotocol", str)
"""Subprotocol in a ``Sec-WebSocket-Protocol`` header."""


EventHandler = Callable[[Any], None]
"""Observer receiving each :data:`~wsbridge.events.Event` of a connection."""
